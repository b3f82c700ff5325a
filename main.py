import sys
import textwrap

from rich.console import Console

from flagstaff import *

__prog__ = "server"

HELP = textwrap.dedent("""
    Runs a server on the given port (default is 8080).

      --port    : specify the port to use.
      --help/-h : prints this help.
""")


class ServerFlags(Flags):
    port = Flag("--port", int, 8080)
    help = Flag("--help", bool, alias="-h")


def main(argv):
    stdout = Console()
    stderr = Console(stderr=True)

    flags, args, errors = ServerFlags.parse(argv)
    if errors:
        stderr.print(errors.render(fancy=True))
        return 1
    if len(args) > 1:
        stderr.print("%s doesn't take any argument." % args[0], markup=False)
        return 1
    if flags.help:
        stdout.print("%s\n%s --port 8080\n%s" % (args[0], args[0], HELP.lstrip("\n")), markup=False, end="")
        return 0

    stdout.print(flags)
    return 0


if __name__ == '__main__':
    sys.exit(main(sys.argv))
