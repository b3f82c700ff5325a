"""
Flagstaff faults (structured parse errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every runtime issue the
  parser can report. Codes follow the Seralix Fault Codes numbering so logs and
  searches stay predictable.
- FlagError: base type of the three structured errors. Errors are plain values:
  they are returned by the parser, never raised.
  • UnknownFlag(pos, arg): a token starting with '-' that no flag recognizes.
  • MissingValue(pos, arg): a value-bearing flag at the end of the input, or
    followed by a token starting with '-'.
  • InvalidValue(pos, arg, val): a value that the flag's type rejects.
- Errors: list of FlagError in encounter order, falsy when empty, with a
  deterministic text form and a rich form.

Text form (str)
    <empty string when there are no errors>
    or a leading newline followed by one line per error:
      Unknown flag `--two` at index 20
      Missing value for flag `-f` at index 23
      Invalid value "nan" for flag `-e` at index 21

Rich form (__rich__ / render())
- header "[ <prog> — <code> | <title> ]", the text line, and a short hint.
- the host application may tune it through attributes of its __main__ module:
  __prog__ (program name), __styles__ (style overrides), __codes__ (code labels)
  and __docs__ (documentation per code, see getdoc()).

Nothing in this module writes to a stream: renderables are handed back to the
caller, who decides where (and whether) to print them.
"""
from collections import defaultdict
from enum import IntEnum

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import *


class FaultCode(IntEnum):
    """
    canonical fault codes for parse errors (stable identifiers).

    grouping
    - switches (flags) (1111x/1112x)
      • UNKNOWN_FLAG, MISSING_VALUE, INVALID_VALUE

    a host may relabel any code through __main__.__codes__ (see normalize()).
    """
    UNKNOWN_FLAG  = 11112
    MISSING_VALUE = 11117
    INVALID_VALUE = 11126

    def normalize(self):
        """
        the label shown in rendered errors: __main__.__codes__[self] when the
        host defines it, the numeric value otherwise.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def getdoc(code, /):
    """
    documentation registered by the host for a fault code.

    looks the code up in __main__.__docs__ (fault-code -> short text) and
    returns None when the host registered nothing.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


def quoted(text, /):
    r"""
    Enclose text in double quotes, escaping '"' and '\' with a backslash.

    >>> print(quoted('say "hi"'))
    "say \"hi\""
    """
    return '"%s"' % text.replace("\\", "\\\\").replace('"', '\\"')


def _styler(colorful, defaults):
    styles = defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""
    return styler


def _text(colorful):
    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)
    return text


def _prog():
    return getattr(__import__("__main__"), "__prog__", "flagstaff")


class FlagError:
    """
    Base type of structured parse errors.

    Fields are exposed as read-only properties:
    - pos: index of the flag token in the token stream given to the parse call.
    - arg: the flag token itself.

    Subclasses set `code` and `title` and implement __str__ and hint.
    Two errors are equal when they are of the same variant with equal fields.
    """
    __slots__ = ("_pos", "_arg")
    __fields__ = ("pos", "arg")

    code = None
    title = None

    pos = mirror("pos")
    arg = mirror("arg")

    def __init__(self, pos, arg, /):
        if not isinstance(pos, int) or isinstance(pos, bool):
            raise TypeError("%s 'pos' must be an integer" % type(self).__name__)
        if not isinstance(arg, str):
            raise TypeError("%s 'arg' must be a string" % type(self).__name__)
        self._pos = pos
        self._arg = arg

    def _values(self):
        return tuple(getattr(self, name) for name in self.__fields__)

    def __eq__(self, other):
        if not isinstance(other, FlagError):
            return NotImplemented
        return type(self) is type(other) and self._values() == other._values()

    def __hash__(self):
        return hash((type(self).__name__, self._values()))

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, ", ".join("%s=%r" % pair for pair in self.__rich_repr__()))

    def __rich_repr__(self):
        for name in self.__fields__:
            yield name, getattr(self, name)

    @property
    def hint(self):
        return ""

    def render(self, *, colorful=True, fancy=False):
        """
        build a rich renderable for this error.

        options
        - colorful: apply styles (defaults merged with __main__.__styles__).
        - fancy: wrap message and hint in a Panel titled with the header.
        """
        styler = _styler(colorful, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
            "docs": "underline #00E5FF dim",
        })
        text = _text(colorful)

        header = Text.assemble(
            "[ ",
            text(_prog(), styler("prog-name")),
            " — ",
            text(self.code.normalize(), styler("code")),
            " | ",
            text(self.title.title(), styler("error-title")),
            " ]"
        )
        body = [text(str(self), styler("error-message"))]
        if self.hint:
            body.append(Text.assemble(text(" → ", styler("hint-arrow")), text(self.hint, styler("hint"))))
        if docs := getdoc(self.code):
            body.append(text(docs, styler("docs")))

        if fancy:
            return Panel(Group(*body), title=header, title_align="left")
        return Group(header, *body)

    def __rich__(self):
        return self.render()


class UnknownFlag(FlagError):
    __slots__ = ()

    code = FaultCode.UNKNOWN_FLAG
    title = "unknown flag"

    def __str__(self):
        return "Unknown flag `%s` at index %d" % (self.arg, self.pos)

    @property
    def hint(self):
        return "check the spelling, or pass it after '--' to use %r as an argument" % self.arg


class MissingValue(FlagError):
    __slots__ = ()

    code = FaultCode.MISSING_VALUE
    title = "missing value"

    def __str__(self):
        return "Missing value for flag `%s` at index %d" % (self.arg, self.pos)

    @property
    def hint(self):
        return "pass a value right after %r (values cannot start with '-')" % self.arg


class InvalidValue(FlagError):
    """
    A value token rejected by the flag's type.

    Adds the field `val`: the offending token, exactly as received.
    """
    __slots__ = ("_val",)
    __fields__ = ("pos", "arg", "val")

    code = FaultCode.INVALID_VALUE
    title = "invalid value"

    val = mirror("val")

    def __init__(self, pos, arg, val, /):
        super().__init__(pos, arg)
        if not isinstance(val, str):
            raise TypeError("%s 'val' must be a string" % type(self).__name__)
        self._val = val

    def __str__(self):
        return "Invalid value %s for flag `%s` at index %d" % (quoted(self.val), self.arg, self.pos)

    @property
    def hint(self):
        return "check the value given to %r" % self.arg


class Errors(list):
    """
    Ordered list of FlagError, in the order the parser met them.

    - bool(errors) is False when empty, so `if errors:` reads naturally.
    - str(errors) is "" when empty; otherwise a newline followed by one
      newline-terminated line per error.
    - render()/__rich__ build a grouped rich renderable.
    """

    def __str__(self):
        if not self:
            return ""
        return "\n" + "".join(str(error) + "\n" for error in self)

    def __repr__(self):
        return "Errors(%s)" % list.__repr__(self)

    def render(self, *, colorful=True, fancy=False):
        styler = _styler(colorful, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "title": "bold #FF4DA6",  # friendly pinky group title
        })
        text = _text(colorful)

        header = Text.assemble(
            "[ ",
            text(_prog(), styler("prog-name")),
            " — ",
            text("Invalid Arguments", styler("title")),
            " ]"
        )
        renders = [error.render(colorful=colorful) for error in self]

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")
        return Group(header, *renders)

    def __rich__(self):
        return self.render()


__all__ = (
    "FaultCode",
    "FlagError",
    "UnknownFlag",
    "MissingValue",
    "InvalidValue",
    "Errors",
    "quoted",
    "getdoc",
)
