"""
Flagstaff token scanner.

scan() walks an argv-like token stream once, left to right, against an ordered
sequence of bound flags (FlagInfo records), and returns the leftover positional
arguments together with the structured errors met on the way.

Algorithm (per position `pos`)
1. token == "--": stop; every remaining token goes verbatim to the positionals.
2. ask each flag, in declaration order, to parse (token, next token); the first
   flag that recognizes the token wins and the others are not consulted.
3. the winning flag reports how the match went (ParseStatus):
   • ONE_PARSED     → advance 1 (boolean flags)
   • TWO_PARSED     → advance 2 (flag + value)
   • PARSE_MISSING  → MissingValue(pos, token), advance 1
   • PARSE_FAILURE  → InvalidValue(pos, token, next), advance 2; the rejected
                      value is never re-read as a flag
4. nobody recognized it: a '-'-prefixed token is an UnknownFlag(pos, token) in
   strict mode, anything else (or any token in permissive mode) is positional.

Errors never stop the scan: the result is always a complete, best-effort batch.
Index 0 is not special; callers conventionally pass the program name there and
get it back as the first positional argument.
"""
from enum import Enum

from .faults import *
from .logger import logger

MARKER = "-"
"""Leading character of every flag name."""

TERMINATOR = "--"
"""Token that ends flag scanning for the rest of the input."""


class ParseStatus(Enum):
    """
    Outcome of offering one token (and its successor) to one flag.

    Members
    - NONE_PARSED: the token is not this flag's name or alias.
    - ONE_PARSED: matched; only the flag token was consumed.
    - TWO_PARSED: matched; the flag token and its value were consumed.
    - PARSE_MISSING: matched; the value is missing (end of input or '-' prefixed).
    - PARSE_FAILURE: matched; the value was rejected by the flag's type.
    """
    NONE_PARSED = 0
    ONE_PARSED = 1
    TWO_PARSED = 2
    PARSE_MISSING = 3
    PARSE_FAILURE = 4


def scan(infos, tokens, /, *, strict=True):
    """
    scan tokens against the ordered flags in `infos`.

    parameters
    - infos: Sequence[FlagInfo]
      bound flags, in declaration order (first match wins).
    - tokens: Sequence[str]
      the token stream; indices in reported errors refer to this sequence.
    - strict: bool (keyword-only)
      report unrecognized '-'-prefixed tokens as UnknownFlag instead of keeping
      them as positional arguments.

    returns
    - tuple[list[str], Errors]: positional arguments and errors, both in
      encounter order.
    """
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError("scan() tokens must be strings, not %r" % type(token).__name__)

    args = []
    errors = Errors()
    size = len(tokens)

    pos = 0
    while pos < size:
        arg = tokens[pos]
        val = tokens[pos + 1] if pos + 1 < size else None

        if arg == TERMINATOR:
            args.extend(tokens[pos + 1:])
            logger.debug("terminator at index %d, %d tokens left as arguments", pos, size - pos - 1)
            break

        parsed = 0
        for info in infos:
            match info.parse(arg, val):
                case ParseStatus.NONE_PARSED:
                    continue
                case ParseStatus.ONE_PARSED:
                    parsed = 1
                case ParseStatus.TWO_PARSED:
                    parsed = 2
                case ParseStatus.PARSE_MISSING:
                    parsed = 1
                    errors.append(MissingValue(pos, arg))
                case ParseStatus.PARSE_FAILURE:
                    parsed = 2
                    errors.append(InvalidValue(pos, arg, val))
            logger.debug("flag %r matched %r at index %d", info.name, arg, pos)
            break

        if not parsed:
            if arg.startswith(MARKER) and strict:
                errors.append(UnknownFlag(pos, arg))
                logger.debug("unknown flag %r at index %d", arg, pos)
            else:
                args.append(arg)

        pos += parsed or 1

    return args, errors


__all__ = (
    "MARKER",
    "TERMINATOR",
    "ParseStatus",
    "scan",
)
