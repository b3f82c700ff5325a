"""
Flagstaff value coercion.

Scope
- parse_value(): convert the text of one token into the declared type of a flag.
- construct(): build the default value of a flag from its constructor arguments.
- char: a one-character string type, the textual counterpart of a single byte.
- SupportsParse: protocol for user types that want to control their own parsing.

Coercion rules
- Generic path: type(text). The converter must accept the whole token; Python
  constructors such as int, float, Decimal or Fraction already reject trailing
  garbage ("12abc"), so no extra bookkeeping is needed.
- __parse__: when a type defines a __parse__(text) classmethod it is used instead
  of the constructor (think of it as a stream extraction operator).
- char: succeeds only for a token of length exactly one.
- list[T]: appends one newly coerced T to the current list (cumulative across
  occurrences). A failed element leaves the list untouched.
- T | None: coerces into T (first member that accepts the token wins for wider unions).
- bool: only reached for nested values such as list[bool]; a top-level bool flag
  never consumes a value (see FlagInfo.parse).
- Enum: resolved by member name, then by member value.

Failures
- Every conversion problem surfaces as ValueError; ValueError, TypeError and
  ArithmeticError raised by a converter are re-raised as ValueError so callers
  only need a single except clause.
"""
import types
from enum import EnumMeta
from typing import Protocol, Union, final, get_args, get_origin, runtime_checkable

from .utils import *


@final
class char(str):
    """
    A string of exactly one character.

    char() defaults to "\\0", the zero character, so a char flag declared without
    constructor arguments has a well-defined (and easily recognized) default.
    """

    def __new__(cls, value="\0", /):
        if not isinstance(value, str):
            raise TypeError("char() argument must be a string, not %r" % type(value).__name__)
        if len(value) != 1:
            raise ValueError("char() argument must be a single character, not %d characters" % len(value))
        return super().__new__(cls, value)

    def __init_subclass__(cls, **options):
        raise TypeError("type 'char' is not an acceptable base type")


@runtime_checkable
class SupportsParse(Protocol):
    """
    Types that parse themselves from the text of one token.

    Example
        class Point:
            def __init__(self, x, y):
                self.x, self.y = x, y

            @classmethod
            def __parse__(cls, text):
                x, y = text.split()
                return cls(float(x), float(y))
    """

    @classmethod
    def __parse__(cls, text, /): ...


def is_union(kind, /):
    """Return True for `A | B` and typing.Union[...] / typing.Optional[...] forms."""
    return isinstance(kind, types.UnionType) or get_origin(kind) is Union


def is_optional(kind, /):
    """Return True when the union accepts None (T | None, Optional[T])."""
    return is_union(kind) and types.NoneType in get_args(kind)


def is_repeated(kind, /):
    """Return True for list and list[T]."""
    return kind is list or get_origin(kind) is list


def members(kind, /):
    """Non-None members of a union, in declaration order."""
    return tuple(arg for arg in get_args(kind) if arg is not types.NoneType)


def element(kind, /):
    """Element type of a repeated kind; a bare list holds strings."""
    args = get_args(kind)
    return args[0] if args else str


def coerce_bool(text, /):
    """
    Convert a token to a boolean.

    Accepted spellings (case-insensitive): true/t/1/yes/on and false/f/0/no/off.
    Anything else is rejected so that a typo never silently becomes True.
    """
    normalized = text.strip().lower()
    if normalized in {"true", "t", "1", "yes", "on"}:
        return True
    elif normalized in {"false", "f", "0", "no", "off"}:
        return False
    raise ValueError("%r is not a valid boolean" % text)


def coerce_enum(text, enum_type, /):
    """
    Convert a token to an Enum member.

    Resolution order
    - by member name (exact)
    - by member value, converting the token through the value's base type
    """
    try:
        return enum_type[text]
    except KeyError:
        pass

    base_type = type(next(iter(enum_type)).value)
    try:
        return enum_type(base_type(text))
    except (ValueError, TypeError):
        values = [str(member.value) for member in enum_type]
        raise ValueError("%r should be one of {%s}" % (text, ", ".join(values))) from None


def parse_value(text, kind, current=Unset, /):
    """
    Coerce the text of one token into `kind`.

    Parameters
    - text: str
      the raw token (never starts with the marker prefix when called by the parser).
    - kind: type | list[T] | T | None
      the declared type of the flag.
    - current: Any
      the value currently held by the flag; only list kinds use it, to append
      in place. Unset means "no storage yet" and a fresh list is created.

    Returns
    - the coerced value (for list kinds, the same list object that was passed in).

    Raises
    - ValueError: the token cannot be converted.
    """
    if is_repeated(kind):
        value = parse_value(text, element(kind))
        current = coalesce(current, [])
        current.append(value)
        return current

    if is_union(kind):
        for member in members(kind):
            try:
                return parse_value(text, member, Unset if current is None else current)
            except ValueError:
                continue
        raise ValueError("%r could not be coerced to any of %s" % (text, kind))

    if kind is char:
        if len(text) != 1:
            raise ValueError("%r is not a single character" % text)
        return char(text)

    if kind is bool:
        return coerce_bool(text)

    if isinstance(kind, EnumMeta):
        return coerce_enum(text, kind)

    converter = kind.__parse__ if isinstance(kind, SupportsParse) else kind
    try:
        return converter(text)
    except (ValueError, TypeError, ArithmeticError) as exception:
        raise ValueError("%r could not be parsed as %s" % (text, getattr(kind, "__name__", kind))) from exception


def construct(kind, /, *args, **kwargs):
    """
    Build a fresh default value for a flag of type `kind`.

    - optional kinds default to None, unless constructor arguments are given
      (then the first non-None member is constructed with them).
    - list kinds produce a new list (a copy of the first argument when given).
    - anything else is called as kind(*args, **kwargs), so int() is 0, str() is ""
      and bool() is False, matching value-initialization of the builtin types.

    Called once per Flags instance, so mutable defaults are never shared.
    """
    if is_union(kind):
        if not args and not kwargs:
            return None
        return construct(members(kind)[0], *args, **kwargs)
    if is_repeated(kind):
        return list(*args, **kwargs)
    return kind(*args, **kwargs)


__all__ = (
    # Types
    "char",
    "SupportsParse",

    # Functions
    "is_union",
    "is_optional",
    "is_repeated",
    "coerce_bool",
    "coerce_enum",
    "parse_value",
    "construct",
)
