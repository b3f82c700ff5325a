r"""
Flagstaff flag declarations, schemas and parsing entry points.

Overview
- Declarations
  • Flag[_T]: class-level declaration of one flag: canonical name, value type,
    optional alias and the constructor arguments of its default value.
  • Flags: base class of a flag-value structure. Subclasses list their flags as
    class attributes; the FlagsType metaclass records them, in declaration order,
    as the class schema (__schema__).

- Runtime records
  • FlagInfo[_T]: the bound, per-instance descriptor of one flag. It owns the
    value storage and knows how to parse a (token, next token) pair into it.
    Every Flags instance builds its own FlagInfo records, so defaults (lists
    included) are never shared between instances.

- Parsing
  • Flags.parse(argv, strict=True) -> (flags, args, errors)
  • Flags.chain(args, errors, strict=True) -> flags
    parses a leftover argument list in place: args is replaced by what this
    schema did not consume and new errors are appended to errors.
  • flags.parse_args(argv, strict=True) -> (args, errors)

- Introspection
  • flags.flag_infos(): the FlagInfo records, in declaration order (read-only
    name/type/alias, current value).

Validation highlights (raised when the class body is executed)
- names and aliases must be strings starting with '-' and cannot be '--'.
- types must be classes, list[T] or unions such as T | None.
- a Flags subclass must declare at least one flag.

Quick example:
    >>> from flagstaff import Flag, Flags
    >>> class ServerFlags(Flags):
    ...     port = Flag("--port", int, 8080)
    ...     help = Flag("--help", bool, alias="-h")
    ...
    >>> flags, args, errors = ServerFlags.parse(["server", "--port", "9000"])
    >>> flags.port, args, bool(errors)
    (9000, ['server'], False)

Public API
- Classes: Flag, FlagInfo, Flags
"""
import functools
import operator
import re
from types import MappingProxyType

from .logger import logger
from .parser import MARKER, TERMINATOR, ParseStatus, scan
from .utils import *
from .values import construct, element, is_repeated, is_union, members, parse_value


class FlagType(type):
    """
    Metaclass that turns declarations and records into introspectable types.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens),
      used in messages and representations.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations.
      __displayable__ (if set) narrows which attributes are shown; otherwise
      __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - flag(name='--port', type=<class 'int'>, alias='-p')
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_names(cls, metadata, /):
    """
    Internal: validate the name and alias of a declaration.

    Rules
    - alias defaults to the name when Unset.
    - both must be strings (TypeError otherwise).
    - both must start with the marker '-' and differ from the terminator '--'
      (ValueError otherwise). Nothing else is enforced: '-', '---' and '-a-b_c'
      are all acceptable spellings, and matching is exact.

    The metadata dict is mutated in place.
    """
    metadata["alias"] = coalesce(metadata["alias"], metadata["name"])

    for field in ("name", "alias"):
        if not isinstance(value := metadata[field], str):
            raise TypeError(f"{cls.__typename__} {field!r} must be a string")
        elif not value.startswith(MARKER):
            raise ValueError(f"{cls.__typename__} {field!r} must start with {MARKER!r}, got {value!r}")
        elif value == TERMINATOR:
            raise ValueError(f"{cls.__typename__} {field!r} cannot be the terminator {TERMINATOR!r}")


def _supported(kind, /):
    if is_union(kind):
        return bool(members(kind)) and all(map(_supported, members(kind)))
    if is_repeated(kind):
        return _supported(element(kind))
    return isinstance(kind, type)


def _sanitize_type(cls, metadata, /):
    """
    Internal: validate the value type of a declaration.

    Accepted: classes (int, str, Path, Enum subclasses, char, user classes),
    list / list[T] and unions of those (T | None, Optional[T]).
    """
    if not _supported(metadata["type"]):
        raise TypeError(f"{cls.__typename__} 'type' must be a class, a list[...] or a union, got {metadata['type']!r}")


class Flag[_T](metaclass=FlagType):
    """
    Declaration of one named flag inside a Flags subclass.

    Flag is a data descriptor: on an instance it reads and writes the value of
    the bound FlagInfo; on the class it returns the declaration itself.

    Properties
    - name: canonical token (e.g. "--port").
    - type: declared value type (e.g. int, list[str], str | None).
    - alias: alternative token (e.g. "-p"); defaults to name.
    - args / kwargs: constructor arguments of the default value.
    """

    __introspectable__ = (
        "name",
        "type",
        "alias",
        "args",
        "kwargs",
    )
    __displayable__ = (
        "name",
        "type",
        "alias",
    )

    def __new__(cls, name, type=str, /, *args, alias=Unset, **kwargs):
        """
        Construct a Flag declaration.

        Parameters
        - name: str
          canonical token; must start with '-' and differ from '--'.
        - type: type | list[T] | T | None
          value type. bool flags are presence-only: they never take a value.
        - *args, **kwargs:
          forwarded to the type when each Flags instance builds its default
          (e.g. Flag("--port", int, 8080), Flag("--center", Point, 1, 2)).
        - alias: Unset | str (keyword-only)
          alternative token; same rules as name.

        Raises
        - TypeError / ValueError: malformed declaration (programmer error).
        """
        metadata = {
            "name": name,
            "type": type,
            "alias": alias,
        }
        _sanitize_names(cls, metadata)
        _sanitize_type(cls, metadata)

        self = super().__new__(cls)
        for field, object in metadata.items():
            setattr(self, "_" + field, object)
        self._args = args
        self._kwargs = MappingProxyType(kwargs)
        self._attribute = Unset  # Bound by __set_name__ when the owner class is created.
        return self

    def __set_name__(self, owner, attribute):
        if self._attribute is not Unset:
            raise TypeError(f"{type(self).__typename__} {self._name!r} is already declared as {self._attribute!r}")
        self._attribute = attribute

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return instance._infos[self._attribute].value

    def __set__(self, instance, value):
        instance._infos[self._attribute].value = value


class FlagInfo[_T](metaclass=FlagType):
    """
    Bound descriptor of one flag, owned by exactly one Flags instance.

    Properties
    - name, type, alias: read-only, copied from the declaration.
    - value: the current value (starts as the constructed default).
    """

    __introspectable__ = (
        "name",
        "type",
        "alias",
    )
    __displayable__ = (
        "name",
        "type",
        "alias",
        "value",
    )

    def __new__(cls, flag, /):
        if not isinstance(flag, Flag):
            raise TypeError(f"{cls.__typename__} must be built from a flag, not {type(flag).__name__!r}")
        self = super().__new__(cls)
        self._name = flag.name
        self._type = flag.type
        self._alias = flag.alias
        self.value = construct(flag.type, *flag.args, **flag.kwargs)
        return self

    def parse(self, arg, val, /):
        """
        Offer a token and its successor to this flag.

        parameters
        - arg: str
          the current token.
        - val: str | None
          the next token, or None at the end of the input.

        returns
        - ParseStatus describing whether the token matched and how many tokens
          were consumed. On TWO_PARSED the value has been stored; on any other
          outcome the stored value is unchanged (except bool flags, set to True).
        """
        if arg != self._name and arg != self._alias:
            return ParseStatus.NONE_PARSED
        if self._type is bool:
            self.value = True
            return ParseStatus.ONE_PARSED
        if val is None or val.startswith(MARKER):
            return ParseStatus.PARSE_MISSING
        try:
            self.value = parse_value(val, self._type, self.value)
        except ValueError as exception:
            logger.debug("flag %r rejected %r: %s", self._name, val, exception)
            return ParseStatus.PARSE_FAILURE
        return ParseStatus.TWO_PARSED


class FlagsType(type):
    """
    Metaclass that records the flag schema of a Flags subclass.

    Registration
    - walks the MRO from the most basic class to the new class and collects
      every Flag found in each class namespace, in source order. Inherited flags
      therefore come first; redefining an attribute keeps its original position,
      and shadowing it with a non-Flag removes it.
    - stores the result as __schema__: a tuple of (attribute, Flag) pairs.

    Constraints
    - every class deriving from Flags must end up with at least one flag.
    """

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            },
        )

        declarations = {}
        for klass in reversed(self.__mro__):
            for attribute, object in vars(klass).items():
                if isinstance(object, Flag):
                    declarations[attribute] = object
                elif attribute in declarations:
                    del declarations[attribute]
        self.__schema__ = tuple(declarations.items())

        if not self.__schema__ and any(isinstance(base, FlagsType) for base in bases):
            raise TypeError(f"{self.__typename__} must declare at least one flag")

        return self


class Flags(metaclass=FlagsType):
    """
    Base class of flag-value structures.

    Subclass it and declare flags as class attributes:

        class TestFlags(Flags):
            path = Flag("--path", str)
            port = Flag("--port", int, 3, alias="-p")
            verbose = Flag("--verbose", bool)

    Each instance owns its schema (one FlagInfo per declaration, in order).
    A single instance must not be parsed from two threads at the same time;
    distinct instances share nothing.
    """

    def __init__(self):
        self._infos = {attribute: FlagInfo(flag) for attribute, flag in type(self).__schema__}

    def flag_infos(self):
        """
        Return the bound FlagInfo records, in declaration order.

        A new list is built on every call; the records themselves are the live
        descriptors of this instance.
        """
        return list(self._infos.values())

    def parse_args(self, argv, /, *, strict=True):
        """
        Parse argv into this instance.

        Returns (args, errors): the positional arguments left over and the
        structured errors, both in encounter order. Error positions are indices
        into argv.
        """
        return scan(tuple(self._infos.values()), argv, strict=strict)

    @classmethod
    def parse(cls, argv, /, *, strict=True):
        """
        Parse argv into a fresh instance.

        parameters
        - argv: Sequence[str]
          the token stream, conventionally sys.argv (the program name at index 0
          comes back as the first positional argument).
        - strict: bool (keyword-only)
          when False, unknown '-'-prefixed tokens are kept as positional
          arguments, which is what a first stage of chained parsing wants.

        returns
        - tuple[Self, list[str], Errors]
        """
        self = cls()
        args, errors = self.parse_args(argv, strict=strict)
        return self, args, errors

    @classmethod
    def chain(cls, args, errors, /, *, strict=True):
        """
        Parse the leftover arguments of a previous stage into a fresh instance.

        args is replaced in place by the arguments this schema did not consume,
        and new errors are appended to errors (their positions are indices into
        args as it was on entry). Returns the new instance.

            shared, args, errors = SharedFlags.parse(sys.argv, strict=False)
            flags = ServerFlags.chain(args, errors)
        """
        self = cls()
        leftover, found = self.parse_args(args, strict=strict)
        args[:] = leftover
        errors.extend(found)
        return self

    def __repr__(self):
        return f"{type(self).__typename__}({
            ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
        })"

    def __rich_repr__(self):
        for attribute, info in self._infos.items():
            yield attribute, info.value


__all__ = (
    # Declarations
    "Flag",
    "Flags",

    # Runtime records
    "FlagInfo",
)
