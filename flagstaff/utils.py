"""
Flagstaff utilities.

Small helpers shared by the declaration, coercion and fault layers.

- Unset: sentinel for "argument not given" (an alias left out, a flag that has
  no storage yet). None stays available as a real value.
- coalesce(value, default): swap Unset for a default, keep everything else.
- rename(...): give generated methods a proper __name__/__qualname__.
- mirror(name): read-only property over the private field "_<name>".

    >>> coalesce(Unset, "--port")
    '--port'
    >>> coalesce(None, "--port") is None
    True
"""
import builtins
import functools
from typing import final


@final
class UnsetType:
    """
    Type of the Unset sentinel.

    There is exactly one instance; it is falsy, prints as "Unset" and the type
    cannot be subclassed.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return default when object is Unset, otherwise object itself.

    Falsy values (None, 0, "", []) are returned unchanged.
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    rename(callable, name) -> callable
    rename(name) -> decorator

    Sets both __name__ and __qualname__. Callables that refuse the new names
    (builtins) raise TypeError.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() cannot update %r" % callable) from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def decorator(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must decorate a callable")
                return rename(callable, name)

            return decorator
        case _:
            raise TypeError("rename() takes 1 or 2 arguments (%d given)" % len(parameters))


def mirror(name, /):
    """
    Build a getter-only property returning self._<name>.

    Assigning through the public name raises AttributeError, which is what keeps
    flag names, aliases and types fixed once declared.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return getattr(self, "_" + name)

    return property(getter)


Unset = UnsetType()


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
