"""
``spew.config``: Formatting options
===================================

Every formatting call takes a :class:`ConfigState`. Calls that are not given
one explicitly use the process-wide default returned by :func:`get_config`::

    >>> get_config() is get_config()
    True

Mutating the default affects every later call that relies on it. A freshly
constructed :class:`ConfigState` is independent::

    >>> cfg = ConfigState(indent="\\t")
    >>> cfg.indent == get_config().indent
    False

"""

from __future__ import annotations

import dataclasses
from typing import Any, Final

__all__ = ("ConfigState", "get_config")

_BOOL_OPTIONS: Final = frozenset(
    {
        "disable_methods",
        "disable_pointer_methods",
        "disable_capacities",
        "continue_on_method",
        "sort_keys",
        "spew_keys",
    }
)


@dataclasses.dataclass
class ConfigState:
    """Options that drive the renderers.

    Attributes:

      indent(str): Token written once per nesting level by the dump
        renderer.

      max_depth(int): Maximum number of nested aggregates (and of pointer
        indirections) to descend into. ``0`` means no limit.

      disable_methods(bool): Do not use the custom ``__str__`` of values or
        the message of exceptions; always expand values structurally.

      disable_pointer_methods(bool): Do not use custom ``__str__`` methods of
        values that were reached by dereferencing a pointer (a :mod:`ctypes`
        pointer or a weak reference).

      disable_capacities(bool): Do not show the allocated capacity of lists
        and bytearrays in the dump.

      continue_on_method(bool): After showing the text produced by a custom
        ``__str__`` (in parentheses), keep going and show the structure of
        the value as well.

      sort_keys(bool): Sort mapping keys (and set elements) so that the
        output does not depend on insertion order.

      spew_keys(bool): When sorting keys that have no natural order
        (mixed or unorderable types), compare their ``%#v`` renderings
        instead of their ``repr``.
    """

    indent: str = " "
    max_depth: int = 0
    disable_methods: bool = False
    disable_pointer_methods: bool = False
    disable_capacities: bool = False
    continue_on_method: bool = False
    sort_keys: bool = False
    spew_keys: bool = False

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "indent":
            if not isinstance(value, str):
                raise TypeError(
                    f"indent must be a str, got {type(value).__name__}"
                )
        elif name == "max_depth":
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(
                    f"max_depth must be an int, got {type(value).__name__}"
                )
            if value < 0:
                raise ValueError(f"max_depth must be >= 0, got {value}")
        elif name in _BOOL_OPTIONS:
            value = bool(value)
        else:
            raise AttributeError(f"Unknown option: {name!r}")
        object.__setattr__(self, name, value)

    def copy(self) -> ConfigState:
        "An independent copy of this configuration."
        return dataclasses.replace(self)

    def depth_exceeded(self, depth: int) -> bool:
        return self.max_depth != 0 and depth > self.max_depth


_DEFAULT: Final = ConfigState()


def get_config() -> ConfigState:
    """The process-wide default configuration.

    The returned object is shared: changes to it are seen by every call that
    doesn't get an explicit configuration.
    """
    return _DEFAULT
