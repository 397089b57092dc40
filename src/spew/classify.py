"""
``spew.classify``: What is this value?
======================================

Resolve the rendering category (:class:`Kind`) of arbitrary runtime values
and pull them apart for the renderers.

The dispatch is closed: every value falls in exactly one :class:`Kind`::

    >>> describe(5)
    ValueDescriptor(kind=<Kind.SCALAR: 2>, type_name='int', capability=None)
    >>> describe({}).kind
    <Kind.MAPPING: 9>
    >>> describe(ValueError("bad")).capability
    <Capability.ERROR: 'error'>

Pointers are :mod:`ctypes` pointers and weak references; they are followed
one step at a time with :func:`deref`.
"""

from __future__ import annotations

import array
import asyncio
import collections.abc as abc
import ctypes
import dataclasses
import enum
import functools
import inspect
import io
import queue
import types
import weakref
from typing import Any, Final

__all__ = (
    "Kind",
    "Capability",
    "ValueDescriptor",
    "NIL",
    "INVALID",
    "describe",
    "kind_of",
    "capability_of",
    "type_name",
    "scalar_text",
    "deref",
    "pointee_type_name",
    "address",
    "is_reference",
    "struct_fields",
    "capacity",
)


class Kind(enum.Enum):
    NIL = enum.auto()
    SCALAR = enum.auto()
    STRING = enum.auto()
    BYTES = enum.auto()
    POINTER = enum.auto()
    BOXED = enum.auto()
    STRUCT = enum.auto()
    SEQUENCE = enum.auto()
    MAPPING = enum.auto()
    CHANNEL = enum.auto()
    FUNCTION = enum.auto()
    #: Values that could not be introspected
    INVALID = enum.auto()


class Capability(enum.Enum):
    "How a value describes itself, if it can."
    ERROR = "error"
    STRING = "string"


@dataclasses.dataclass(slots=True, frozen=True)
class ValueDescriptor:
    kind: Kind
    type_name: str
    capability: Capability | None


class _Sentinel:
    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return self._name


#: What a pointer points to when it doesn't point to anything.
NIL: Final = _Sentinel("NIL")

#: Stands for a field that couldn't be read.
INVALID: Final = _Sentinel("INVALID")

_POINTER_TYPES: Final = (ctypes._Pointer, weakref.ref)

_CTYPES_VALUES: Final = (
    ctypes.Structure,
    ctypes.Union,
    ctypes.Array,
    ctypes._SimpleCData,
    ctypes._Pointer,
)

_CHANNEL_TYPES: Final = (
    types.GeneratorType,
    types.CoroutineType,
    types.AsyncGeneratorType,
    abc.Iterator,
    abc.AsyncIterator,
    queue.Queue,
    asyncio.Queue,
    io.IOBase,
)

# Modules whose `__str__` implementations are not worth calling: they give
# the same thing as `repr`.
_PLAIN_STR_MODULES: Final = frozenset(
    {"builtins", "_ctypes", "ctypes", "_weakref", "weakref"}
)

_PTR_SIZE: Final = ctypes.sizeof(ctypes.c_void_p)


def type_name(ty: type) -> str:
    """The name used to annotate values of type *ty*

    >>> type_name(int)
    'int'
    >>> type_name(abc.Mapping)
    'collections.abc.Mapping'
    """
    qualname = getattr(ty, "__qualname__", None) or getattr(
        ty, "__name__", "?"
    )
    module = getattr(ty, "__module__", None)
    if module is None or module == "builtins":
        return str(qualname)
    return f"{module}.{qualname}"


def kind_of(value: Any) -> Kind:
    # Order matters: bool is an int, named tuples are tuples, ctypes arrays
    # are sequences...
    if value is None:
        return Kind.NIL
    if isinstance(value, (bool, int, float, complex)):
        return Kind.SCALAR
    if isinstance(value, str):
        return Kind.STRING
    if isinstance(value, (bytes, bytearray, memoryview)):
        return Kind.BYTES
    if isinstance(value, _POINTER_TYPES):
        return Kind.POINTER
    if isinstance(value, types.CellType):
        return Kind.BOXED
    if isinstance(value, ctypes._SimpleCData):
        return Kind.SCALAR
    if isinstance(value, (ctypes.Structure, ctypes.Union)):
        return Kind.STRUCT
    if isinstance(value, ctypes.Array):
        return Kind.SEQUENCE
    if isinstance(value, (type, types.ModuleType, range)):
        return Kind.SCALAR
    if isinstance(value, tuple) and hasattr(type(value), "_fields"):
        return Kind.STRUCT
    if isinstance(value, abc.Mapping):
        return Kind.MAPPING
    if isinstance(value, (abc.Sequence, abc.Set, array.array)):
        return Kind.SEQUENCE
    if isinstance(value, _CHANNEL_TYPES):
        return Kind.CHANNEL
    if inspect.isroutine(value) or isinstance(value, functools.partial):
        return Kind.FUNCTION
    if (
        dataclasses.is_dataclass(value)
        or isinstance(value, BaseException)
        or hasattr(value, "__dict__")
        or _slot_names(type(value))
    ):
        return Kind.STRUCT
    return Kind.SCALAR


def capability_of(value: Any) -> Capability | None:
    """Does *value* know how to describe itself?

    Exceptions have their message. Other values count only if their
    ``__str__`` comes from a class that isn't a builtin.
    """
    if isinstance(value, BaseException):
        return Capability.ERROR
    for klass in type(value).__mro__:
        if "__str__" in vars(klass):
            if klass.__module__ in _PLAIN_STR_MODULES:
                return None
            return Capability.STRING
    return None


def describe(value: Any) -> ValueDescriptor:
    try:
        kind = kind_of(value)
    except RecursionError:
        raise
    except Exception:
        # ``isinstance`` and ``hasattr`` go through ``__class__`` and
        # ``__getattribute__``, which can fail.
        kind = Kind.INVALID
    capability = None
    if kind not in (Kind.NIL, Kind.BOXED, Kind.INVALID):
        capability = capability_of(value)
    return ValueDescriptor(kind, type_name(type(value)), capability)


def _safe_repr(value: Any) -> str:
    try:
        return repr(value)
    except Exception:
        return "<invalid>"


def scalar_text(value: Any) -> str:
    """Text of a value of kind :attr:`Kind.SCALAR`

    >>> scalar_text(True), scalar_text(3), scalar_text(ctypes.c_uint8(5))
    ('true', '3', '5')
    """
    match value:
        case None:
            return "<nil>"
        case bool():
            return "true" if value else "false"
        # Go through the base types so that subclasses overriding `__repr__`
        # don't get a say.
        case int():
            return int.__repr__(value)
        case float():
            return float.__repr__(value)
        case complex():
            return complex.__repr__(value)
        case ctypes._SimpleCData():
            return scalar_text(value.value)
        case type():
            return type_name(value)
        case types.ModuleType():
            return f"<module {value.__name__!r}>"
    return _safe_repr(value)


def deref(value: Any) -> tuple[Any, int | None]:
    """Follow one pointer or box.

    Returns:
      ``(target, address)``; *target* is :data:`NIL` if *value* doesn't point
      to anything.
    """
    if isinstance(value, ctypes._Pointer):
        if not value:
            return NIL, None
        target = value.contents
        return target, ctypes.addressof(target)
    if isinstance(value, weakref.ref):
        target = value()
        if target is None:
            return NIL, None
        return target, id(target)
    if isinstance(value, types.CellType):
        try:
            target = value.cell_contents
        except ValueError:
            return NIL, None
        return target, id(target)
    raise TypeError(f"Cannot dereference values of type {type(value)}")


def pointee_type_name(pointer: Any) -> str:
    "Name of the type a pointer is declared to point to"
    target = getattr(type(pointer), "_type_", None)
    if isinstance(target, type):
        return type_name(target)
    return "object"


def address(value: Any) -> int:
    if isinstance(value, _CTYPES_VALUES):
        return ctypes.addressof(value)
    return id(value)


def is_reference(value: Any) -> bool:
    """Is *value* tracked by its own identity?

    :mod:`ctypes` structures and arrays are plain memory: they are only
    tracked through the pointers that lead to them.
    """
    if isinstance(value, _CTYPES_VALUES):
        return False
    return kind_of(value) in (Kind.STRUCT, Kind.SEQUENCE, Kind.MAPPING)


def capacity(value: Any) -> int | None:
    """Number of allocated slots, if it is known.

    >>> capacity((1, 2)) is None
    True
    """
    if isinstance(value, list):
        used = list.__sizeof__(value) - type(value).__basicsize__
        return used // _PTR_SIZE
    if isinstance(value, bytearray):
        # The allocation includes the trailing NUL byte.
        return max(value.__alloc__() - 1, len(value))
    return None


def _slot_names(ty: type) -> list[tuple[str, str]]:
    """``(name, attribute)`` for all the slots of *ty*, base classes first."""
    res = []
    for klass in reversed(ty.__mro__):
        slots = vars(klass).get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name in ("__dict__", "__weakref__"):
                continue
            attr = name
            if name.startswith("__") and not name.endswith("__"):
                attr = f"_{klass.__name__.lstrip('_')}{name}"
            res.append((name, attr))
    return res


def _read(value: Any, attr: str) -> Any:
    try:
        return getattr(value, attr)
    except Exception:
        return INVALID


def struct_fields(value: Any) -> list[tuple[str, Any]]:
    """All the fields of *value*, private ones included.

    Declared fields come first, in declaration order, followed by the
    remaining instance attributes in insertion order. Fields that cannot be
    read are :data:`INVALID`.
    """
    ty = type(value)
    if isinstance(value, (ctypes.Structure, ctypes.Union)):
        return [
            (fld[0], _read(value, fld[0]))
            for klass in reversed(ty.__mro__)
            for fld in vars(klass).get("_fields_", ())
        ]

    declared: list[tuple[str, str]] = []
    if isinstance(value, tuple) and hasattr(ty, "_fields"):
        declared.extend((name, name) for name in ty._fields)
    elif dataclasses.is_dataclass(value):
        declared.extend((f.name, f.name) for f in dataclasses.fields(value))
    if isinstance(value, BaseException):
        declared.append(("args", "args"))
    declared.extend(_slot_names(ty))

    seen = set[str]()
    res: list[tuple[str, Any]] = []
    for name, attr in declared:
        if attr in seen:
            continue
        seen.add(attr)
        res.append((name, _read(value, attr)))

    try:
        attrs = vars(value)
    except TypeError:
        attrs = {}
    for name, v in attrs.items():
        if name not in seen:
            res.append((name, v))
    return res
