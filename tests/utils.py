from __future__ import annotations

import ctypes
import dataclasses
import re
from typing import Any

FLAG_STRINGS = {0: "flagOne", 1: "flagTwo"}


class Flag(int):
    "An enumerant with a custom textual representation."

    def __str__(self):
        return FLAG_STRINGS.get(self, f"Unknown flag ({int(self)})")


FLAG_ONE = Flag(0)
FLAG_TWO = Flag(1)


@dataclasses.dataclass
class Bar:
    flag: Flag
    data: ctypes.c_void_p = dataclasses.field(default_factory=ctypes.c_void_p)


@dataclasses.dataclass
class Foo:
    _unexported_field: Bar
    ExportedField: dict[Any, Any]


class Circular(ctypes.Structure):
    pass


Circular._fields_ = [
    ("ui8", ctypes.c_uint8),
    ("c", ctypes.POINTER(Circular)),
]


@dataclasses.dataclass
class Node:
    value: int
    next: Node | None = None


class Broken:
    def __init__(self, value):
        self.value = value

    def __str__(self):
        raise RuntimeError("no text for you")


class Named:
    def __init__(self, name):
        self._name = name

    def __str__(self):
        return f"named {self._name}"


class Opaque:
    "Refuses every attribute lookup, `__class__` included."

    def __getattribute__(self, name):
        raise RuntimeError(name)


def mk_foo(flag=FLAG_TWO):
    return Foo(Bar(flag), {"one": True})


def circular():
    c = Circular(1)
    c.c = ctypes.pointer(c)
    return c


def tname(ty):
    return f"{ty.__module__}.{ty.__qualname__}"


ADDR = r"0x[0-9a-f]+"


def fullmatch(pattern, text):
    """Match *text* against *pattern* where `{addr}` stands for an address and
    everything else is literal."""
    parts = pattern.split("{addr}")
    rex = ADDR.join(re.escape(p) for p in parts)
    assert re.fullmatch(rex, text), text
