"""
``spew.inline``: Compact rendering
==================================

Render values on a single line. There are three flavours, named after the
printf verbs that select them:

``%v``
  The default, terse, form::

      >>> from spew.config import ConfigState
      >>> render({"a": [1, None]}, ConfigState())
      '{a:[1 <nil>]}'

``%+v``
  Adds the field names of structures and the addresses pointers go through.

``%#v``
  Adds field names and the types of values::

      >>> render({"a": [1, None]}, ConfigState(), types=True)
      '(dict){(str)"a":(list)[(int)1 (NoneType)<nil>]}'

"""

from __future__ import annotations

import json
from typing import ClassVar, Iterator

from spew import base, pretty
from spew.classify import ValueDescriptor
from spew.config import ConfigState

__all__ = ("InlinePrinter", "render")

SEP = pretty.text(" ")


class InlinePrinter(base.Accumulator[pretty.Doc, str]):
    "Serialize a value on one line."

    NIL: ClassVar[pretty.Doc] = pretty.text("<nil>")
    INVALID: ClassVar[pretty.Doc] = pretty.text("<invalid>")
    CYCLE: ClassVar[pretty.Doc] = pretty.text("<shown>")
    MAX_DEPTH: ClassVar[pretty.Doc] = pretty.text("<max>")

    fields: bool
    types: bool

    def __init__(self, fields: bool = False, types: bool = False) -> None:
        self.fields = fields
        self.types = types

    def format_list(
        self,
        docs: Iterator[pretty.Doc] | None,
        *,
        opar: str,
        cpar: str,
    ) -> pretty.Doc:
        if docs is None:
            return pretty.text(opar) + self.MAX_DEPTH + pretty.text(cpar)
        body = pretty.join(SEP, list(docs))
        return pretty.text(opar) + body + pretty.text(cpar)

    def annotate(
        self, desc: ValueDescriptor, body: pretty.Doc
    ) -> pretty.Doc:
        if not self.types:
            return body
        return pretty.text(f"({desc.type_name})") + body

    def nil(self) -> pretty.Doc:
        return self.NIL

    def scalar(self, text: str) -> pretty.Doc:
        return pretty.text(text)

    def string(self, value: str) -> pretty.Doc:
        if self.types:
            return pretty.text(json.dumps(value, ensure_ascii=False))
        return pretty.text(value)

    def bytes(self, value: bytes, capacity: int | None) -> pretty.Doc:
        return pretty.text(repr(value))

    def opaque(self, address: int) -> pretty.Doc:
        return pretty.text(f"{address:#x}")

    def invalid(self) -> pretty.Doc:
        return self.INVALID

    def cycle(self) -> pretty.Doc:
        return self.CYCLE

    def method(self, result: base.MethodResult) -> pretty.Doc:
        return pretty.text(result.text)

    def prefixed(
        self, result: base.MethodResult, body: pretty.Doc
    ) -> pretty.Doc:
        if result.failed:
            return pretty.text(f"{result.text} ") + body
        return pretty.text(f"({result.text}) ") + body

    def struct(
        self, fields: Iterator[tuple[str, pretty.Doc]] | None
    ) -> pretty.Doc:
        if fields is None or not (self.fields or self.types):
            docs = None if fields is None else (v for _, v in fields)
        else:
            docs = (pretty.text(f"{name}:") + v for name, v in fields)
        return self.format_list(docs, opar="{", cpar="}")

    def sequence(
        self,
        size: int,
        capacity: int | None,
        items: Iterator[pretty.Doc] | None,
    ) -> pretty.Doc:
        return self.format_list(items, opar="[", cpar="]")

    def mapping(
        self, size: int, items: Iterator[tuple[pretty.Doc, pretty.Doc]] | None
    ) -> pretty.Doc:
        docs = None
        if items is not None:
            docs = (k + pretty.text(":") + v for k, v in items)
        return self.format_list(docs, opar="{", cpar="}")

    def pointer(
        self,
        type_name: str,
        indirects: int,
        addresses: list[int],
        state: base.PointerState,
        target: pretty.Doc | None,
    ) -> pretty.Doc:
        stars = "*" * indirects
        if self.types:
            acc = pretty.text(f"({stars}{type_name})")
        else:
            acc = pretty.text(f"<{stars}>")
        if self.fields and addresses:
            chain = "->".join(f"{addr:#x}" for addr in addresses)
            acc += pretty.text(f"({chain})")
        match state:
            case base.PointerState.NIL:
                return acc + self.NIL
            case base.PointerState.CYCLE:
                return acc + self.CYCLE
            case base.PointerState.MAX_DEPTH:
                return acc + self.MAX_DEPTH
        assert target is not None
        return acc + target

    def root(self, doc: pretty.Doc) -> str:
        return pretty.flatten(doc)


def render(
    value: object,
    config: ConfigState,
    *,
    fields: bool = False,
    types: bool = False,
) -> str:
    """Render *value* on one line.

    Args:
      value: The value to render.
      config: The options to use.
      fields(bool): Show field names and pointer addresses (``%+v``).
      types(bool): Show field names and types (``%#v``).
    """
    acc = InlinePrinter(fields=fields, types=types)
    return base.reduce_value(value, acc, config)
