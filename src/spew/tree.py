"""
``spew.tree``: Verbose tree rendering
=====================================

Every value is prefixed by its type and aggregates are spread over several
lines, one level of indentation per level of nesting::

    >>> from spew.config import ConfigState
    >>> print(render({"one": [1, 2]}, ConfigState(disable_capacities=True)))
    (dict) {
     (str) "one": (list) (len=2) {
      (int) 1,
      (int) 2
     }
    }

"""

from __future__ import annotations

import json
from typing import ClassVar, Iterator

from spew import base, pretty
from spew.classify import ValueDescriptor
from spew.config import ConfigState

__all__ = ("DumpPrinter", "hexdump", "render")

COL_SEP = pretty.text(",") + pretty.NULL_BREAK


def hexdump(data: bytes) -> list[str]:
    """Format *data* in the canonical ``hexdump -C`` layout.

    >>> hexdump(b"spew\\x00")
    ['00000000  73 70 65 77 00                                    |spew.|']
    """
    lines = []
    for offset in range(0, len(data), 16):
        chunk = data[offset : offset + 16]
        hexa = " ".join(f"{b:02x}" for b in chunk[:8])
        if len(chunk) > 8:
            hexa += "  " + " ".join(f"{b:02x}" for b in chunk[8:])
        ascii = "".join(chr(b) if 32 <= b <= 126 else "." for b in chunk)
        lines.append(f"{offset:08x}  {hexa:<48}  |{ascii}|")
    return lines


class DumpPrinter(base.Accumulator[pretty.Doc, str]):
    "Convert a value into a multiline, type annotated document"

    NIL: ClassVar[pretty.Doc] = pretty.text("<nil>")
    INVALID: ClassVar[pretty.Doc] = pretty.text("<invalid>")
    CYCLE: ClassVar[pretty.Doc] = pretty.text("<already shown>")
    MAX_DEPTH: ClassVar[str] = "<max depth reached>"

    config: ConfigState

    def __init__(self, config: ConfigState) -> None:
        self.config = config

    def block(
        self, docs: list[pretty.Doc], sep: pretty.Doc = COL_SEP
    ) -> pretty.Doc:
        if not docs:
            return pretty.text("{") + pretty.NULL_BREAK + pretty.text("}")
        body = pretty.NULL_BREAK + pretty.join(sep, docs)
        return (
            pretty.text("{")
            + pretty.nest(1, body)
            + pretty.NULL_BREAK
            + pretty.text("}")
        )

    def truncated(self) -> pretty.Doc:
        return self.block([pretty.text(self.MAX_DEPTH)])

    def header(self, size: int, capacity: int | None) -> pretty.Doc:
        if capacity is not None and capacity != size:
            return pretty.text(f"(len={size} cap={capacity}) ")
        return pretty.text(f"(len={size}) ")

    def annotate(
        self, desc: ValueDescriptor, body: pretty.Doc
    ) -> pretty.Doc:
        return pretty.text(f"({desc.type_name}) ") + body

    def nil(self) -> pretty.Doc:
        return self.NIL

    def scalar(self, text: str) -> pretty.Doc:
        return pretty.text(text)

    def string(self, value: str) -> pretty.Doc:
        return pretty.text(json.dumps(value, ensure_ascii=False))

    def bytes(self, value: bytes, capacity: int | None) -> pretty.Doc:
        lines = [pretty.text(line) for line in hexdump(value)]
        return self.header(len(value), capacity) + self.block(
            lines, sep=pretty.NULL_BREAK
        )

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
        # Failures already come wrapped in parentheses.
        if result.failed:
            return pretty.text(f"{result.text} ") + body
        return pretty.text(f"({result.text}) ") + body

    def struct(
        self, fields: Iterator[tuple[str, pretty.Doc]] | None
    ) -> pretty.Doc:
        if fields is None:
            return self.truncated()
        return self.block(
            [pretty.text(f"{name}: ") + value for name, value in fields]
        )

    def sequence(
        self,
        size: int,
        capacity: int | None,
        items: Iterator[pretty.Doc] | None,
    ) -> pretty.Doc:
        header = self.header(size, capacity)
        if items is None:
            return header + self.truncated()
        return header + self.block(list(items))

    def mapping(
        self, size: int, items: Iterator[tuple[pretty.Doc, pretty.Doc]] | None
    ) -> pretty.Doc:
        if items is None:
            return self.truncated()
        return self.block([k + pretty.text(": ") + v for k, v in items])

    def pointer(
        self,
        type_name: str,
        indirects: int,
        addresses: list[int],
        state: base.PointerState,
        target: pretty.Doc | None,
    ) -> pretty.Doc:
        acc = pretty.text(f"({'*' * indirects}{type_name})")
        if addresses:
            chain = "->".join(f"{addr:#x}" for addr in addresses)
            acc += pretty.text(f"({chain})")
        match state:
            case base.PointerState.NIL:
                body = self.NIL
            case base.PointerState.CYCLE:
                body = self.CYCLE
            case base.PointerState.MAX_DEPTH:
                body = pretty.text(self.MAX_DEPTH)
            case base.PointerState.VALUE:
                assert target is not None
                body = target
        return acc + pretty.text("(") + body + pretty.text(")")

    def root(self, doc: pretty.Doc) -> str:
        return pretty.to_string(doc, indent=self.config.indent)


def render(value: object, config: ConfigState) -> str:
    """The dump of *value*, without the trailing newline."""
    return base.reduce_value(value, DumpPrinter(config), config)
