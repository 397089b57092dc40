"""``spew.pretty``: Layout documents
==================================

A cut-down version of Christian Lindig's "strictly pretty" [`pdf
<https://lindig.github.io/papers/strictly-pretty-2000.pdf>`_] document
algebra.

The renderers only ever need two layouts: every break is a newline (the
verbose dump, :func:`to_string`) or no break is (the inline renderer,
:func:`flatten`). There is therefore no width-driven fitting and no groups,
but the document constructors are the same as in the article so that
renderers can build output without caring about the final layout.

Indentation is expressed in *levels*: :func:`nest` adds levels and the
renderer writes one indentation token per level after each newline::

    >>> body = nest(1, NULL_BREAK + text("a"))
    >>> doc = text("{") + body + NULL_BREAK + text("}")
    >>> to_string(doc, indent="--")
    '{\\n--a\\n}'
    >>> flatten(doc)
    '{a}'

"""

from __future__ import annotations

import dataclasses
import io
from typing import TextIO

__all__ = (
    "Doc",
    "EMPTY",
    "text",
    "NULL_BREAK",
    "nest",
    "join",
    "to_string",
    "flatten",
)


class Doc:
    """Type used to represent documents

    This constructor should never be called directly

    Documents can be concatenated via the ``+`` operator.
    """

    def __add__(self, other: Doc) -> Doc:
        return DocCons(self, other)


@dataclasses.dataclass(slots=True)
class DocNil(Doc):
    pass


@dataclasses.dataclass(slots=True)
class DocCons(Doc):
    left: Doc
    right: Doc


@dataclasses.dataclass(slots=True)
class DocText(Doc):
    text: str


@dataclasses.dataclass(slots=True)
class DocNest(Doc):
    levels: int
    doc: Doc


@dataclasses.dataclass(slots=True)
class DocBREAK(Doc):
    pass


#: The empty document
EMPTY: Doc = DocNil()


def text(s: str) -> Doc:
    """
    Turns a string into a document

    Args:
      s(str)

    Returns:
      Doc:
    """
    return DocText(s)


def nest(levels: int, doc: Doc) -> Doc:
    """Add *levels* indentation levels to the lines started inside *doc*.

    Args:
      levels(int):
      doc(Doc):

    Returns:
      Doc:
    """
    return DocNest(levels, doc)


#: A newline followed by the indentation of the enclosing nest; disappears
#: entirely when the document is flattened.
NULL_BREAK: Doc = DocBREAK()


def join(sep: Doc, docs: list[Doc]) -> Doc:
    acc = EMPTY
    first = True
    for doc in docs:
        if not first:
            acc += sep
        else:
            first = False
        acc += doc
    return acc


# NOTE: Linked list of pending work. Documents are deeply right-nested (they
# are built with `+`) so popping from the head needs to be O(1).
@dataclasses.dataclass(slots=True)
class LL:
    level: int
    doc: Doc
    _succ: LL | None = None


def format(elts: LL | None, out: TextIO, indent: str) -> None:
    def sline(level: int) -> None:
        out.write("\n")
        out.write(indent * level)

    stext = out.write

    while elts is not None:
        match elts:
            case LL(i, DocNil(), z):
                elts = z
                continue
            case LL(i, DocCons(x, y), z):
                elts = LL(i, x, LL(i, y, z))
                continue
            case LL(i, DocNest(j, x), z):
                elts = LL(i + j, x, z)
                continue
            case LL(i, DocText(s), z):
                stext(s)
                elts = z
                continue
            case LL(i, DocBREAK(), z):
                sline(i)
                elts = z
                continue
        # unreachable
        assert False, elts  # pragma: no cover


def to_string(doc: Doc, indent: str = " ") -> str:
    """Render *doc*, turning every break into a newline.

    Args:
      doc(Doc):
      indent(str): the token written once per indentation level.
    """
    out = io.StringIO()
    format(LL(0, doc), out, indent)
    return out.getvalue()


def flatten(doc: Doc) -> str:
    """Render *doc* on one line: breaks and indentation are dropped."""
    out = io.StringIO()
    docs = [doc]
    while docs:
        match docs.pop():
            case DocNil() | DocBREAK():
                continue
            case DocText(s):
                out.write(s)
            case DocCons(left=l, right=r):
                docs.append(r)
                docs.append(l)
            case DocNest(doc=d):
                docs.append(d)
            case _:  # pragma: no cover
                assert False
    return out.getvalue()
