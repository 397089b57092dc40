"""
``spew.notebook``: Highlighted dumps
====================================

Display dumps with syntax highlighting in IPython/Jupyter notebooks. The
result of :func:`view` renders itself as HTML::

    >>> v = view((1,))
    >>> print(v)
    (tuple) (len=1) {
     (int) 1
    }
    >>> "spew-highlight" in v._repr_html_()
    True

"""

from __future__ import annotations

import functools
from typing import Any

import pygments
import pygments.formatters
from pygments.lexer import RegexLexer, bygroups, words
from pygments.token import (
    Comment,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Text,
)

from spew import writer
from spew.config import ConfigState

__all__ = ("DumpLexer", "DumpView", "highlight", "view")

CSS_CLASS = "spew-highlight"


class DumpLexer(RegexLexer):
    "Lexer for the output of :func:`spew.dump`"
    name = "spew"
    aliases = ["spew"]
    filenames = []  # type: ignore[var-annotated]

    tokens = {
        "root": [
            (r"\n", Text),
            (r"\s+", Text),
            (
                r"<(?:nil|invalid|already shown|max depth reached)>",
                Name.Builtin.Pseudo,
            ),
            (
                r"(\()(len=\d+(?: cap=\d+)?)(\))",
                bygroups(Punctuation, Comment, Punctuation),
            ),
            (
                r"(\()(0x[0-9a-f]+(?:->0x[0-9a-f]+)*)(\))",
                bygroups(Punctuation, Number.Hex, Punctuation),
            ),
            (
                r"(\()(\**)([^()\s<][^()\s]*)(\))",
                bygroups(Punctuation, Operator, Keyword.Type, Punctuation),
            ),
            (r'"(?:[^"\\]|\\.)*"', String.Double),
            (r"0x[0-9a-f]+", Number.Hex),
            (words(("true", "false"), suffix=r"\b"), Keyword.Constant),
            (r"-?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?j?", Number),
            (r"([^\W\d]\w*)(:)", bygroups(Name.Attribute, Punctuation)),
            (r"[{}(),]", Punctuation),
            (r".", Text),
        ],
    }


@functools.lru_cache()
def get_highlight_style() -> str:
    formatter = pygments.formatters.HtmlFormatter(cssclass=CSS_CLASS)
    styles: str = formatter.get_style_defs(f".{CSS_CLASS}")
    return styles


def highlight(code: str) -> str:
    formatter = pygments.formatters.HtmlFormatter(cssclass=CSS_CLASS)
    res: str = pygments.highlight(code, DumpLexer(), formatter)
    return res


class DumpView:
    """The dump of some values, displayed with highlighting in notebooks."""

    __slots__ = ("text",)

    text: str

    def __init__(self, text: str) -> None:
        self.text = text

    def __str__(self) -> str:
        return self.text.rstrip("\n")

    def __repr__(self) -> str:
        return self.text.rstrip("\n")

    def _repr_html_(self) -> str:
        return f"<style>{get_highlight_style()}</style>{highlight(self.text)}"


def view(*args: Any, config: ConfigState | None = None) -> DumpView:
    """Like :func:`spew.sdump` but displayed as highlighted HTML in notebooks.

    Args:
      *args: The values to dump.
      config(ConfigState): The options to use (defaults to
        :func:`~spew.config.get_config`).
    """
    return DumpView(writer.sdump(*args, config=config))
