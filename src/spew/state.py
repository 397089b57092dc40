"""
``spew.state``: Bound configurations
====================================

A :class:`SpewState` carries its own :class:`~spew.config.ConfigState` and
exposes the functions of :mod:`spew.writer` bound to it. It needs no
set-up: the configuration is created the first time it is needed::

    >>> ss = SpewState()
    >>> ss.config().indent = "\\t"
    >>> ss.sdump({"one": 1})
    '(dict) {\\n\\t(str) "one": (int) 1\\n}\\n'

"""

from __future__ import annotations

from typing import Any, TextIO

from spew import writer
from spew.config import ConfigState

__all__ = ("SpewState",)


class SpewState:
    __slots__ = ("_config",)

    _config: ConfigState | None

    def __init__(self, config: ConfigState | None = None) -> None:
        self._config = config

    def __repr__(self) -> str:
        return f"SpewState({self._config!r})"

    def config(self) -> ConfigState:
        "The configuration of this state, created on first use."
        if self._config is None:
            self._config = ConfigState()
        return self._config

    def dump(self, *args: Any, file: TextIO | None = None) -> None:
        writer.dump(*args, file=file, config=self.config())

    def sdump(self, *args: Any) -> str:
        return writer.sdump(*args, config=self.config())

    def printf(self, fmt: str, *args: Any, file: TextIO | None = None) -> None:
        writer.printf(fmt, *args, file=file, config=self.config())

    def sprintf(self, fmt: str, *args: Any) -> str:
        return writer.sprintf(fmt, *args, config=self.config())

    def sprint(self, *args: Any, sep: str = " ") -> str:
        return writer.sprint(*args, sep=sep, config=self.config())

    def sprintln(self, *args: Any, sep: str = " ") -> str:
        return writer.sprintln(*args, sep=sep, config=self.config())

    def println(
        self, *args: Any, sep: str = " ", file: TextIO | None = None
    ) -> None:
        writer.println(*args, sep=sep, file=file, config=self.config())

    def sformat(self, template: str, *args: Any, **kwargs: Any) -> str:
        return writer.sformat(template, *args, config=self.config(), **kwargs)

    def formatter(self, value: Any) -> writer.Formatted:
        return writer.formatter(value, config=self.config())
