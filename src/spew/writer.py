"""
``spew.writer``: Entry points
=============================

Drive the renderers over the arguments of a call and send the result to a
sink.

The printf family understands the same templates as the ``%`` operator plus
three extra verbs:

    >>> sprintf("%v|%+v|%#v", [1, "a"], [1, "a"], [1, "a"])
    '[1 a]|[1 a]|(list)[(int)1 (str)"a"]'
    >>> sprintf("%5.2f%%", 3.14159)
    ' 3.14%'

Problems with the template never raise, they show up in the output:

    >>> sprintf("%d %v", "x")
    '%!d(str=x) %!v(MISSING)'
    >>> sprintf("%v", 1, 2)
    '1%!(EXTRA int=2)'

"""

from __future__ import annotations

import collections.abc
import logging
import re
import string
import sys
from typing import Any, Final, Mapping, Sequence, TextIO

from spew import classify, inline, tree
from spew.config import ConfigState, get_config

__all__ = (
    "Formatted",
    "dump",
    "formatter",
    "printf",
    "println",
    "sdump",
    "sformat",
    "sprint",
    "sprintf",
    "sprintln",
)

# One `%` directive, as understood by the `%` operator.
_DIRECTIVE: Final = re.compile(
    r"%(?:\((?P<key>[^)]*)\))?"
    r"(?P<flags>[-#0 +]*)"
    r"(?P<width>\*|\d+)?"
    r"(?:\.(?P<precision>\*|\d*))?"
    r"(?P<length>[hlL])?"
    r"(?P<conv>.?)",
    re.DOTALL,
)

# A `str.format` spec selecting the inline renderer: the usual string spec
# followed by the printf flags and `v`.
_VERB_SPEC: Final = re.compile(r"(?P<spec>.*?)(?P<flags>[#+]*)v", re.DOTALL)

logger = logging.getLogger(__name__)

MISSING: Final = "%!v(MISSING)"


class Formatted:
    """A value that renders itself with :mod:`spew.inline`.

    ``str()`` gives the ``%v`` rendering, ``repr()`` the ``%#v`` one and
    :func:`format` accepts the same specs as :func:`sformat`::

        >>> w = formatter([1, 2])
        >>> f"{w} {w!r} {w:>7v}"
        '[1 2] (list)[(int)1 (int)2]   [1 2]'
    """

    __slots__ = ("value", "config")

    value: Any
    config: ConfigState

    def __init__(self, value: Any, config: ConfigState) -> None:
        self.value = value
        self.config = config

    def __str__(self) -> str:
        return inline.render(self.value, self.config)

    def __repr__(self) -> str:
        return inline.render(self.value, self.config, types=True)

    def __format__(self, spec: str) -> str:
        if not spec:
            return str(self)
        return _format_field(self.value, spec, self.config)


def formatter(value: Any, config: ConfigState | None = None) -> Formatted:
    """Wrap *value* so that the string formatting machinery renders it inline.

    Args:
      value: The value to wrap.
      config(ConfigState): The options to use (defaults to
        :func:`~spew.config.get_config`).
    """
    return Formatted(value, get_config() if config is None else config)


def _render(
    value: Any, config: ConfigState, fields: bool, types: bool
) -> str:
    if isinstance(value, Formatted):
        value, config = value.value, value.config
    return inline.render(value, config, fields=fields, types=types)


def _bad_arg(verb: str, value: Any, config: ConfigState) -> str:
    ty = classify.type_name(type(value))
    return f"%!{verb}({ty}={_render(value, config, False, False)})"


def _format_field(value: Any, spec: str, config: ConfigState) -> str:
    m = _VERB_SPEC.fullmatch(spec)
    if m is not None:
        flags = m["flags"]
        text = _render(value, config, "+" in flags, "#" in flags)
        try:
            return format(text, m["spec"])
        except ValueError:
            return _bad_arg(spec, value, config)
    try:
        return format(value, spec)
    except Exception:
        logger.debug(
            "format spec %r failed on a value of type %s",
            spec,
            classify.type_name(type(value)),
            exc_info=True,
        )
        return _bad_arg(spec, value, config)


class _Missing:
    "Stands for an argument that was referred to but not passed."


class _BadIndex:
    "Stands for a field whose index or attribute couldn't be looked up."


class _Formatter(string.Formatter):
    def __init__(self, config: ConfigState) -> None:
        self.config = config

    def get_value(
        self, key: int | str, args: Sequence[Any], kwargs: Mapping[str, Any]
    ) -> Any:
        try:
            return super().get_value(key, args, kwargs)
        except (IndexError, KeyError):
            return _Missing

    def get_field(
        self, field_name: str, args: Sequence[Any], kwargs: Mapping[str, Any]
    ) -> Any:
        try:
            return super().get_field(field_name, args, kwargs)
        except Exception:
            logger.debug("failed to look up %r", field_name, exc_info=True)
            return _BadIndex, field_name

    def convert_field(self, value: Any, conversion: str | None) -> Any:
        if value is _Missing or value is _BadIndex:
            return value
        try:
            return super().convert_field(value, conversion)
        except Exception:
            if conversion not in ("s", "r", "a"):
                raise
            logger.debug("!%s conversion failed", conversion, exc_info=True)
            return _bad_arg(conversion, value, self.config)

    def format_field(self, value: Any, format_spec: str) -> str:
        if value is _Missing:
            return MISSING
        if value is _BadIndex:
            return "%!(BADINDEX)"
        if not format_spec:
            format_spec = "v"
        return _format_field(value, format_spec, self.config)


def sformat(
    template: str,
    *args: Any,
    config: ConfigState | None = None,
    **kwargs: Any,
) -> str:
    """Like :meth:`str.format` with inline rendering for the ``v`` specs.

    Fields without a spec are rendered as with ``v``. The specs ``v``,
    ``+v``, ``#v`` and ``#+v`` select the inline renderer and can be
    preceded by a standard string spec (``{:>10v}``); all the other specs are
    handled by :func:`format`::

        >>> sformat("{} {x:+v} {y:.2f}", [1], x=None, y=1.0)
        '[1] <nil> 1.00'

    Fields that refer to missing arguments or that can't be looked up don't
    raise either::

        >>> sformat("{0} {1} {0[3]}", [1])
        '[1] %!v(MISSING) %!(BADINDEX)'
    """
    if config is None:
        config = get_config()
    try:
        return _Formatter(config).vformat(template, args, kwargs)
    except Exception as e:
        logger.debug("bad template %r", template, exc_info=True)
        return f"%!(BADTEMPLATE {e})"


def _lookup(mapping: Mapping[str, Any], key: str | None) -> Any:
    if not key:
        return _Missing
    try:
        return mapping.get(key, _Missing)
    except Exception:
        logger.debug("failed to look up %r", key, exc_info=True)
        return _Missing


def sprintf(fmt: str, *args: Any, config: ConfigState | None = None) -> str:
    """Format *args* according to the printf-style template *fmt*.

    ``%v`` renders a value inline, ``%+v`` adds field names and pointer
    addresses and ``%#v`` adds types. Their width, precision and ``-`` flag
    work as for ``%s``. Every other directive is handled by the ``%``
    operator. If the only argument is a mapping, ``%(key)`` directives look
    their values up in it.
    """
    if config is None:
        config = get_config()
    mapping: Mapping[str, Any] | None = None
    if len(args) == 1 and isinstance(args[0], collections.abc.Mapping):
        if any(m["key"] is not None for m in _DIRECTIVE.finditer(fmt)):
            mapping = args[0]
    pending = iter(args)
    used = 0
    out: list[str] = []
    last = 0

    def next_arg() -> Any:
        nonlocal used
        used += 1
        return next(pending, _Missing)

    for m in _DIRECTIVE.finditer(fmt):
        out.append(fmt[last : m.start()])
        last = m.end()
        conv = m["conv"]
        if conv == "%":
            out.append("%")
            continue
        if not conv:
            out.append("%!(NOVERB)")
            continue
        width = m["width"] or ""
        precision = m["precision"]
        if width == "*":
            arg = next_arg()
            if isinstance(arg, int) and not isinstance(arg, bool):
                width = str(arg)
            else:
                out.append("%!(BADWIDTH)")
                width = ""
        if precision == "*":
            arg = next_arg()
            if isinstance(arg, int) and not isinstance(arg, bool):
                precision = str(arg)
            else:
                out.append("%!(BADPREC)")
                precision = None
        if mapping is not None:
            value = _lookup(mapping, m["key"])
        else:
            value = next_arg()
        if value is _Missing:
            out.append(f"%!{conv}(MISSING)")
            continue
        flags = m["flags"]
        prec = "" if precision is None else f".{precision}"
        try:
            if conv == "v":
                text = _render(value, config, "+" in flags, "#" in flags)
                align = "-" if "-" in flags else ""
                out.append(f"%{align}{width}{prec}s" % (text,))
            else:
                length = m["length"] or ""
                out.append(f"%{flags}{width}{prec}{length}{conv}" % (value,))
        except Exception:
            # Bad conversions, but also whatever `__str__`, `__index__`...
            # throw at us.
            logger.debug(
                "%%%s failed on a value of type %s",
                conv,
                classify.type_name(type(value)),
                exc_info=True,
            )
            out.append(_bad_arg(conv, value, config))
    out.append(fmt[last:])

    if mapping is None and used < len(args):
        extra = ", ".join(
            f"{classify.type_name(type(v))}={_render(v, config, False, False)}"
            for v in args[used:]
        )
        out.append(f"%!(EXTRA {extra})")
    return "".join(out)


def sprint(
    *args: Any, sep: str = " ", config: ConfigState | None = None
) -> str:
    """Render every argument in the default inline form, separated by *sep*.

    >>> sprint("a", [1, 2], {"k": None})
    'a [1 2] {k:<nil>}'
    """
    if config is None:
        config = get_config()
    return sep.join(_render(arg, config, False, False) for arg in args)


def sprintln(
    *args: Any, sep: str = " ", config: ConfigState | None = None
) -> str:
    return sprint(*args, sep=sep, config=config) + "\n"


def sdump(*args: Any, config: ConfigState | None = None) -> str:
    """The dump of every argument, each one followed by a newline.

    Args:
      *args: The values to dump.
      config(ConfigState): The options to use (defaults to
        :func:`~spew.config.get_config`).
    """
    if config is None:
        config = get_config()
    return "".join(f"{tree.render(arg, config)}\n" for arg in args)


def _sink(file: TextIO | None) -> TextIO:
    # Resolved at call time so that redirections of `sys.stdout` are honored.
    return sys.stdout if file is None else file


def dump(
    *args: Any, file: TextIO | None = None, config: ConfigState | None = None
) -> None:
    """Write the dump of every argument to *file*.

    Arguments:

      *args: The values to dump.
      file(file-like):
        `text file <https://docs.python.org/3/glossary.html#term-text-file>`_
        where the output will be written (defaults to :data:`sys.stdout`).
      config(ConfigState): The options to use (defaults to
        :func:`~spew.config.get_config`).
    """
    _sink(file).write(sdump(*args, config=config))


def printf(
    fmt: str,
    *args: Any,
    file: TextIO | None = None,
    config: ConfigState | None = None,
) -> None:
    "Write :func:`sprintf` of the arguments to *file*."
    _sink(file).write(sprintf(fmt, *args, config=config))


def println(
    *args: Any,
    sep: str = " ",
    file: TextIO | None = None,
    config: ConfigState | None = None,
) -> None:
    _sink(file).write(sprintln(*args, sep=sep, config=config))
