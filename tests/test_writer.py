from __future__ import annotations

import ctypes
import dataclasses
import io

import pytest

import spew
from spew.config import ConfigState

from . import utils


@pytest.fixture
def default_config():
    cfg = spew.get_config()
    saved = cfg.copy()
    yield cfg
    for fld in dataclasses.fields(saved):
        setattr(cfg, fld.name, getattr(saved, fld.name))


def test_printf_example(capsys):
    ppui8 = ctypes.pointer(ctypes.pointer(ctypes.c_uint8(5)))
    spew.printf("ppui8: %v\n", ppui8)
    spew.printf("circular: %v\n", utils.circular())
    assert capsys.readouterr().out == (
        "ppui8: <**>5\ncircular: {1 <*>{1 <*><shown>}}\n"
    )


def test_sprintf_verbs():
    foo = utils.mk_foo()
    assert spew.sprintf("%v", foo) == "{{flagTwo <nil>} {one:true}}"
    assert spew.sprintf("%+v", foo).startswith("{_unexported_field:{flag:")
    assert spew.sprintf("%#v", 1) == "(int)1"
    assert spew.sprintf("%#+v", [None]) == "(list)[(NoneType)<nil>]"
    assert spew.sprintf("%+#v", [None]) == "(list)[(NoneType)<nil>]"


def test_sprintf_passthrough():
    assert spew.sprintf("%5.2f|%-4d|%x%%", 3.14159, 7, 255) == " 3.14|7   |ff%"
    assert spew.sprintf("%s and %r", "a", "a") == "a and 'a'"
    assert spew.sprintf("%*d", 5, 42) == "   42"
    assert spew.sprintf("%.*f", 1, 2.25) == "2.2"
    assert spew.sprintf("no directives") == "no directives"


def test_sprintf_width():
    assert spew.sprintf("%-6v|%6v|", [1], [1]) == "[1]   |   [1]|"
    assert spew.sprintf("%.3v", "abcdef") == "abc"
    assert spew.sprintf("%*v", 4, 1) == "   1"


def test_sprintf_mapping():
    values = {"a": "x", "b": [1]}
    assert spew.sprintf("%(a)s=%(b)v", values) == "x=[1]"
    assert spew.sprintf("%(c)v", values) == "%!v(MISSING)"
    # Without keys, a mapping is just a value.
    assert spew.sprintf("%v", {"a": 1}) == "{a:1}"


def test_sprintf_errors():
    assert spew.sprintf("%d", "x") == "%!d(str=x)"
    assert spew.sprintf("%z", [1]) == "%!z(list=[1])"
    assert spew.sprintf("%v %v", 1) == "1 %!v(MISSING)"
    assert spew.sprintf("%v", 1, "a", None) == (
        "1%!(EXTRA str=a, NoneType=<nil>)"
    )
    assert spew.sprintf("100%") == "100%!(NOVERB)"
    assert spew.sprintf("%*d", "x", 1) == "%!(BADWIDTH)1"


class BadNumber:
    def __index__(self):
        raise RuntimeError("no index")


def test_sprintf_failing_methods():
    broken = utils.tname(utils.Broken)
    assert spew.sprintf("%s|%v", utils.Broken(1), 2) == (
        f"%!s({broken}=(PANIC=RuntimeError: no text for you))|2"
    )
    assert spew.sprintf("%x", BadNumber()) == (
        f"%!x({utils.tname(BadNumber)}={{}})"
    )


class BrokenMapping(dict):
    def __getitem__(self, key):
        raise RuntimeError(key)

    def get(self, key, default=None):
        raise RuntimeError(key)


def test_sprintf_failing_mapping():
    assert spew.sprintf("%(a)v", BrokenMapping(a=1)) == "%!v(MISSING)"


def test_sprintf_config():
    cfg = ConfigState(disable_methods=True)
    assert spew.sprintf("f: %v", utils.FLAG_TWO, config=cfg) == "f: 1"
    assert spew.sprintf("f: %v", utils.FLAG_TWO) == "f: flagTwo"


def test_sformat():
    assert spew.sformat("{} {!r}", [1, 2], [1, 2]) == "[1 2] [1, 2]"
    assert spew.sformat("{0:v} {0:+v} {0:#v}", (1,)) == (
        "[1] [1] (tuple)[(int)1]"
    )
    assert spew.sformat("{x:>6v}|{x:<6}|", x=[1]) == "   [1]|%!<6(list=[1])|"
    assert spew.sformat("{:.2f} {:04d}", 1.0, 7) == "1.00 0007"
    assert spew.sformat("{} {}", 1) == "1 %!v(MISSING)"
    assert spew.sformat("{name}", other=1) == "%!v(MISSING)"
    assert spew.sformat("{", 1).startswith("%!(BADTEMPLATE ")
    assert spew.sformat("{0!z}", 1).startswith("%!(BADTEMPLATE ")


def test_sformat_fields():
    node = utils.Node(1, utils.Node(2))
    assert spew.sformat("{0.next.value} {0.value:#v}", node) == "2 (int)1"
    assert spew.sformat("{0[1]} {m[k]}", [1, [2]], m={"k": "v"}) == "[2] v"
    assert spew.sformat("{0[5]} {0[k]}", [1]) == (
        "%!(BADINDEX) %!(BADINDEX)"
    )
    assert spew.sformat("{m[x]} {0.nope}", 1, m={}) == (
        "%!(BADINDEX) %!(BADINDEX)"
    )
    assert spew.sformat("{1[0]}", 1) == "%!(BADINDEX)"


def test_sformat_failing_methods():
    broken = utils.tname(utils.Broken)
    assert spew.sformat("{0!s}|{0}", utils.Broken(1)) == (
        f"%!s({broken}=(PANIC=RuntimeError: no text for you))|"
        "(PANIC=RuntimeError: no text for you)"
    )
    assert spew.sformat("{:>4}", utils.Broken(1)) == (
        f"%!>4({broken}=(PANIC=RuntimeError: no text for you))"
    )


def test_formatter():
    ppui8 = ctypes.pointer(ctypes.pointer(ctypes.c_uint8(5)))
    w = spew.formatter(ppui8)
    assert str(w) == "<**>5"
    assert repr(w) == "(**ctypes.c_ubyte)5"
    assert f"{w}|{w:>6v}|{w:#v}" == "<**>5| <**>5|(**ctypes.c_ubyte)5"
    assert "%s" % w == "<**>5"
    assert spew.sprintf("%v", w) == "<**>5"
    bound = spew.formatter(utils.FLAG_TWO, ConfigState(disable_methods=True))
    assert f"{bound}" == "1"
    assert spew.sformat("{}", bound) == "1"


def test_sprint():
    assert spew.sprint("a", [1], None) == "a [1] <nil>"
    assert spew.sprint("a", "b", sep="") == "ab"
    assert spew.sprintln(1, 2) == "1 2\n"


def test_println(capsys):
    spew.println("x", {"k": 1})
    assert capsys.readouterr().out == "x {k:1}\n"


def test_dump(capsys):
    spew.dump(1, "a")
    assert capsys.readouterr().out == '(int) 1\n(str) "a"\n'
    buf = io.StringIO()
    spew.dump([], file=buf, config=ConfigState(disable_capacities=True))
    assert buf.getvalue() == "(list) (len=0) {\n}\n"
    assert spew.sdump() == ""


def test_printf_file():
    buf = io.StringIO()
    spew.printf("%v-%d", "a", 1, file=buf)
    assert buf.getvalue() == "a-1"


def test_default_config(default_config):
    default_config.indent = "\t"
    assert spew.sdump({"a": 1}) == '(dict) {\n\t(str) "a": (int) 1\n}\n'
    assert spew.sdump({"a": 1}, config=ConfigState()) == (
        '(dict) {\n (str) "a": (int) 1\n}\n'
    )
    default_config.disable_methods = True
    assert spew.sprint(utils.FLAG_TWO) == "1"


def test_arguments_are_independent():
    # Each argument gets its own cycle tracker.
    node = utils.Node(1)
    assert spew.sprint(node, node) == "{1 <nil>} {1 <nil>}"
