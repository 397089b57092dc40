from __future__ import annotations

import io

import spew
from spew import SpewState
from spew.config import ConfigState

from . import utils


def test_uninitialized():
    ss = SpewState()
    assert ss.config() == ConfigState()
    assert ss.config() is ss.config()
    assert ss.config() is not spew.get_config()


def test_indent():
    ss = SpewState()
    ss.config().indent = "\t"
    v = {"one": 1}
    assert ss.sprintf("v: %v\n", v) == "v: {one:1}\n"
    assert ss.sdump(v) == '(dict) {\n\t(str) "one": (int) 1\n}\n'
    assert spew.get_config().indent == " "


def test_independent_states():
    ss, ss2 = SpewState(), SpewState()
    ss.config().disable_methods = True
    assert ss.sprintf("f: %v", utils.FLAG_TWO) == "f: 1"
    assert ss2.sprintf("f: %v", utils.FLAG_TWO) == "f: flagTwo"
    assert ss.sprint(utils.FLAG_TWO) == "1"
    assert ss2.sprintln(utils.FLAG_TWO) == "flagTwo\n"
    assert ss.sformat("{}", utils.FLAG_TWO) == "1"
    assert f"{ss.formatter(utils.FLAG_TWO)}" == "1"


def test_bound_config():
    cfg = ConfigState(indent="..")
    ss = SpewState(cfg)
    assert ss.config() is cfg
    assert ss.sdump([1]).endswith("\n..(int) 1\n}\n")


def test_writers():
    ss = SpewState()
    buf = io.StringIO()
    ss.dump(1, file=buf)
    ss.printf("%v|", None, file=buf)
    ss.println("a", 1, file=buf)
    assert buf.getvalue() == "(int) 1\n<nil>|a 1\n"
