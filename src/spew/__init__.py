"""Deep pretty printer for debugging"""
from __future__ import annotations

from importlib import metadata

from .classify import Kind
from .config import ConfigState, get_config
from .notebook import view
from .state import SpewState
from .writer import (
    dump,
    formatter,
    printf,
    println,
    sdump,
    sformat,
    sprint,
    sprintf,
    sprintln,
)

# https://packaging.python.org/en/latest/guides/single-sourcing-package-version/
__version__ = metadata.version(__name__)

__all__ = (
    "ConfigState",
    "Kind",
    "SpewState",
    "dump",
    "formatter",
    "get_config",
    "printf",
    "println",
    "sdump",
    "sformat",
    "sprint",
    "sprintf",
    "sprintln",
    "view",
)
