"""
docrun — launch documentation engine operations from the command line.

Raw arguments are parsed as constant literals, dispatched by count to one of
the engine's operations, and the outcome becomes the process exit status.

Quick start::

    from docrun import invoke, Succeeded

    outcome = invoke("file", ['"src/a.py"', '[{dir,"doc"}]'], engine=my_engine)
    assert isinstance(outcome, Succeeded)
"""

from docrun.decoder import Atom, decode, parse_literal
from docrun.dispatch import ENTRY_POINTS, EntryPoint, dispatch
from docrun.entrypoints import application, file, files, invoke, main, packages, toc
from docrun.errors import (
    ConfigError,
    DecodeError,
    DocrunError,
    EngineError,
    EngineLoadError,
    EngineNotConfigured,
    InvalidArguments,
)
from docrun.lifecycle import Lifecycle, execute
from docrun.outcome import CaughtFailure, Outcome, Succeeded, UncaughtAbnormal

__version__ = "0.1.0"

__all__ = [
    "Atom",
    "decode",
    "parse_literal",
    "ENTRY_POINTS",
    "EntryPoint",
    "dispatch",
    "application",
    "file",
    "files",
    "invoke",
    "main",
    "packages",
    "toc",
    "ConfigError",
    "DecodeError",
    "DocrunError",
    "EngineError",
    "EngineLoadError",
    "EngineNotConfigured",
    "InvalidArguments",
    "Lifecycle",
    "execute",
    "CaughtFailure",
    "Outcome",
    "Succeeded",
    "UncaughtAbnormal",
]
