"""Dispatcher: pick the engine call shape from the argument-list length.

Each entry point accepts a fixed set of argument-list lengths; the length
alone selects the engine variant. Element contents are not inspected here,
the engine validates them.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from docrun.decoder import Atom, decode
from docrun.engine import Engine
from docrun.errors import InvalidArguments


class _NoVariant(Exception):
    pass


def _file(engine: Engine, args: list[Any]) -> Any:
    match args:
        case [file]:
            return engine.file(file, [])
        case [file, options]:
            return engine.file(file, options)
    raise _NoVariant


def _files(engine: Engine, args: list[Any]) -> Any:
    match args:
        case [files]:
            return engine.files(files)
        case [files, options]:
            return engine.files(files, options)
    raise _NoVariant


def _packages(engine: Engine, args: list[Any]) -> Any:
    match args:
        case [packages]:
            return engine.packages(packages)
        case [packages, options]:
            return engine.packages(packages, options)
    raise _NoVariant


def _application(engine: Engine, args: list[Any]) -> Any:
    match args:
        case [app]:
            return engine.application(app)
        case [app, options]:
            return engine.application(app, options)
        case [app, directory, options]:
            return engine.application(app, directory, options)
    raise _NoVariant


def _toc(engine: Engine, args: list[Any]) -> Any:
    match args:
        case [directory, paths]:
            return engine.toc(directory, paths)
        case [directory, paths, options]:
            return engine.toc(directory, paths, options)
    raise _NoVariant


@dataclass(frozen=True)
class EntryPoint:
    """One externally invocable documentation operation."""

    name: str
    arities: tuple[int, ...]
    usage: str
    summary: str
    handler: Callable[[Engine, list[Any]], Any]

    @property
    def where(self) -> str:
        return f"docrun:{self.name}"


ENTRY_POINTS: dict[str, EntryPoint] = {
    entry.name: entry
    for entry in (
        EntryPoint(
            "file",
            (1, 2),
            "FILE [OPTIONS]",
            "Document a single source file.",
            _file,
        ),
        EntryPoint(
            "files",
            (1, 2),
            "FILES [OPTIONS]",
            "Document a list of source files.",
            _files,
        ),
        EntryPoint(
            "packages",
            (1, 2),
            "PACKAGES [OPTIONS]",
            "Document a list of packages.",
            _packages,
        ),
        EntryPoint(
            "application",
            (1, 2, 3),
            "APP [[DIR] OPTIONS]",
            "Document a whole application.",
            _application,
        ),
        EntryPoint(
            "toc",
            (2, 3),
            "DIR PATHS [OPTIONS]",
            "Build a table of contents over generated documentation.",
            _toc,
        ),
    )
}


def get_entry_point(name: str) -> EntryPoint:
    try:
        return ENTRY_POINTS[name]
    except KeyError:
        available = ", ".join(ENTRY_POINTS)
        raise KeyError(f"Entry point '{name}' not found. Available: {available}") from None


def dispatch(name: str, tokens: Sequence[str | Atom], engine: Engine) -> Any:
    """Decode ``tokens`` and call the matching variant of ``name`` on ``engine``.

    Raises ``DecodeError`` before any engine call if a token is not a
    constant literal, and ``InvalidArguments`` if the decoded list has a
    length the entry point does not accept.
    """
    entry = get_entry_point(name)
    args = decode(tokens)
    try:
        return entry.handler(engine, args)
    except _NoVariant:
        raise InvalidArguments(entry.where, list(tokens)) from None


__all__ = ["EntryPoint", "ENTRY_POINTS", "get_entry_point", "dispatch"]
