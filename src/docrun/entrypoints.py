"""
Entry points: one per documentation operation.

Each function takes the raw argument strings exactly as a launcher passed
them, parses them as constant literals, calls the engine, and ends the
process. None of them return::

    docs:
        docrun application myapp '"."' '[{def,{vsn,"$(VSN)"}}]'

Note the quoting: single quotes keep the shell away, double quotes mark the
string literals.

``invoke`` runs the same protocol but hands back the ``Outcome`` instead of
terminating, for embedding docrun in a longer-lived process.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, NoReturn

from docrun import runtime
from docrun.decoder import Atom
from docrun.dispatch import dispatch, get_entry_point
from docrun.engine import Engine
from docrun.lifecycle import Lifecycle, execute
from docrun.logging import bind_context
from docrun.outcome import Outcome
from docrun.settings import DocrunSettings, get_settings

Tokens = Sequence[str | Atom]


def main(
    name: str,
    tokens: Tokens,
    *,
    engine: Engine | None = None,
    settings: DocrunSettings | None = None,
    lifecycle: Lifecycle | None = None,
) -> NoReturn:
    """Run entry point ``name`` with ``tokens`` and terminate the process.

    Starts the code-loader service unless it is already registered. Without
    an explicit ``engine`` the one named by ``settings.engine`` is loaded
    through that service once the startup gate sees it.
    """
    settings = settings or get_settings()
    lifecycle = lifecycle or Lifecycle.from_settings(settings)
    entry = get_entry_point(name)
    bind_context(entry_point=entry.where)
    runtime.boot(lifecycle.ready_service, target=lifecycle.registry)

    def operation() -> Any:
        target = engine if engine is not None else lifecycle.service.load(settings.engine)
        return dispatch(entry.name, tokens, target)

    lifecycle.run(operation)


def invoke(name: str, tokens: Tokens, engine: Engine) -> Outcome:
    """Run entry point ``name`` against ``engine`` and return the outcome."""
    get_entry_point(name)
    return execute(lambda: dispatch(name, tokens, engine))


def file(args: Tokens, **kwargs: Any) -> NoReturn:
    """``[File]`` or ``[File, Options]``; the short form passes ``[]`` as options.

    Kept for older build scripts; ``application``, ``packages`` and ``files``
    are the preferred ways of generating documentation.
    """
    main("file", args, **kwargs)


def files(args: Tokens, **kwargs: Any) -> NoReturn:
    """``[Files]`` or ``[Files, Options]``."""
    main("files", args, **kwargs)


def packages(args: Tokens, **kwargs: Any) -> NoReturn:
    """``[Packages]`` or ``[Packages, Options]``."""
    main("packages", args, **kwargs)


def application(args: Tokens, **kwargs: Any) -> NoReturn:
    """``[App]``, ``[App, Options]`` or ``[App, Dir, Options]``."""
    main("application", args, **kwargs)


def toc(args: Tokens, **kwargs: Any) -> NoReturn:
    """``[Dir, Paths]`` or ``[Dir, Paths, Options]``."""
    main("toc", args, **kwargs)


__all__ = ["main", "invoke", "file", "files", "packages", "application", "toc"]
