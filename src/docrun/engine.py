"""
The documentation engine seam.

docrun never generates documentation itself. It calls one of five operation
families on an *engine*, an object (or module) exposing:

==============  ===============================================
Operation       Call shapes
==============  ===============================================
``file``        ``file(file, options)``
``files``       ``files(files)`` / ``files(files, options)``
``packages``    ``packages(packages)`` / ``packages(packages, options)``
``application`` ``application(app)`` / ``application(app, options)`` /
                ``application(app, dir, options)``
``toc``         ``toc(dir, paths)`` / ``toc(dir, paths, options)``
==============  ===============================================

The engine is located through an import path, ``package.module:attr`` or
just ``package.module`` (module-level functions). A class found at the path
is instantiated with no arguments.

Tags:
    docrun, engine, plugin, import-path, protocol

Doc-Types:
    - API Reference
    - Engine Author Guide
"""

from __future__ import annotations

import importlib
import inspect
from typing import Any, Protocol, runtime_checkable

from docrun.errors import EngineLoadError, EngineNotConfigured
from docrun.logging import get_logger

logger = get_logger(__name__)

OPERATIONS = ("file", "files", "packages", "application", "toc")


@runtime_checkable
class Engine(Protocol):
    """Structural type of a documentation engine."""

    def file(self, file: Any, options: Any, /) -> Any: ...

    def files(self, files: Any, options: Any = ..., /) -> Any: ...

    def packages(self, packages: Any, options: Any = ..., /) -> Any: ...

    def application(self, app: Any, *rest: Any) -> Any: ...

    def toc(self, dir: Any, paths: Any, options: Any = ..., /) -> Any: ...


class CodeLoader:
    """Runtime service that resolves engine import paths.

    Registered under the readiness name by ``docrun.runtime.boot``; the
    operation looks it up once the startup gate has let it through.
    """

    def load(self, path: str | None) -> Any:
        if not path:
            raise EngineNotConfigured()

        module_name, _, attr = path.partition(":")
        if not module_name:
            raise EngineLoadError(path, "missing module name")
        try:
            target: Any = importlib.import_module(module_name)
        except ImportError as exc:
            raise EngineLoadError(path, str(exc), cause=exc) from exc

        for part in filter(None, attr.split(".")):
            try:
                target = getattr(target, part)
            except AttributeError as exc:
                raise EngineLoadError(path, f"no attribute '{part}'", cause=exc) from exc

        if inspect.isclass(target):
            target = target()

        missing = [op for op in OPERATIONS if not callable(getattr(target, op, None))]
        if len(missing) == len(OPERATIONS):
            raise EngineLoadError(path, "object exposes none of " + ", ".join(OPERATIONS))

        logger.debug("engine_loaded", path=path, missing=missing or None)
        return target


__all__ = ["OPERATIONS", "Engine", "CodeLoader"]
