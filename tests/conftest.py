"""
Shared pytest fixtures and configuration for docrun tests.

This module provides:
- Service registry and settings cleanup for test isolation
- A recording stand-in engine
- A lifecycle whose exit/halt hooks record the status instead of ending
  the test process

Usage:
    Fixtures are auto-discovered by pytest.

    def test_something(engine, lifecycle):
        ...
"""

import sys
from pathlib import Path
from typing import Any, Generator

import pytest
import structlog

# Ensure docrun and the stub engine module are importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from docrun.engine import CodeLoader
from docrun.lifecycle import Lifecycle
from docrun.logging import clear_context
from docrun.runtime import ServiceRegistry, registry
from docrun.settings import reset_settings


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_runtime(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """
    Clear the process-wide service registry and cached settings around
    each test, undo any logging configuration a CLI run installed, and make
    sure no DOCRUN_* variable leaks in from the shell.
    """
    import os

    for key in list(os.environ):
        if key.startswith("DOCRUN_"):
            monkeypatch.delenv(key)
    registry.clear()
    reset_settings()
    structlog.reset_defaults()
    yield
    registry.clear()
    reset_settings()
    structlog.reset_defaults()
    clear_context()


# =============================================================================
# Engine Fixtures
# =============================================================================


class RecordingEngine:
    """Stand-in engine that records which variant fired and with what.

    ``fail_with`` makes every operation raise that exception after recording.
    """

    def __init__(self, fail_with: BaseException | None = None, returns: Any = None):
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.fail_with = fail_with
        self.returns = returns

    def _record(self, name: str, *args: Any) -> Any:
        self.calls.append((name, args))
        if self.fail_with is not None:
            raise self.fail_with
        return self.returns

    def file(self, file, options):
        return self._record("file/2", file, options)

    def files(self, files, *options):
        return self._record(f"files/{1 + len(options)}", files, *options)

    def packages(self, packages, *options):
        return self._record(f"packages/{1 + len(options)}", packages, *options)

    def application(self, app, *rest):
        return self._record(f"application/{1 + len(rest)}", app, *rest)

    def toc(self, directory, paths, *options):
        return self._record(f"toc/{2 + len(options)}", directory, paths, *options)


@pytest.fixture
def engine() -> RecordingEngine:
    return RecordingEngine()


@pytest.fixture
def failing_engine() -> RecordingEngine:
    from docrun.errors import EngineError

    return RecordingEngine(fail_with=EngineError("no such file: a.src"))


# =============================================================================
# Lifecycle Fixtures
# =============================================================================


class Terminated(Exception):
    """Raised by the recording exit/halt hooks in place of ending the process."""

    def __init__(self, how: str, status: int):
        super().__init__(how, status)
        self.how = how
        self.status = status


@pytest.fixture
def service_registry() -> ServiceRegistry:
    """A private registry with the code loader already up."""
    target = ServiceRegistry()
    target.register("code_loader", CodeLoader())
    return target


@pytest.fixture
def lifecycle(service_registry: ServiceRegistry) -> Lifecycle:
    """Lifecycle whose terminations raise ``Terminated`` instead of exiting."""

    def _exit(status: int) -> None:
        raise Terminated("exit", status)

    def _halt(status: int) -> None:
        raise Terminated("halt", status)

    return Lifecycle(
        ready_service="code_loader",
        registry=service_registry,
        flush_delay=0.0,
        exit=_exit,
        halt=_halt,
        sleep=lambda seconds: None,
    )


@pytest.fixture
def hard_exit(monkeypatch: pytest.MonkeyPatch) -> list[int]:
    """Replace ``os._exit`` so a failing CLI run raises SystemExit instead.

    Returns the list of statuses passed to it.
    """
    statuses: list[int] = []

    def _fake_exit(status: int) -> None:
        statuses.append(status)
        raise SystemExit(status)

    monkeypatch.setattr("docrun.lifecycle.os._exit", _fake_exit)
    return statuses
