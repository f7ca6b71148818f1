"""
Lifecycle controller: run one unit of work, then end the process.

State machine::

    Starting ──gate──▶ Running ──┬──▶ Succeeded ────────▶ Terminated (status 0)
                                 ├──▶ CaughtFailure ────▶ Terminated (status 1)
                                 └──▶ UncaughtAbnormal ─▶ Terminated (status 1)

``Lifecycle.run`` is called once per process and never returns. On success
the process exits gracefully (``SystemExit(0)``, so ``atexit`` hooks run).
On failure one diagnostic is logged, the diagnostic sinks are flushed, and
the process is torn down hard with status 1 (``os._exit``). When a sink
cannot be flushed the controller sleeps ``flush_delay`` seconds instead so
buffered output gets a chance to drain before the kill.

Tags:
    docrun, lifecycle, exit-status, error-boundary, state-machine

Doc-Types:
    - API Reference
    - Architecture
"""

from __future__ import annotations

import os
import reprlib
import sys
import time
from collections.abc import Callable
from typing import Any, NoReturn, TextIO

from docrun.errors import ConfigError, DecodeError, InvalidArguments
from docrun.gate import await_ready
from docrun.logging import get_logger
from docrun.outcome import (
    EXIT_FAILURE,
    EXIT_OK,
    CaughtFailure,
    Outcome,
    Succeeded,
    UncaughtAbnormal,
    describe,
)
from docrun.runtime import ServiceRegistry
from docrun.settings import DocrunSettings, get_settings

logger = get_logger(__name__)


def execute(operation: Callable[[], Any]) -> Outcome:
    """Run ``operation`` inside the catch boundary and classify the result."""
    try:
        operation()
    except Exception as exc:  # noqa: BLE001
        return CaughtFailure(exc)
    except BaseException as signal:  # noqa: BLE001
        return UncaughtAbnormal(signal)
    return Succeeded()


def format_bounded(value: Any, depth: int) -> str:
    """Render ``value`` with nested structures cut off below ``depth``."""
    limiter = reprlib.Repr()
    limiter.maxlevel = depth
    limiter.maxstring = 200
    limiter.maxother = 200
    limiter.maxlist = limiter.maxtuple = limiter.maxdict = 20
    limiter.maxset = limiter.maxfrozenset = 20
    if isinstance(value, BaseException):
        return f"{type(value).__name__}{limiter.repr(value.args)}"
    return limiter.repr(value)


class Lifecycle:
    """Drives one operation from startup to process termination.

    ``exit`` ends the process gracefully with a status (default
    ``sys.exit``), ``halt`` ends it immediately (default ``os._exit``).
    """

    def __init__(
        self,
        *,
        ready_service: str,
        registry: ServiceRegistry | None = None,
        poll_interval: float = 0.0,
        flush_delay: float = 1.0,
        failure_depth: int = 10,
        abnormal_depth: int = 15,
        exit: Callable[[int], Any] | None = None,
        halt: Callable[[int], Any] | None = None,
        sleep: Callable[[float], Any] | None = None,
    ):
        self.ready_service = ready_service
        self.registry = registry
        self.poll_interval = poll_interval
        self.flush_delay = flush_delay
        self.failure_depth = failure_depth
        self.abnormal_depth = abnormal_depth
        self._exit = exit
        self._halt = halt
        self._sleep = sleep
        self.service: Any = None

    @classmethod
    def from_settings(cls, settings: DocrunSettings | None = None, **overrides: Any) -> Lifecycle:
        settings = settings or get_settings()
        params: dict[str, Any] = {
            "ready_service": settings.ready_service,
            "poll_interval": settings.poll_interval,
            "flush_delay": settings.flush_delay,
            "failure_depth": settings.failure_depth,
            "abnormal_depth": settings.abnormal_depth,
        }
        params.update(overrides)
        return cls(**params)

    def run(self, operation: Callable[[], Any]) -> NoReturn:
        """Wait for the runtime, run ``operation``, terminate. Never returns."""
        self.service = await_ready(
            self.ready_service,
            target=self.registry,
            poll_interval=self.poll_interval,
        )
        outcome = execute(operation)
        logger.debug("operation_finished", **describe(outcome))
        self.terminate(outcome)

    def report(self, outcome: Outcome) -> None:
        """Emit the single diagnostic for a failed outcome."""
        if isinstance(outcome, CaughtFailure):
            error = outcome.error
            if isinstance(error, DecodeError):
                logger.error("bad_argument", argument=error.token, reason=error.detail)
            elif isinstance(error, InvalidArguments):
                logger.error("invalid_arguments", where=error.where, args=error.tokens)
            elif isinstance(error, ConfigError):
                logger.error("engine_unavailable", reason=error.message)
            else:
                logger.error(
                    "engine_terminated_abnormally",
                    error=format_bounded(error, self.failure_depth),
                )
        elif isinstance(outcome, UncaughtAbnormal):
            logger.error(
                "internal_error",
                reason="abnormal signal escaped the engine",
                signal=format_bounded(outcome.signal, self.abnormal_depth),
            )

    def terminate(self, outcome: Outcome) -> NoReturn:
        if not outcome.is_failure():
            (self._exit or sys.exit)(EXIT_OK)
            raise SystemExit(EXIT_OK)

        self.report(outcome)
        self.flush()
        (self._halt or os._exit)(EXIT_FAILURE)
        raise SystemExit(EXIT_FAILURE)

    def flush(self, streams: tuple[TextIO | None, ...] | None = None) -> None:
        """Flush diagnostic sinks; fall back to a fixed delay if one can't be."""
        streams = streams if streams is not None else (sys.stdout, sys.stderr)
        flushed = True
        for stream in streams:
            try:
                stream.flush()
            except (AttributeError, OSError, ValueError):
                flushed = False
        if not flushed:
            (self._sleep or time.sleep)(self.flush_delay)


__all__ = ["Lifecycle", "execute", "format_bounded"]
