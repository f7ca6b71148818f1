"""
Outcome of running one operation under the lifecycle catch boundary.

``Outcome`` is the tri-state counterpart of a Result: the operation either
returned (``Succeeded``), raised a recognized failure (``CaughtFailure``), or
let some other abnormal control signal escape (``UncaughtAbnormal``). The
lifecycle controller consumes it immediately to pick the exit status.

Examples:
    >>> Succeeded().exit_status
    0
    >>> outcome = CaughtFailure(ValueError("boom"))
    >>> outcome.is_failure(), outcome.exit_status
    (True, 1)
    >>> match outcome:
    ...     case CaughtFailure(error):
    ...         print(type(error).__name__)
    ValueError

Tags:
    outcome, result-pattern, error-handling, lifecycle, docrun

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

EXIT_OK = 0
EXIT_FAILURE = 1


@dataclass(frozen=True, slots=True)
class Succeeded:
    """The operation returned normally. Its return value is not kept."""

    @property
    def exit_status(self) -> int:
        return EXIT_OK

    def is_failure(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class CaughtFailure:
    """The operation raised an ``Exception``."""

    error: BaseException

    @property
    def exit_status(self) -> int:
        return EXIT_FAILURE

    def is_failure(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class UncaughtAbnormal:
    """Something other than an ``Exception`` escaped the operation.

    ``signal`` is the ``BaseException`` that was trapped, e.g. a
    ``SystemExit`` or ``KeyboardInterrupt`` raised inside the engine.
    """

    signal: BaseException

    @property
    def exit_status(self) -> int:
        return EXIT_FAILURE

    def is_failure(self) -> bool:
        return True


Outcome = Succeeded | CaughtFailure | UncaughtAbnormal


def describe(outcome: Outcome) -> dict[str, Any]:
    """Summarize an outcome for structured logging."""
    if isinstance(outcome, Succeeded):
        return {"outcome": "succeeded", "exit_status": EXIT_OK}
    if isinstance(outcome, CaughtFailure):
        return {
            "outcome": "caught_failure",
            "error_type": type(outcome.error).__name__,
            "exit_status": EXIT_FAILURE,
        }
    return {
        "outcome": "uncaught_abnormal",
        "error_type": type(outcome.signal).__name__,
        "exit_status": EXIT_FAILURE,
    }


__all__ = [
    "EXIT_OK",
    "EXIT_FAILURE",
    "Succeeded",
    "CaughtFailure",
    "UncaughtAbnormal",
    "Outcome",
    "describe",
]
