"""
Structured error types for docrun.

Every failure that can end an invocation is one of these, so the lifecycle
controller can report it once with a uniform shape and pick the exit status.

Manifesto:
    - **Typed Error Hierarchy:** Decode, argument, engine and config failures
      are different classes with different categories
    - **Report once:** Errors carry what the diagnostic needs (the offending
      token, the entry point, the raw token list) instead of logging on raise
    - **Error Chaining:** Preserve the underlying exception as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────┐
        │                      DocrunError                         │
        │                (category, context, cause)                │
        ├──────────────────┬──────────────────┬───────────────────┤
        │  DecodeError     │ InvalidArguments │  EngineError      │
        │  (DECODE)        │ (ARGUMENTS)      │  (ENGINE)         │
        │                  │                  │                   │
        │                  │                  │  ConfigError      │
        │                  │                  │  (CONFIG)         │
        │                  │                  │    │              │
        │                  │                  │  EngineNotConfig. │
        │                  │                  │  EngineLoadError  │
        └──────────────────┴──────────────────┴───────────────────┘

Tags:
    exception, error-hierarchy, error-context, docrun, base-class

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Classification of docrun failures."""

    DECODE = "DECODE"
    ARGUMENTS = "ARGUMENTS"
    ENGINE = "ENGINE"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """Structured metadata attached to an error."""

    entry_point: str | None = None
    token: str | None = None
    tokens: list[str] | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.entry_point is not None:
            result["entry_point"] = self.entry_point
        if self.token is not None:
            result["token"] = self.token
        if self.tokens is not None:
            result["tokens"] = list(self.tokens)
        if self.metadata:
            result.update(self.metadata)
        return result


class DocrunError(Exception):
    """
    Base exception for all docrun errors.

    Subclasses set ``default_category``. ``cause`` is chained onto
    ``__cause__`` so tracebacks keep the original exception.

    Examples:
        >>> error = DocrunError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(entry_point="docrun:file").context.entry_point
        'docrun:file'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> DocrunError:
        """Add context to this error (fluent API)."""
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class DecodeError(DocrunError):
    """A raw argument is not a valid constant literal expression.

    ``token`` is the raw argument text as received, ``detail`` says what the
    parser choked on and ``position`` is the character offset (if known).
    """

    default_category = ErrorCategory.DECODE

    def __init__(self, token: str, detail: str, *, position: int | None = None):
        super().__init__(
            f"error parsing argument '{token}': {detail}",
            context=ErrorContext(token=token),
        )
        self.token = token
        self.detail = detail
        self.position = position


class InvalidArguments(DocrunError):
    """The decoded argument list has a length the entry point does not accept."""

    default_category = ErrorCategory.ARGUMENTS

    def __init__(self, where: str, tokens: list[str]):
        super().__init__(
            f"invalid arguments to {where}: {tokens!r}",
            context=ErrorContext(entry_point=where, tokens=list(tokens)),
        )
        self.where = where
        self.tokens = list(tokens)


class EngineError(DocrunError):
    """The documentation engine failed while performing an operation.

    Engines may raise this (or any other ``Exception``); both are treated as
    caught failures.
    """

    default_category = ErrorCategory.ENGINE


class ConfigError(DocrunError):
    """Configuration is missing or unusable."""

    default_category = ErrorCategory.CONFIG


class EngineNotConfigured(ConfigError):
    def __init__(self) -> None:
        super().__init__(
            "no documentation engine configured; set DOCRUN_ENGINE or pass --engine MODULE:ATTR"
        )


class EngineLoadError(ConfigError):
    """The configured engine import path could not be resolved."""

    def __init__(self, path: str, reason: str, *, cause: BaseException | None = None):
        super().__init__(
            f"cannot load engine '{path}': {reason}",
            cause=cause,
        )
        self.path = path
        self.with_context(engine=path)


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "DocrunError",
    "DecodeError",
    "InvalidArguments",
    "EngineError",
    "ConfigError",
    "EngineNotConfigured",
    "EngineLoadError",
]
