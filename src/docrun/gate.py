"""Startup gate: block until a named runtime service is available."""

from __future__ import annotations

import time
from typing import Any

from docrun.logging import get_logger
from docrun.runtime import ServiceRegistry, registry

logger = get_logger(__name__)


def await_ready(
    name: str,
    *,
    target: ServiceRegistry | None = None,
    poll_interval: float = 0.0,
) -> Any:
    """Block until ``name`` is registered, then return the service.

    Control is yielded between polls (``time.sleep(0)`` releases the GIL so
    the registering thread can run). There is no timeout: a service that
    never registers blocks the caller forever. The host environment
    guarantees that it comes up.
    """
    target = target or registry
    polls = 0
    while True:
        service = target.whereis(name)
        if service is not None:
            if polls:
                logger.debug("service_ready", name=name, polls=polls)
            return service
        polls += 1
        time.sleep(poll_interval)


__all__ = ["await_ready"]
