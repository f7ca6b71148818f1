"""Named runtime services and the bootstrap that brings them up.

The registry is the readiness signal the startup gate polls: a service is
"up" once it has been registered under its name. ``boot()`` starts the code
loader on a background thread, the same way a host runtime brings its core
services up while the launcher's call is already on its way in.

Tags:
    docrun, runtime, registry, service-discovery, startup

Doc-Types:
    api-reference
"""

from __future__ import annotations

import threading
from typing import Any

from docrun.logging import get_logger

logger = get_logger(__name__)


class ServiceRegistry:
    """Thread-safe name → service mapping."""

    def __init__(self) -> None:
        self._services: dict[str, Any] = {}
        self._lock = threading.Lock()

    def register(self, name: str, service: Any) -> None:
        with self._lock:
            if name in self._services:
                raise ValueError(f"Service '{name}' is already registered")
            self._services[name] = service
        logger.debug("service_registered", name=name, service=type(service).__name__)

    def unregister(self, name: str) -> None:
        with self._lock:
            self._services.pop(name, None)

    def whereis(self, name: str) -> Any | None:
        """Return the service registered under ``name``, or ``None``."""
        with self._lock:
            return self._services.get(name)

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._services)

    def clear(self) -> None:
        """Clear registry (for testing)."""
        with self._lock:
            self._services.clear()


# Process-wide registry
registry = ServiceRegistry()


def boot(
    ready_service: str,
    *,
    target: ServiceRegistry | None = None,
) -> threading.Thread | None:
    """Start the code loader and register it as ``ready_service``.

    Returns the (daemon) thread doing the registration, or ``None`` if the
    service is already up. Callers wait on the startup gate, not the thread.
    """
    from docrun.engine import CodeLoader

    target = target or registry
    if target.whereis(ready_service) is not None:
        return None

    def _start() -> None:
        target.register(ready_service, CodeLoader())

    thread = threading.Thread(target=_start, name=f"docrun-{ready_service}", daemon=True)
    thread.start()
    return thread


__all__ = ["ServiceRegistry", "registry", "boot"]
