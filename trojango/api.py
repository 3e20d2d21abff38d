"""Registry of API services started for a given proxy role."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from trojango import logger as log

Handler = Callable[[Any, Any], Any]

_handlers: dict[str, Handler] = {}


def register_handler(name: str, handler: Handler) -> None:
    """Register the service ``handler`` under ``name``."""
    _handlers[name] = handler


def run_service(ctx: Any, name: str, auth: Any) -> Any:
    """Run the service registered as ``name``; return None if there is none."""
    handler = _handlers.get(name)
    if handler is None:
        log.debug("api handler not found", name)
        return None
    log.debug("api handler found", name)
    return handler(ctx, auth)