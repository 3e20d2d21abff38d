"""Registry of command-line option handlers, taken out by priority."""

from __future__ import annotations

from typing import Any

from trojango.common import TrojanError

_handlers: dict[str, Any] = {}


def register_handler(handler: Any) -> None:
    """Register ``handler`` under ``handler.name()``, replacing one of the same name."""
    _handlers[handler.name()] = handler


def pop_option_handler() -> Any:
    """Remove and return the handler of highest priority."""
    best = None
    for handler in _handlers.values():
        if best is None or best.priority() < handler.priority():
            best = handler
    if best is None:
        raise TrojanError("no option left")
    del _handlers[best.name()]
    return best