"""Coalescing change notification between a producer and a consumer."""

from __future__ import annotations

import queue


class Notifier:
    """Signals changes; several signals before a wait collapse into one."""

    def __init__(self) -> None:
        self._slot: queue.Queue[None] = queue.Queue(maxsize=1)

    def signal(self) -> None:
        """Record a change. Never blocks."""
        try:
            self._slot.put_nowait(None)
        except queue.Full:
            pass

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for a change; return False if ``timeout`` expired first."""
        try:
            self._slot.get(timeout=timeout)
        except queue.Empty:
            return False
        return True