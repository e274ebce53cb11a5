"""Minimal synchronous observer base for the state holders."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable
from typing import Generic, TypeVar

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class Observable(Generic[T]):
    """Keeps a listener list and pushes each committed value to it.

    Listeners run synchronously, in subscription order, on the thread (event
    loop) that performed the write. A failing listener is logged and skipped
    so it cannot break the writer or the other listeners.
    """

    def __init__(self) -> None:
        self._listeners: list[Callable[[T], None]] = []

    def subscribe(self, listener: Callable[[T], None]) -> Callable[[], None]:
        """Register *listener*; returns a callable that removes it again."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, value: T) -> None:
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception:
                _logger.debug("State listener %r failed", listener, exc_info=True)
