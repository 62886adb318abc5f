from __future__ import annotations

"""
Listener Registry.

Minimal observer list used for selection and change notifications. A failing
listener is logged with its traceback and does not stop the remaining ones.
"""

import logging
from typing import Any, Callable, List

logger = logging.getLogger(__name__)


class ListenerRegistry:
    """Ordered set of callbacks sharing one call signature."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._listeners: List[Callable[..., Any]] = []

    def add(self, listener: Callable[..., Any]) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            Callable[[], None]: Unsubscribe handle. Calling it twice is harmless.
        """
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def emit(self, *args: Any) -> None:
        for listener in list(self._listeners):
            try:
                listener(*args)
            except Exception:
                logger.error(f"Listener failure on '{self.name}' notification", exc_info=True)

    def __len__(self) -> int:
        return len(self._listeners)
