# python
"""
deskfs/events.py
Minimal observer channel used for store-changed and launch-request notifications.
"""
import logging
from typing import Any, Callable, List

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class EventChannel:
    def __init__(self, name: str):
        self.name = name
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register `listener` and return a callable that removes it again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, *args: Any) -> None:
        # iterate over a copy so listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                listener(*args)
            except Exception:
                logger.exception("Listener for %s event failed", self.name)
