"""In-process event emitter for auth lifecycle events.

Event types use the ``auth:`` namespace:

- ``auth:token-changed`` - a login stored a new token; payload
  ``{"old": <previous token or None>, "new": <token>}``
"""

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

TOKEN_CHANGED = "auth:token-changed"

EventHandler = Callable[[dict[str, Any]], None]


class EventEmitter:
    """Synchronous, fire-and-forget event dispatch."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}

    def on(self, event_type: str, callback: EventHandler) -> None:
        """Register a callback for ``event_type``."""
        self._handlers.setdefault(event_type, []).append(callback)

    def off(self, event_type: str, callback: EventHandler) -> None:
        """Unregister a callback; unknown callbacks are ignored."""
        handlers = self._handlers.get(event_type, [])
        if callback in handlers:
            handlers.remove(callback)

    def emit(self, event_type: str, data: dict[str, Any]) -> None:
        """Call every handler for ``event_type`` with ``data``.

        A failing handler is logged and does not stop the others.
        """
        for handler in list(self._handlers.get(event_type, [])):
            try:
                handler(data)
            except Exception:
                logger.warning(f"Handler for {event_type} raised", exc_info=True)
