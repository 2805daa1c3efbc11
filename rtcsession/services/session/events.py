"""
Session Manager Events

Notification names emitted by the session manager and the small
listener registry used to deliver them:
- SESSION_STARTED: a room went from no members to at least one
- SESSION_ENDED: all members left a room's session
"""
import logging
from enum import Enum
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

SessionListener = Callable[..., Any]


class SessionManagerEvent(str, Enum):
    """Notifications raised on session activity edges."""

    # A member joined, creating an active session in a room that had none
    SESSION_STARTED = "session_started"
    # All participants left the room's session
    SESSION_ENDED = "session_ended"


class SessionEventEmitter:
    """
    Synchronous listener registry.

    Listeners are called in registration order with the emitted
    arguments, (room_id, session) for both manager events. A failing
    listener is logged and skipped.
    """

    def __init__(self):
        self._listeners: Dict[SessionManagerEvent, List[SessionListener]] = {}

    def on(self, event: SessionManagerEvent, listener: SessionListener) -> SessionListener:
        self._listeners.setdefault(SessionManagerEvent(event), []).append(listener)
        return listener

    def off(self, event: SessionManagerEvent, listener: SessionListener) -> bool:
        """
        Remove one registration of a listener.

        Returns:
            True if the listener was registered, False otherwise.
        """
        listeners = self._listeners.get(SessionManagerEvent(event), [])
        if listener in listeners:
            listeners.remove(listener)
            return True
        return False

    def emit(self, event: SessionManagerEvent, *args: Any) -> int:
        """
        Deliver an event to every listener.

        Returns:
            Number of listeners that ran without raising
        """
        event = SessionManagerEvent(event)
        delivered = 0
        # Copy so listeners may unsubscribe while being called
        for listener in list(self._listeners.get(event, [])):
            try:
                listener(*args)
                delivered += 1
            except Exception as e:
                logger.error(f"[SessionEvents] Listener for {event.value} failed: {e}")
        return delivered
