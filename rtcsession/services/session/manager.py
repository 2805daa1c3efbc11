"""
RTC Session Manager - per-room session lifecycle.

Holds the session object for every room the app has asked about and
keeps them up to date as the client reports rooms, timeline events and
room state changes. Raises SESSION_STARTED / SESSION_ENDED exactly on
the edges where a room's session gains its first member or loses its
last one.
"""
import asyncio
import logging
from typing import Any, Optional

from rtcsession.config.constants import (
    CALL_ENCRYPTION_KEYS_EVENT_TYPE,
    CALL_MEMBER_EVENT_TYPE,
    CLIENT_EVENT_ROOM,
    ROOM_EVENT_TIMELINE,
    ROOM_STATE_EVENT_EVENTS,
)
from rtcsession.config.settings import settings
from rtcsession.services.metrics import sessions_ended, sessions_started, unknown_room_events
from rtcsession.services.protocols import (
    MatrixClientProtocol,
    MatrixEventProtocol,
    RoomProtocol,
    RTCSessionProtocol,
    SessionFactory,
)
from rtcsession.services.session.decryption import DecryptionGate
from rtcsession.services.session.events import SessionEventEmitter, SessionManagerEvent
from rtcsession.services.session.registry import SessionRegistry

logger = logging.getLogger(__name__)


class RTCSessionManager(SessionEventEmitter):
    """
    Tracks one RTC session object per room for the lifetime of the client.

    Handles:
    - Seeding sessions for rooms that already have members (start)
    - Routing room, timeline and room state events to sessions
    - Edge-triggered SESSION_STARTED / SESSION_ENDED notifications
    - Stopping and forgetting every session (stop)

    All handlers run on the client's event loop; nothing here is
    thread-safe or needs to be.
    """

    def __init__(
        self,
        client: MatrixClientProtocol,
        session_factory: SessionFactory,
        retry_delay: Optional[float] = None
    ):
        super().__init__()
        self.client = client
        self.session_factory = session_factory
        self.registry = SessionRegistry()
        self._running = False
        self.decryption_gate = DecryptionGate(
            client,
            self._on_call_encryption,
            settings.DECRYPTION_RETRY_DELAY_SEC if retry_delay is None else retry_delay
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self):
        """Seed sessions for known rooms, then subscribe to client events."""
        # A client that cannot enumerate rooms yet reports None
        rooms = self.client.get_rooms() or []
        for room in rooms:
            self._discover_room(room)

        logger.info(
            f"[SessionManager] Started with {len(self.registry)} active sessions "
            f"across {len(rooms)} rooms"
        )

        self._running = True
        self.client.on(CLIENT_EVENT_ROOM, self._on_room)
        self.client.on(ROOM_EVENT_TIMELINE, self._on_timeline)
        self.client.on(ROOM_STATE_EVENT_EVENTS, self._on_room_state)

    def stop(self):
        """Stop every tracked session, clear the registry and unsubscribe."""
        self._running = False
        try:
            self.registry.remove_all()
        finally:
            self.client.off(CLIENT_EVENT_ROOM, self._on_room)
            self.client.off(ROOM_EVENT_TIMELINE, self._on_timeline)
            self.client.off(ROOM_STATE_EVENT_EVENTS, self._on_room_state)

        logger.info("[SessionManager] Stopped")

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_active_room_session(self, room: RoomProtocol) -> Optional[RTCSessionProtocol]:
        """
        Get the main RTC session for a room, or None if there is no
        tracked session.
        """
        return self.registry.get_active(room.room_id)

    def get_room_session(self, room: RoomProtocol) -> RTCSessionProtocol:
        """
        Get the main RTC session for a room, creating an empty session
        if no members are currently participating.
        """
        return self.registry.get_or_create(self.client, room, self.session_factory)

    # ------------------------------------------------------------------
    # Client event handlers
    # ------------------------------------------------------------------

    def _on_room(self, room: RoomProtocol, *args: Any):
        if room.room_id in self.registry:
            # Reported again: treat as an ordinary membership refresh
            self.refresh_room(room)
        else:
            self._discover_room(room)

    def _on_timeline(self, event: MatrixEventProtocol, *args: Any) -> asyncio.Task:
        return self.decryption_gate.schedule(event)

    def _on_room_state(self, event: MatrixEventProtocol, *args: Any):
        if event.get_type() != CALL_MEMBER_EVENT_TYPE:
            return

        room = self._resolve_room(event, "room_state")
        if room is None:
            return

        self.refresh_room(room)

    def _on_call_encryption(self, event: MatrixEventProtocol):
        if not self._running:
            # Late retry after stop()
            logger.debug(f"[SessionManager] Ignoring event {event.get_id()} received after stop")
            return

        if event.get_type() != CALL_ENCRYPTION_KEYS_EVENT_TYPE:
            return

        room = self._resolve_room(event, "timeline")
        if room is None:
            return

        self.get_room_session(room).on_call_encryption(event)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _discover_room(self, room: RoomProtocol):
        """Track a newly seen room's session if it already has members, silently."""
        session = self.session_factory(self.client, room)
        if len(session.memberships) > 0:
            self.registry.add(room.room_id, session)
            logger.debug(
                f"[SessionManager] Room {room.room_id} has an ongoing session "
                f"with {len(session.memberships)} members"
            )

    def _resolve_room(self, event: MatrixEventProtocol, source: str) -> Optional[RoomProtocol]:
        room_id = event.get_room_id()
        room = self.client.get_room(room_id)
        if room is None:
            unknown_room_events.labels(source=source).inc()
            logger.error(f"[SessionManager] Got {source} event for unknown room {room_id}!")
        return room

    def refresh_room(self, room: RoomProtocol):
        """
        Recompute a room's membership and emit a notification on an
        activity edge.

        A session first seen here counts as previously inactive, so it
        can only ever produce SESSION_STARTED.
        """
        is_new_session = room.room_id not in self.registry
        session = self.get_room_session(room)

        was_active_and_known = len(session.memberships) > 0 and not is_new_session

        session.on_rtc_session_member_update()

        now_active = len(session.memberships) > 0

        if was_active_and_known and not now_active:
            sessions_ended.inc()
            logger.info(f"[SessionManager] Session ended in room {room.room_id}")
            self.emit(SessionManagerEvent.SESSION_ENDED, room.room_id, session)
        elif not was_active_and_known and now_active:
            sessions_started.inc()
            logger.info(f"[SessionManager] Session started in room {room.room_id}")
            self.emit(SessionManagerEvent.SESSION_STARTED, room.room_id, session)
