"""
Session Registry - one session object per room.

Single Responsibility: Own the room_id -> session mapping and guarantee
that, once created, a room's session object is never replaced while the
manager runs. Code holding a session reference can therefore never be
holding a stale duplicate.
"""
import logging
from typing import Dict, Optional

from rtcsession.services.metrics import sessions_tracked_gauge
from rtcsession.services.protocols import (
    MatrixClientProtocol,
    RoomProtocol,
    RTCSessionProtocol,
    SessionFactory,
)

logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    In-memory mapping from room ID to its session object.

    Entries are only ever added, read, or removed all at once by
    remove_all().
    """

    def __init__(self):
        self._sessions: Dict[str, RTCSessionProtocol] = {}

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def get_active(self, room_id: str) -> Optional[RTCSessionProtocol]:
        """Return the tracked session for a room, or None. Never creates."""
        return self._sessions.get(room_id)

    def add(self, room_id: str, session: RTCSessionProtocol) -> RTCSessionProtocol:
        """
        Track a session unless the room already has one.

        Returns:
            The session now tracked for the room (the existing one wins).
        """
        existing = self._sessions.get(room_id)
        if existing is not None:
            return existing

        self._sessions[room_id] = session
        sessions_tracked_gauge.set(len(self._sessions))
        logger.debug(f"[Registry] Tracking session for room {room_id}")
        return session

    def get_or_create(
        self,
        client: MatrixClientProtocol,
        room: RoomProtocol,
        factory: SessionFactory
    ) -> RTCSessionProtocol:
        """
        Return the room's session, synthesizing and tracking one if needed.

        Repeated calls for the same room return the same object.
        """
        session = self._sessions.get(room.room_id)
        if session is None:
            session = self.add(room.room_id, factory(client, room))
        return session

    def remove_all(self) -> int:
        """
        Stop every tracked session and forget all of them.

        Returns:
            Number of sessions stopped
        """
        sessions = list(self._sessions.items())
        self._sessions.clear()
        sessions_tracked_gauge.set(0)

        for room_id, session in sessions:
            try:
                session.stop()
            except Exception as e:
                logger.error(f"[Registry] Error stopping session for room {room_id}: {e}")

        logger.info(f"[Registry] Stopped and removed {len(sessions)} sessions")
        return len(sessions)
