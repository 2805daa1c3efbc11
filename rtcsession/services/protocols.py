"""
Protocol definitions for the messaging client boundary.

The session manager never owns the client, its rooms, its events or the
per-room session objects. This module defines the interfaces (Python
Protocols) it relies on, which allows:
- Plugging in any Matrix client binding that exposes these accessors
- Testing with small in-memory fakes
- Clear contracts between the manager and its collaborators

Usage:
    from rtcsession.services.protocols import MatrixClientProtocol

    def count_rooms(client: MatrixClientProtocol) -> int:
        return len(client.get_rooms() or [])
"""

from typing import Any, Callable, Optional, Protocol, Sequence


class MatrixEventProtocol(Protocol):
    """
    Interface for a single (possibly encrypted) room event.

    After decryption, get_type() reports the cleartext event type.
    """

    decryption_failure_reason: Optional[str]

    def get_id(self) -> Optional[str]:
        """Return the event ID."""
        ...

    def get_type(self) -> str:
        """Return the event type tag (e.g. "org.matrix.msc3401.call.member")."""
        ...

    def get_room_id(self) -> Optional[str]:
        """Return the ID of the room the event belongs to."""
        ...

    def is_decryption_failure(self) -> bool:
        """True if the last decryption attempt for this event failed."""
        ...


class RoomProtocol(Protocol):
    """Interface for a room known to the client."""

    room_id: str


class RTCSessionProtocol(Protocol):
    """
    Interface for the per-room RTC session object.

    The session computes its own membership; the manager only reads
    `memberships` and forwards updates.
    """

    memberships: Sequence[Any]

    def on_rtc_session_member_update(self) -> None:
        """Recompute memberships from the room's current state."""
        ...

    def on_call_encryption(self, event: MatrixEventProtocol) -> None:
        """Ingest one decrypted call encryption event."""
        ...

    def stop(self) -> None:
        """Release any resources held by the session."""
        ...


class MatrixClientProtocol(Protocol):
    """
    Interface for the messaging client.

    Implementations must provide room enumeration, room lookup,
    decryption and an on/off event subscription API.
    """

    def get_rooms(self) -> Optional[Sequence[RoomProtocol]]:
        """
        Enumerate all rooms currently known to the client.

        Returns:
            The rooms, or None when the client cannot enumerate them yet
        """
        ...

    def get_room(self, room_id: Optional[str]) -> Optional[RoomProtocol]:
        """
        Look up a room by ID.

        Returns:
            The room, or None for rooms the client does not know
        """
        ...

    async def decrypt_event_if_needed(self, event: MatrixEventProtocol) -> None:
        """Attempt to decrypt the event in place if it is encrypted."""
        ...

    def on(self, event_name: str, handler: Callable[..., Any]) -> Any:
        """Subscribe a handler to a client event."""
        ...

    def off(self, event_name: str, handler: Callable[..., Any]) -> Any:
        """Unsubscribe a handler previously passed to on()."""
        ...


# Synthesizes the session object for a room; membership is computed from
# the room's state at creation time.
SessionFactory = Callable[[MatrixClientProtocol, RoomProtocol], RTCSessionProtocol]
