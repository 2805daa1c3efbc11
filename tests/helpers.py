import uuid
from typing import Any, Callable, Dict, List, Optional

from rtcsession.config.constants import (
    CALL_ENCRYPTION_KEYS_EVENT_TYPE,
    CALL_MEMBER_EVENT_TYPE,
)
from rtcsession.services.session.events import SessionManagerEvent


def unique_room_id(server: str = "example.org") -> str:
    return f"!{uuid.uuid4().hex[:12]}:{server}"


class FakeRoom:
    """Room whose call membership state is a plain list tests can edit."""

    def __init__(self, room_id: Optional[str] = None, call_members: Optional[List[str]] = None):
        self.room_id = room_id or unique_room_id()
        self.call_members: List[str] = list(call_members or [])


class FakeSession:
    """Session that copies membership from its room's state when asked."""

    def __init__(self, room: FakeRoom):
        self.room = room
        self.memberships: List[str] = list(room.call_members)
        self.stop_calls = 0
        self.update_calls = 0
        self.encryption_events: List[Any] = []

    def on_rtc_session_member_update(self):
        self.update_calls += 1
        self.memberships = list(self.room.call_members)

    def on_call_encryption(self, event):
        self.encryption_events.append(event)

    def stop(self):
        self.stop_calls += 1


class FakeEvent:
    """
    Room event with scripted decryption.

    The first `failures` decryption attempts fail, later ones succeed.
    """

    def __init__(
        self,
        room_id: str,
        event_type: str = CALL_ENCRYPTION_KEYS_EVENT_TYPE,
        failures: int = 0,
        event_id: Optional[str] = None
    ):
        self.event_id = event_id or f"${uuid.uuid4().hex[:16]}"
        self.event_type = event_type
        self.room_id = room_id
        self.failures = failures
        self.decrypt_attempts = 0
        self.decryption_failure_reason: Optional[str] = None
        self._failed = False

    def get_id(self):
        return self.event_id

    def get_type(self):
        return self.event_type

    def get_room_id(self):
        return self.room_id

    def is_decryption_failure(self):
        return self._failed

    def attempt_decryption(self):
        self.decrypt_attempts += 1
        self._failed = self.decrypt_attempts <= self.failures
        self.decryption_failure_reason = "MEGOLM_UNKNOWN_INBOUND_SESSION_ID" if self._failed else None


def member_event(room_id: str) -> FakeEvent:
    return FakeEvent(room_id, event_type=CALL_MEMBER_EVENT_TYPE)


class FakeClient:
    """In-memory Matrix client with an on/off handler registry."""

    def __init__(self, rooms: Optional[List[FakeRoom]] = None):
        self.rooms: Dict[str, FakeRoom] = {r.room_id: r for r in (rooms or [])}
        self.handlers: Dict[str, List[Callable[..., Any]]] = {}
        self.enumerate_rooms = True

    def add_room(self, room: FakeRoom) -> FakeRoom:
        self.rooms[room.room_id] = room
        return room

    def get_rooms(self):
        if not self.enumerate_rooms:
            return None
        return list(self.rooms.values())

    def get_room(self, room_id):
        return self.rooms.get(room_id)

    async def decrypt_event_if_needed(self, event):
        event.attempt_decryption()

    def on(self, event_name, handler):
        self.handlers.setdefault(event_name, []).append(handler)

    def off(self, event_name, handler):
        if handler in self.handlers.get(event_name, []):
            self.handlers[event_name].remove(handler)

    def handler_count(self, event_name) -> int:
        return len(self.handlers.get(event_name, []))

    def emit(self, event_name, *args):
        for handler in list(self.handlers.get(event_name, [])):
            handler(*args)


def session_factory(client, room) -> FakeSession:
    return FakeSession(room)


class Recorder:
    """Collects (room_id, session) pairs per manager notification."""

    def __init__(self, manager):
        self.started = []
        self.ended = []
        manager.on(SessionManagerEvent.SESSION_STARTED, lambda room_id, s: self.started.append((room_id, s)))
        manager.on(SessionManagerEvent.SESSION_ENDED, lambda room_id, s: self.ended.append((room_id, s)))
