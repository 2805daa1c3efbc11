import logging

from rtcsession.services.session import SessionRegistry
from tests.helpers import FakeClient, FakeRoom, FakeSession, session_factory


class TestSessionRegistry:
    def setup_method(self):
        self.client = FakeClient()
        self.registry = SessionRegistry()

    def test_get_or_create_returns_same_object(self):
        room = self.client.add_room(FakeRoom())

        first = self.registry.get_or_create(self.client, room, session_factory)
        second = self.registry.get_or_create(self.client, room, session_factory)

        assert first is second
        assert len(self.registry) == 1

    def test_get_or_create_builds_empty_session(self):
        room = self.client.add_room(FakeRoom())
        session = self.registry.get_or_create(self.client, room, session_factory)
        assert session.memberships == []

    def test_get_active_does_not_create(self):
        assert self.registry.get_active("!nothing:example.org") is None
        assert len(self.registry) == 0

    def test_add_never_overwrites(self):
        room = FakeRoom()
        original = FakeSession(room)
        self.registry.add(room.room_id, original)

        kept = self.registry.add(room.room_id, FakeSession(room))

        assert kept is original
        assert self.registry.get_active(room.room_id) is original

    def test_contains(self):
        rooms = [FakeRoom() for _ in range(2)]
        for room in rooms:
            self.registry.add(room.room_id, FakeSession(room))

        assert all(r.room_id in self.registry for r in rooms)
        assert "!other:example.org" not in self.registry

    def test_remove_all_stops_each_session_once(self):
        sessions = [FakeSession(FakeRoom()) for _ in range(3)]
        for session in sessions:
            self.registry.add(session.room.room_id, session)

        stopped = self.registry.remove_all()

        assert stopped == 3
        assert len(self.registry) == 0
        assert [s.stop_calls for s in sessions] == [1, 1, 1]

    def test_remove_all_on_empty_registry(self):
        assert self.registry.remove_all() == 0

    def test_remove_all_keeps_going_when_a_session_fails_to_stop(self, caplog):
        class BrokenSession(FakeSession):
            def stop(self):
                super().stop()
                raise RuntimeError("stop failed")

        sessions = [BrokenSession(FakeRoom()), FakeSession(FakeRoom()), BrokenSession(FakeRoom())]
        for session in sessions:
            self.registry.add(session.room.room_id, session)

        with caplog.at_level(logging.ERROR):
            stopped = self.registry.remove_all()

        assert stopped == 3
        assert len(self.registry) == 0
        assert [s.stop_calls for s in sessions] == [1, 1, 1]
        assert "stop failed" in caplog.text
