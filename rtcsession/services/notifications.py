"""
Session Notifications

Mirrors session manager transitions into a Redis stream so other
processes can react to calls starting and ending:
- session_started: first member joined a room's session
- session_ended: last member left a room's session
"""
import asyncio
import logging
from datetime import datetime, UTC
from typing import Any, Awaitable, Callable, Optional, Set

from rtcsession.config.constants import SESSION_EVENTS_STREAM_MAXLEN
from rtcsession.config.redis import get_redis
from rtcsession.config.settings import settings
from rtcsession.services.protocols import RTCSessionProtocol
from rtcsession.services.session.events import SessionEventEmitter, SessionManagerEvent

logger = logging.getLogger(__name__)


class RedisSessionNotifier:
    """
    Publishes SESSION_STARTED / SESSION_ENDED to a Redis stream.

    Listener callbacks are synchronous, so each publish runs as a
    background task on the running loop. Publish failures are logged.
    """

    def __init__(
        self,
        stream_name: Optional[str] = None,
        redis_getter: Callable[[], Awaitable[Any]] = get_redis
    ):
        self.stream_name = stream_name or settings.SESSION_EVENTS_STREAM
        self._get_redis = redis_getter
        self._tasks: Set[asyncio.Task] = set()

    def attach(self, emitter: SessionEventEmitter):
        emitter.on(SessionManagerEvent.SESSION_STARTED, self._on_started)
        emitter.on(SessionManagerEvent.SESSION_ENDED, self._on_ended)
        logger.info(f"[Notifier] Publishing session transitions to {self.stream_name}")

    def detach(self, emitter: SessionEventEmitter):
        emitter.off(SessionManagerEvent.SESSION_STARTED, self._on_started)
        emitter.off(SessionManagerEvent.SESSION_ENDED, self._on_ended)

    async def publish(
        self,
        event: SessionManagerEvent,
        room_id: str,
        session: RTCSessionProtocol
    ) -> bytes:
        """
        Append one transition to the stream.

        Returns:
            The stream entry ID
        """
        r = await self._get_redis()

        data = {
            b"type": SessionManagerEvent(event).value.encode("utf-8"),
            b"room_id": room_id.encode("utf-8"),
            b"member_count": str(len(session.memberships)).encode("utf-8"),
            b"timestamp": datetime.now(UTC).isoformat().encode("utf-8"),
        }

        result = await r.xadd(
            self.stream_name,
            data,
            maxlen=SESSION_EVENTS_STREAM_MAXLEN,
            approximate=True
        )
        logger.debug(f"[Notifier] Published {event.value} for room {room_id} as {result}")
        return result

    async def drain(self):
        """Wait for all in-flight publishes to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _on_started(self, room_id: str, session: RTCSessionProtocol):
        self._schedule(SessionManagerEvent.SESSION_STARTED, room_id, session)

    def _on_ended(self, room_id: str, session: RTCSessionProtocol):
        self._schedule(SessionManagerEvent.SESSION_ENDED, room_id, session)

    def _schedule(self, event: SessionManagerEvent, room_id: str, session: RTCSessionProtocol):
        task = asyncio.get_running_loop().create_task(self._safe_publish(event, room_id, session))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _safe_publish(self, event: SessionManagerEvent, room_id: str, session: RTCSessionProtocol):
        try:
            await self.publish(event, room_id, session)
        except Exception as e:
            logger.error(f"[Notifier] Error publishing {event.value} for room {room_id}: {e}")
