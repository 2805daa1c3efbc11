"""
Decryption Gate - decrypt timeline events before they are inspected.

Decryption is best-effort: a failed event is retried exactly once after
a fixed delay, then dropped. Failures are only ever logged.
"""
import asyncio
import logging
from typing import Any, Callable, Set

from rtcsession.config.constants import DEFAULT_DECRYPTION_RETRY_DELAY_SEC
from rtcsession.services.metrics import decryption_failures, decryption_recovered
from rtcsession.services.protocols import MatrixClientProtocol, MatrixEventProtocol

logger = logging.getLogger(__name__)


class DecryptionGate:
    """
    Ensures events are decrypted before being handed on.

    Retries are unkeyed timers; the is_retry flag they carry is the only
    thing limiting an event to one retry. Pending retries are not
    cancelled when the owner stops.
    """

    def __init__(
        self,
        client: MatrixClientProtocol,
        on_decrypted: Callable[[MatrixEventProtocol], Any],
        retry_delay: float = DEFAULT_DECRYPTION_RETRY_DELAY_SEC
    ):
        self.client = client
        self.on_decrypted = on_decrypted
        self.retry_delay = retry_delay
        # Strong references to running tasks only, so they are not garbage collected
        self._tasks: Set[asyncio.Task] = set()

    def schedule(self, event: MatrixEventProtocol, is_retry: bool = False) -> asyncio.Task:
        """
        Run consume() in the background on the running loop.

        Returns:
            The task, which callers may await but do not have to.
        """
        task = asyncio.get_running_loop().create_task(self.consume(event, is_retry))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def consume(self, event: MatrixEventProtocol, is_retry: bool = False) -> bool:
        """
        Decrypt an event if needed and pass it on.

        Returns:
            True if the event was handed to on_decrypted, False otherwise.
        """
        try:
            await self.client.decrypt_event_if_needed(event)
        except Exception as e:
            logger.error(f"[Decryption] Error decrypting event {event.get_id()}: {e}")
            return False

        if event.is_decryption_failure():
            if not is_retry:
                decryption_failures.labels(attempt="first").inc()
                logger.warning(
                    f"[Decryption] Decryption failed for event {event.get_id()}: "
                    f"{event.decryption_failure_reason} will retry once only"
                )
                self._schedule_retry(event)
            else:
                decryption_failures.labels(attempt="retry").inc()
                logger.warning(
                    f"[Decryption] Decryption failed for event {event.get_id()}: "
                    f"{event.decryption_failure_reason}"
                )
            return False

        if is_retry:
            decryption_recovered.inc()
            logger.info(f"[Decryption] Decryption succeeded for event {event.get_id()} after retry")

        try:
            self.on_decrypted(event)
        except Exception as e:
            logger.error(f"[Decryption] Error handling event {event.get_id()}: {e}")
            return False
        return True

    def _schedule_retry(self, event: MatrixEventProtocol):
        loop = asyncio.get_running_loop()
        loop.call_later(self.retry_delay, self.schedule, event, True)
