"""
RTC Session Tracking - service wiring

This is the entry point for embedding session tracking in a client
process. It handles:
- Logging configuration
- Optional Prometheus metrics server
- Starting/stopping the session manager
- Optional Redis fan-out of session transitions
"""
import logging
from typing import Optional

from rtcsession.config.redis import close_redis
from rtcsession.config.settings import settings
from rtcsession.services.metrics import start_metrics_server
from rtcsession.services.notifications import RedisSessionNotifier
from rtcsession.services.protocols import MatrixClientProtocol, SessionFactory
from rtcsession.services.session import RTCSessionManager

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None):
    """Configure root logging from settings (DEBUG forces debug level)."""
    if level is None:
        level = "DEBUG" if settings.DEBUG else settings.LOG_LEVEL
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


class SessionService:
    """
    Owns a session manager for one client instance.

    The manager's lifetime is bound to this object: start() when the
    client is ready, stop() before it shuts down.
    """

    def __init__(
        self,
        client: MatrixClientProtocol,
        session_factory: SessionFactory,
        notifier: Optional[RedisSessionNotifier] = None
    ):
        self.manager = RTCSessionManager(client, session_factory)
        if notifier is None and settings.SESSION_EVENTS_ENABLED:
            notifier = RedisSessionNotifier()
        self.notifier = notifier

    async def start(self):
        logger.info("Starting RTC session tracking...")

        if settings.METRICS_ENABLED:
            start_metrics_server(settings.METRICS_PORT)

        if self.notifier is not None:
            self.notifier.attach(self.manager)

        self.manager.start()
        logger.info("RTC session tracking started")

    async def stop(self):
        logger.info("Stopping RTC session tracking...")

        self.manager.stop()

        if self.notifier is not None:
            self.notifier.detach(self.manager)
            await self.notifier.drain()
            await close_redis()

        logger.info("RTC session tracking stopped")
