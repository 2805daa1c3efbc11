"""
Per-room RTC session tracking for Matrix clients.

Keeps exactly one session object per room and announces when a room's
call starts or ends.
"""
from rtcsession.services.session import RTCSessionManager, SessionManagerEvent

__all__ = ["RTCSessionManager", "SessionManagerEvent"]
