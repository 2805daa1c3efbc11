"""
Session management module.

Provides the RTCSessionManager that keeps one RTC session object per room
and announces when a room's session starts or ends.
"""
from .events import SessionEventEmitter, SessionManagerEvent
from .decryption import DecryptionGate
from .registry import SessionRegistry
from .manager import RTCSessionManager

__all__ = [
    "RTCSessionManager",
    "SessionRegistry",
    "DecryptionGate",
    "SessionEventEmitter",
    "SessionManagerEvent",
]
