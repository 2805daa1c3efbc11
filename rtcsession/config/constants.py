"""
Protocol-level constants for RTC session tracking.

This file centralizes the event type tags and client event names the
session manager listens for, so handlers and tests agree on them.

Note: Environment-dependent settings (Redis, metrics, retry delay) belong in settings.py.
This file is for values fixed by the messaging protocol.
"""

# ==============================================================================
# EVENT TYPES
# ==============================================================================

# Room-state event announcing or withdrawing a call membership
CALL_MEMBER_EVENT_TYPE: str = "org.matrix.msc3401.call.member"

# Timeline event carrying (encrypted) call encryption keys
CALL_ENCRYPTION_KEYS_EVENT_TYPE: str = "io.element.call.encryption_keys"

# ==============================================================================
# CLIENT EVENT NAMES
# ==============================================================================

# Emitted by the client when a new room becomes visible
CLIENT_EVENT_ROOM: str = "Room"

# Emitted for every event added to a room timeline
ROOM_EVENT_TIMELINE: str = "Room.timeline"

# Emitted for every state event applied to a room
ROOM_STATE_EVENT_EVENTS: str = "RoomState.events"

# ==============================================================================
# TIMING & DELAYS - DECRYPTION
# ==============================================================================

# Delay before the single decryption retry (seconds)
DEFAULT_DECRYPTION_RETRY_DELAY_SEC: float = 1.0

# ==============================================================================
# NOTIFICATIONS
# ==============================================================================

# Maximum entries kept in the session events stream (approximate trim)
SESSION_EVENTS_STREAM_MAXLEN: int = 10000
