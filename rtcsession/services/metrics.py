"""Prometheus metrics instrumentation for RTC session tracking.

Exposes metrics for monitoring session transitions, decryption health
and dropped events. Metrics are exposed via HTTP on port 8001
(configurable).

Metrics exported:
- rtc_sessions_started_total: Counter of inactive -> active transitions
- rtc_sessions_ended_total: Counter of active -> inactive transitions
- rtc_sessions_tracked: Gauge of session objects currently held
- rtc_unknown_room_events_total: Counter of events dropped for unknown rooms
- rtc_decryption_failures_total: Counter of failed decryption attempts
- rtc_decryption_recovered_total: Counter of decryptions that succeeded on retry

Usage:
    from rtcsession.services.metrics import start_metrics_server, sessions_started

    start_metrics_server(port=8001)
    sessions_started.inc()
"""

from prometheus_client import Counter, Gauge, start_http_server
import logging

logger = logging.getLogger(__name__)

# Transition counters
sessions_started = Counter(
    'rtc_sessions_started_total',
    'Number of rooms whose RTC session became active'
)

sessions_ended = Counter(
    'rtc_sessions_ended_total',
    'Number of rooms whose RTC session became inactive'
)

# Registry size
sessions_tracked_gauge = Gauge(
    'rtc_sessions_tracked',
    'Number of session objects currently held by the manager'
)

# Dropped events
unknown_room_events = Counter(
    'rtc_unknown_room_events_total',
    'Events dropped because their room could not be resolved',
    labelnames=['source']  # source: timeline, room_state
)

# Decryption health
decryption_failures = Counter(
    'rtc_decryption_failures_total',
    'Failed decryption attempts for timeline events',
    labelnames=['attempt']  # attempt: first, retry
)

decryption_recovered = Counter(
    'rtc_decryption_recovered_total',
    'Timeline events that decrypted successfully on retry'
)


def start_metrics_server(port: int = 8001):
    """Start Prometheus metrics HTTP server."""
    try:
        start_http_server(port)
        logger.info(f"Metrics server started on port {port}")
    except Exception as e:
        logger.error(f"Failed to start metrics server: {e}")
