"""Session tracking services.

This package contains the service modules that track RTC sessions in
Matrix rooms.

Service Categories:
- Session: Session registry, event routing, decryption retry, transitions
- Notifications: Redis stream fan-out of session transitions

Shared:
- protocols: Interfaces for the messaging client, rooms, events and sessions
- metrics: Prometheus counters and gauges
"""
