import pytest

from rtcsession.services.session import RTCSessionManager
from tests.helpers import FakeClient, Recorder, session_factory


@pytest.fixture
def client():
    return FakeClient()


@pytest.fixture
def manager(client):
    """Manager with a zero retry delay so retries fire on the next loop turn."""
    mgr = RTCSessionManager(client, session_factory, retry_delay=0.0)
    yield mgr
    if mgr._running:
        mgr.stop()


@pytest.fixture
def recorder(manager):
    return Recorder(manager)
