import os
import sys
import pytest

# Ensure the backend root (containing the `typerace` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from typerace import create_app, socketio
from typerace.services.race import ConnectionRegistry, EventDispatcher, RoomStore


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    DEFAULT_WORD_COUNT = 5
    MAX_PLAYERS_PER_ROOM = 3
    WORD_COUNT_OPTIONS = (5, 10)
    SOCKET_CORS_ORIGINS = ['http://localhost:5173']
    JOIN_POLICY = 'open'
    ROOM_ID_LENGTH = 8
    SOCKETIO_NAMESPACE = '/'


class FakeClock:
    def __init__(self, start=1_000_000):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


class SequenceText:
    """Deterministic text source: 'text-1', 'text-2', ..."""

    def __init__(self):
        self.calls = 0

    def __call__(self, word_count):
        self.calls += 1
        return f"text-{self.calls}"


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
        application.extensions['typerace'].shutdown()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio_client(flask_app):
    created = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
        )
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except RuntimeError:
            pass


@pytest.fixture()
def sio_client(make_sio_client):
    return make_sio_client()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def texts():
    return SequenceText()


@pytest.fixture()
def store(texts):
    return RoomStore(max_players=3, word_count=5, text_source=texts)


@pytest.fixture()
def registry():
    return ConnectionRegistry()


@pytest.fixture()
def dispatcher(store, registry, clock):
    return EventDispatcher(store, registry, clock=clock, word_count_options=(5, 10))
