import os
import random
import re
import sys
import pytest

# Ensure the backend root (containing the `codeduel` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from codeduel import create_app, socketio
from codeduel.problems import PROBLEMS
from codeduel.services import Arena
from codeduel.services.judge import STATUS_ACCEPTED


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:5173']
    SOCKETIO_NAMESPACE = '/ws'
    JUDGE0_URL = 'http://judge.invalid'
    JUDGE_TIMEOUT_SEC = 1
    SUBMISSION_LIMIT = 5
    SUBMISSION_WINDOW_SEC = 60
    ROOM_IDLE_TIMEOUT_SEC = 3600
    ROOM_SWEEP_INTERVAL_SEC = 0


# stdin -> (expected stdout, position of the case inside its problem)
_CASES = {
    tc.input: (tc.expected_output, idx)
    for p in PROBLEMS
    for idx, tc in enumerate(p.test_cases)
}


class FakeJudge:
    """Stands in for Judge0. Behaviour is picked by the submitted code:

    ``pass:all`` answers every case, ``pass:N`` answers the first N cases
    of a problem, ``crash`` raises, anything else prints a wrong answer.
    ``gate`` (if set) is called before each result is returned.
    """

    def __init__(self, gate=None):
        self.gate = gate
        self.calls = []
        self.healthy = True

    def execute(self, code, language_id, stdin, limits=None):
        self.calls.append((code, language_id, stdin))
        if self.gate:
            self.gate(code, stdin)
        if code.startswith('crash'):
            raise RuntimeError('judge exploded')
        expected, idx = _CASES.get(stdin, ('', 0))
        partial = re.match(r'pass:(\d+)', code)
        ok = code.startswith('pass:all') or bool(partial and idx < int(partial.group(1)))
        return {
            'statusId': STATUS_ACCEPTED,
            'statusDescription': 'Accepted',
            'stdout': expected + '\r\n' if ok else 'nope',
            'stderr': None,
            'compileOutput': None,
            'timeMs': 12,
            'memoryKb': 1024,
        }

    def is_healthy(self):
        return self.healthy


class Recorder:
    """Collects (event, payload, to) triples in place of socket emits."""

    def __init__(self):
        self.events = []

    def __call__(self, event, payload, to):
        self.events.append((event, payload, to))

    def to(self, sid, event=None):
        return [p for e, p, t in self.events if t == sid and (event is None or e == event)]

    def named(self, event):
        return [(p, t) for e, p, t in self.events if e == event]

    def clear(self):
        self.events = []


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture()
def fake_judge():
    return FakeJudge()


@pytest.fixture()
def recorder():
    return Recorder()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def arena(fake_judge, recorder, clock):
    config = {k: getattr(TestConfig, k) for k in dir(TestConfig) if k.isupper()}
    return Arena(config, emit=recorder, judge=fake_judge, rng=random.Random(7), clock=clock)


@pytest.fixture()
def seated(arena):
    """alice and bob connected and sitting in an open two-sum duel."""
    room_id = 'room_alice_bob'
    arena.connect('alice')
    arena.connect('bob')
    arena.duel.open(room_id, 'two-sum')
    arena.sessions.bind('alice', room_id)
    arena.sessions.bind('bob', room_id)
    return room_id


@pytest.fixture()
def flask_app(fake_judge):
    application = create_app(TestConfig, judge=fake_judge)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    clients = []

    def _connect():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace='/ws'
        )
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        try:
            if test_client.is_connected('/ws'):
                test_client.disconnect(namespace='/ws')
        except Exception:
            pass
