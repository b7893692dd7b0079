import threading

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from config.database import init_db
from config.settings import Settings
from main import create_app


class FakeMailer:
    def __init__(self):
        self.sent = []

    async def send_contact_email(self, name, email, subject, message):
        self.sent.append(("contact", email, subject))

    async def send_welcome_email(self, email, name, unsubscribe_token, preferences_token):
        self.sent.append(("welcome", email, unsubscribe_token))

    async def send_admin_notification(self, email, name):
        self.sent.append(("admin", email, name))


class RecordingSink:
    """In-memory sink; ``fail=True`` rejects every insert."""

    def __init__(self, fail=False):
        self.fail = fail
        self.rows = []
        self._lock = threading.Lock()

    def insert(self, table, record):
        if self.fail:
            return False, RuntimeError("insert rejected")
        with self._lock:
            self.rows.append((table, dict(record)))
        return True, None


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine, engine)
    yield engine
    engine.dispose()


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", admin_api_key="secret-key")


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def app(engine, settings, mailer):
    return create_app(settings, engine=engine, mailer=mailer, create_tables=False)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def recording_sink():
    return RecordingSink()


@pytest.fixture
def failing_sink():
    return RecordingSink(fail=True)


@pytest.fixture
def make_app(engine, settings, mailer):
    def _make(**overrides):
        overrides.setdefault("engine", engine)
        overrides.setdefault("mailer", mailer)
        app_settings = overrides.pop("settings", settings)
        return create_app(app_settings, create_tables=False, **overrides)

    return _make
