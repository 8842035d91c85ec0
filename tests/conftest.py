import os
import sys
from pathlib import Path
from uuid import uuid4

import mongomock
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Must be set before app modules build their module-level settings.
os.environ["NODE_ENV"] = "test"
os.environ["EMAIL_USER"] = ""
os.environ["EMAIL_PASS"] = ""
os.environ["RUN_MIGRATIONS"] = "false"
# Minimum bcrypt cost keeps the suite fast
os.environ["PASSWORD_HASH_ROUNDS"] = "4"

from fastapi.testclient import TestClient

from app.core.config import get_settings
from app.db.mongodb import get_db
from app.main import app
from app.services.mail_service import MailDeliveryError, Mailer, get_mailer


class RecordingMailer(Mailer):
    """Collects messages instead of talking to SMTP."""

    def __init__(self, fail: bool = False):
        super().__init__(get_settings())
        self.fail = fail
        self.sent = []

    def send(self, to: str, subject: str, text: str) -> bool:
        if self.fail:
            raise MailDeliveryError("SMTP unavailable")
        self.sent.append({"to": to, "subject": subject, "text": text})
        return True


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Ensure cached settings don't leak between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def db():
    # mongomock clients share storage per host; a fresh db name isolates tests
    return mongomock.MongoClient()[f"pms_test_{uuid4().hex}"]


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def client(db, mailer):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_mailer] = lambda: mailer
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
