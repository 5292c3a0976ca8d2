import os
import tempfile
import uuid

import pytest

# Point settings at a throwaway database before anything imports badgeforge
_DB_DIR = tempfile.mkdtemp(prefix="badgeforge-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_DB_DIR, "test.db")
os.environ["OPENROUTER_API_KEY"] = ""

from sqlalchemy import text  # noqa: E402

from badgeforge.auth import create_access_token  # noqa: E402
from badgeforge.database import create_tables, engine  # noqa: E402
from badgeforge.engine.archetypes import Archetype  # noqa: E402
from badgeforge.engine.inference import ColumnMapping  # noqa: E402
from badgeforge.engine.layout import Layout  # noqa: E402
from badgeforge.engine.records import Record  # noqa: E402


class StubClassifier:
    """Returns a fixed mapping and remembers the last request"""

    def __init__(self, payload):
        self.payload = payload
        self.requests = []

    async def classify(self, request):
        self.requests.append(request)
        return ColumnMapping.from_payload(self.payload)


@pytest.fixture
def conference_layout():
    return Layout.default_for(Archetype.CONFERENCE)


@pytest.fixture
def ada():
    return Record(
        registration_id="R1",
        name="Ada",
        company="ACME",
        role="Speaker",
        extras={"Name": "Ada", "Org": "ACME", "School Name": "Hill High"},
    )


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from badgeforge.main import app

    create_tables()
    with engine.begin() as conn:
        conn.execute(text("DELETE FROM attendees"))
        conn.execute(text("DELETE FROM saved_templates"))

    with TestClient(app) as test_client:
        yield test_client


def _headers(user_id):
    return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}


@pytest.fixture
def user_headers():
    return _headers(f"user-{uuid.uuid4().hex[:8]}")


@pytest.fixture
def other_headers():
    return _headers(f"other-{uuid.uuid4().hex[:8]}")
