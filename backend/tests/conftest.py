import os
import tempfile

# Must be set before commstyle.db creates its engine
_DB_DIR = tempfile.mkdtemp(prefix="commstyle-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_DB_DIR, "test.db")
os.environ.pop("GEMINI_API_KEY", None)
os.environ.pop("OPENROUTER_API_KEY", None)

import pytest
from fastapi.testclient import TestClient

from commstyle.catalog import QUESTION_PAIRS
from commstyle.db import Base, SessionLocal, engine
from commstyle.errors import CoachUnavailableError
from commstyle.main import create_app
from commstyle.routers import auth as auth_router
from commstyle.settings import Settings

ADMIN_CODE = "team-admin-code"


class FakeCoach:
    """Stands in for CoachService so API tests never reach the network."""

    def __init__(self, text="### Advice\n- Listen more"):
        self.text = text
        self.fail_with = None
        self.calls = []

    async def personal_advice(self, scores, question, history=()):
        self.calls.append(("personal", scores, question, list(history)))
        if self.fail_with:
            raise CoachUnavailableError(self.fail_with)
        return self.text

    async def team_advice(self, team, profiles, challenge):
        self.calls.append(("team", team, list(profiles), challenge))
        if self.fail_with:
            raise CoachUnavailableError(self.fail_with)
        return self.text


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    auth_router._users.clear()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _make_app(**overrides):
    app = create_app(Settings(**overrides))
    app.state.coach = FakeCoach()
    return app


@pytest.fixture
def simple_app():
    return _make_app(FEATURE_SET="simple", ACCESS_PASSWORD="Inspire")


@pytest.fixture
def full_app():
    return _make_app(FEATURE_SET="full", ADMIN_CODE=ADMIN_CODE)


@pytest.fixture
def simple_client(simple_app):
    return TestClient(simple_app)


@pytest.fixture
def full_client(full_app):
    return TestClient(full_app)


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


def guest_token(client, password="inspire"):
    r = client.post("/auth/password", json={"password": password})
    assert r.status_code == 200, r.text
    return r.json()["access_token"]


def register_and_login(client, username, team="alpha", admin_code=None, password="s3cret-pass"):
    body = {
        "username": username,
        "password": password,
        "display_name": username.title(),
        "team": team,
    }
    if admin_code:
        body["admin_code"] = admin_code
    r = client.post("/auth/register", json=body)
    assert r.status_code == 201, r.text
    r = client.post("/auth/token", data={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["access_token"]


def complete_questionnaire(client, token, value=None):
    """Walk every question; `value` answers all of them, None keeps the defaults."""
    headers = auth_header(token)
    r = client.post("/questionnaire/start", headers=headers)
    assert r.status_code == 200, r.text
    for question in QUESTION_PAIRS:
        if value is not None:
            r = client.post("/questionnaire/answer", json={"question_id": question.id, "value": value}, headers=headers)
            assert r.status_code == 200, r.text
        r = client.post("/questionnaire/next", headers=headers)
        assert r.status_code == 200, r.text
    assert r.json()["stage"] == "results"
    return r.json()
