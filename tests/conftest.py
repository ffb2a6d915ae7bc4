import os
from datetime import datetime, timedelta, timezone

# Configure the environment before any application import creates the storage
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"

import pytest  # noqa: E402

from api import create_app  # noqa: E402
from models import storage  # noqa: E402
from models.client import Role  # noqa: E402

PASSWORD = "s3cret-pass"


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def fresh_database():
    storage.reset()
    yield
    storage.close()


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def app(clock):
    return create_app("test", clock=clock)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login_service(app):
    return app.extensions["login_service"]


@pytest.fixture
def token_service(login_service):
    return login_service.tokens


@pytest.fixture
def make_client(login_service):
    def _make(email="john@test.com", role=Role.NORMAL_USER, name="John Tester", password=PASSWORD):
        result = login_service.register(name, email, password, role)
        assert result.ok, result.error
        return result.value

    return _make


@pytest.fixture
def john(make_client):
    return make_client()


@pytest.fixture
def admin(make_client):
    return make_client(email="admin@test.com", role=Role.ADMIN, name="Ada Admin")


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def login(client, email, password=PASSWORD) -> dict:
    resp = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()
