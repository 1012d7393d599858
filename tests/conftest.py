import pytest
from fastapi.testclient import TestClient

from wsp.auth.verify import auth_dependency
from wsp.db.client import DataClient, get_data_client
from wsp.main import app as planner_app
from wsp.routes.view_state import get_state_store


class FakeRedis:
    def __init__(self):
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int | None] = {}

    async def set_with_ttl(self, key: str, value: str, ttl_s: int | None = None) -> bool:
        self.store[key] = value
        self.ttls[key] = ttl_s
        return True

    async def get(self, key: str) -> str | None:
        return self.store.get(key)

    async def delete(self, key: str) -> bool:
        self.ttls.pop(key, None)
        return self.store.pop(key, None) is not None


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def data_client(tmp_path):
    """Local backend seeded with the demo tenants, persisted under tmp_path."""
    return DataClient.local(tmp_path / "store.json")


@pytest.fixture
def app(data_client, fake_redis):
    planner_app.dependency_overrides[get_data_client] = lambda: data_client
    planner_app.dependency_overrides[get_state_store] = lambda: fake_redis
    yield planner_app
    planner_app.dependency_overrides.clear()


@pytest.fixture
def login(app):
    """Make subsequent requests come from `user_id`."""

    def _login(user_id: str):
        app.dependency_overrides[auth_dependency] = lambda: {"sub": user_id, "role": "authenticated"}

    return _login


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
