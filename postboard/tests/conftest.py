from typing import AsyncGenerator, Generator
from datetime import datetime, timedelta, timezone
import os

# Force test configuration for all imports
os.environ.setdefault("ENV", "test")

import pytest
from fastapi.testclient import TestClient
from httpx import AsyncClient, ASGITransport

from postboard import bootstrap, security
from postboard.domain import model
from postboard.main import app
from postboard.service_layer.unit_of_work import FakeUnitOfWork
from postboard.tests.fakes import ALICE_ID, BOB_ID, FakePostRepository, FakeUserRepository

@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"

@pytest.fixture()
def alice() -> model.UserAggregate:
    return model.UserAggregate(id=ALICE_ID, email="alice@example.com", name="Alice", avatar="https://img/alice.png")

@pytest.fixture()
def bob() -> model.UserAggregate:
    return model.UserAggregate(id=BOB_ID, email="bob@example.com", name="Bob", avatar=None)

@pytest.fixture()
def uow(alice, bob) -> FakeUnitOfWork:
    return FakeUnitOfWork(FakeUserRepository([alice, bob]), FakePostRepository())

@pytest.fixture()
def bus(uow):
    return bootstrap.bootstrap(uow=uow)

@pytest.fixture()
def existing_post(uow, alice) -> model.PostAggregate:
    post = model.PostAggregate.create(text="hello", author=alice.profile)
    post.created_at = datetime.now(timezone.utc) - timedelta(minutes=5)
    uow.posts.add(post)
    return post

@pytest.fixture()
def client(bus) -> Generator:
    app.dependency_overrides[bootstrap.get_message_bus] = lambda: bus
    yield TestClient(app)
    app.dependency_overrides.clear()

@pytest.fixture()
async def async_client(bus) -> AsyncGenerator:
    """A client for making asynchronous requests to the app, backed by the fake unit of work."""
    app.dependency_overrides[bootstrap.get_message_bus] = lambda: bus
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver", timeout=5.0) as ac:
        yield ac
    app.dependency_overrides.clear()

def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {security.create_access_token(user_id)}"}

@pytest.fixture()
def alice_headers(alice) -> dict:
    return auth_headers(alice.id)

@pytest.fixture()
def bob_headers(bob) -> dict:
    return auth_headers(bob.id)
