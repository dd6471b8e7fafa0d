import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.anyio

async def register_user(
    async_client: AsyncClient,
    email: str,
    password: str,
    name: str = "Carol",
):
    return await async_client.post(
        "/api/register",
        json={
            "email": email,
            "password": password,
            "name": name,
        }
    )

async def login(async_client: AsyncClient, email: str, password: str):
    return await async_client.post(
        "/api/token",
        data={"username": email, "password": password},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )

async def test_register_user(async_client: AsyncClient, uow):
    response = await register_user(async_client, "carol@example.com", "123456")

    assert response.status_code == 201
    assert "User created" in response.json()["detail"]
    assert uow.users.get(response.json()["id"]).name == "Carol"

async def test_register_user_already_exists(async_client: AsyncClient, alice):
    response = await register_user(async_client, alice.email, "123456")

    assert response.status_code == 400
    assert "already exists" in response.json()["detail"]

async def test_register_requires_fields(async_client: AsyncClient):
    response = await async_client.post("/api/register", json={"email": "not-an-email", "password": "123456"})

    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["errors"]}
    assert fields == {"email", "name"}

async def test_login_user_not_exists(async_client: AsyncClient):
    response = await login(async_client, "email@email.com", "1234tired.")

    assert response.status_code == 401

async def test_login_and_profile(async_client: AsyncClient):
    await register_user(async_client, "carol@example.com", "123456")

    wrong = await login(async_client, "carol@example.com", "wrong-password")
    assert wrong.status_code == 401

    response = await login(async_client, "carol@example.com", "123456")
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = await async_client.get("/api/user/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "carol@example.com"
    assert me.json()["name"] == "Carol"

def test_root(client):
    response = client.get("/")

    assert response.json() == {"message": "Server is running"}
