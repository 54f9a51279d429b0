import pytest
from httpx import AsyncClient

from app.utils.jwt_manager import decode_access_token

SIGNUP = {"name": "Jane Doe", "email": "jane@example.com", "password": "hunter22"}


@pytest.mark.asyncio
async def test_signup_issues_http_only_cookie(client: AsyncClient):
    response = await client.post("/api/v1/auth/signup", json=SIGNUP)

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["email"] == "jane@example.com"
    assert user["role"] == "user"
    assert "password" not in user and "password_hash" not in user

    set_cookie = response.headers["set-cookie"].lower()
    assert set_cookie.startswith("auth_token=")
    assert "httponly" in set_cookie
    assert "max-age=604800" in set_cookie

    claims = decode_access_token(response.cookies["auth_token"])
    assert claims["id"] == user["id"]
    assert claims["email"] == "jane@example.com"
    assert claims["role"] == "user"
    assert claims["exp"] - claims["iat"] == 7 * 24 * 60 * 60


@pytest.mark.asyncio
async def test_signup_rejects_duplicate_email(client: AsyncClient):
    await client.post("/api/v1/auth/signup", json=SIGNUP)
    response = await client.post("/api/v1/auth/signup", json=SIGNUP)

    assert response.status_code == 400
    assert response.json()["detail"] == "User with this email already exists"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"email": "a@example.com", "password": "hunter22"},
        {"name": "A", "email": "not-an-email", "password": "hunter22"},
        {"name": "A", "email": "a@example.com", "password": "short"},
    ],
)
async def test_signup_validation_errors_are_bad_requests(client: AsyncClient, payload):
    response = await client.post("/api/v1/auth/signup", json=payload)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_login_with_wrong_password_is_unauthorized(client: AsyncClient):
    await client.post("/api/v1/auth/signup", json=SIGNUP)
    client.cookies.clear()

    response = await client.post(
        "/api/v1/auth/login", json={"email": SIGNUP["email"], "password": "wrong-pass"}
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"

    response = await client.post(
        "/api/v1/auth/login", json={"email": "nobody@example.com", "password": "x"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_missing_fields_is_bad_request(client: AsyncClient):
    response = await client.post("/api/v1/auth/login", json={"email": "a@example.com"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_session_lifecycle(client: AsyncClient):
    response = await client.get("/api/v1/auth/session")
    assert response.json() == {"user": None}

    await client.post("/api/v1/auth/signup", json=SIGNUP)
    client.cookies.clear()
    login = await client.post(
        "/api/v1/auth/login",
        json={"email": SIGNUP["email"], "password": SIGNUP["password"]},
    )
    assert login.status_code == 200

    response = await client.get("/api/v1/auth/session")
    assert response.json()["user"]["email"] == SIGNUP["email"]

    response = await client.post("/api/v1/auth/logout")
    assert response.json() == {"message": "Logged out successfully"}

    response = await client.get("/api/v1/auth/session")
    assert response.json() == {"user": None}


@pytest.mark.asyncio
async def test_session_with_garbage_cookie_is_signed_out(client: AsyncClient):
    client.cookies.set("auth_token", "not-a-jwt")
    response = await client.get("/api/v1/auth/session")

    assert response.status_code == 200
    assert response.json() == {"user": None}


@pytest.mark.asyncio
async def test_protected_routes_require_cookie(client: AsyncClient):
    response = await client.get("/api/v1/tickets")
    assert response.status_code == 401

    client.cookies.set("auth_token", "not-a-jwt")
    response = await client.get("/api/v1/tickets")
    assert response.status_code == 401
