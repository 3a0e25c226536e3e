"""Auth API tests.

Learn: Tests cover:
1. Registration (doubles as login) + duplicate prevention
2. Login → token + student
3. Identical failures for unknown email and wrong password
4. /me with a real token, a bad token, and none
"""

import uuid

import pytest


# ═══════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_student(client):
    """Register returns a token and the new student, with no projects."""
    email = f"test-{uuid.uuid4().hex[:8]}@example.com"
    r = await client.post(
        "/api/v1/auth/register",
        json={"email": email, "name": "Test Student", "password": "secure_password_123"},
    )
    assert r.status_code == 201
    body = r.json()
    assert body["token"]
    assert body["token_type"] == "bearer"
    student = body["student"]
    assert student["email"] == email
    assert student["name"] == "Test Student"
    assert student["project_ids"] == []
    assert student["projects"] == []
    assert "password_hash" not in student


@pytest.mark.asyncio
async def test_register_token_works_immediately(client, register, auth_headers):
    """The token from registration authenticates without a separate login."""
    token, student, _ = await register("Fresh")
    r = await client.get("/api/v1/auth/me", headers=auth_headers(token))
    assert r.status_code == 200
    assert r.json()["id"] == student["id"]


@pytest.mark.asyncio
async def test_register_duplicate_email(client):
    """Can't register with the same email twice (case-insensitive)."""
    email = f"dup-{uuid.uuid4().hex[:8]}@example.com"
    r1 = await client.post(
        "/api/v1/auth/register",
        json={"email": email, "name": "User 1", "password": "password_123"},
    )
    assert r1.status_code == 201

    r2 = await client.post(
        "/api/v1/auth/register",
        json={"email": email.upper(), "name": "User 2", "password": "password_123"},
    )
    assert r2.status_code == 409
    assert r2.json()["code"] == "email_taken"


@pytest.mark.asyncio
async def test_register_requires_fields(client):
    """Missing fields are rejected by validation."""
    r = await client.post("/api/v1/auth/register", json={"email": "a@example.com"})
    assert r.status_code == 422


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login(client, register):
    """Login with correct credentials returns a token and the student."""
    _, student, email = await register("Login", password="my_password_123")

    r = await client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": "my_password_123"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["token"]
    assert body["token_type"] == "bearer"
    assert body["student"]["id"] == student["id"]


@pytest.mark.asyncio
async def test_login_wrong_password(client, register):
    """Login with wrong password returns 401."""
    _, _, email = await register("Wrong", password="correct_password")

    r = await client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": "wrong_password"},
    )
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_login_failures_are_indistinguishable(client, register):
    """Unknown email and wrong password produce byte-identical responses."""
    _, _, email = await register("Probe", password="right_password")

    wrong_pw = await client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": "wrong_password"},
    )
    unknown = await client.post(
        "/api/v1/auth/login",
        json={"email": "nobody@example.com", "password": "wrong_password"},
    )
    assert wrong_pw.status_code == unknown.status_code == 401
    assert wrong_pw.json() == unknown.json()
    assert wrong_pw.json() == {
        "detail": "Invalid credentials",
        "code": "authentication_failed",
    }


# ═══════════════════════════════════════════════════════════
# Current student (/me)
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_me_with_token(client, register, auth_headers):
    """Login → use token → /me returns the same student."""
    _, student, email = await register("Me", password="password_123")
    r = await client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": "password_123"},
    )
    token = r.json()["token"]

    r = await client.get("/api/v1/auth/me", headers=auth_headers(token))
    assert r.status_code == 200
    me = r.json()
    assert me["id"] == student["id"]
    assert me["email"] == email
    assert me["projects"] == []


@pytest.mark.asyncio
async def test_me_without_token(client):
    """No token → 401."""
    r = await client.get("/api/v1/auth/me")
    assert r.status_code == 401
    assert r.json()["code"] == "unauthenticated"


@pytest.mark.asyncio
async def test_me_with_garbage_token(client, auth_headers):
    """A token that doesn't verify is treated as no token at all."""
    r = await client.get("/api/v1/auth/me", headers=auth_headers("not-a-jwt"))
    assert r.status_code == 401
    assert r.json()["code"] == "unauthenticated"


@pytest.mark.asyncio
async def test_me_for_deleted_student(client, auth_headers):
    """A valid token for a student that doesn't exist → 404."""
    from codecollab.auth.jwt import create_access_token

    token = create_access_token(uuid.uuid4())
    r = await client.get("/api/v1/auth/me", headers=auth_headers(token))
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_me_with_lowercase_scheme(client, register):
    """The auth scheme name is matched case-insensitively."""
    token, student, _ = await register("Lower")
    r = await client.get("/api/v1/auth/me", headers={"Authorization": f"bearer {token}"})
    assert r.status_code == 200
    assert r.json()["id"] == student["id"]
