"""
Shared helpers for CodeCollab examples.

Handles the health check and authentication (register, which doubles as
login) so each example can focus on its own workflow.
"""

import sys
import uuid

import httpx

BASE = "http://localhost:8000/api/v1"


def check_backend() -> None:
    """Verify the backend is reachable and healthy."""
    try:
        resp = httpx.get(f"{BASE}/health", timeout=5)
    except httpx.ConnectError:
        print(f"ERROR: Backend not reachable at {BASE}")
        print("Start it with:  codecollab serve --reload")
        sys.exit(1)

    if resp.status_code != 200:
        print(f"ERROR: Health check returned {resp.status_code}")
        sys.exit(1)

    health = resp.json()
    print("Backend health:")
    print(f"  Status:   {health['status']} (v{health['version']})")
    print(f"  Database: {'✓' if health['database'] == 'ok' else '✗'}")

    if health["database"] != "ok":
        print("\nERROR: Database is not reachable. Check CODECOLLAB_DATABASE_URL.")
        sys.exit(1)


def register(name: str, password: str = "demo-password-123") -> tuple[str, dict]:
    """Register a fresh student and return (token, student).

    Uses a unique email per run so examples are idempotent.
    """
    run_id = uuid.uuid4().hex[:8]
    email = f"{name.lower()}-{run_id}@example.com"

    resp = httpx.post(
        f"{BASE}/auth/register",
        json={"email": email, "name": name, "password": password},
        timeout=10,
    )
    if resp.status_code != 201:
        print(f"ERROR: Registration failed: {resp.status_code} {resp.text}")
        sys.exit(1)

    body = resp.json()
    return body["token"], body["student"]


def create_client(name: str = "Demo") -> tuple[httpx.Client, dict]:
    """Check backend, register a student, and return an authed client plus the student."""
    check_backend()
    token, student = register(name)
    print(f"  Auth:     ✓ (JWT for {student['name']})")
    client = httpx.Client(
        base_url=BASE,
        timeout=10,
        headers={"Authorization": f"Bearer {token}"},
    )
    return client, student
