#!/usr/bin/env python3
"""
CodeCollab Quickstart — a project's full lifecycle in one script.

Registers a student → adds a project → browses it → updates it →
shows another student is locked out → removes it.
Run with: python examples/quickstart.py

Requires: pip install httpx
Backend must be running: http://localhost:8000
"""

import httpx

from _common import BASE, create_client, register


def main():
    client, ada = create_client("Ada")

    # ── Add a project ─────────────────────────────────────────────
    print("\n1. Adding a project...")
    resp = client.post("/projects", json={
        "name": "Engine",
        "base_language": "Rust",
        "open_collab": True,
        "description": "A tiny game engine",
    })
    assert resp.status_code == 201, f"Failed: {resp.text}"
    ada = resp.json()
    project = ada["projects"][0]
    print(f"   Project: {project['name']} ({project['id'][:8]}...)")
    print(f"   {ada['name']} now lists {len(ada['project_ids'])} project(s)")

    # ── Browse open projects (no auth needed by default) ──────────
    print("\n2. Browsing projects...")
    for p in httpx.get(f"{BASE}/projects", timeout=10).json():
        flag = "open" if p["open_collab"] else "closed"
        print(f"   {p['name']:<20} {p['base_language']:<10} {flag:<7} by {p['student']['name']}")

    # ── Close it for collaboration ────────────────────────────────
    print("\n3. Closing the project for collaboration...")
    resp = client.patch(f"/projects/{project['id']}", json={"open_collab": False})
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print(f"   open_collab = {resp.json()['open_collab']}")

    # ── Someone else tries to delete it ───────────────────────────
    print("\n4. Another student tries to delete it...")
    grace_token, grace = register("Grace")
    resp = httpx.delete(
        f"{BASE}/projects/{project['id']}",
        headers={"Authorization": f"Bearer {grace_token}"},
        timeout=10,
    )
    print(f"   {grace['name']}: {resp.status_code} {resp.json()['code']}")

    # ── Remove it ─────────────────────────────────────────────────
    print("\n5. Removing the project...")
    resp = client.delete(f"/projects/{project['id']}")
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print(f"   {ada['name']} now lists {len(resp.json()['project_ids'])} project(s)")

    resp = client.get(f"/projects/{project['id']}")
    print(f"   GET /projects/{project['id'][:8]}... → {resp.status_code}")

    print("\n✓ Lifecycle finished.")


if __name__ == "__main__":
    main()
