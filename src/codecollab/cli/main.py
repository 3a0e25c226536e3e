"""CodeCollab CLI — run the server, browse projects, audit consistency.

Usage:
    codecollab serve                        # Run the API with uvicorn
    codecollab projects                     # List projects (via the API)
    codecollab projects --open              # Only projects open for collaboration
    codecollab reconcile                    # Report student/project drift
    codecollab reconcile --repair           # ...and fix it
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Optional

import click
import httpx

from codecollab import __version__

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("CODECOLLAB_API_URL", DEFAULT_API_URL).rstrip("/")


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the CodeCollab backend."""
    return httpx.AsyncClient(base_url=_api_url(), timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "—"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="codecollab")
def main():
    """CodeCollab — students, projects, and who owns what."""


# ---------------------------------------------------------------------------
# codecollab serve
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default: CODECOLLAB_HOST)")
@click.option("--port", type=int, default=None, help="Port (default: CODECOLLAB_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    from codecollab.config import settings

    uvicorn.run(
        "codecollab.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# codecollab projects
# ---------------------------------------------------------------------------


@main.command()
@click.option("--student", "-s", help="Only projects owned by this student UUID")
@click.option("--name", "-n", help="Only projects with exactly this name")
@click.option("--open", "open_only", is_flag=True, help="Only open-collab projects")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
def projects(student: Optional[str], name: Optional[str], open_only: bool, as_json: bool):
    """List projects and their owners."""
    rows = _run(_fetch_projects(student, name))
    if open_only:
        rows = [p for p in rows if p["open_collab"]]

    if as_json:
        click.echo(_pretty_json(rows))
        return
    if not rows:
        click.echo("No projects found.")
        return

    _print_table(
        [
            {
                "name": p["name"],
                "base_language": p["base_language"],
                "open": "yes" if p["open_collab"] else "no",
                "owner": (p.get("student") or {}).get("name", "—"),
                "id": p["id"],
            }
            for p in rows
        ],
        [
            ("NAME", "name", 24),
            ("LANGUAGE", "base_language", 12),
            ("OPEN", "open", 5),
            ("OWNER", "owner", 20),
            ("ID", "id", 36),
        ],
    )


async def _fetch_projects(student: Optional[str], name: Optional[str]) -> list[dict]:
    params = {k: v for k, v in (("student", student), ("name", name)) if v}
    headers = {}
    token = os.environ.get("CODECOLLAB_TOKEN")
    if token:
        headers["Authorization"] = f"Bearer {token}"

    async with _client() as c:
        try:
            r = await c.get("/api/v1/projects", params=params, headers=headers)
        except httpx.ConnectError:
            click.secho(f"Backend not reachable at {_api_url()}", fg="red", err=True)
            sys.exit(1)
        if r.status_code != 200:
            click.secho(f"Error {r.status_code}: {r.text}", fg="red", err=True)
            sys.exit(1)
        return r.json()


# ---------------------------------------------------------------------------
# codecollab reconcile
# ---------------------------------------------------------------------------


@main.command()
@click.option("--repair", is_flag=True, help="Fix what the sweep finds")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
def reconcile(repair: bool, as_json: bool):
    """Audit that every project is listed exactly once under its owner.

    Talks to the database directly (CODECOLLAB_DATABASE_URL). Exits 1 when
    drift is found and not repaired.
    """
    report = _run(_reconcile(repair))

    if as_json:
        click.echo(_pretty_json(report))
    elif _is_clean(report):
        click.secho("No drift: students and projects agree.", fg="green")
    else:
        click.secho(
            f"Orphaned projects:    {len(report['orphaned_projects'])}", fg="yellow"
        )
        for pid in report["orphaned_projects"]:
            click.echo(f"  {pid}")
        click.secho(
            f"Dangling references:  {len(report['dangling_references'])}", fg="yellow"
        )
        for ref in report["dangling_references"]:
            click.echo(f"  student {ref['student_id']} → {ref['project_id']}")
        click.secho(
            f"Duplicate references: {len(report['duplicate_references'])}", fg="yellow"
        )
        for ref in report["duplicate_references"]:
            click.echo(f"  student {ref['student_id']} → {ref['project_id']}")
        if report["repaired"]:
            click.secho("Repaired.", fg="green")

    if not _is_clean(report) and not report["repaired"]:
        sys.exit(1)


def _is_clean(report: dict) -> bool:
    return not (
        report["orphaned_projects"]
        or report["dangling_references"]
        or report["duplicate_references"]
    )


async def _reconcile(repair: bool) -> dict:
    from codecollab.db.engine import async_session_factory, engine
    from codecollab.services.reconciliation import ReconciliationService

    try:
        async with async_session_factory() as session:
            report = await ReconciliationService(session).sweep(repair=repair)
    finally:
        await engine.dispose()
    return report.to_dict()


if __name__ == "__main__":
    main()
