"""CLI tests — click commands with the network and database stubbed out."""

import json

import pytest
from click.testing import CliRunner

from codecollab import __version__
from codecollab.cli import main as cli

CLEAN = {
    "orphaned_projects": [],
    "dangling_references": [],
    "duplicate_references": [],
    "repaired": False,
}

DRIFT = {
    "orphaned_projects": ["11111111-1111-1111-1111-111111111111"],
    "dangling_references": [
        {
            "student_id": "22222222-2222-2222-2222-222222222222",
            "project_id": "33333333-3333-3333-3333-333333333333",
        }
    ],
    "duplicate_references": [],
    "repaired": False,
}


@pytest.fixture
def runner():
    return CliRunner()


def _fake_reconcile(report: dict, calls: list):
    async def _reconcile(repair: bool) -> dict:
        calls.append(repair)
        return {**report, "repaired": repair and report is not CLEAN}

    return _reconcile


def test_version(runner):
    result = runner.invoke(cli.main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_reconcile_clean(runner, monkeypatch):
    calls = []
    monkeypatch.setattr(cli, "_reconcile", _fake_reconcile(CLEAN, calls))

    result = runner.invoke(cli.main, ["reconcile"])
    assert result.exit_code == 0
    assert "No drift" in result.output
    assert calls == [False]


def test_reconcile_drift_exits_nonzero(runner, monkeypatch):
    calls = []
    monkeypatch.setattr(cli, "_reconcile", _fake_reconcile(DRIFT, calls))

    result = runner.invoke(cli.main, ["reconcile"])
    assert result.exit_code == 1
    assert "Orphaned projects:    1" in result.output
    assert "11111111-1111-1111-1111-111111111111" in result.output
    assert "33333333-3333-3333-3333-333333333333" in result.output


def test_reconcile_repair(runner, monkeypatch):
    calls = []
    monkeypatch.setattr(cli, "_reconcile", _fake_reconcile(DRIFT, calls))

    result = runner.invoke(cli.main, ["reconcile", "--repair"])
    assert result.exit_code == 0
    assert "Repaired." in result.output
    assert calls == [True]


def test_reconcile_json(runner, monkeypatch):
    monkeypatch.setattr(cli, "_reconcile", _fake_reconcile(DRIFT, []))

    result = runner.invoke(cli.main, ["reconcile", "--json"])
    assert result.exit_code == 1
    assert json.loads(result.output)["orphaned_projects"] == DRIFT["orphaned_projects"]


def test_projects_table(runner, monkeypatch):
    rows = [
        {
            "id": "44444444-4444-4444-4444-444444444444",
            "name": "Engine",
            "base_language": "Rust",
            "open_collab": True,
            "student": {"name": "Ada"},
        },
        {
            "id": "55555555-5555-5555-5555-555555555555",
            "name": "Parser",
            "base_language": "Go",
            "open_collab": False,
            "student": {"name": "Grace"},
        },
    ]
    seen = {}

    async def _fetch(student, name):
        seen["args"] = (student, name)
        return rows

    monkeypatch.setattr(cli, "_fetch_projects", _fetch)

    result = runner.invoke(cli.main, ["projects", "--open", "--name", "Engine"])
    assert result.exit_code == 0
    assert "Engine" in result.output
    assert "Parser" not in result.output
    assert seen["args"] == (None, "Engine")


def test_projects_empty(runner, monkeypatch):
    async def _fetch(student, name):
        return []

    monkeypatch.setattr(cli, "_fetch_projects", _fetch)
    result = runner.invoke(cli.main, ["projects"])
    assert result.exit_code == 0
    assert "No projects found." in result.output
