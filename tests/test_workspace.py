"""Tests for workspace collection and skill discovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from agentlinter.workspace import WorkspaceError, discover_skill_sources, scan_workspace


def test_scan_workspace_collects_known_files(tmp_path: Path) -> None:
    _write(tmp_path / "CLAUDE.md", "# Overview\nhi")
    _write(tmp_path / "SOUL.md", "# Soul\ncalm")
    _write(tmp_path / "memory" / "2026-01-01.md", "# Day\nnote")
    _write(tmp_path / ".claude" / "rules" / "style.md", "# Style\nshort")
    _write(tmp_path / "clawdbot.json", "{}")
    _write(tmp_path / "skills" / "weather" / "SKILL.md", "# Weather\nforecast")
    _write(tmp_path / "notes.md", "# Ignored\nnot an instruction file")

    records = scan_workspace(tmp_path)

    assert [record.path for record in records] == [
        "CLAUDE.md",
        "SOUL.md",
        "memory/2026-01-01.md",
        ".claude/rules/style.md",
        "clawdbot.json",
        "skills/weather/SKILL.md",
    ]
    assert records[0].sections[0].heading == "Overview"


def test_scan_workspace_requires_existing_directory(tmp_path: Path) -> None:
    with pytest.raises(WorkspaceError):
        scan_workspace(tmp_path / "missing")


def test_discover_skill_sources_prefers_skill_md(tmp_path: Path) -> None:
    _write(tmp_path / "skills" / "alpha" / "README.md", "readme")
    _write(tmp_path / "skills" / "alpha" / "SKILL.md", "skill")
    _write(tmp_path / "skills" / "beta" / "README.md", "beta readme")
    _write(tmp_path / "skills" / "gamma.txt", "loose")
    _write(tmp_path / "skills" / "image.png", "binary")
    (tmp_path / "skills" / "empty").mkdir()

    folders = discover_skill_sources(tmp_path)

    assert len(folders) == 1
    sources = folders[0].sources
    assert [(item.name, item.filename, item.content) for item in sources] == [
        ("alpha", "SKILL.md", "skill"),
        ("beta", "README.md", "beta readme"),
        ("gamma", "gamma.txt", "loose"),
    ]


def test_discover_skill_sources_reads_extra_and_home_dirs(tmp_path: Path) -> None:
    workspace = tmp_path / "ws"
    _write(workspace / ".claude" / "skills" / "one.md", "one")
    _write(workspace / "vendor" / "two.md", "two")
    home = tmp_path / "home"
    _write(home / ".clawd" / "skills" / "three" / "skill.md", "three")

    folders = discover_skill_sources(workspace, ["vendor"], include_home=True, home=home)

    assert [[item.name for item in folder.sources] for folder in folders] == [
        ["one"],
        ["two"],
        ["three"],
    ]

    without_home = discover_skill_sources(workspace, ["vendor"])
    assert len(without_home) == 2


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
