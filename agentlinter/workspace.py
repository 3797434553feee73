"""Workspace and skill-folder discovery."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from agentlinter.files import FileRecord, build_file_record
from agentlinter.runtime_config import RUNTIME_CONFIG_NAMES
from agentlinter.skill_audit import SkillSource

logger = logging.getLogger(__name__)

INSTRUCTION_FILES = (
    "CLAUDE.md",
    "AGENTS.md",
    "SOUL.md",
    "IDENTITY.md",
    "USER.md",
    "TOOLS.md",
    "MEMORY.md",
    "HEARTBEAT.md",
    ".claude/CLAUDE.md",
)
INSTRUCTION_GLOBS = ("memory/*.md", ".claude/rules/*.md")
SKILL_DIRS = ("skills", ".claude/skills")
SKILL_ENTRY_NAMES = ("SKILL.md", "skill.md", "README.md")
SKILL_FILE_SUFFIXES = (".md", ".txt")
HOME_SKILL_DIR = Path(".clawd") / "skills"


class WorkspaceError(RuntimeError):
    """Raised when a workspace cannot be read."""


@dataclass(slots=True)
class SkillFolder:
    """Skill definitions found directly under one folder."""

    folder: str
    sources: list[SkillSource] = field(default_factory=list)


def scan_workspace(root: Path) -> list[FileRecord]:
    """Collect instruction documents, runtime configs, and skill files under root."""
    root = _require_directory(root)
    records: list[FileRecord] = []
    seen: set[Path] = set()

    candidates: list[Path] = [root / name for name in INSTRUCTION_FILES]
    for pattern in INSTRUCTION_GLOBS:
        candidates.extend(sorted(root.glob(pattern)))
    candidates.extend(root / name for name in RUNTIME_CONFIG_NAMES)

    for path in candidates:
        resolved = path.resolve()
        if resolved in seen or not path.is_file():
            continue
        seen.add(resolved)
        records.append(build_file_record(path.name, _relative(path, root), read_text(path)))

    for skill_dir in SKILL_DIRS:
        for folder in _skill_folders(root / skill_dir):
            for source in folder.sources:
                skill_path = Path(source.path or source.filename)
                records.append(
                    build_file_record(
                        skill_path.name, _relative(skill_path, root), source.content
                    )
                )

    logger.debug("Collected %d files from %s", len(records), root)
    return records


def discover_skill_sources(
    root: Path,
    extra_dirs: Sequence[str] = (),
    *,
    include_home: bool = False,
    home: Path | None = None,
) -> list[SkillFolder]:
    """Find skill definitions in the workspace skill folders and any extra folders.

    A subfolder contributes its ``SKILL.md``, ``skill.md`` or ``README.md``
    (first one present); a loose ``.md``/``.txt`` file is a skill by itself.
    Folders without skills are omitted.
    """
    root = _require_directory(root)
    candidates = [root / name for name in SKILL_DIRS]
    candidates.extend(_resolve_dir(root, item) for item in extra_dirs)
    if include_home:
        candidates.append((home or Path.home()) / HOME_SKILL_DIR)

    folders: list[SkillFolder] = []
    seen: set[Path] = set()
    for candidate in candidates:
        resolved = candidate.resolve()
        if resolved in seen:
            continue
        seen.add(resolved)
        folders.extend(_skill_folders(candidate))
    return folders


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise WorkspaceError(f"Could not read {path}: {exc}") from exc


def _skill_folders(folder: Path) -> list[SkillFolder]:
    if not folder.is_dir():
        return []

    skill_folder = SkillFolder(folder=str(folder))
    for entry in sorted(folder.iterdir(), key=lambda item: item.name):
        if entry.is_dir():
            for entry_name in SKILL_ENTRY_NAMES:
                skill_path = entry / entry_name
                if skill_path.is_file():
                    skill_folder.sources.append(
                        SkillSource(
                            name=entry.name,
                            filename=skill_path.name,
                            content=read_text(skill_path),
                            path=str(skill_path),
                        )
                    )
                    break
        elif entry.is_file() and entry.suffix in SKILL_FILE_SUFFIXES:
            skill_folder.sources.append(
                SkillSource(
                    name=entry.stem,
                    filename=entry.name,
                    content=read_text(entry),
                    path=str(entry),
                )
            )

    if not skill_folder.sources:
        return []
    logger.debug("Found %d skill(s) in %s", len(skill_folder.sources), folder)
    return [skill_folder]


def _relative(path: Path, root: Path) -> str:
    if path.is_relative_to(root):
        return path.relative_to(root).as_posix()
    return path.as_posix()


def _resolve_dir(root: Path, value: str) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else root / path


def _require_directory(root: Path) -> Path:
    resolved = root.resolve()
    if not resolved.is_dir():
        raise WorkspaceError(f"Workspace directory does not exist: {root}")
    return resolved
