"""Persistent memory file rules."""

from __future__ import annotations

from collections.abc import Sequence

from agentlinter.files import FileRecord
from agentlinter.rules.base import WORKSPACE_FILE, Diagnostic, DiagnosticReporter

MAX_MEMORY_LINES = 200


def memory_files(files: Sequence[FileRecord]) -> list[FileRecord]:
    return [record for record in files if _is_memory_file(record)]


def _is_memory_file(record: FileRecord) -> bool:
    if record.name.upper() == "MEMORY.MD":
        return True
    return record.path.replace("\\", "/").startswith("memory/")


class MemoryFileExistsRule:
    """Agents keep context across sessions through a memory file."""

    rule_id = "memory/file-exists"
    severity = "info"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        if memory_files(files):
            return []
        return [
            report(
                WORKSPACE_FILE,
                "No MEMORY.md or memory/ notes found.",
                fix="Add MEMORY.md so the agent can persist decisions between sessions.",
            )
        ]


class MemorySizeRule:
    """Memory files are loaded every session and should stay compact."""

    rule_id = "memory/size"
    severity = "warning"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        return [
            report(
                record.name,
                f"Memory file has {len(record.lines)} lines (over {MAX_MEMORY_LINES}).",
                fix="Summarize old entries and archive the rest outside the loaded context.",
            )
            for record in memory_files(files)
            if len(record.lines) > MAX_MEMORY_LINES
        ]
