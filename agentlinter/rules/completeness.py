"""Completeness rules for the main instruction file."""

from __future__ import annotations

import re
from collections.abc import Sequence

from agentlinter.files import FileRecord
from agentlinter.rules.base import WORKSPACE_FILE, Diagnostic, DiagnosticReporter, find_file

MAIN_FILE_NAMES = ("CLAUDE.md", "AGENTS.md")
OVERVIEW_HEADING_RE = re.compile(
    r"\b(?:overview|about|project|purpose|identity|who you are|context)\b", re.IGNORECASE
)
COMMAND_RE = re.compile(
    r"\b(?:npm|pnpm|yarn|npx|make|pytest|cargo|go test|uv|pip|poetry|gradle|mvn)\b"
    r"|\b(?:build|test|lint|run)\s+(?:command|with|via)\b",
    re.IGNORECASE,
)


class MainFileRule:
    """Workspace needs a CLAUDE.md or AGENTS.md entry point."""

    rule_id = "completeness/main-file"
    severity = "error"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        if find_file(files, *MAIN_FILE_NAMES) is not None:
            return []
        return [
            report(
                WORKSPACE_FILE,
                "No CLAUDE.md or AGENTS.md found.",
                fix="Create CLAUDE.md describing the project, conventions and commands.",
            )
        ]


class ProjectOverviewRule:
    """Main file should open with what the project is."""

    rule_id = "completeness/project-overview"
    severity = "warning"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        main_file = find_file(files, *MAIN_FILE_NAMES)
        if main_file is None:
            return []
        if any(OVERVIEW_HEADING_RE.search(section.heading) for section in main_file.sections):
            return []
        return [
            report(
                main_file.name,
                "No overview section describing the project.",
                fix="Add a '## Overview' section with the project's purpose and stack.",
            )
        ]


class CommandsRule:
    """Main file should list build/test commands."""

    rule_id = "completeness/commands"
    severity = "info"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        main_file = find_file(files, *MAIN_FILE_NAMES)
        if main_file is None or COMMAND_RE.search(main_file.content):
            return []
        return [
            report(
                main_file.name,
                "No build, test or run commands documented.",
                fix="List the exact commands the agent should use to build and test.",
            )
        ]
