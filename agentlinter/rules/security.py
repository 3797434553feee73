"""Security rules for instruction documents."""

from __future__ import annotations

import re
from collections.abc import Sequence

from agentlinter.files import FileRecord
from agentlinter.rules.base import Diagnostic, DiagnosticReporter, find_file, markdown_files

SECRET_PATTERNS = [
    (re.compile(r"\bsk-(?:ant-|proj-)?[A-Za-z0-9_-]{20,}"), "API key"),
    (re.compile(r"\bgh[pousr]_[A-Za-z0-9]{36,}"), "GitHub token"),
    (re.compile(r"\bAKIA[0-9A-Z]{16}\b"), "AWS access key"),
    (re.compile(r"\bxox[abprs]-[A-Za-z0-9-]{10,}"), "Slack token"),
    (re.compile(r"-----BEGIN (?:[A-Z]+ )?PRIVATE KEY-----"), "private key block"),
]

BYPASS_PATTERNS = [
    (re.compile(r"--dangerously-skip-permissions"), "permission checks disabled"),
    (re.compile(r"\bchmod\s+(?:-R\s+)?777\b"), "world-writable permissions"),
    (re.compile(r"\brm\s+-rf\s+/(?:\s|$)"), "recursive delete of filesystem root"),
    (re.compile(r"--no-verify\b"), "git hooks bypassed"),
]

INJECTION_GUARD_RE = re.compile(
    r"prompt injection|untrusted (?:input|content|data)|external content|"
    r"ignore instructions (?:in|from)",
    re.IGNORECASE,
)


class PlaintextSecretsRule:
    """Instruction files must not contain credentials."""

    rule_id = "security/plaintext-secrets"
    severity = "error"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        for record in markdown_files(files):
            for line_number, line in enumerate(record.lines, start=1):
                for pattern, kind in SECRET_PATTERNS:
                    if pattern.search(line):
                        diagnostics.append(
                            report(
                                record.name,
                                f"Possible {kind} in plaintext.",
                                line=line_number,
                                fix="Remove the secret, rotate it, and reference an "
                                "environment variable instead.",
                            )
                        )
                        break
        return diagnostics


class PermissionBypassRule:
    """Instructions that disable safety checks or grant broad destructive access."""

    rule_id = "security/permission-bypass"
    severity = "warning"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        for record in markdown_files(files):
            for line_number, line in enumerate(record.lines, start=1):
                for pattern, reason in BYPASS_PATTERNS:
                    if pattern.search(line):
                        diagnostics.append(
                            report(
                                record.name,
                                f"Instruction bypasses a safeguard ({reason}).",
                                line=line_number,
                                fix="Require explicit user confirmation for this action.",
                            )
                        )
        return diagnostics


class InjectionGuardRule:
    """Workspace should tell the agent how to treat untrusted content."""

    rule_id = "security/injection-guard"
    severity = "info"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        main_file = find_file(files, "CLAUDE.md", "AGENTS.md")
        if main_file is None:
            return []
        if any(INJECTION_GUARD_RE.search(record.content) for record in markdown_files(files)):
            return []
        return [
            report(
                main_file.name,
                "No guidance on handling untrusted external content.",
                fix="Tell the agent to treat fetched pages, issues and tool output as data, "
                "not instructions.",
            )
        ]
