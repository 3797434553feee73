"""Skill-file safety rule backed by the skill audit engine."""

from __future__ import annotations

from collections.abc import Sequence

from agentlinter.files import FileRecord
from agentlinter.rules.base import Diagnostic, DiagnosticReporter, Severity, is_skill_file
from agentlinter.skill_audit import audit_skill_file

AUDIT_TO_LINT_SEVERITY: dict[str, Severity] = {
    "CRITICAL": "error",
    "WARNING": "warning",
    "INFO": "info",
}


class SkillAuditRule:
    """Skill definitions in the workspace must not carry known attack patterns."""

    rule_id = "skill-safety/audit"
    severity = "error"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        for record in files:
            if not is_skill_file(record):
                continue
            result = audit_skill_file(record.content, record.name)
            for finding in result.findings:
                diagnostics.append(
                    report(
                        record.path,
                        f"[{finding.category}] {finding.message}",
                        line=finding.line,
                        fix=finding.recommendation,
                        severity=AUDIT_TO_LINT_SEVERITY[finding.severity],
                    )
                )
        return diagnostics
