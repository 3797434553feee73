"""Base rule protocol and diagnostic model."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal, Protocol

from agentlinter.files import FileRecord

Severity = Literal["error", "warning", "info"]
Category = Literal[
    "structure",
    "clarity",
    "completeness",
    "security",
    "consistency",
    "memory",
    "runtime",
    "skillSafety",
]

CATEGORY_WEIGHTS: dict[Category, float] = {
    "structure": 0.12,
    "clarity": 0.20,
    "completeness": 0.12,
    "security": 0.15,
    "consistency": 0.08,
    "memory": 0.10,
    "runtime": 0.13,
    "skillSafety": 0.10,
}

CATEGORY_LABELS: dict[Category, str] = {
    "structure": "Structure",
    "clarity": "Clarity",
    "completeness": "Completeness",
    "security": "Security",
    "consistency": "Consistency",
    "memory": "Memory",
    "runtime": "Runtime Config",
    "skillSafety": "Skill Safety",
}

CATEGORIES: tuple[Category, ...] = tuple(CATEGORY_WEIGHTS)

WORKSPACE_FILE = "(workspace)"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single issue reported by a lint rule."""

    severity: Severity
    category: Category
    rule: str
    file: str
    message: str
    line: int | None = None
    fix: str | None = None


@dataclass(frozen=True, slots=True)
class DiagnosticReporter:
    """Diagnostic factory bound to one rule's metadata.

    Built once when the rule is registered so a rule never has to look up its
    own identity while it runs.
    """

    rule_id: str
    category: Category
    severity: Severity

    def __call__(
        self,
        file: str,
        message: str,
        *,
        line: int | None = None,
        fix: str | None = None,
        severity: Severity | None = None,
    ) -> Diagnostic:
        return Diagnostic(
            severity=severity or self.severity,
            category=self.category,
            rule=self.rule_id,
            file=file,
            message=message,
            line=line,
            fix=fix,
        )


class Rule(Protocol):
    """Protocol consumed by the scoring engine."""

    rule_id: str
    category: Category
    severity: Severity
    description: str

    def check(self, files: Sequence[FileRecord]) -> list[Diagnostic]:
        """Evaluate the file set and return diagnostics."""


class RuleImpl(Protocol):
    """Protocol for rule implementations before registration."""

    rule_id: str
    severity: Severity

    def check(
        self, files: Sequence[FileRecord], report: DiagnosticReporter
    ) -> list[Diagnostic]:
        """Evaluate the file set, creating diagnostics through ``report``."""


@dataclass(frozen=True, slots=True)
class RegisteredRule:
    """A rule implementation with its metadata captured at registration."""

    rule_id: str
    category: Category
    severity: Severity
    description: str
    impl: RuleImpl
    reporter: DiagnosticReporter

    def check(self, files: Sequence[FileRecord]) -> list[Diagnostic]:
        return self.impl.check(tuple(files), self.reporter)


def register(impl: RuleImpl, *, category: Category) -> RegisteredRule:
    """Bind an implementation to its category and freeze its metadata."""
    description = (type(impl).__doc__ or "").strip()
    return RegisteredRule(
        rule_id=impl.rule_id,
        category=category,
        severity=impl.severity,
        description=description,
        impl=impl,
        reporter=DiagnosticReporter(
            rule_id=impl.rule_id,
            category=category,
            severity=impl.severity,
        ),
    )


def markdown_files(files: Sequence[FileRecord]) -> list[FileRecord]:
    """Instruction documents, excluding skill definitions."""
    return [item for item in files if item.is_markdown and not is_skill_file(item)]


def is_skill_file(file: FileRecord) -> bool:
    normalized = file.path.replace("\\", "/").lower()
    return file.name.lower() == "skill.md" or "skills/" in normalized


def find_file(files: Sequence[FileRecord], *names: str) -> FileRecord | None:
    wanted = {name.lower() for name in names}
    for item in files:
        if item.name.lower() in wanted:
            return item
    return None
