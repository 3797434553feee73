"""Scoring orchestration."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from agentlinter.files import FileRecord
from agentlinter.rules import default_rules, rules_by_category
from agentlinter.rules.base import (
    CATEGORIES,
    CATEGORY_WEIGHTS,
    Category,
    Diagnostic,
    Rule,
    Severity,
)

logger = logging.getLogger(__name__)

# Mirrors the skill audit's CRITICAL/WARNING/INFO point values.
SEVERITY_PENALTIES: dict[Severity, int] = {
    "error": 25,
    "warning": 10,
    "info": 3,
}

MAX_SCORE = 100


@dataclass(slots=True)
class CategoryScore:
    """Score for one lint category."""

    category: Category
    score: int
    weight: float
    diagnostics: list[Diagnostic] = field(default_factory=list)


@dataclass(slots=True)
class LintResult:
    """Top-level result of one workspace scan."""

    workspace: str
    files: list[FileRecord]
    categories: list[CategoryScore]
    total_score: int
    diagnostics: list[Diagnostic]
    timestamp: str


def evaluate(
    workspace: str,
    files: Sequence[FileRecord],
    rules: Sequence[Rule] | None = None,
    *,
    penalties: dict[Severity, int] | None = None,
    now: datetime | None = None,
) -> LintResult:
    """Run rules over the files and score every category.

    A rule that raises is reported as a single ``info`` diagnostic and the
    scan continues with the remaining rules.
    """
    active_rules = list(rules) if rules is not None else default_rules()
    snapshot = tuple(files)
    active_penalties = dict(SEVERITY_PENALTIES if penalties is None else penalties)

    all_diagnostics: list[Diagnostic] = []
    for rule in active_rules:
        all_diagnostics.extend(run_rule(rule, snapshot))

    grouped = rules_by_category(active_rules)
    category_scores: list[CategoryScore] = []
    for category in CATEGORIES:
        attributed = [item for item in all_diagnostics if item.category == category]
        if not grouped[category]:
            logger.debug("No rules registered for category %s", category)
        category_scores.append(
            CategoryScore(
                category=category,
                score=score_category(attributed, penalties=active_penalties),
                weight=CATEGORY_WEIGHTS[category],
                diagnostics=attributed,
            )
        )

    return LintResult(
        workspace=workspace,
        files=list(snapshot),
        categories=category_scores,
        total_score=overall_score(category_scores),
        diagnostics=all_diagnostics,
        timestamp=_timestamp(now),
    )


def run_rule(rule: Rule, files: tuple[FileRecord, ...]) -> list[Diagnostic]:
    """Invoke one rule, converting an internal failure into a diagnostic."""
    try:
        return list(rule.check(files))
    except Exception as exc:  # noqa: BLE001
        logger.warning("Rule %s failed: %s", rule.rule_id, exc, exc_info=True)
        return [
            Diagnostic(
                severity="info",
                category=rule.category,
                rule=rule.rule_id,
                file="(engine)",
                message=f"Rule '{rule.rule_id}' failed: {exc}",
            )
        ]


def score_category(
    diagnostics: Sequence[Diagnostic],
    *,
    penalties: dict[Severity, int] | None = None,
) -> int:
    """Start at 100 and subtract one severity penalty per diagnostic, floored at 0."""
    active_penalties = SEVERITY_PENALTIES if penalties is None else penalties
    deducted = sum(active_penalties.get(item.severity, 0) for item in diagnostics)
    return _clamp(MAX_SCORE - deducted)


def overall_score(category_scores: Sequence[CategoryScore]) -> int:
    weighted = sum(item.score * item.weight for item in category_scores)
    return _clamp(math.floor(weighted + 0.5))


def _timestamp(now: datetime | None) -> str:
    moment = now or datetime.now(tz=UTC)
    return moment.replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _clamp(value: int, lower: int = 0, upper: int = MAX_SCORE) -> int:
    return max(lower, min(upper, value))
