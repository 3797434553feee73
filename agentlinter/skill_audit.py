"""Skill-file threat audit.

Scans a skill definition line by line against the corpora in
``agentlinter.skill_patterns`` and classifies it with a capped risk score and
a four-level verdict. Auditing is pure: no I/O and no state between calls.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Literal

from agentlinter.skill_patterns import (
    ADDITIONAL_RED_FLAGS,
    CORPORA,
    EXFILTRATION,
    REMOTE_FETCH,
    SUSPICIOUS_RATE_LIMITS,
    AuditSeverity,
    Corpus,
    ThreatPattern,
    recommendation_for,
)

logger = logging.getLogger(__name__)

Verdict = Literal["SAFE", "SUSPICIOUS", "DANGEROUS", "MALICIOUS"]

VERDICTS: tuple[Verdict, ...] = ("SAFE", "SUSPICIOUS", "DANGEROUS", "MALICIOUS")

SEVERITY_POINTS: dict[AuditSeverity, int] = {
    "CRITICAL": 25,
    "WARNING": 10,
    "INFO": 3,
}

MAX_RISK_SCORE = 100
MATCH_MAX_LEN = 80
MAX_RATE_DIGITS = 18
CODE_FENCE = "```"


@dataclass(frozen=True, slots=True)
class AuditFinding:
    """A single threat-pattern hit."""

    severity: AuditSeverity
    category: str
    match: str
    message: str
    recommendation: str
    line: int | None = None


@dataclass(frozen=True, slots=True)
class AuditResult:
    """Audit outcome for one skill file."""

    file: str
    risk_score: int
    verdict: Verdict
    findings: list[AuditFinding] = field(default_factory=list)

    @property
    def critical_count(self) -> int:
        return count_severity(self.findings, "CRITICAL")


@dataclass(frozen=True, slots=True)
class SkillSource:
    """Skill text paired with a display name."""

    name: str
    filename: str
    content: str
    path: str | None = None


def audit_skill_file(content: str, filename: str) -> AuditResult:
    """Audit skill text and return findings, risk score, and verdict."""
    findings: list[AuditFinding] = []
    in_code_block = False

    for line_number, line in enumerate(content.split("\n"), start=1):
        if line.strip().startswith(CODE_FENCE):
            in_code_block = not in_code_block

        for corpus in CORPORA:
            findings.extend(
                _scan_corpus(
                    corpus,
                    line=line,
                    line_number=line_number,
                    in_code_block=in_code_block,
                )
            )

    risk_score = calculate_risk_score(findings)
    verdict = classify_verdict(risk_score, count_severity(findings, "CRITICAL"))
    return AuditResult(file=filename, findings=findings, risk_score=risk_score, verdict=verdict)


def audit_skill_files(
    sources: Sequence[SkillSource], *, max_workers: int = 4
) -> list[tuple[SkillSource, AuditResult]]:
    """Audit many skill files concurrently, preserving input order."""
    if max_workers <= 0:
        raise ValueError(f"max_workers must be positive, got {max_workers}")
    if not sources:
        return []

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        results = list(
            pool.map(lambda source: audit_skill_file(source.content, source.filename), sources)
        )
    for source, result in zip(sources, results):
        logger.debug("Audited skill %s: %s (%d)", source.name, result.verdict, result.risk_score)
    return list(zip(sources, results))


def calculate_risk_score(findings: Sequence[AuditFinding]) -> int:
    total = sum(SEVERITY_POINTS[finding.severity] for finding in findings)
    return min(total, MAX_RISK_SCORE)


def classify_verdict(risk_score: int, critical_count: int) -> Verdict:
    """Map a risk score and critical-finding count to a verdict.

    Thresholds are inclusive and checked from most to least severe.
    """
    if critical_count >= 3 or risk_score >= 80:
        return "MALICIOUS"
    if critical_count > 0 or risk_score >= 50:
        return "DANGEROUS"
    if risk_score >= 20:
        return "SUSPICIOUS"
    return "SAFE"


def count_severity(findings: Sequence[AuditFinding], severity: AuditSeverity) -> int:
    return sum(1 for finding in findings if finding.severity == severity)


def _scan_corpus(
    corpus: Corpus,
    *,
    line: str,
    line_number: int,
    in_code_block: bool,
) -> list[AuditFinding]:
    # One finding per line and category label; the first pattern in corpus
    # order wins. Additional red flags are labelled per subcategory.
    findings: list[AuditFinding] = []
    reported: set[str] = set()
    for pattern in corpus.patterns:
        category = _finding_category(corpus, pattern)
        if category in reported:
            continue
        matches = pattern.search(line)
        if matches is None:
            continue

        finding = _build_finding(
            corpus,
            pattern,
            category=category,
            matches=matches,
            line=line,
            line_number=line_number,
            in_code_block=in_code_block,
        )
        if finding is None:
            continue
        reported.add(category)
        findings.append(finding)
    return findings


def _build_finding(
    corpus: Corpus,
    pattern: ThreatPattern,
    *,
    category: str,
    matches: list[re.Match[str]],
    line: str,
    line_number: int,
    in_code_block: bool,
) -> AuditFinding | None:
    severity: AuditSeverity = corpus.severity
    message = f"{corpus.message_prefix}: {pattern.label}"
    recommendation = corpus.recommendation

    if corpus is REMOTE_FETCH and in_code_block:
        severity = "WARNING"
    elif corpus is SUSPICIOUS_RATE_LIMITS:
        rate, digits = _captured_rate(matches)
        if rate < 100:
            return None
        severity = "WARNING" if rate >= 1000 else "INFO"
        message = f"{corpus.message_prefix} ({digits}): {pattern.label}"
    elif corpus is ADDITIONAL_RED_FLAGS:
        severity = "CRITICAL" if pattern.subcategory == EXFILTRATION else "WARNING"
        recommendation = recommendation_for(pattern.subcategory)

    return AuditFinding(
        severity=severity,
        category=category,
        line=line_number,
        match=line.strip()[:MATCH_MAX_LEN],
        message=message,
        recommendation=recommendation,
    )


def _finding_category(corpus: Corpus, pattern: ThreatPattern) -> str:
    if pattern.subcategory is None:
        return corpus.category
    return f"{corpus.category}: {pattern.subcategory}"


def _captured_rate(matches: list[re.Match[str]]) -> tuple[int, str]:
    for match in matches:
        if match.lastindex:
            digits = match.group(1).lstrip("0") or "0"
            if len(digits) > MAX_RATE_DIGITS:
                return (10**MAX_RATE_DIGITS, digits)
            return (int(digits), digits)
    return (0, "0")
