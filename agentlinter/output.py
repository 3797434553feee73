"""Output rendering and serialization."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

import click

from agentlinter import __version__
from agentlinter.files import FileRecord, Section
from agentlinter.rules.base import CATEGORY_LABELS, Diagnostic
from agentlinter.scoring import CategoryScore, LintResult
from agentlinter.skill_audit import AuditFinding, AuditResult, SkillSource

GRADE_TIERS: tuple[tuple[int, str], ...] = (
    (98, "S"),
    (96, "A+"),
    (93, "A"),
    (90, "A-"),
    (85, "B+"),
    (80, "B"),
    (75, "B-"),
    (68, "C+"),
    (60, "C"),
    (55, "C-"),
    (50, "D"),
)

BAR_WIDTH = 25

_SEVERITY_ORDER = {"error": 0, "warning": 1, "info": 2}
_SEVERITY_STYLE = {
    "error": ("ERROR", "red"),
    "warning": ("WARN", "yellow"),
    "info": ("TIP", "blue"),
}
_AUDIT_SEVERITY_COLORS = {"CRITICAL": "red", "WARNING": "yellow", "INFO": "blue"}
_VERDICT_COLORS = {
    "SAFE": "green",
    "SUSPICIOUS": "yellow",
    "DANGEROUS": "red",
    "MALICIOUS": "red",
}


def render_human(result: LintResult) -> str:
    """Render a compact colorized lint summary."""
    lines: list[str] = [
        click.style(f"AgentLinter v{__version__}", fg="magenta", bold=True),
        f"Workspace: {result.workspace}",
        f"Files: {', '.join(item.name for item in result.files) or '(none)'}",
        "",
        click.style(
            f"Overall score: {result.total_score}/100 ({grade_for(result.total_score)})",
            fg=_score_color(result.total_score),
            bold=True,
        ),
        "",
    ]

    for category_score in result.categories:
        lines.append(_render_category_line(category_score))
    lines.append("")

    ordered = sort_diagnostics(result.diagnostics)
    counts = _severity_counts(ordered)
    summary_parts = [
        click.style(f"{counts[severity]} {label}", fg=color)
        for severity, label, color in (
            ("error", "error(s)", "red"),
            ("warning", "warning(s)", "yellow"),
            ("info", "suggestion(s)", "blue"),
        )
        if counts[severity]
    ]
    if summary_parts:
        lines.append(", ".join(summary_parts))
        lines.append("")

    for diagnostic in ordered:
        label, color = _SEVERITY_STYLE[diagnostic.severity]
        location = (
            f"{diagnostic.file}:{diagnostic.line}" if diagnostic.line else diagnostic.file
        )
        lines.append(f"  {click.style(label, fg=color, bold=True)}  {location} [{diagnostic.rule}]")
        lines.append(f"      {diagnostic.message}")
        if diagnostic.fix:
            lines.append(click.style(f"      fix: {diagnostic.fix}", fg="cyan"))
    return "\n".join(lines).rstrip()


def render_audit_human(result: AuditResult) -> str:
    """Render one skill audit with a verdict banner and grouped findings."""
    lines: list[str] = [
        click.style("AgentLinter Skill Audit", fg="magenta", bold=True),
        f"File: {result.file}",
        "",
        click.style(
            f" VERDICT: {result.verdict} ",
            fg="white",
            bg=_VERDICT_COLORS[result.verdict],
            bold=True,
        ),
        f"Risk score: {result.risk_score}/100",
        "",
    ]
    if not result.findings:
        lines.append(click.style("No dangerous patterns detected.", fg="green"))
        return "\n".join(lines)

    counts = {severity: 0 for severity in _AUDIT_SEVERITY_COLORS}
    for finding in result.findings:
        counts[finding.severity] += 1
    lines.append(
        "Findings: "
        + ", ".join(
            click.style(f"{count} {severity}", fg=_AUDIT_SEVERITY_COLORS[severity])
            for severity, count in counts.items()
            if count
        )
    )
    lines.append("")

    for category, findings in group_findings(result.findings).items():
        lines.append(click.style(f"> {category}", bold=True))
        for finding in findings:
            severity = click.style(
                finding.severity, fg=_AUDIT_SEVERITY_COLORS[finding.severity], bold=True
            )
            lines.append(f"    {severity} (line {finding.line or '?'})")
            lines.append(f"      {finding.message}")
            lines.append(f'      match: "{finding.match}"')
            lines.append(click.style(f"      -> {finding.recommendation}", fg="cyan"))
        lines.append("")

    if result.verdict in {"DANGEROUS", "MALICIOUS"}:
        lines.append(
            click.style("DO NOT INSTALL this skill without a manual review.", fg="red", bold=True)
        )
    elif result.verdict == "SUSPICIOUS":
        lines.append(
            click.style("PROCEED WITH CAUTION: review the warnings above.", fg="yellow")
        )
    return "\n".join(lines).rstrip()


def render_skills_summary(
    folders: Sequence[tuple[str, Sequence[tuple[SkillSource, AuditResult]]]],
) -> str:
    """Render one status line per audited skill plus verdict totals."""
    lines: list[str] = [click.style("Skills security scan", bold=True), ""]
    totals = {"SAFE": 0, "SUSPICIOUS": 0, "DANGEROUS": 0, "MALICIOUS": 0}

    for folder, audited in folders:
        lines.append(f"Found {len(audited)} skill(s) in {folder}")
        for source, result in audited:
            totals[result.verdict] += 1
            status = click.style(result.verdict, fg=_VERDICT_COLORS[result.verdict], bold=True)
            detail = ""
            if result.verdict == "SUSPICIOUS":
                warnings = sum(1 for item in result.findings if item.severity == "WARNING")
                detail = f" ({warnings} warning{'s' if warnings != 1 else ''})"
            elif result.verdict == "DANGEROUS":
                criticals = result.critical_count
                detail = f" ({criticals} critical{'s' if criticals != 1 else ''})"
            lines.append(f"  - {source.name}: {status}{detail}")
        lines.append("")

    overall = " | ".join(
        click.style(f"{count} {verdict}", fg=_VERDICT_COLORS[verdict])
        for verdict, count in totals.items()
        if count
    )
    lines.append(f"Overall: {overall or 'no skills found'}")
    return "\n".join(lines)


def render_json(payload: dict[str, Any]) -> str:
    """Render stable JSON output for CI and automation."""
    return json.dumps(payload, sort_keys=True)


def grade_for(score: int) -> str:
    for threshold, grade in GRADE_TIERS:
        if score >= threshold:
            return grade
    return "F"


def make_bar(score: int, width: int = BAR_WIDTH) -> str:
    filled = min(width, max(0, int(score / 100 * width + 0.5)))
    return "#" * filled + "-" * (width - filled)


def sort_diagnostics(diagnostics: Sequence[Diagnostic]) -> list[Diagnostic]:
    """Order diagnostics by severity, then file, keeping rule order for ties."""
    return sorted(
        diagnostics,
        key=lambda item: (_SEVERITY_ORDER.get(item.severity, 1), item.file),
    )


def group_findings(findings: Sequence[AuditFinding]) -> dict[str, list[AuditFinding]]:
    grouped: dict[str, list[AuditFinding]] = {}
    for finding in findings:
        grouped.setdefault(finding.category, []).append(finding)
    return grouped


def lint_result_to_dict(result: LintResult) -> dict[str, Any]:
    """Serialize a lint result with the camelCase keys consumers expect."""
    return {
        "workspace": result.workspace,
        "files": [_serialize_file(item) for item in result.files],
        "categories": [_serialize_category(item) for item in result.categories],
        "totalScore": result.total_score,
        "diagnostics": [_serialize_diagnostic(item) for item in result.diagnostics],
        "timestamp": result.timestamp,
    }


def lint_result_from_dict(payload: dict[str, Any]) -> LintResult:
    return LintResult(
        workspace=payload["workspace"],
        files=[_deserialize_file(item) for item in payload["files"]],
        categories=[
            CategoryScore(
                category=item["category"],
                score=item["score"],
                weight=item["weight"],
                diagnostics=[_deserialize_diagnostic(entry) for entry in item["diagnostics"]],
            )
            for item in payload["categories"]
        ],
        total_score=payload["totalScore"],
        diagnostics=[_deserialize_diagnostic(item) for item in payload["diagnostics"]],
        timestamp=payload["timestamp"],
    )


def audit_result_to_dict(result: AuditResult) -> dict[str, Any]:
    return {
        "file": result.file,
        "findings": [
            {
                "severity": finding.severity,
                "category": finding.category,
                "line": finding.line,
                "match": finding.match,
                "message": finding.message,
                "recommendation": finding.recommendation,
            }
            for finding in result.findings
        ],
        "riskScore": result.risk_score,
        "verdict": result.verdict,
    }


def audit_result_from_dict(payload: dict[str, Any]) -> AuditResult:
    return AuditResult(
        file=payload["file"],
        findings=[
            AuditFinding(
                severity=item["severity"],
                category=item["category"],
                line=item.get("line"),
                match=item["match"],
                message=item["message"],
                recommendation=item["recommendation"],
            )
            for item in payload["findings"]
        ],
        risk_score=payload["riskScore"],
        verdict=payload["verdict"],
    )


def _serialize_file(record: FileRecord) -> dict[str, Any]:
    return {
        "name": record.name,
        "path": record.path,
        "content": record.content,
        "lines": list(record.lines),
        "sections": [
            {
                "heading": section.heading,
                "level": section.level,
                "startLine": section.start_line,
                "endLine": section.end_line,
                "content": section.content,
            }
            for section in record.sections
        ],
    }


def _deserialize_file(payload: dict[str, Any]) -> FileRecord:
    return FileRecord(
        name=payload["name"],
        path=payload["path"],
        content=payload["content"],
        lines=tuple(payload["lines"]),
        sections=tuple(
            Section(
                heading=item["heading"],
                level=item["level"],
                start_line=item["startLine"],
                end_line=item["endLine"],
                content=item["content"],
            )
            for item in payload["sections"]
        ),
    )


def _serialize_category(category_score: CategoryScore) -> dict[str, Any]:
    return {
        "category": category_score.category,
        "score": category_score.score,
        "weight": category_score.weight,
        "diagnostics": [_serialize_diagnostic(item) for item in category_score.diagnostics],
    }


def _serialize_diagnostic(diagnostic: Diagnostic) -> dict[str, Any]:
    return {
        "severity": diagnostic.severity,
        "category": diagnostic.category,
        "rule": diagnostic.rule,
        "file": diagnostic.file,
        "line": diagnostic.line,
        "message": diagnostic.message,
        "fix": diagnostic.fix,
    }


def _deserialize_diagnostic(payload: dict[str, Any]) -> Diagnostic:
    return Diagnostic(
        severity=payload["severity"],
        category=payload["category"],
        rule=payload["rule"],
        file=payload["file"],
        line=payload.get("line"),
        message=payload["message"],
        fix=payload.get("fix"),
    )


def _render_category_line(category_score: CategoryScore) -> str:
    label = CATEGORY_LABELS.get(category_score.category, category_score.category).ljust(15)
    bar = click.style(make_bar(category_score.score), fg=_bar_color(category_score.score))
    return f"  {label} {bar} {category_score.score:>3} {grade_for(category_score.score)}"


def _severity_counts(diagnostics: Sequence[Diagnostic]) -> dict[str, int]:
    counts = {severity: 0 for severity in _SEVERITY_ORDER}
    for diagnostic in diagnostics:
        counts[diagnostic.severity] = counts.get(diagnostic.severity, 0) + 1
    return counts


def _bar_color(score: int) -> str:
    if score >= 95:
        return "magenta"
    if score >= 85:
        return "green"
    if score >= 68:
        return "yellow"
    return "red"


def _score_color(score: int) -> str:
    if score >= 96:
        return "magenta"
    if score >= 80:
        return "green"
    if score >= 60:
        return "yellow"
    return "red"
