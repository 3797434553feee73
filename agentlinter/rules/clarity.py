"""Instruction clarity rules."""

from __future__ import annotations

import re
from collections.abc import Sequence

from agentlinter.files import FileRecord
from agentlinter.rules.base import Diagnostic, DiagnosticReporter, markdown_files

VAGUE_PATTERNS = [
    (re.compile(r"\bif (?:necessary|needed|appropriate)\b", re.IGNORECASE), "if necessary"),
    (re.compile(r"\bas (?:needed|appropriate)\b", re.IGNORECASE), "as needed"),
    (re.compile(r"\bwhen (?:possible|appropriate)\b", re.IGNORECASE), "when possible"),
    (re.compile(r"\btry to\b", re.IGNORECASE), "try to"),
    (re.compile(r"\betc\.?(?:\s|$)", re.IGNORECASE), "etc."),
    (re.compile(r"\b(?:properly|appropriately)\b", re.IGNORECASE), "properly"),
]

NEGATION_RE = re.compile(r"\b(?:don'?t|never|avoid|do not|must not)\b", re.IGNORECASE)
DIRECTIVE_PREFIXES = ("- ", "* ", "+ ")
MAX_LINE_LENGTH = 300
MIN_DIRECTIVES_FOR_RATIO = 10
NEGATION_RATIO = 0.5
MAX_VAGUE_PER_FILE = 5


class VagueLanguageRule:
    """Flags hedged phrases that leave the agent guessing."""

    rule_id = "clarity/vague-language"
    severity = "warning"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        for record in markdown_files(files):
            hits = 0
            for line_number, line in enumerate(record.lines, start=1):
                for pattern, phrase in VAGUE_PATTERNS:
                    if pattern.search(line) is None:
                        continue
                    hits += 1
                    if hits <= MAX_VAGUE_PER_FILE:
                        diagnostics.append(
                            report(
                                record.name,
                                f'Vague phrase "{phrase}" leaves the decision to the agent.',
                                line=line_number,
                                fix="State the concrete condition or action instead.",
                            )
                        )
                    break
        return diagnostics


class NegationHeavyRule:
    """Most directives phrased as prohibitions."""

    rule_id = "clarity/negation-heavy"
    severity = "info"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        for record in markdown_files(files):
            directives = [
                line for line in record.lines if line.strip().startswith(DIRECTIVE_PREFIXES)
            ]
            if len(directives) < MIN_DIRECTIVES_FOR_RATIO:
                continue
            negations = sum(1 for line in directives if NEGATION_RE.search(line))
            if negations / len(directives) <= NEGATION_RATIO:
                continue
            diagnostics.append(
                report(
                    record.name,
                    f"{negations} of {len(directives)} directives are prohibitions.",
                    fix="Rephrase rules as what to do, not only what to avoid.",
                )
            )
        return diagnostics


class LongLinesRule:
    """Very long lines usually pack several instructions together."""

    rule_id = "clarity/long-lines"
    severity = "info"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        for record in markdown_files(files):
            in_fence = False
            for line_number, line in enumerate(record.lines, start=1):
                if line.strip().startswith("```"):
                    in_fence = not in_fence
                    continue
                if in_fence or len(line) <= MAX_LINE_LENGTH:
                    continue
                diagnostics.append(
                    report(
                        record.name,
                        f"Line is {len(line)} characters long.",
                        line=line_number,
                        fix="Break long instructions into separate bullet points.",
                    )
                )
        return diagnostics
