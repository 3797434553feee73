"""Cross-file consistency rules."""

from __future__ import annotations

import re
from collections.abc import Sequence

from agentlinter.files import FileRecord
from agentlinter.rules.base import Diagnostic, DiagnosticReporter, markdown_files

LANGUAGE_RE = re.compile(
    r"\b(?:respond|reply|answer|write|communicate)\s+(?:only\s+)?in\s+"
    r"(english|korean|japanese|chinese|spanish|french|german|portuguese)\b",
    re.IGNORECASE,
)


class ConflictingLanguageRule:
    """Files disagree on the agent's response language."""

    rule_id = "consistency/conflicting-language"
    severity = "warning"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        locations: list[tuple[str, str, int]] = []
        for record in markdown_files(files):
            for line_number, line in enumerate(record.lines, start=1):
                match = LANGUAGE_RE.search(line)
                if match:
                    locations.append((match.group(1).capitalize(), record.name, line_number))

        languages = sorted({language for language, _, _ in locations})
        if len(languages) < 2:
            return []
        where = "; ".join(f"{name}:{line} ({language})" for language, name, line in locations)
        _, first_file, first_line = locations[0]
        return [
            report(
                first_file,
                f"Conflicting response languages: {', '.join(languages)}.",
                line=first_line,
                fix=f"Pick one language. Locations: {where}",
            )
        ]


class DuplicateHeadingsRule:
    """Repeated headings at the same level within one file."""

    rule_id = "consistency/duplicate-headings"
    severity = "info"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        for record in markdown_files(files):
            seen: set[tuple[int, str]] = set()
            for section in record.sections:
                key = (section.level, section.heading.lower())
                if key in seen:
                    diagnostics.append(
                        report(
                            record.name,
                            f'Heading "{section.heading}" appears more than once.',
                            line=section.start_line,
                            fix="Merge the duplicated sections.",
                        )
                    )
                seen.add(key)
        return diagnostics
