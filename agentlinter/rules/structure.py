"""Document structure rules."""

from __future__ import annotations

from collections.abc import Sequence

from agentlinter.files import FileRecord
from agentlinter.rules.base import Diagnostic, DiagnosticReporter, markdown_files

MAX_FILE_LINES = 500
MIN_HEADINGLESS_LINES = 20


class HasHeadingsRule:
    """Longer instruction files should be organized under markdown headings."""

    rule_id = "structure/has-headings"
    severity = "warning"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        for record in markdown_files(files):
            if record.sections or len(record.lines) < MIN_HEADINGLESS_LINES:
                continue
            diagnostics.append(
                report(
                    record.name,
                    f"{len(record.lines)} lines with no headings.",
                    fix="Split instructions into sections with '## ' headings.",
                )
            )
        return diagnostics


class HeadingHierarchyRule:
    """Heading levels should not skip (e.g. # followed by ###)."""

    rule_id = "structure/heading-hierarchy"
    severity = "info"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        for record in markdown_files(files):
            previous_level = 0
            for section in record.sections:
                if previous_level and section.level > previous_level + 1:
                    diagnostics.append(
                        report(
                            record.name,
                            f'Heading "{section.heading}" jumps from level '
                            f"{previous_level} to {section.level}.",
                            line=section.start_line,
                            fix=f"Use a level {previous_level + 1} heading here.",
                        )
                    )
                previous_level = section.level
        return diagnostics


class EmptySectionRule:
    """Sections should contain content."""

    rule_id = "structure/empty-section"
    severity = "info"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        for record in markdown_files(files):
            for section in record.sections:
                if section.content.strip():
                    continue
                diagnostics.append(
                    report(
                        record.name,
                        f'Section "{section.heading}" is empty.',
                        line=section.start_line,
                        fix="Add content or remove the heading.",
                    )
                )
        return diagnostics


class FileLengthRule:
    """Instruction files should stay short enough to fit the context budget."""

    rule_id = "structure/file-length"
    severity = "warning"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        return [
            report(
                record.name,
                f"File has {len(record.lines)} lines (over {MAX_FILE_LINES}).",
                fix="Move reference material into separate files loaded on demand.",
            )
            for record in markdown_files(files)
            if len(record.lines) > MAX_FILE_LINES
        ]
