"""Parsed text artifact primitives."""

from __future__ import annotations

from dataclasses import dataclass
from re import Match, compile

HEADING_RE = compile(r"^(?P<marks>#{1,6})\s+(?P<text>.*)$")


@dataclass(frozen=True, slots=True)
class Section:
    """A markdown section spanning its heading line through ``end_line``."""

    heading: str
    level: int
    start_line: int
    end_line: int
    content: str


@dataclass(frozen=True, slots=True)
class FileRecord:
    """A single workspace artifact with line and section structure."""

    name: str
    path: str
    content: str
    lines: tuple[str, ...]
    sections: tuple[Section, ...]

    @property
    def is_markdown(self) -> bool:
        return self.name.lower().endswith(".md")

    @property
    def is_json(self) -> bool:
        return self.name.lower().endswith(".json")


def build_file_record(name: str, path: str, content: str) -> FileRecord:
    """Split content into lines and sections."""
    lines = split_lines(content)
    return FileRecord(
        name=name,
        path=path,
        content=content,
        lines=lines,
        sections=parse_sections(lines),
    )


def split_lines(content: str) -> tuple[str, ...]:
    if not content:
        return ()
    return tuple(line.removesuffix("\r") for line in content.split("\n"))


def parse_sections(lines: tuple[str, ...] | list[str]) -> tuple[Section, ...]:
    """Parse headings into an ordered, flat section sequence.

    A section starts at its heading and runs until the line before the next
    heading of the same or a shallower level, or the end of the file. Deeper
    headings stay inside the enclosing section's span.
    """
    headings: list[tuple[int, int, str]] = []
    for index, line in enumerate(lines, start=1):
        parsed = _parse_heading(line)
        if parsed is not None:
            headings.append((index, parsed[0], parsed[1]))

    total = len(lines)
    sections: list[Section] = []
    for position, (start, level, text) in enumerate(headings):
        end = total
        for next_start, next_level, _ in headings[position + 1 :]:
            if next_level <= level:
                end = next_start - 1
                break
        body = "\n".join(lines[start:end])
        sections.append(
            Section(heading=text, level=level, start_line=start, end_line=end, content=body)
        )
    return tuple(sections)


def _parse_heading(line: str) -> tuple[int, str] | None:
    match: Match[str] | None = HEADING_RE.match(line.strip())
    if match is None:
        return None
    return (len(match.group("marks")), match.group("text").strip())
