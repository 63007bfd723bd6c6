"""Structuring of line-oriented code search output.

`git grep -n -C<k>` prints one line per hit or context line:

    src/a.js-9-// setup
    src/a.js:10:const x = 1;
    src/a.js-11-const y = 2;
    --
    src/b.js:3:let x;

Match lines use ':' around the line number, context lines use '-'. File
names that themselves contain '-<n>-' or ':<n>:' make this flat shape
ambiguous, so the search tool asks git for the heading layout instead
(`--heading --break`), where each file name is printed once on its own line
and sections are separated by an empty line:

    src/a.js
    9-// setup
    10:const x = 1;

    src/b.js
    3:let x;

This module turns either layout into per-file match groups with their
surrounding context. Lines that fit neither shape (hunk separators,
binary-file notices) are dropped rather than treated as errors.
"""

import re
from typing import Iterable, List, NamedTuple, Optional, Set

from pydantic import BaseModel, Field

_MATCH_PATTERN = re.compile(r"^(?P<file>[^:]+):(?P<line>\d+):(?P<content>.*)$")
_CONTEXT_PATTERN = re.compile(r"^(?P<file>.+?)-(?P<line>\d+)-(?P<content>.*)$")
_RELATIVE_PATTERN = re.compile(r"^(?P<line>\d+)(?P<sep>[:-])(?P<content>.*)$")

MATCH_SEPARATOR = ":"
CONTEXT_SEPARATOR = "-"


class ContextLine(BaseModel):
    """A non-matching line printed around a match."""

    line_number: int
    content: str


class SearchMatch(BaseModel):
    """A matched line together with its surrounding context."""

    file: str
    line_number: int
    content: str
    context_before: List[ContextLine] = Field(default_factory=list)
    context_after: List[ContextLine] = Field(default_factory=list)


class SearchFileResult(BaseModel):
    """All matches found in one file."""

    file: str
    matches: List[SearchMatch]


class SearchReport(BaseModel):
    """Top-level result of a code search."""

    pattern: str
    case_sensitive: bool
    context_lines: int
    file_patterns: List[str]
    results: List[SearchFileResult]
    total_matches: int
    total_files: int


class ParsedLine(NamedTuple):
    """One classified line of search output."""

    file: str
    is_match: bool
    line_number: int
    content: str


def parse_relative_line(line: str, file: str) -> Optional[ParsedLine]:
    """Classify a `<n>:<content>` or `<n>-<content>` line belonging to file."""
    relative = _RELATIVE_PATTERN.match(line)
    if not relative:
        return None
    return ParsedLine(
        file=file,
        is_match=relative.group("sep") == MATCH_SEPARATOR,
        line_number=int(relative.group("line")),
        content=relative.group("content"),
    )


def _parse_as_file(line: str, file: str) -> Optional[ParsedLine]:
    if not line.startswith(file) or len(line) <= len(file):
        return None
    sep = line[len(file)]
    if sep not in (MATCH_SEPARATOR, CONTEXT_SEPARATOR):
        return None
    parsed = parse_relative_line(line[len(file) + 1:], file)
    if parsed is None or parsed.is_match != (sep == MATCH_SEPARATOR):
        return None
    return parsed


def parse_search_line(
    line: str,
    current_file: Optional[str] = None,
    known_files: Iterable[str] = (),
) -> Optional[ParsedLine]:
    """
    Classify a single line of flat search output.

    The file of the section being built is tried first, then any file
    already known from match lines (longest first), so file names containing
    '-<n>-' are not split in the wrong place. Otherwise a line is read as a
    match (file name up to the first ':') before it is read as context.

    Args:
        line: Raw output line without its trailing newline
        current_file: File of the section being built, if any
        known_files: File names seen on match lines of the same output

    Returns:
        ParsedLine, or None when the line is neither a match nor a context line
    """
    candidates = [current_file] if current_file else []
    candidates += sorted((f for f in known_files if f != current_file), key=len, reverse=True)
    for file in candidates:
        parsed = _parse_as_file(line, file)
        if parsed is not None:
            return parsed

    for pattern, is_match in ((_MATCH_PATTERN, True), (_CONTEXT_PATTERN, False)):
        found = pattern.match(line)
        if found:
            return ParsedLine(
                file=found.group("file"),
                is_match=is_match,
                line_number=int(found.group("line")),
                content=found.group("content"),
            )
    return None


class _FileSection:
    """Accumulates the matches of one file section."""

    def __init__(self, file: str):
        self.file = file
        self.matches: List[SearchMatch] = []
        self._current: Optional[SearchMatch] = None
        self._buffer: List[ContextLine] = []

    def add(self, parsed: ParsedLine) -> None:
        if not parsed.is_match:
            self._buffer.append(ContextLine(line_number=parsed.line_number, content=parsed.content))
            return

        if self._current is not None:
            self._current.context_after = self._buffer
            self.matches.append(self._current)
            self._buffer = []

        self._current = SearchMatch(
            file=self.file,
            line_number=parsed.line_number,
            content=parsed.content,
            context_before=self._buffer,
        )
        self._buffer = []

    def finish(self) -> Optional[SearchFileResult]:
        if self._current is not None:
            self._current.context_after = self._buffer
            self.matches.append(self._current)
            self._current = None
            self._buffer = []

        if not self.matches:
            return None
        return SearchFileResult(file=self.file, matches=self.matches)


def _output_lines(raw_output: str) -> List[str]:
    return [line.rstrip("\r") for line in raw_output.split("\n")]


def _match_files(lines: List[str]) -> Set[str]:
    files = set()
    for line in lines:
        found = _MATCH_PATTERN.match(line)
        if found:
            files.add(found.group("file"))
    return files


def _structure_flat(lines: List[str]) -> List[SearchFileResult]:
    results: List[SearchFileResult] = []
    section: Optional[_FileSection] = None
    known_files = _match_files(lines)

    for line in lines:
        if not line.strip():
            continue

        parsed = parse_search_line(line, section.file if section else None, known_files)
        if parsed is None:
            continue

        if section is None or parsed.file != section.file:
            if section is not None:
                finished = section.finish()
                if finished is not None:
                    results.append(finished)
            section = _FileSection(parsed.file)

        section.add(parsed)

    if section is not None:
        finished = section.finish()
        if finished is not None:
            results.append(finished)

    return results


def _structure_headings(lines: List[str]) -> List[SearchFileResult]:
    results: List[SearchFileResult] = []
    section: Optional[_FileSection] = None
    expect_heading = True

    for line in lines:
        if not line:
            expect_heading = True
            continue

        if expect_heading:
            if section is not None:
                finished = section.finish()
                if finished is not None:
                    results.append(finished)
            section = _FileSection(line)
            expect_heading = False
            continue

        parsed = parse_relative_line(line, section.file)
        if parsed is not None:
            section.add(parsed)

    if section is not None:
        finished = section.finish()
        if finished is not None:
            results.append(finished)

    return results


def structure_search_results(raw_output: str, headings: bool = False) -> List[SearchFileResult]:
    """
    Group raw search output into per-file match records.

    Args:
        raw_output: Text printed by `git grep -n -C<k>` (or compatible tools)
        headings: Whether the output uses `--heading --break` layout

    Returns:
        One SearchFileResult per file section that contains at least one match,
        in output order
    """
    lines = _output_lines(raw_output)
    if headings:
        return _structure_headings(lines)
    return _structure_flat(lines)


def structure_search_output(
    raw_output: str,
    pattern: str,
    case_sensitive: bool = False,
    context_lines: int = 2,
    file_patterns: Optional[List[str]] = None,
    headings: bool = False,
) -> SearchReport:
    """
    Build the full search report, echoing the query parameters.

    Args:
        raw_output: Raw search tool output
        pattern: Pattern that was searched for
        case_sensitive: Whether the search was case sensitive
        context_lines: Number of context lines requested
        file_patterns: File globs the search was restricted to
        headings: Whether the output uses `--heading --break` layout

    Returns:
        SearchReport whose totals are derived from its results
    """
    results = structure_search_results(raw_output, headings=headings)
    return SearchReport(
        pattern=pattern,
        case_sensitive=case_sensitive,
        context_lines=context_lines,
        file_patterns=list(file_patterns or []),
        results=results,
        total_matches=sum(len(result.matches) for result in results),
        total_files=len(results),
    )
