"""Parsing of `git status --porcelain` output."""

from dataclasses import dataclass, field
from typing import List

CONFLICT_CODES = {"DD", "AU", "UD", "UA", "DU", "AA", "UU"}


@dataclass
class StatusSummary:
    """Files of a working tree grouped by their status."""

    staged: List[str] = field(default_factory=list)
    modified: List[str] = field(default_factory=list)
    not_added: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    conflicted: List[str] = field(default_factory=list)


def parse_porcelain_status(output: str) -> StatusSummary:
    """
    Group porcelain v1 status lines by state.

    Each line is "XY <path>" where X is the index status and Y the work tree
    status. Renames ("R  old -> new") are reported under their new path.

    Args:
        output: stdout of `git status --porcelain`

    Returns:
        StatusSummary with one list per state (a file may appear in several)
    """
    summary = StatusSummary()

    for line in output.splitlines():
        if len(line) < 4:
            continue

        status_code = line[:2]
        file_path = line[3:]
        if " -> " in file_path:
            file_path = file_path.split(" -> ", 1)[1]

        if status_code == "??":
            summary.not_added.append(file_path)
            continue

        if status_code in CONFLICT_CODES:
            summary.conflicted.append(file_path)
            continue

        if status_code[0] not in (" ", "?", "!"):
            summary.staged.append(file_path)
        if "M" in status_code:
            summary.modified.append(file_path)
        if "D" in status_code:
            summary.deleted.append(file_path)

    return summary
