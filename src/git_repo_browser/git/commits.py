"""Commit history, commit creation and line-level history tools."""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from git_repo_browser.git.base import GitToolsBase, reject_option, tool_errors
from git_repo_browser.git.params import (
    BlameParams,
    CommitHistoryParams,
    CommitParams,
    CommitsDetailsParams,
    RevertParams,
    TrackParams,
)
from git_repo_browser.git.runner import GitCommandError
from git_repo_browser.git.status import parse_porcelain_status
from git_repo_browser.results import ToolResponse

logger = logging.getLogger(__name__)

# Hash of the empty tree, used to diff root commits
EMPTY_TREE = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"

FIELD_SEP = "\x1f"
RECORD_SEP = "\x1e"

HISTORY_FIELDS = ("hash", "author", "email", "date", "message", "body")
HISTORY_FORMAT = "%H%x1f%an%x1f%ae%x1f%aI%x1f%s%x1f%b%x1e"

DETAIL_FIELDS = (
    "hash",
    "parents",
    "author",
    "author_email",
    "committer",
    "committer_email",
    "date",
    "message",
    "body",
    "refs",
)
DETAIL_FORMAT = "%H%x1f%P%x1f%an%x1f%ae%x1f%cn%x1f%ce%x1f%aI%x1f%s%x1f%b%x1f%D%x1e"

SUMMARY_PATTERN = re.compile(
    r"(?P<changes>\d+) files? changed"
    r"(?:, (?P<insertions>\d+) insertions?\(\+\))?"
    r"(?:, (?P<deletions>\d+) deletions?\(-\))?"
)
BLAME_HEADER = re.compile(r"^(?P<hash>[0-9a-f]{40,64}) (?P<original>\d+) (?P<final>\d+)(?: (?P<count>\d+))?$")


def parse_log_records(output: str, fields) -> List[Dict[str, str]]:
    """Split `git log` output produced with record/field separators into dicts."""
    records = []
    for raw_record in output.split(RECORD_SEP):
        raw_record = raw_record.lstrip("\n")
        if not raw_record:
            continue
        values = raw_record.split(FIELD_SEP)
        values += [""] * (len(fields) - len(values))
        record = dict(zip(fields, values))
        record["body"] = record["body"].strip()
        records.append(record)
    return records


def parse_commit_summary(output: str) -> Dict[str, int]:
    """Extract change counts from the stat line `git commit` prints."""
    match = SUMMARY_PATTERN.search(output)
    if not match:
        return {"changes": 0, "insertions": 0, "deletions": 0}
    return {key: int(value or 0) for key, value in match.groupdict().items()}


def parse_line_porcelain(output: str) -> List[Dict[str, Any]]:
    """Parse `git blame --line-porcelain` output into one entry per line."""
    entries: List[Dict[str, Any]] = []
    current: Optional[Dict[str, Any]] = None

    for line in output.split("\n"):
        header = BLAME_HEADER.match(line)
        if header:
            if current:
                entries.append(current)
            current = {
                "hash": header.group("hash"),
                "original_line": int(header.group("original")),
                "final_line": int(header.group("final")),
                "line_count": int(header.group("count") or 1),
                "author": "",
                "author_mail": "",
                "author_time": 0,
                "subject": "",
                "content": "",
            }
        elif current is None:
            continue
        elif line.startswith("\t"):
            current["content"] = line[1:]
            entries.append(current)
            current = None
        elif line.startswith("author "):
            current["author"] = line[len("author "):]
        elif line.startswith("author-mail "):
            current["author_mail"] = line[len("author-mail "):].strip("<>")
        elif line.startswith("author-time "):
            current["author_time"] = int(line[len("author-time "):])
        elif line.startswith("summary "):
            current["subject"] = line[len("summary "):]

    if current:
        entries.append(current)
    return entries


class CommitTools(GitToolsBase):
    """Tools reading commit history and creating commits."""

    def _log_args(self, params: CommitHistoryParams, log_format: str) -> List[str]:
        args = ["log", f"--max-count={params.max_count}", f"--format={log_format}"]
        if params.author:
            args.append(f"--author={params.author}")
        if params.since:
            args.append(f"--since={params.since}")
        if params.until:
            args.append(f"--until={params.until}")
        if params.grep:
            args.append(f"--grep={params.grep}")
        return args

    def _changed_files(self, repo_path: Path, commit_hash: str) -> List[Dict[str, str]]:
        output = self._git(repo_path, "show", "--name-status", "--format=", commit_hash)
        changed = []
        for line in output.splitlines():
            parts = line.split("\t")
            if len(parts) < 2 or not parts[0]:
                continue
            # Renames and copies list the old and new path; report the new one
            changed.append({"status": parts[0][0], "file": parts[-1]})
        return changed

    @tool_errors("get commit history")
    def commit_history(self, params: CommitHistoryParams) -> ToolResponse:
        """List commits of a branch in a cached clone, newest first."""
        acquisition = self.cache.acquire(params.repo_url)
        if not acquisition.ok:
            return ToolResponse.failure(f"Failed to get commit history: {acquisition.error}")

        revision = self._resolve_branch(acquisition.path, params.branch)
        output = self._git(acquisition.path, *self._log_args(params, HISTORY_FORMAT), revision, "--")

        return ToolResponse.success({"commits": parse_log_records(output, HISTORY_FIELDS)})

    @tool_errors("get commit details")
    def commits_details(self, params: CommitsDetailsParams) -> ToolResponse:
        """List commits with committer data, refs and optionally diffs."""
        acquisition = self.cache.acquire(params.repo_url)
        if not acquisition.ok:
            return ToolResponse.failure(f"Failed to get commit details: {acquisition.error}")

        repo_path = acquisition.path
        revision = self._resolve_branch(repo_path, params.branch)
        output = self._git(repo_path, *self._log_args(params, DETAIL_FORMAT), revision, "--")

        commits = []
        for record in parse_log_records(output, DETAIL_FIELDS):
            parents = record.pop("parents").split()
            if params.include_diff:
                base = f"{record['hash']}^" if parents else EMPTY_TREE
                record["diff"] = self._git(repo_path, "diff", base, record["hash"])
                record["changed_files"] = self._changed_files(repo_path, record["hash"])
            commits.append(record)

        return ToolResponse.success({"commits": commits})

    @tool_errors("create commit")
    def commit(self, params: CommitParams) -> ToolResponse:
        """Commit what is currently staged."""
        repo_path = self._open_local(params.repo_path)

        output = self._git(repo_path, "commit", "-m", params.message)
        commit_hash = self._git(repo_path, "rev-parse", "HEAD").strip()
        logger.info(f"Created commit {commit_hash} in {repo_path}")

        return ToolResponse.success({
            "success": True,
            "commit_hash": commit_hash,
            "commit_message": params.message,
            "summary": parse_commit_summary(output),
        })

    @tool_errors("track files")
    def track(self, params: TrackParams) -> ToolResponse:
        """Stage files and report the resulting status."""
        repo_path = self._open_local(params.repo_path)

        self._git(repo_path, "add", "--", *params.files)
        status = parse_porcelain_status(
            self._git(repo_path, "-c", "core.quotepath=off", "status", "--porcelain")
        )

        if params.files == ["."]:
            message = "Tracked all files"
        else:
            message = f"Tracked {len(params.files)} files"

        return ToolResponse.success({
            "success": True,
            "message": message,
            "staged": status.staged,
            "not_staged": status.not_added,
            "modified": status.modified,
        })

    @tool_errors("revert commit")
    def revert(self, params: RevertParams) -> ToolResponse:
        """Revert a commit, reporting conflicted files when it does not apply cleanly."""
        repo_path = self._open_local(params.repo_path)
        reject_option(params.commit, "commit reference")

        args = ["revert", "--no-edit"]
        if params.no_commit:
            args.append("--no-commit")
        args.append(params.commit)

        try:
            output = self._git(repo_path, *args)
        except GitCommandError as e:
            return ToolResponse.failure(
                f"Failed to revert commit: {e}",
                conflicts=self._conflicted_files(repo_path),
            )

        return ToolResponse.success({
            "success": True,
            "message": f"Reverted commit {params.commit}",
            "commit": params.commit,
            "result": output,
        })

    @tool_errors("get blame information")
    def blame(self, params: BlameParams) -> ToolResponse:
        """Show who last changed each line of a file."""
        repo_path = self._open_local(params.repo_path)
        self._resolve_inside(repo_path, params.file_path)
        reject_option(params.rev, "revision")

        output = self._git(repo_path, "blame", "--line-porcelain", params.rev, "--", params.file_path)

        return ToolResponse.success({
            "success": True,
            "file": params.file_path,
            "blame": parse_line_porcelain(output),
        })
