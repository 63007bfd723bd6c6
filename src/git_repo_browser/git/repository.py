"""Repository browsing tools: tree, file contents, code search, local changes."""

import logging
from pathlib import Path
from typing import Dict

from git_repo_browser.git.base import GitToolsBase, SecurityError, tool_errors
from git_repo_browser.git.params import (
    ReadFilesParams,
    RepoPathParams,
    RepoUrlParams,
    SearchCodeParams,
)
from git_repo_browser.git.search import structure_search_output
from git_repo_browser.git.status import parse_porcelain_status
from git_repo_browser.results import ToolResponse

logger = logging.getLogger(__name__)

METADATA_PREFIX = ".git"


def build_directory_tree(directory: Path, prefix: str = "") -> str:
    """
    Render a directory as an ASCII tree.

    Entries are sorted by name; anything starting with ".git" is left out.
    Symlinked directories are listed but not descended into.

    Args:
        directory: Directory to render
        prefix: Indentation carried down from parent levels

    Returns:
        One line per entry, newline terminated
    """
    entries = sorted(
        entry for entry in (child.name for child in directory.iterdir())
        if not entry.startswith(METADATA_PREFIX)
    )

    output = []
    for index, name in enumerate(entries):
        is_last = index == len(entries) - 1
        output.append(f"{prefix}{'└── ' if is_last else '├── '}{name}\n")

        entry_path = directory / name
        if entry_path.is_dir() and not entry_path.is_symlink():
            output.append(build_directory_tree(entry_path, prefix + ("    " if is_last else "│   ")))

    return "".join(output)


class RepositoryTools(GitToolsBase):
    """Read-only views of cached remote repositories and local working copies."""

    def directory_structure(self, params: RepoUrlParams) -> ToolResponse:
        """Clone (or refresh) a repository and return its directory tree."""
        acquisition = self.cache.acquire(params.repo_url)
        if not acquisition.ok:
            return ToolResponse.failure(acquisition.error)

        try:
            return ToolResponse.success(build_directory_tree(acquisition.path))
        except OSError as e:
            logger.error(f"Error walking {acquisition.path}: {e}", exc_info=True)
            return ToolResponse.failure(f"Failed to read directory structure: {e}")

    def read_files(self, params: ReadFilesParams) -> ToolResponse:
        """
        Read several files from a repository.

        Unreadable or missing files are reported inline; only a failure to
        obtain the repository fails the whole call.
        """
        acquisition = self.cache.acquire(params.repo_url)
        if not acquisition.ok:
            return ToolResponse.failure(f"Failed to process repository: {acquisition.error}")

        results: Dict[str, str] = {}
        for file_path in params.file_paths:
            try:
                full_path = self._resolve_inside(acquisition.path, file_path)
            except SecurityError as e:
                results[file_path] = f"Error: {e}"
                continue

            if not full_path.is_file():
                results[file_path] = "Error: File not found"
                continue

            try:
                results[file_path] = full_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                results[file_path] = f"Error reading file: {e}"

        return ToolResponse.success(results)

    @tool_errors("search repository")
    def search_code(self, params: SearchCodeParams) -> ToolResponse:
        """Search repository contents with `git grep` and structure the hits."""
        acquisition = self.cache.acquire(params.repo_url)
        if not acquisition.ok:
            return ToolResponse.failure(f"Failed to search repository: {acquisition.error}")

        args = [
            "-c", "core.quotepath=off",
            "grep", "--no-color", "-n", "--heading", "--break", f"-C{params.context_lines}",
        ]
        if not params.case_sensitive:
            args.append("-i")
        args.extend(["-e", params.pattern])
        if params.file_patterns:
            args.extend(["--", *params.file_patterns])

        result = self.runner.run(args, cwd=acquisition.path)

        # git grep exits with 1 when nothing matched
        if result.returncode > 1 or (result.returncode == 1 and result.stderr.strip()):
            detail = result.stderr.strip() or f"exit code {result.returncode}"
            return ToolResponse.failure(f"Failed to search repository: {detail}")

        if result.stderr.strip():
            logger.warning(f"Search error: {result.stderr.strip()}")

        report = structure_search_output(
            result.stdout,
            pattern=params.pattern,
            case_sensitive=params.case_sensitive,
            context_lines=params.context_lines,
            file_patterns=params.file_patterns,
            headings=True,
        )
        return ToolResponse.success(report)

    @tool_errors("get local changes")
    def local_changes(self, params: RepoPathParams) -> ToolResponse:
        """Summarize uncommitted changes of a local working copy."""
        repo_path = self._open_local(params.repo_path)

        status = parse_porcelain_status(
            self._git(repo_path, "-c", "core.quotepath=off", "status", "--porcelain")
        )

        diffs = {
            file_path: self._git(repo_path, "diff", "--", file_path)
            for file_path in status.modified
        }

        return ToolResponse.success({
            "branch": self._current_branch(repo_path),
            "staged_files": status.staged,
            "modified_files": status.modified,
            "new_files": status.not_added,
            "deleted_files": status.deleted,
            "conflicted_files": status.conflicted,
            "diffs": diffs,
        })
