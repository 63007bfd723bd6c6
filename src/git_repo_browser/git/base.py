"""Shared plumbing for git tool classes."""

import functools
import logging
import re
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from git_repo_browser.config import BrowserConfig
from git_repo_browser.git.cache import RepositoryCache
from git_repo_browser.git.runner import GitCommandError, GitRunner
from git_repo_browser.results import ToolResponse

logger = logging.getLogger(__name__)


class SecurityError(Exception):
    """Raised when a security violation is detected (e.g., path traversal attempt)."""

    pass


def tool_errors(operation: str) -> Callable:
    """
    Convert exceptions raised by a tool method into failure responses.

    Expected errors (bad arguments, sandbox violations, failing git commands)
    become "Failed to <operation>: <cause>". Anything else is logged with its
    traceback first.

    Args:
        operation: Verb phrase describing the tool (e.g., "create commit")
    """

    def decorator(func: Callable[..., ToolResponse]) -> Callable[..., ToolResponse]:
        @functools.wraps(func)
        def wrapper(self, params) -> ToolResponse:
            try:
                return func(self, params)
            except (ValueError, SecurityError, GitCommandError) as e:
                return ToolResponse.failure(f"Failed to {operation}: {e}")
            except Exception as e:
                logger.error(f"Error trying to {operation}: {e}", exc_info=True)
                return ToolResponse.failure(f"Failed to {operation}: {e}")

        return wrapper

    return decorator


def reject_option(value: str, kind: str) -> str:
    """Refuse values git would parse as command line options."""
    if value.startswith("-"):
        raise ValueError(f"Invalid {kind} '{value}'")
    return value


class GitToolsBase:
    """
    Base class for git tool groups.

    Holds the git runner and the clone cache shared by all tool groups and
    provides validation helpers for local repositories.
    """

    def __init__(
        self,
        config: BrowserConfig,
        runner: Optional[GitRunner] = None,
        cache: Optional[RepositoryCache] = None,
    ):
        """
        Initialize git tools.

        Args:
            config: Browser configuration
            runner: git runner (created from config when omitted)
            cache: Clone cache (created from config when omitted)
        """
        self.config = config
        self.runner = runner or GitRunner(config)
        self.cache = cache or RepositoryCache(config, self.runner)

    def _git(self, repo_path: Path, *args: str) -> str:
        """Run a git command in repo_path and return stdout, raising on failure."""
        return self.runner.check(list(args), cwd=repo_path)

    def _git_verbose(self, repo_path: Path, *args: str) -> str:
        """Run a git command that reports on stderr and return both streams, raising on failure."""
        result = self.runner.run(list(args), cwd=repo_path)
        if not result.ok:
            raise GitCommandError(list(args), result.returncode, result.stderr, result.stdout)
        return "\n".join(part.strip() for part in (result.stdout, result.stderr) if part.strip())

    def _validate_repository(self, repo_path: Path) -> Tuple[bool, str]:
        """
        Validate that a directory is a git working copy.

        Args:
            repo_path: Path to check

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not repo_path.exists():
            return False, f"Repository directory does not exist: {repo_path}"

        if not repo_path.is_dir():
            return False, f"Path is not a directory: {repo_path}"

        result = self.runner.run(["rev-parse", "--is-inside-work-tree"], cwd=repo_path)
        if not result.ok or result.stdout.strip() != "true":
            return False, f"Not a git repository: {repo_path}"

        return True, ""

    def _open_local(self, repo_path: str) -> Path:
        """
        Resolve and validate a caller-supplied local repository path.

        Raises:
            ValueError: If the path is not a git working copy
        """
        path = Path(repo_path).expanduser()
        is_valid, error = self._validate_repository(path)
        if not is_valid:
            raise ValueError(error)
        return path

    def _resolve_inside(self, root: Path, relative_path: str) -> Path:
        """
        Resolve a path relative to root, refusing anything outside root.

        Raises:
            SecurityError: If the resolved path escapes root
        """
        root_abs = root.resolve()
        target = (root_abs / relative_path).resolve()
        if not target.is_relative_to(root_abs):
            logger.error(
                f"SECURITY: Path traversal attempt detected - "
                f"tried to access '{target}' outside '{root_abs}'"
            )
            raise SecurityError(f"Access denied: Path '{relative_path}' is outside the repository")
        return target

    def _sanitize_name(self, name: str, kind: str) -> str:
        """
        Sanitize a name that becomes a file name (e.g., a hook name).

        Only allows alphanumeric characters, hyphens, underscores and dots.

        Raises:
            ValueError: If the name is empty
            SecurityError: If it contains path separators or other characters
        """
        name = name.strip()

        if not name:
            raise ValueError(f"{kind} name cannot be empty")

        if ".." in name or "/" in name or "\\" in name:
            raise SecurityError(
                f"Invalid {kind} name '{name}': contains path separators or parent directory references"
            )

        if not re.match(r"^[a-zA-Z0-9_.-]+$", name):
            raise SecurityError(
                f"Invalid {kind} name '{name}': only alphanumeric characters, dots, hyphens, "
                f"and underscores are allowed"
            )

        return name

    def _validate_branch_name(self, repo_path: Path, branch_name: str) -> str:
        """Check a branch name with `git check-ref-format`, raising ValueError if invalid."""
        branch_name = branch_name.strip()
        if not branch_name:
            raise ValueError("Branch name cannot be empty")

        result = self.runner.run(["check-ref-format", "--branch", branch_name], cwd=repo_path)
        if not result.ok:
            raise ValueError(f"Invalid branch name '{branch_name}'")
        return branch_name

    def _current_branch(self, repo_path: Path) -> Optional[str]:
        """Return the checked out branch, or None on a detached HEAD."""
        result = self.runner.run(["branch", "--show-current"], cwd=repo_path)
        branch = result.stdout.strip() if result.ok else ""
        return branch or None

    def _conflicted_files(self, repo_path: Path) -> List[str]:
        """List files with unresolved merge conflicts."""
        result = self.runner.run(["diff", "--name-only", "--diff-filter=U"], cwd=repo_path)
        if not result.ok:
            return []
        return [line for line in result.stdout.splitlines() if line.strip()]

    def _ref_exists(self, repo_path: Path, ref: str) -> bool:
        return self.runner.run(["rev-parse", "--verify", "--quiet", ref], cwd=repo_path).ok

    def _resolve_branch(self, repo_path: Path, branch: str) -> str:
        """
        Return a revision usable for a branch that may only exist on origin.

        Local branches are used as-is. Otherwise the branch is fetched from
        origin and its remote-tracking ref is returned. Tags and commit ids
        are accepted as a last resort.

        Raises:
            ValueError: If the branch cannot be found anywhere
        """
        reject_option(branch, "branch name")

        if self._ref_exists(repo_path, f"refs/heads/{branch}"):
            return branch

        fetch = self.runner.run(["fetch", "origin", branch], cwd=repo_path)
        if not fetch.ok:
            logger.debug(f"Fetching '{branch}' from origin failed: {fetch.stderr.strip()}")

        if self._ref_exists(repo_path, f"refs/remotes/origin/{branch}"):
            return f"origin/{branch}"

        if self._ref_exists(repo_path, f"{branch}^{{commit}}"):
            return branch

        raise ValueError(f"Branch '{branch}' not found locally or on origin")
