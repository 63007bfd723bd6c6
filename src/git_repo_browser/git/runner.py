"""Execution of git commands as subprocesses."""

import logging
import os
import subprocess
from pathlib import Path
from typing import List, NamedTuple, Optional, Union

from git_repo_browser.config import BrowserConfig

logger = logging.getLogger(__name__)


class GitCommandError(Exception):
    """Raised when a git command exits with a non-zero status."""

    def __init__(self, args: List[str], returncode: int, stderr: str = "", stdout: str = ""):
        self.command = list(args)
        self.returncode = returncode
        self.stderr = stderr
        self.stdout = stdout
        detail = stderr.strip() or stdout.strip() or f"exit code {returncode}"
        super().__init__(detail)


class GitResult(NamedTuple):
    """Captured outcome of a single git invocation."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class GitRunner:
    """
    Runs git commands against a working directory.

    Commands are passed as argument lists and never go through a shell.
    The working directory is always given explicitly via cwd; the process
    working directory is never changed.
    """

    def __init__(self, config: BrowserConfig):
        """
        Initialize the runner.

        Args:
            config: Browser configuration (git executable and timeout)
        """
        self.git_command = config.git_command
        self.timeout = config.command_timeout
        self._env = os.environ.copy()
        # Never block waiting for credentials; stdin is the protocol channel
        self._env["GIT_TERMINAL_PROMPT"] = "0"

    def run(
        self,
        args: List[str],
        cwd: Optional[Union[str, Path]] = None,
        timeout: Optional[float] = None,
    ) -> GitResult:
        """
        Execute a git command and capture its output.

        Args:
            args: git arguments without the executable (e.g., ['status', '--porcelain'])
            cwd: Directory to run in
            timeout: Overrides the configured timeout for this call

        Returns:
            GitResult with return code, stdout and stderr. Launch failures and
            timeouts are reported as return code 1 with the reason in stderr.
        """
        command = [self.git_command, *args]
        effective_timeout = timeout if timeout is not None else self.timeout
        logger.debug(f"Executing in {cwd or '.'}: {' '.join(command)}")

        try:
            completed = subprocess.run(
                command,
                cwd=str(cwd) if cwd is not None else None,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=effective_timeout,
                env=self._env,
            )
        except subprocess.TimeoutExpired:
            return GitResult(1, "", f"Command timed out after {effective_timeout} seconds")
        except OSError as e:
            return GitResult(1, "", f"Error executing git command: {e}")

        return GitResult(completed.returncode, completed.stdout, completed.stderr)

    def check(
        self,
        args: List[str],
        cwd: Optional[Union[str, Path]] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """
        Execute a git command and return its stdout.

        Raises:
            GitCommandError: If the command exits with a non-zero status
        """
        result = self.run(args, cwd=cwd, timeout=timeout)
        if not result.ok:
            raise GitCommandError(args, result.returncode, result.stderr, result.stdout)
        return result.stdout
