"""Tests for the git command runner."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest
from conftest import requires_git

from git_repo_browser.config import BrowserConfig
from git_repo_browser.git.runner import GitCommandError, GitResult, GitRunner


class TestGitCommandError:
    """Test error message selection."""

    def test_prefers_stderr(self):
        error = GitCommandError(["push"], 1, stderr="fatal: denied\n", stdout="partial")
        assert str(error) == "fatal: denied"
        assert error.command == ["push"]
        assert error.returncode == 1

    def test_falls_back_to_stdout(self):
        error = GitCommandError(["commit"], 1, stdout="nothing to commit\n")
        assert str(error) == "nothing to commit"

    def test_falls_back_to_exit_code(self):
        assert str(GitCommandError(["status"], 128)) == "exit code 128"


@requires_git
class TestGitRunner:
    """Test running real git commands."""

    def test_run_success(self, runner: GitRunner, tmp_path: Path):
        result = runner.run(["--version"], cwd=tmp_path)

        assert result.ok
        assert result.stdout.startswith("git version")

    def test_run_failure_outside_repository(self, runner: GitRunner, tmp_path: Path):
        result = runner.run(["rev-parse", "--show-toplevel"], cwd=tmp_path)

        assert not result.ok
        assert "not a git repository" in result.stderr.lower()

    def test_check_raises(self, runner: GitRunner, tmp_path: Path):
        with pytest.raises(GitCommandError) as exc_info:
            runner.check(["rev-parse", "--show-toplevel"], cwd=tmp_path)

        assert exc_info.value.command == ["rev-parse", "--show-toplevel"]
        assert exc_info.value.returncode != 0

    def test_check_returns_stdout(self, runner: GitRunner, local_repo: Path):
        assert runner.check(["branch", "--show-current"], cwd=local_repo).strip() == "main"


def test_missing_executable_reported(tmp_path: Path):
    """Test that a git executable that cannot be started yields a failed result."""
    runner = GitRunner(BrowserConfig(cache_root=str(tmp_path), git_command="no-such-git-binary"))

    result = runner.run(["status"], cwd=tmp_path)

    assert result.returncode == 1
    assert result.stderr.startswith("Error executing git command:")


def test_timeout_reported(tmp_path: Path):
    """Test that a timeout becomes a failed result instead of an exception."""
    runner = GitRunner(BrowserConfig(cache_root=str(tmp_path), command_timeout=5.0))

    with patch(
        "git_repo_browser.git.runner.subprocess.run",
        side_effect=subprocess.TimeoutExpired(cmd="git", timeout=5.0),
    ):
        result = runner.run(["fetch"], cwd=tmp_path)

    assert result == GitResult(1, "", "Command timed out after 5.0 seconds")


def test_subprocess_invocation(tmp_path: Path):
    """Test that git runs without a shell, stdin or terminal prompts."""
    runner = GitRunner(BrowserConfig(cache_root=str(tmp_path), command_timeout=9.0))

    with patch("git_repo_browser.git.runner.subprocess.run") as mock_run:
        mock_run.return_value = subprocess.CompletedProcess(["git"], 0, "out", "")
        result = runner.run(["status", "--porcelain"], cwd=tmp_path, timeout=3.0)

    assert result == GitResult(0, "out", "")
    args, kwargs = mock_run.call_args
    assert args[0] == ["git", "status", "--porcelain"]
    assert kwargs["cwd"] == str(tmp_path)
    assert kwargs["stdin"] == subprocess.DEVNULL
    assert kwargs["timeout"] == 3.0
    assert kwargs["env"]["GIT_TERMINAL_PROMPT"] == "0"
    assert "shell" not in kwargs
