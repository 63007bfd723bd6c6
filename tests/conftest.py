"""Pytest configuration and fixtures."""

import shutil
import subprocess
from pathlib import Path
from typing import Any

import pytest

from git_repo_browser.config import BrowserConfig
from git_repo_browser.git.cache import RepositoryCache
from git_repo_browser.git.runner import GitRunner

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")

GIT_IDENTITY = {
    "GIT_AUTHOR_NAME": "Test Author",
    "GIT_AUTHOR_EMAIL": "author@example.com",
    "GIT_COMMITTER_NAME": "Test Committer",
    "GIT_COMMITTER_EMAIL": "committer@example.com",
}


def git(cwd: Path, *args: str) -> str:
    """Run git in cwd for test setup and return stdout."""
    completed = subprocess.run(
        ["git", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
        stdin=subprocess.DEVNULL,
    )
    return completed.stdout


def init_repo(path: Path) -> Path:
    """Create an empty repository whose initial branch is main."""
    path.mkdir(parents=True, exist_ok=True)
    git(path, "init", "-q")
    git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    return path


def commit_file(repo: Path, name: str, content: str, message: str = "") -> str:
    """Write a file, commit it and return the new commit hash."""
    file_path = repo / name
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(content)
    git(repo, "add", "--", name)
    git(repo, "commit", "-q", "-m", message or f"Add {name}")
    return git(repo, "rev-parse", "HEAD").strip()


@pytest.fixture(autouse=True)
def git_environment(monkeypatch: Any, tmp_path_factory: Any) -> None:
    """Isolate git from the user's configuration and pin commit identities."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path_factory.getbasetemp()))
    for name, value in GIT_IDENTITY.items():
        monkeypatch.setenv(name, value)
    for name in ("GIT_DIR", "GIT_WORK_TREE", "GIT_INDEX_FILE"):
        monkeypatch.delenv(name, raising=False)
    for name in (
        "GIT_BROWSER_CACHE_ROOT",
        "GIT_BROWSER_CACHE_PREFIX",
        "GIT_BROWSER_GIT_COMMAND",
        "GIT_BROWSER_COMMAND_TIMEOUT",
        "GIT_BROWSER_LOG_LEVEL",
        "GIT_BROWSER_SERVER_NAME",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def test_config(tmp_path: Path) -> BrowserConfig:
    """Provide test configuration with a private cache root."""
    return BrowserConfig(cache_root=str(tmp_path / "cache"))


@pytest.fixture
def runner(test_config: BrowserConfig) -> GitRunner:
    return GitRunner(test_config)


@pytest.fixture
def cache(test_config: BrowserConfig, runner: GitRunner) -> RepositoryCache:
    return RepositoryCache(test_config, runner)


@pytest.fixture
def local_repo(tmp_path: Path) -> Path:
    """A working copy on main with two commits."""
    repo = init_repo(tmp_path / "local")
    commit_file(repo, "README.md", "# Sample\n", "Initial commit")
    commit_file(repo, "src/app.py", "def main():\n    return 1\n", "Add app")
    return repo


@pytest.fixture
def remote_repo(tmp_path: Path) -> Path:
    """A repository standing in for a remote, with a feature branch."""
    repo = init_repo(tmp_path / "remote")
    commit_file(repo, "README.md", "# Remote\n", "Initial commit")
    commit_file(
        repo,
        "src/a.js",
        "// setup\nconst x = 1;\nconst y = 2;\n",
        "Add a.js",
    )
    commit_file(repo, "docs/guide.md", "Guide\nconst in docs\n", "Add guide")
    git(repo, "checkout", "-q", "-b", "feature")
    commit_file(repo, "src/feature.js", "export const feature = true;\n", "Add feature")
    git(repo, "checkout", "-q", "main")
    return repo


@pytest.fixture
def remote_url(remote_repo: Path) -> str:
    return str(remote_repo)


@pytest.fixture
def cloned_repo(tmp_path: Path, local_repo: Path) -> Path:
    """A working copy cloned from a bare origin, tracking origin/main."""
    origin = tmp_path / "origin.git"
    git(tmp_path, "clone", "-q", "--bare", str(local_repo), str(origin))
    work = tmp_path / "work"
    git(tmp_path, "clone", "-q", str(origin), str(work))
    return work
