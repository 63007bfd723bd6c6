"""Tests for configuration loading."""

import tempfile
from typing import Any

import pytest

from git_repo_browser.config import BrowserConfig


def test_defaults():
    """Test defaults when no environment variables are set."""
    config = BrowserConfig()

    assert config.cache_root == tempfile.gettempdir()
    assert config.cache_prefix == "github_tools"
    assert config.git_command == "git"
    assert config.command_timeout is None
    assert config.log_level == "WARNING"
    assert config.server_name == "mcp-git-repo-browser"


def test_environment_overrides(monkeypatch: Any, tmp_path: Any):
    """Test that environment variables override defaults."""
    monkeypatch.setenv("GIT_BROWSER_CACHE_ROOT", str(tmp_path))
    monkeypatch.setenv("GIT_BROWSER_CACHE_PREFIX", "clones")
    monkeypatch.setenv("GIT_BROWSER_COMMAND_TIMEOUT", "30")
    monkeypatch.setenv("GIT_BROWSER_LOG_LEVEL", "debug")
    monkeypatch.setenv("GIT_BROWSER_SERVER_NAME", "browser")

    config = BrowserConfig()

    assert config.cache_root == str(tmp_path)
    assert config.cache_prefix == "clones"
    assert config.command_timeout == 30.0
    assert config.log_level == "DEBUG"
    assert config.server_name == "browser"


@pytest.mark.parametrize("prefix", ["", "   ", "a/b", "a\\b", ".."])
def test_invalid_prefix_rejected(prefix: str):
    """Test that prefixes which could escape the cache root are rejected."""
    with pytest.raises(ValueError):
        BrowserConfig(cache_prefix=prefix)


def test_non_numeric_timeout_rejected(monkeypatch: Any):
    """Test that a malformed timeout in the environment is reported."""
    monkeypatch.setenv("GIT_BROWSER_COMMAND_TIMEOUT", "soon")

    with pytest.raises(ValueError, match="must be a number"):
        BrowserConfig()


@pytest.mark.parametrize("timeout", [0, -5.0])
def test_non_positive_timeout_rejected(timeout: float):
    with pytest.raises(ValueError, match="positive"):
        BrowserConfig(command_timeout=timeout)


def test_invalid_log_level_rejected():
    with pytest.raises(ValueError, match="log_level"):
        BrowserConfig(log_level="CHATTY")


def test_empty_git_command_rejected():
    with pytest.raises(ValueError, match="git_command"):
        BrowserConfig(git_command="")
