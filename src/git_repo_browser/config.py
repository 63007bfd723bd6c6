"""Configuration management for the git repository browser."""

import os
import tempfile
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _timeout_from_env() -> Optional[float]:
    raw = os.getenv("GIT_BROWSER_COMMAND_TIMEOUT", "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"GIT_BROWSER_COMMAND_TIMEOUT must be a number, got '{raw}'")


@dataclass
class BrowserConfig:
    """
    Configuration for the git repository browser.

    Attributes:
        cache_root: Directory that holds cached clones of remote repositories
        cache_prefix: Prefix of every cache slot directory name
        git_command: git executable to invoke
        command_timeout: Per-command timeout in seconds (None disables it)
        log_level: Logging level name used by the CLI
        server_name: Name reported to MCP clients during initialization
    """

    cache_root: str = field(
        default_factory=lambda: os.getenv("GIT_BROWSER_CACHE_ROOT") or tempfile.gettempdir()
    )

    cache_prefix: str = field(
        default_factory=lambda: os.getenv("GIT_BROWSER_CACHE_PREFIX", "github_tools")
    )

    git_command: str = field(default_factory=lambda: os.getenv("GIT_BROWSER_GIT_COMMAND", "git"))

    command_timeout: Optional[float] = field(default_factory=_timeout_from_env)

    log_level: str = field(
        default_factory=lambda: os.getenv("GIT_BROWSER_LOG_LEVEL", "WARNING").upper()
    )

    server_name: str = field(
        default_factory=lambda: os.getenv("GIT_BROWSER_SERVER_NAME", "mcp-git-repo-browser")
    )

    def validate(self) -> None:
        """Validate configuration and raise ValueError if invalid."""
        self.cache_prefix = self.cache_prefix.strip()

        if not self.cache_prefix:
            raise ValueError("cache_prefix cannot be empty")

        if "/" in self.cache_prefix or "\\" in self.cache_prefix or ".." in self.cache_prefix:
            raise ValueError(
                f"Invalid cache_prefix '{self.cache_prefix}': contains path separators "
                f"or parent directory references"
            )

        if not self.cache_root:
            raise ValueError("cache_root is required")

        if self.command_timeout is not None and self.command_timeout <= 0:
            raise ValueError("command_timeout must be positive when set")

        if not self.git_command:
            raise ValueError("git_command is required")

        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log_level '{self.log_level}'")

    def __post_init__(self) -> None:
        """Post-initialization validation."""
        self.validate()
