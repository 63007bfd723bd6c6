"""Git Repo Browser - MCP server exposing git repository operations as tools."""

from git_repo_browser.config import BrowserConfig

__version__ = "0.1.0"
__all__ = ["BrowserConfig"]
