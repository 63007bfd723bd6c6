"""Local clone cache for remote repositories.

Every remote URL maps to a fixed directory under the cache root, named after
a SHA-256 fingerprint of the URL. A slot is reused (and pulled) only when it
is the top level of a working copy whose first remote fetches from exactly
the requested URL; anything else is purged and cloned again.
"""

import hashlib
import logging
import shutil
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from git_repo_browser.config import BrowserConfig
from git_repo_browser.git.runner import GitResult, GitRunner

logger = logging.getLogger(__name__)

CACHE_KEY_LENGTH = 12


def cache_key(repo_url: str) -> str:
    """Return the fixed-length, filesystem-safe fingerprint of a repository URL."""
    return hashlib.sha256(repo_url.encode("utf-8")).hexdigest()[:CACHE_KEY_LENGTH]


def first_fetch_url(remote_output: str) -> Optional[str]:
    """
    Extract the fetch URL of the first remote from `git remote -v` output.

    Args:
        remote_output: Lines of the form "<name>\\t<url> (fetch|push)"

    Returns:
        The fetch URL, or None if no remote is configured
    """
    for line in remote_output.splitlines():
        parts = line.split()
        if len(parts) >= 3 and parts[-1] == "(fetch)":
            return " ".join(parts[1:-1])
    return None


@dataclass(frozen=True)
class CacheAcquisition:
    """Result of acquiring a working copy: a path on success, an error otherwise."""

    path: Optional[Path] = None
    error: Optional[str] = None
    reused: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and self.path is not None


class RepositoryCache:
    """
    Hands out ready-to-use local working copies of remote repositories.

    The validate/refresh/reclone sequence for a given URL runs under a
    per-slot lock, so concurrent requests for the same URL within this
    process never observe a slot that is half deleted or half cloned.
    """

    def __init__(self, config: BrowserConfig, runner: Optional[GitRunner] = None):
        """
        Initialize the cache.

        Args:
            config: Browser configuration (cache root and slot prefix)
            runner: git runner to use (defaults to one built from config)
        """
        self.cache_root = Path(config.cache_root)
        self.prefix = config.cache_prefix
        self.runner = runner or GitRunner(config)
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def path_for(self, repo_url: str) -> Path:
        """Return the deterministic slot directory for a repository URL."""
        return self.cache_root / f"{self.prefix}_{cache_key(repo_url)}"

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def acquire(self, repo_url: str) -> CacheAcquisition:
        """
        Produce a local working copy of a remote repository.

        Reuses and pulls a valid existing slot; purges and re-clones a slot
        that is not a working copy of repo_url. A failed pull on a valid slot
        is reported without touching the directory.

        Args:
            repo_url: Remote repository URL (compared verbatim, no normalization)

        Returns:
            CacheAcquisition with the slot path, or the failure message
        """
        key = cache_key(repo_url)
        path = self.path_for(repo_url)

        with self._lock_for(key):
            if path.exists():
                if self._is_valid_slot(path, repo_url):
                    result = self.runner.run(["pull"], cwd=path)
                    if not result.ok:
                        logger.warning(f"Refreshing cached clone {path} failed: {_detail(result)}")
                        return CacheAcquisition(
                            error=f"Failed to refresh cached repository: {_detail(result)}"
                        )
                    logger.info(f"Reusing cached clone of {repo_url} at {path}")
                    return CacheAcquisition(path=path, reused=True)

                logger.info(f"Discarding stale cache slot {path}")
                try:
                    _remove_path(path)
                except OSError as e:
                    logger.error(f"Could not remove stale cache slot {path}: {e}")
                    return CacheAcquisition(error=f"Failed to clear stale cache directory {path}: {e}")

            return self._clone(repo_url, path)

    def _is_valid_slot(self, path: Path, repo_url: str) -> bool:
        toplevel = self.runner.run(["rev-parse", "--show-toplevel"], cwd=path)
        if not toplevel.ok:
            logger.debug(f"{path} is not a git working copy: {_detail(toplevel)}")
            return False

        if Path(toplevel.stdout.strip()).resolve() != path.resolve():
            logger.debug(f"{path} is nested inside another working copy")
            return False

        remotes = self.runner.run(["remote", "-v"], cwd=path)
        if not remotes.ok:
            return False

        fetch_url = first_fetch_url(remotes.stdout)
        if fetch_url != repo_url:
            logger.debug(f"{path} tracks '{fetch_url}', expected '{repo_url}'")
            return False

        return True

    def _clone(self, repo_url: str, path: Path) -> CacheAcquisition:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return CacheAcquisition(error=f"Failed to clone repository: {e}")

        logger.info(f"Cloning {repo_url} into {path}")
        result = self.runner.run(["clone", "--", repo_url, str(path)], cwd=self.cache_root)
        if not result.ok:
            shutil.rmtree(path, ignore_errors=True)
            logger.error(f"Cloning {repo_url} failed: {_detail(result)}")
            return CacheAcquisition(error=f"Failed to clone repository: {_detail(result)}")

        return CacheAcquisition(path=path, reused=False)


def _remove_path(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def _detail(result: GitResult) -> str:
    return result.stderr.strip() or result.stdout.strip() or f"exit code {result.returncode}"
