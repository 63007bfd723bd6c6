"""Tests for the repository clone cache."""

import hashlib
import shutil
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest
from conftest import commit_file, git, init_repo, requires_git

from git_repo_browser.config import BrowserConfig
from git_repo_browser.git.cache import RepositoryCache, cache_key, first_fetch_url


class TestCacheKey:
    """Test URL fingerprints and slot paths."""

    def test_key_is_sha256_prefix(self):
        url = "https://github.com/example/project.git"
        expected = hashlib.sha256(url.encode("utf-8")).hexdigest()[:12]

        assert cache_key(url) == expected

    def test_key_is_deterministic_and_url_sensitive(self):
        assert cache_key("https://a/x") == cache_key("https://a/x")
        assert cache_key("https://a/x") != cache_key("https://a/x.git")

    def test_path_for(self, tmp_path: Path):
        cache = RepositoryCache(BrowserConfig(cache_root=str(tmp_path), cache_prefix="slots"))
        url = "https://example.com/repo.git"

        assert cache.path_for(url) == tmp_path / f"slots_{cache_key(url)}"

    def test_lock_is_shared_per_key(self, cache: RepositoryCache):
        assert cache._lock_for("abc") is cache._lock_for("abc")
        assert cache._lock_for("abc") is not cache._lock_for("def")


class TestFirstFetchUrl:
    """Test parsing `git remote -v` output."""

    def test_first_remote(self):
        output = (
            "origin\thttps://example.com/a.git (fetch)\n"
            "origin\thttps://example.com/a.git (push)\n"
            "upstream\thttps://example.com/b.git (fetch)\n"
        )
        assert first_fetch_url(output) == "https://example.com/a.git"

    def test_no_remotes(self):
        assert first_fetch_url("") is None


@requires_git
class TestAcquire:
    """Test acquiring working copies of real repositories."""

    def test_first_acquire_clones(self, cache: RepositoryCache, remote_url: str):
        acquisition = cache.acquire(remote_url)

        assert acquisition.ok
        assert acquisition.reused is False
        assert acquisition.path == cache.path_for(remote_url)
        assert (acquisition.path / "README.md").read_text() == "# Remote\n"

    def test_second_acquire_refreshes(self, cache: RepositoryCache, remote_repo: Path, remote_url: str):
        first = cache.acquire(remote_url)
        commit_file(remote_repo, "NEWS.md", "news\n", "Add news")

        second = cache.acquire(remote_url)

        assert second.ok
        assert second.reused is True
        assert second.path == first.path
        assert (second.path / "NEWS.md").exists()

    def test_invalid_slot_is_replaced(self, cache: RepositoryCache, remote_url: str):
        slot = cache.path_for(remote_url)
        slot.mkdir(parents=True)
        (slot / "junk.txt").write_text("leftover")

        acquisition = cache.acquire(remote_url)

        assert acquisition.ok
        assert acquisition.reused is False
        assert not (slot / "junk.txt").exists()
        assert (slot / "README.md").exists()

    def test_empty_slot_is_replaced(self, cache: RepositoryCache, remote_url: str):
        cache.path_for(remote_url).mkdir(parents=True)

        acquisition = cache.acquire(remote_url)

        assert acquisition.ok
        assert (acquisition.path / ".git").is_dir()

    def test_file_in_place_of_slot_is_replaced(self, cache: RepositoryCache, remote_url: str):
        slot = cache.path_for(remote_url)
        slot.parent.mkdir(parents=True)
        slot.write_text("not a directory")

        acquisition = cache.acquire(remote_url)

        assert acquisition.ok
        assert slot.is_dir()

    def test_slot_for_other_url_is_replaced(self, cache: RepositoryCache, tmp_path: Path, remote_url: str):
        other = init_repo(tmp_path / "other")
        commit_file(other, "OTHER.md", "other\n")
        slot = cache.path_for(remote_url)
        slot.parent.mkdir(parents=True)
        git(tmp_path, "clone", "-q", str(other), str(slot))

        acquisition = cache.acquire(remote_url)

        assert acquisition.ok
        assert acquisition.reused is False
        assert not (slot / "OTHER.md").exists()
        assert git(slot, "remote", "get-url", "origin").strip() == remote_url

    def test_slot_nested_in_other_working_copy_is_replaced(self, local_repo: Path, remote_url: str):
        cache = RepositoryCache(BrowserConfig(cache_root=str(local_repo / "cache")))
        slot = cache.path_for(remote_url)
        slot.mkdir(parents=True)

        acquisition = cache.acquire(remote_url)

        assert acquisition.ok
        assert acquisition.reused is False
        assert (slot / ".git").is_dir()

    def test_clone_failure_cleans_up(self, cache: RepositoryCache, tmp_path: Path):
        url = str(tmp_path / "does-not-exist")

        acquisition = cache.acquire(url)

        assert not acquisition.ok
        assert acquisition.error.startswith("Failed to clone repository:")
        assert not cache.path_for(url).exists()

    def test_pull_failure_keeps_slot(self, cache: RepositoryCache, remote_repo: Path, remote_url: str):
        first = cache.acquire(remote_url)
        shutil.rmtree(remote_repo)

        second = cache.acquire(remote_url)

        assert not second.ok
        assert second.error.startswith("Failed to refresh cached repository:")
        assert (first.path / "README.md").exists()

    def test_concurrent_acquire_clones_once(self, cache: RepositoryCache, remote_url: str):
        with ThreadPoolExecutor(max_workers=4) as pool:
            acquisitions = list(pool.map(cache.acquire, [remote_url] * 4))

        assert all(acquisition.ok for acquisition in acquisitions)
        assert len({acquisition.path for acquisition in acquisitions}) == 1
        assert sum(1 for acquisition in acquisitions if not acquisition.reused) == 1


@pytest.mark.parametrize("url", ["https://example.com/a.git", "git@example.com:a.git"])
def test_distinct_urls_use_distinct_slots(cache: RepositoryCache, url: str):
    assert cache.path_for(url) != cache.path_for(url + "x")
