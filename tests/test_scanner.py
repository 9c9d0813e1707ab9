"""Tests for the organization scanner."""

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from patina.cache import CacheIOError, OrganizationSnapshot, RepoCache
from patina.github import FetchError, Repository, RepositoryFetcher
from patina.scanner import ScanOptions, Scanner

NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeFetcher(RepositoryFetcher):
    """Fetcher returning fixed repositories and counting calls."""

    def __init__(self, repos=None, error=None):
        self.repos = repos or []
        self.error = error
        self.calls = 0

    def fetch(self, org):
        self.calls += 1
        if self.error:
            raise self.error
        return self.repos


@pytest.fixture
def repos():
    return [
        Repository("repo1", "test-org/repo1", NOW - timedelta(days=1), "https://github.com/test-org/repo1"),
        Repository("repo2", "test-org/repo2", NOW - timedelta(days=365), "https://github.com/test-org/repo2"),
    ]


@pytest.fixture
def cache():
    """Create cache in a temporary directory."""
    with tempfile.TemporaryDirectory() as d:
        yield RepoCache(Path(d), clock=lambda: NOW)


def test_scan_uses_cache_after_first_fetch(cache, repos):
    """First scan fetches, second is served from cache, refresh fetches again."""
    fetcher = FakeFetcher(repos)
    scanner = Scanner(fetcher, cache, clock=lambda: NOW)

    first = scanner.scan("test-org", ScanOptions(refresh=False))
    assert first.from_cache is False
    assert fetcher.calls == 1
    assert first.repositories == repos

    second = scanner.scan("test-org", ScanOptions(refresh=False))
    assert second.from_cache is True
    assert fetcher.calls == 1
    assert second.repositories == repos
    assert second.fetched_at == NOW

    third = scanner.scan("test-org", ScanOptions(refresh=True))
    assert third.from_cache is False
    assert fetcher.calls == 2


def test_scan_default_options(cache, repos):
    fetcher = FakeFetcher(repos)
    scanner = Scanner(fetcher, cache, clock=lambda: NOW)

    scanner.scan("test-org")
    result = scanner.scan("test-org")

    assert result.from_cache is True
    assert result.organization == "test-org"
    assert fetcher.calls == 1


def test_scan_refetches_expired_cache(cache, repos):
    cache.save(OrganizationSnapshot(organization="test-org", repositories=repos[:1]))
    fetcher = FakeFetcher(repos)
    scanner = Scanner(fetcher, cache, clock=lambda: NOW + timedelta(days=31))

    result = scanner.scan("test-org")

    assert result.from_cache is False
    assert result.repositories == repos
    assert fetcher.calls == 1


def test_scan_refetches_corrupt_cache(cache, repos):
    """A malformed cache file does not block scanning."""
    cache.path_for("test-org").write_text("garbage")
    fetcher = FakeFetcher(repos)
    scanner = Scanner(fetcher, cache, clock=lambda: NOW)

    result = scanner.scan("test-org")

    assert result.from_cache is False
    assert cache.load("test-org", NOW).repositories == repos


def test_scan_refetches_non_utf8_cache(cache, repos):
    cache.path_for("test-org").write_bytes(b"\xff\xfe garbage")
    fetcher = FakeFetcher(repos)
    scanner = Scanner(fetcher, cache, clock=lambda: NOW)

    result = scanner.scan("test-org")

    assert result.from_cache is False
    assert fetcher.calls == 1
    assert cache.load("test-org", NOW).repositories == repos


@pytest.mark.parametrize("org", ["", ".", ".."])
def test_scan_rejects_invalid_org_before_fetch(cache, repos, org):
    fetcher = FakeFetcher(repos)
    scanner = Scanner(fetcher, cache, clock=lambda: NOW)

    with pytest.raises(ValueError, match="Invalid organization name"):
        scanner.scan(org, ScanOptions(refresh=True))

    assert fetcher.calls == 0


def test_scan_propagates_fetch_error(cache):
    """Fetch failures surface unchanged and leave the cache alone."""
    error = FetchError("GitHub API error for test-org (status 401)")
    scanner = Scanner(FakeFetcher(error=error), cache, clock=lambda: NOW)

    with pytest.raises(FetchError) as exc_info:
        scanner.scan("test-org")

    assert exc_info.value is error
    assert not cache.path_for("test-org").exists()


def test_scan_fetch_error_keeps_existing_cache(cache, repos):
    cache.save(OrganizationSnapshot(organization="test-org", repositories=repos))
    scanner = Scanner(FakeFetcher(error=FetchError("boom")), cache, clock=lambda: NOW)

    with pytest.raises(FetchError):
        scanner.scan("test-org", ScanOptions(refresh=True))

    assert cache.load("test-org", NOW).repositories == repos


def test_scan_save_failure_is_not_fatal(repos, caplog):
    """Cache write errors are logged and the fetched data is returned."""
    mock_cache = MagicMock(spec=RepoCache)
    mock_cache.load.side_effect = CacheIOError("test-org", "Failed to read cache")
    mock_cache.save.side_effect = CacheIOError("test-org", "Failed to write cache")
    scanner = Scanner(FakeFetcher(repos), mock_cache, clock=lambda: NOW)

    result = scanner.scan("test-org")

    assert result.from_cache is False
    assert result.repositories == repos
    assert result.fetched_at == NOW
    assert "Failed to save cache" in caplog.text


def test_scan_refresh_skips_cache_read(repos):
    mock_cache = MagicMock(spec=RepoCache)
    mock_cache.save.side_effect = lambda snapshot: snapshot
    scanner = Scanner(FakeFetcher(repos), mock_cache, clock=lambda: NOW)

    scanner.scan("test-org", ScanOptions(refresh=True))

    mock_cache.load.assert_not_called()
    saved = mock_cache.save.call_args[0][0]
    assert saved.organization == "test-org"
    assert saved.repositories == repos
