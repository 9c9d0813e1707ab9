"""Organization scanning with cache-first repository lookup."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from patina.cache import (
    CacheError,
    CacheIOError,
    OrganizationSnapshot,
    RepoCache,
    utc_now,
)
from patina.github import Repository, RepositoryFetcher

logger = logging.getLogger(__name__)


@dataclass
class ScanOptions:
    """Options for a single scan."""

    refresh: bool = False  # fetch even if the cache is valid


@dataclass
class ScanResult:
    """Repositories of an organization and where they came from."""

    organization: str
    repositories: list[Repository]
    fetched_at: datetime
    from_cache: bool


class Scanner:
    """Serves repository listings from the cache, fetching on a miss."""

    def __init__(
        self,
        fetcher: RepositoryFetcher,
        cache: RepoCache,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize with a repository fetcher and a cache."""
        self.fetcher = fetcher
        self.cache = cache
        self.clock = clock

    def scan(self, org: str, options: ScanOptions | None = None) -> ScanResult:
        """Return the repositories of an organization.

        A valid cached snapshot is used unless options.refresh is set. Any
        cache miss, expiry or read failure falls through to a fetch.

        Raises:
            ValueError: If org does not map to a cache file name
            FetchError: If fetching is required and fails
        """
        if options is None:
            options = ScanOptions()
        self.cache.path_for(org)
        now = self.clock()

        if not options.refresh:
            try:
                snapshot = self.cache.load(org, now)
            except CacheError as e:
                logger.info(f"No usable cache for {org} ({e}), fetching from GitHub")
            else:
                return ScanResult(
                    organization=org,
                    repositories=snapshot.repositories,
                    fetched_at=snapshot.fetched_at,
                    from_cache=True,
                )

        repos = self.fetcher.fetch(org)
        logger.info(f"Fetched {len(repos)} repositories for {org}")

        snapshot = OrganizationSnapshot(organization=org, repositories=repos, fetched_at=now)
        try:
            snapshot = self.cache.save(snapshot)
        except CacheIOError as e:
            logger.warning(f"Failed to save cache: {e}")

        return ScanResult(
            organization=org,
            repositories=repos,
            fetched_at=snapshot.fetched_at,
            from_cache=False,
        )
