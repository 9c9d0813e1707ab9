"""patina - repository freshness scanner for GitHub organizations."""

from patina.cache import (
    CacheError,
    CacheExpiredError,
    CacheIOError,
    CacheNotFoundError,
    OrganizationSnapshot,
    RepoCache,
)
from patina.freshness import (
    Freshness,
    InvalidFreshnessFilter,
    classify,
    humanize_age,
    parse_freshness,
)
from patina.github import FetchError, Repository, RepositoryFetcher, create_fetcher
from patina.scanner import ScanOptions, ScanResult, Scanner
from patina.summary import (
    FreshnessSummary,
    filter_by_freshness,
    sort_by_age,
    sort_by_age_desc,
    summarize,
    top_stale,
)

__all__ = [
    "CacheError",
    "CacheExpiredError",
    "CacheIOError",
    "CacheNotFoundError",
    "OrganizationSnapshot",
    "RepoCache",
    "Freshness",
    "InvalidFreshnessFilter",
    "classify",
    "humanize_age",
    "parse_freshness",
    "FetchError",
    "Repository",
    "RepositoryFetcher",
    "create_fetcher",
    "ScanOptions",
    "ScanResult",
    "Scanner",
    "FreshnessSummary",
    "filter_by_freshness",
    "sort_by_age",
    "sort_by_age_desc",
    "summarize",
    "top_stale",
]
