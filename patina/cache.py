"""On-disk cache of organization repository listings."""

import json
import os
import re
import sys
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from pathlib import Path

from patina.github import Repository, parse_timestamp

CACHE_DIR_NAME = "patina"


def utc_now() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(timezone.utc)


def default_cache_dir() -> Path:
    """Return the per-user cache directory for the current platform."""
    if sys.platform == "win32":
        base = os.environ.get("LOCALAPPDATA") or str(Path.home() / "AppData" / "Local")
    elif sys.platform == "darwin":
        base = str(Path.home() / "Library" / "Caches")
    else:
        base = os.environ.get("XDG_CACHE_HOME") or str(Path.home() / ".cache")
    return Path(base) / CACHE_DIR_NAME


class CacheError(Exception):
    """Base exception for cache failures."""

    def __init__(self, org: str, message: str):
        super().__init__(f"{message} for {org}")
        self.org = org


class CacheNotFoundError(CacheError):
    """Raised when no snapshot exists for an organization."""


class CacheExpiredError(CacheError):
    """Raised when a snapshot is older than the validity window."""


class CacheIOError(CacheError):
    """Raised when a snapshot cannot be read, parsed or written."""


@dataclass(frozen=True)
class OrganizationSnapshot:
    """An organization's repository list and the time it was fetched."""

    organization: str
    repositories: list[Repository] = field(default_factory=list)
    fetched_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "organization": self.organization,
            "fetched_at": self.fetched_at.isoformat() if self.fetched_at else None,
            "repositories": [repo.to_dict() for repo in self.repositories],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "OrganizationSnapshot":
        return cls(
            organization=data["organization"],
            repositories=[Repository.from_dict(r) for r in data["repositories"]],
            fetched_at=parse_timestamp(data["fetched_at"]),
        )


class RepoCache:
    """Cache of repository snapshots, one JSON file per organization."""

    def __init__(
        self,
        cache_dir: Path | None = None,
        cache_days: int = 30,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize cache rooted at cache_dir (platform default if None)."""
        self.cache_dir = cache_dir if cache_dir is not None else default_cache_dir()
        self.cache_days = cache_days
        self.clock = clock

    def path_for(self, org: str) -> Path:
        """Return the snapshot file for an organization.

        Characters outside [A-Za-z0-9._-] become underscores and leading or
        trailing dots are stripped, so the name cannot leave cache_dir.
        """
        safe = re.sub(r"[^A-Za-z0-9._-]", "_", org).strip(".")
        if not safe:
            raise ValueError(f"Invalid organization name: {org!r}")
        return self.cache_dir / f"{safe}.json"

    def save(self, snapshot: OrganizationSnapshot) -> OrganizationSnapshot:
        """Write a snapshot, stamping fetched_at with the current time.

        Returns:
            The snapshot as written
        """
        snapshot = replace(snapshot, fetched_at=self.clock())
        path = self.path_for(snapshot.organization)
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(snapshot.to_dict(), indent=2), encoding="utf-8")
        except OSError as e:
            raise CacheIOError(snapshot.organization, f"Failed to write cache: {e}") from e
        return snapshot

    def load(self, org: str, now: datetime | None = None) -> OrganizationSnapshot:
        """Read a snapshot that is still within the validity window.

        Raises:
            CacheNotFoundError: No snapshot exists
            CacheExpiredError: The snapshot is older than cache_days
            CacheIOError: The snapshot is unreadable or malformed
        """
        path = self.path_for(org)
        try:
            raw = path.read_bytes()
        except FileNotFoundError as e:
            raise CacheNotFoundError(org, "Cache not found") from e
        except OSError as e:
            raise CacheIOError(org, f"Failed to read cache: {e}") from e

        # UnicodeDecodeError is a ValueError
        try:
            snapshot = OrganizationSnapshot.from_dict(json.loads(raw.decode("utf-8")))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            raise CacheIOError(org, f"Malformed cache file {path}: {e}") from e

        if now is None:
            now = self.clock()
        if now - snapshot.fetched_at > timedelta(days=self.cache_days):
            raise CacheExpiredError(org, "Cache expired")

        return snapshot

    def is_valid(self, org: str, now: datetime | None = None) -> bool:
        """Check if a non-expired, readable snapshot exists."""
        try:
            self.load(org, now)
        except CacheError:
            return False
        return True

    def clear(self, org: str) -> None:
        """Remove the snapshot of one organization, if any."""
        try:
            self.path_for(org).unlink(missing_ok=True)
        except OSError as e:
            raise CacheIOError(org, f"Failed to clear cache: {e}") from e

    def clear_all(self) -> None:
        """Remove every cached snapshot."""
        if not self.cache_dir.exists():
            return
        for path in self.cache_dir.glob("*.json"):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                raise CacheIOError(path.stem, f"Failed to clear cache: {e}") from e
