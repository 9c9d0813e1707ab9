"""GitHub clients for listing an organization's repositories."""

import json
import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone

import httpx
from dateutil.parser import isoparse

logger = logging.getLogger(__name__)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp, treating naive values as UTC."""
    parsed = isoparse(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class FetchError(RuntimeError):
    """Raised when repositories cannot be fetched from GitHub."""


@dataclass(frozen=True)
class Repository:
    """A GitHub repository as of the time it was fetched."""

    name: str
    full_name: str
    last_updated: datetime
    url: str

    @classmethod
    def from_api(cls, data: dict) -> "Repository":
        """Create Repository from GitHub API response."""
        # Repositories that were never pushed to have no pushed_at
        pushed_at = data.get("pushed_at") or data["created_at"]
        return cls(
            name=data["name"],
            full_name=data["full_name"],
            last_updated=parse_timestamp(pushed_at),
            url=data["html_url"],
        )

    @classmethod
    def from_dict(cls, data: dict) -> "Repository":
        """Create Repository from its cached form."""
        return cls(
            name=data["name"],
            full_name=data["full_name"],
            last_updated=parse_timestamp(data["last_updated"]),
            url=data["html_url"],
        )

    def to_dict(self) -> dict:
        """Serialize for the cache document."""
        return {
            "name": self.name,
            "full_name": self.full_name,
            "last_updated": self.last_updated.isoformat(),
            "html_url": self.url,
        }


class RepositoryFetcher(ABC):
    """Abstract source of an organization's repositories."""

    @abstractmethod
    def fetch(self, org: str) -> list[Repository]:
        """Fetch every non-archived repository of an organization.

        Args:
            org: Organization login

        Returns:
            Complete list of repositories across all result pages

        Raises:
            FetchError: On any transport, authentication or parse failure
        """
        pass

    def close(self):
        """Release any resources held by the fetcher."""


def _parse_repos(org: str, items: list) -> list[Repository]:
    """Convert raw API items to repositories, skipping archived ones."""
    repos: list[Repository] = []
    try:
        for item in items:
            if item.get("archived", False):
                continue
            repos.append(Repository.from_api(item))
    except (KeyError, TypeError, AttributeError, ValueError) as e:
        raise FetchError(f"Failed to parse repositories for {org}: {e}") from e
    return repos


class GitHubClient(RepositoryFetcher):
    """Fetches repositories from the GitHub REST API with a token."""

    BASE_URL = "https://api.github.com"
    PER_PAGE = 100

    def __init__(self, token: str, transport: httpx.BaseTransport | None = None):
        """Initialize with GitHub token."""
        self.token = token
        self._client = httpx.Client(
            base_url=self.BASE_URL,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            transport=transport,
            timeout=30.0,
        )

    def fetch(self, org: str) -> list[Repository]:
        """Fetch all repositories of an organization, following pagination."""
        repos: list[Repository] = []
        page = 1

        while True:
            try:
                response = self._client.get(
                    f"/orgs/{org}/repos",
                    params={"type": "all", "per_page": self.PER_PAGE, "page": page},
                )
            except httpx.HTTPError as e:
                raise FetchError(f"Failed to fetch repositories for {org}: {e}") from e

            if response.status_code != 200:
                raise FetchError(
                    f"GitHub API error for {org}: {response.text[:200]} "
                    f"(status {response.status_code})"
                )

            try:
                items = response.json()
            except json.JSONDecodeError as e:
                raise FetchError(f"Failed to parse response for {org}: {e}") from e
            if not isinstance(items, list):
                raise FetchError(f"Unexpected response for {org}: expected a list")

            if not items:
                break

            repos.extend(_parse_repos(org, items))
            logger.debug(f"Fetched page {page} for {org} ({len(items)} repos)")

            if "next" not in response.links:
                break
            page += 1

        return repos

    def close(self):
        """Close the HTTP client."""
        self._client.close()


class GhCliClient(RepositoryFetcher):
    """Fetches repositories by delegating to an authenticated `gh` CLI."""

    def __init__(self, executable: str = "gh"):
        """Initialize with the gh executable name or path."""
        self.executable = executable

    def fetch(self, org: str) -> list[Repository]:
        """Fetch all repositories of an organization via `gh api --paginate`."""
        # --jq '.[]' prints one object per line across every page
        cmd = [
            self.executable,
            "api",
            "--paginate",
            "--jq",
            ".[]",
            f"/orgs/{org}/repos?type=all&per_page=100",
        ]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as e:
            raise FetchError(f"Failed to run {self.executable} for {org}: {e}") from e

        if result.returncode != 0:
            raise FetchError(
                f"gh api failed for {org} (rc={result.returncode}): {result.stderr.strip()}"
            )

        items = []
        for line in result.stdout.splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                items.append(json.loads(line))
            except json.JSONDecodeError as e:
                raise FetchError(f"Failed to parse gh output for {org}: {e}") from e

        return _parse_repos(org, items)


def create_fetcher(token: str | None) -> RepositoryFetcher:
    """Create a fetcher: the REST client when a token is set, else the gh CLI."""
    if token:
        return GitHubClient(token=token)
    return GhCliClient()
