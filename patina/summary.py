"""Aggregation over repository lists: counts, ordering and filtering."""

from dataclasses import dataclass
from datetime import datetime

from patina.freshness import Freshness, classify
from patina.github import Repository


@dataclass
class FreshnessSummary:
    """Repository counts per freshness level."""

    green: int = 0
    yellow: int = 0
    red: int = 0
    total: int = 0

    def percentages(self) -> tuple[float, float, float]:
        """Return (green, yellow, red) shares of total in percent."""
        if self.total == 0:
            return 0.0, 0.0, 0.0
        return (
            self.green / self.total * 100,
            self.yellow / self.total * 100,
            self.red / self.total * 100,
        )


def summarize(repos: list[Repository], now: datetime) -> FreshnessSummary:
    """Count repositories per freshness level."""
    summary = FreshnessSummary(total=len(repos))

    for repo in repos:
        level = classify(repo.last_updated, now)
        if level is Freshness.GREEN:
            summary.green += 1
        elif level is Freshness.YELLOW:
            summary.yellow += 1
        else:
            summary.red += 1

    return summary


def sort_by_age(repos: list[Repository]) -> list[Repository]:
    """Return repositories oldest first. Ties keep their input order."""
    return sorted(repos, key=lambda r: r.last_updated)


def sort_by_age_desc(repos: list[Repository]) -> list[Repository]:
    """Return repositories newest first. Ties keep their input order."""
    return sorted(repos, key=lambda r: r.last_updated, reverse=True)


def filter_by_freshness(
    repos: list[Repository], level: Freshness, now: datetime
) -> list[Repository]:
    """Return the repositories at the given level, in input order."""
    return [r for r in repos if classify(r.last_updated, now) is level]


def top_stale(repos: list[Repository], n: int) -> list[Repository]:
    """Return the n oldest repositories, oldest first."""
    if not repos or n <= 0:
        return []
    return sort_by_age(repos)[:n]
