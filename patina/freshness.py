"""Freshness classification for repository last-push times."""

from datetime import datetime, timedelta
from enum import Enum

YELLOW_THRESHOLD = timedelta(days=60)  # ~2 months
RED_THRESHOLD = timedelta(days=180)  # ~6 months

COLOUR_RESET = "\033[0m"


class InvalidFreshnessFilter(ValueError):
    """Raised when a freshness filter string is not a known level."""


class Freshness(str, Enum):
    """Staleness level of a repository."""

    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"

    def __str__(self) -> str:
        return self.value

    @property
    def colour(self) -> str:
        """ANSI colour code for terminal output."""
        return _COLOURS[self]

    @property
    def emoji(self) -> str:
        """Emoji indicator for the level."""
        return _EMOJI[self]


_COLOURS = {
    Freshness.GREEN: "\033[32m",
    Freshness.YELLOW: "\033[33m",
    Freshness.RED: "\033[31m",
}

_EMOJI = {
    Freshness.GREEN: "🟢",
    Freshness.YELLOW: "🟡",
    Freshness.RED: "🔴",
}


def classify(last_updated: datetime, now: datetime) -> Freshness:
    """Classify a repository by the time elapsed since its last update.

    Thresholds are compared with a strict greater-than, so a repository
    updated exactly 60 days ago is still green and exactly 180 days ago is
    still yellow. Timestamps in the future give a negative age and are green.
    """
    age = now - last_updated

    if age > RED_THRESHOLD:
        return Freshness.RED
    if age > YELLOW_THRESHOLD:
        return Freshness.YELLOW
    return Freshness.GREEN


def parse_freshness(value: str | None) -> Freshness | None:
    """Parse an exact lowercase level name, returning None if it is not one."""
    for level in Freshness:
        if value == level.value:
            return level
    return None


def require_freshness(value: str | None) -> Freshness:
    """Parse a freshness filter supplied by a user.

    Raises:
        InvalidFreshnessFilter: If value is not green, yellow or red
    """
    level = parse_freshness(value)
    if level is None:
        raise InvalidFreshnessFilter(
            f"Invalid freshness value: {value!r} (must be green, yellow, or red)"
        )
    return level


def humanize_age(last_updated: datetime, now: datetime) -> str:
    """Return a coarse human-readable age such as "3 months ago".

    Months are 30 days and years are 12 such months; there is no calendar
    awareness, so 365 days reads as "1 year ago" and 400 days as
    "1 year, 1 month ago".
    """
    age = now - last_updated
    days = int(age.total_seconds() // 86400)

    if days < 1:
        return "today"
    if days == 1:
        return "1 day ago"
    if days < 30:
        return f"{_pluralize(days, 'day')} ago"

    months = days // 30
    if months < 12:
        return f"{_pluralize(months, 'month')} ago"

    years = months // 12
    remaining_months = months % 12
    if remaining_months == 0:
        return f"{_pluralize(years, 'year')} ago"
    return f"{_pluralize(years, 'year')}, {_pluralize(remaining_months, 'month')} ago"


def _pluralize(n: int, unit: str) -> str:
    if n == 1:
        return f"1 {unit}"
    return f"{n} {unit}s"
