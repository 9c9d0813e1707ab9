"""Configuration loading from an optional JSON file and the environment."""

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

TOKEN_ENV = "GITHUB_TOKEN"
CACHE_DIR_ENV = "PATINA_CACHE_DIR"


@dataclass
class Config:
    """Application configuration."""

    github_token: str | None = None
    cache_dir: Path | None = None
    cache_days: int = 30
    top_n: int = 10
    report_output: Path = Path("patina-report.html")


def load_config(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Config:
    """Load configuration, letting environment variables override the file.

    Args:
        config_path: Optional JSON config file
        environ: Environment mapping (defaults to os.environ)
    """
    if environ is None:
        environ = os.environ

    data: dict = {}
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        with open(config_path) as f:
            data = json.load(f)

    github = data.get("github", {})
    cache = data.get("cache", {})
    settings = data.get("settings", {})

    config = Config(
        github_token=github.get("token") or None,
        cache_dir=Path(cache["dir"]).expanduser() if cache.get("dir") else None,
        cache_days=cache.get("days", 30),
        top_n=settings.get("top_n", 10),
        report_output=Path(settings.get("report_output", "patina-report.html")),
    )

    if environ.get(TOKEN_ENV):
        config.github_token = environ[TOKEN_ENV]
    if environ.get(CACHE_DIR_ENV):
        config.cache_dir = Path(environ[CACHE_DIR_ENV]).expanduser()

    return config
