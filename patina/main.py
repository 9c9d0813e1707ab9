"""patina - Scan GitHub organizations for repository freshness."""

import argparse
import logging
import sys
from pathlib import Path

from patina.cache import RepoCache, utc_now
from patina.config import Config, load_config
from patina.freshness import InvalidFreshnessFilter, require_freshness
from patina.github import FetchError, create_fetcher
from patina.report import format_repo_list, format_summary, format_top_stale, render_html
from patina.scanner import ScanOptions, ScanResult, Scanner
from patina.summary import filter_by_freshness, sort_by_age, summarize

logger = logging.getLogger(__name__)

DESCRIPTION = """Scan GitHub organizations for repositories that haven't been updated recently.

Repositories are categorized by freshness:
  green:  updated within the last 2 months (active)
  yellow: updated between 2 and 6 months ago (aging)
  red:    not updated in over 6 months (stale)

Repository data is cached for 30 days. Set GITHUB_TOKEN to use the GitHub API
directly, otherwise an authenticated `gh` CLI is used."""


def build_scanner(config: Config) -> Scanner:
    """Create a scanner wired from configuration."""
    cache = RepoCache(cache_dir=config.cache_dir, cache_days=config.cache_days)
    return Scanner(fetcher=create_fetcher(config.github_token), cache=cache)


def scan_org(args: argparse.Namespace, config: Config) -> ScanResult:
    """Scan args.org and close the fetcher afterwards."""
    scanner = build_scanner(config)
    try:
        return scanner.scan(args.org, ScanOptions(refresh=args.refresh))
    finally:
        scanner.fetcher.close()


def print_cache_notice(result: ScanResult) -> None:
    if result.from_cache:
        print(f"Using cached data from {result.fetched_at.strftime('%Y-%m-%d %H:%M:%S')}\n")


def run_scan(args: argparse.Namespace, config: Config) -> int:
    """Print the freshness summary and the stalest repositories."""
    logger.info(f"Scanning organization: {args.org}")
    if args.refresh:
        logger.info("Forcing refresh from GitHub API")

    result = scan_org(args, config)
    now = utc_now()

    print_cache_notice(result)
    print(format_summary(summarize(result.repositories, now)))
    print()
    top_n = args.top if args.top is not None else config.top_n
    print(format_top_stale(result.repositories, now, top_n))
    return 0


def run_list(args: argparse.Namespace, config: Config) -> int:
    """Print every repository, oldest first, optionally filtered."""
    level = require_freshness(args.freshness) if args.freshness else None

    result = scan_org(args, config)
    now = utc_now()

    repos = result.repositories
    if level is not None:
        repos = filter_by_freshness(repos, level, now)
    repos = sort_by_age(repos)

    print_cache_notice(result)
    if level is not None:
        print(f"Repositories in {args.org} ({level}): {len(repos)}\n")
    else:
        print(f"All repositories in {args.org}: {len(repos)}\n")
    print(format_repo_list(repos, now))
    return 0


def run_report(args: argparse.Namespace, config: Config) -> int:
    """Write the standalone HTML report."""
    logger.info(f"Scanning organization: {args.org}")
    result = scan_org(args, config)
    if result.from_cache:
        logger.info(f"Using cached data from {result.fetched_at:%Y-%m-%d %H:%M:%S}")

    output = args.output if args.output is not None else config.report_output
    output.write_text(render_html(args.org, result.repositories, utc_now()), encoding="utf-8")
    print(f"Report generated: {output}")
    return 0


def run_cache(args: argparse.Namespace, config: Config) -> int:
    """Show or clear the repository cache."""
    cache = RepoCache(cache_dir=config.cache_dir, cache_days=config.cache_days)

    if args.cache_command == "path":
        print(cache.cache_dir)
    elif args.all:
        cache.clear_all()
        print(f"Cleared all cached organizations in {cache.cache_dir}")
    elif args.org:
        cache.clear(args.org)
        print(f"Cleared cache for {args.org}")
    else:
        logger.error("Specify an organization or --all")
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="patina",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to JSON config file")
    parser.add_argument("--cache-dir", type=Path, default=None, help="Override the cache directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)

    scan = commands.add_parser("scan", help="Summarize freshness and list the stalest repositories")
    scan.add_argument("org", help="GitHub organization")
    scan.add_argument("-r", "--refresh", action="store_true", help="Force refresh from GitHub API")
    scan.add_argument("-n", "--top", type=int, default=None, help="Number of stale repos to show")
    scan.set_defaults(handler=run_scan)

    list_cmd = commands.add_parser("list", help="List all repositories with their freshness")
    list_cmd.add_argument("org", help="GitHub organization")
    list_cmd.add_argument("-f", "--freshness", type=str, help="Filter by freshness (green, yellow, red)")
    list_cmd.add_argument("-r", "--refresh", action="store_true", help="Force refresh from GitHub API")
    list_cmd.set_defaults(handler=run_list)

    report = commands.add_parser("report", help="Generate an HTML freshness report")
    report.add_argument("org", help="GitHub organization")
    report.add_argument("-o", "--output", type=Path, default=None, help="Output file path")
    report.add_argument("-r", "--refresh", action="store_true", help="Force refresh from GitHub API")
    report.set_defaults(handler=run_report)

    cache = commands.add_parser("cache", help="Inspect or clear cached data")
    cache_commands = cache.add_subparsers(dest="cache_command", required=True)
    cache_commands.add_parser("path", help="Print the cache directory")
    clear = cache_commands.add_parser("clear", help="Remove cached data")
    clear.add_argument("org", nargs="?", help="Organization to clear")
    clear.add_argument("--all", action="store_true", help="Clear every organization")
    cache.set_defaults(handler=run_cache)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the patina command line."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        config = load_config(args.config)
        if args.cache_dir is not None:
            config.cache_dir = args.cache_dir
        return args.handler(args, config)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1
    except InvalidFreshnessFilter as e:
        logger.error(str(e))
        return 1
    except ValueError as e:
        logger.error(str(e))
        return 1
    except FetchError as e:
        logger.error(f"Failed to scan organization {args.org}: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Command failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
