"""Terminal and HTML rendering of freshness results."""

from datetime import datetime
from html import escape

from patina.freshness import COLOUR_RESET, Freshness, classify, humanize_age
from patina.github import Repository
from patina.summary import FreshnessSummary, sort_by_age, summarize, top_stale

LEVEL_LABELS = {
    Freshness.GREEN: ("Green ", "(≤2 months): "),
    Freshness.YELLOW: ("Yellow", "(2-6 months):"),
    Freshness.RED: ("Red   ", "(>6 months): "),
}


def format_summary(summary: FreshnessSummary) -> str:
    """Format the freshness summary for the terminal."""
    counts = {
        Freshness.GREEN: summary.green,
        Freshness.YELLOW: summary.yellow,
        Freshness.RED: summary.red,
    }
    lines = [
        "Repository Freshness Summary",
        "============================",
        "",
        f"Total repositories: {summary.total}",
        "",
    ]
    for level, (label, window) in LEVEL_LABELS.items():
        lines.append(
            f"{level.emoji} {level.colour}{label}{COLOUR_RESET} {window} {counts[level]}"
        )
    return "\n".join(lines)


def _format_line(repo: Repository, now: datetime, width: int) -> str:
    level = classify(repo.last_updated, now)
    age = humanize_age(repo.last_updated, now)
    return f"{level.emoji} {level.colour}{repo.name:<{width}}{COLOUR_RESET}  {age}"


def format_top_stale(repos: list[Repository], now: datetime, n: int = 10) -> str:
    """Format the n stalest repositories as a numbered list."""
    stale = top_stale(repos, n)
    if not stale:
        return "No repositories found."

    title = f"Top {len(stale)} Most Stale Repositories"
    lines = [title, "=" * len(title), ""]
    width = max(len(r.name) for r in stale)
    for i, repo in enumerate(stale, start=1):
        lines.append(f"{i:2d}. {_format_line(repo, now, width)}")
    return "\n".join(lines)


def format_repo_list(repos: list[Repository], now: datetime) -> str:
    """Format repositories one per line, in the order given."""
    if not repos:
        return "No repositories found matching the criteria."
    width = max(len(r.name) for r in repos)
    return "\n".join(_format_line(repo, now, width) for repo in repos)


HTML_STYLE = """
        body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
               color: #333; background: #f5f5f5; margin: 0; padding: 2rem; }
        .container { max-width: 1200px; margin: 0 auto; }
        .subtitle { color: #586069; margin-bottom: 2rem; }
        .summary-grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(200px, 1fr));
                        gap: 1rem; margin-bottom: 2rem; }
        .card { background: white; border-radius: 8px; padding: 1.5rem; text-align: center;
                box-shadow: 0 1px 3px rgba(0,0,0,0.1); }
        .card.total { border-left: 4px solid #6c757d; }
        .card.green { border-left: 4px solid #28a745; }
        .card.yellow { border-left: 4px solid #ffc107; }
        .card.red { border-left: 4px solid #dc3545; }
        .number { font-size: 2.5rem; font-weight: bold; }
        .chart { background: white; border-radius: 8px; padding: 1.5rem; margin-bottom: 2rem; }
        .pie { width: 200px; height: 200px; border-radius: 50%; margin: 0 auto; }
        table { width: 100%; border-collapse: collapse; background: white; }
        th, td { text-align: left; padding: 0.75rem 1.5rem; border-bottom: 1px solid #e1e4e8; }
        th { background: #f6f8fa; }
        .badge { padding: 0.25rem 0.75rem; border-radius: 12px; font-size: 0.85rem; }
        .badge.green { background: #dcffe4; color: #22863a; }
        .badge.yellow { background: #fff3cd; color: #856404; }
        .badge.red { background: #ffeef0; color: #cb2431; }
        a { color: #0366d6; text-decoration: none; }
        .footer { text-align: center; margin-top: 2rem; color: #586069; font-size: 0.85rem; }
"""


def _render_chart(summary: FreshnessSummary) -> str:
    if summary.total == 0:
        return ""
    green_pct, yellow_pct, red_pct = summary.percentages()
    yellow_end = green_pct + yellow_pct
    return f"""
    <div class="chart">
        <div class="pie" style="background: conic-gradient(#28a745 0% {green_pct:.1f}%, #ffc107 {green_pct:.1f}% {yellow_end:.1f}%, #dc3545 {yellow_end:.1f}% 100%);"></div>
        <p>Active ({green_pct:.1f}%) | Aging ({yellow_pct:.1f}%) | Stale ({red_pct:.1f}%)</p>
    </div>"""


def render_html(organization: str, repos: list[Repository], now: datetime) -> str:
    """Render a standalone HTML freshness report, oldest repositories first."""
    summary = summarize(repos, now)

    rows = []
    for i, repo in enumerate(sort_by_age(repos), start=1):
        level = classify(repo.last_updated, now)
        rows.append(
            f'            <tr data-status="{level.value}">'
            f"<td>{i}</td>"
            f'<td><a href="{escape(repo.url)}" target="_blank">{escape(repo.full_name)}</a></td>'
            f"<td>{escape(humanize_age(repo.last_updated, now))}</td>"
            f'<td><span class="badge {level.value}">{level.value}</span></td></tr>'
        )
    body_rows = "\n".join(rows)
    org = escape(organization)
    generated = now.strftime("%Y-%m-%d %H:%M:%S")

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Repository Freshness Report - {org}</title>
    <style>{HTML_STYLE}    </style>
</head>
<body>
<div class="container">
    <h1>Repository Freshness Report</h1>
    <p class="subtitle">Organisation: <strong>{org}</strong> | Generated: {generated}</p>
    <div class="summary-grid">
        <div class="card total"><div class="number">{summary.total}</div>Total Repositories</div>
        <div class="card green"><div class="number">{summary.green}</div>Active (≤2 months)</div>
        <div class="card yellow"><div class="number">{summary.yellow}</div>Aging (2-6 months)</div>
        <div class="card red"><div class="number">{summary.red}</div>Stale (&gt;6 months)</div>
    </div>{_render_chart(summary)}
    <table id="repo-table">
        <thead><tr><th>#</th><th>Repository</th><th>Last Updated</th><th>Status</th></tr></thead>
        <tbody>
{body_rows}
        </tbody>
    </table>
    <div class="footer">Generated by <strong>patina</strong></div>
</div>
</body>
</html>
"""
