"""Write fetched data to JSON, CSV and Markdown files."""

import csv
import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel

from github_data_explorer.models.portfolio import PortfolioSummary

logger = logging.getLogger(__name__)


def serialize_for_json(obj: Any) -> Any:
    """Convert objects to JSON-serializable format."""
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    elif isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    elif isinstance(obj, dict):
        return {k: serialize_for_json(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [serialize_for_json(item) for item in obj]
    return obj


def save_as_json(data: Any, name: str, output_dir: Path | str = "./output") -> Path:
    """Write ``data`` to ``<output_dir>/<name>.json``.

    Returns:
        Path to written file
    """
    output_path = Path(output_dir) / f"{name}.json"
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(serialize_for_json(data), f, indent=2, ensure_ascii=False, default=str)

    logger.info("Saved JSON file: %s", output_path)
    return output_path


def _csv_cell(value: Any) -> Any:
    if isinstance(value, list):
        return "; ".join(str(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    return value


def save_as_csv(rows: list[Any], name: str, output_dir: Path | str = "./output") -> Optional[Path]:
    """Write ``rows`` to ``<output_dir>/<name>.csv``.

    The header comes from the first row's keys. Lists are joined with "; ",
    nested objects are written as JSON.

    Returns:
        Path to written file, or None when there is nothing to write
    """
    records = [serialize_for_json(row) for row in rows]
    if not records:
        logger.info("No rows for %s, skipping CSV", name)
        return None

    output_path = Path(output_dir) / f"{name}.csv"
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = list(records[0].keys())
    with open(output_path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames, extrasaction="ignore")
        writer.writeheader()
        for record in records:
            writer.writerow({key: _csv_cell(record.get(key)) for key in fieldnames})

    logger.info("Saved CSV file: %s", output_path)
    return output_path


def render_portfolio_markdown(summary: PortfolioSummary, owner: str, repo: str, user: str) -> str:
    """Render a portfolio summary as Markdown."""
    counts = summary.contributions
    duration = summary.duration

    lines = [
        f"# GitHub Project Portfolio: {owner}/{repo}",
        "",
        f"Contributor: **{user}**",
        "",
    ]
    if duration.start_date and duration.end_date:
        lines += [
            f"Active from {duration.start_date.isoformat()} to {duration.end_date.isoformat()} "
            f"({duration.duration_days} days)",
            "",
        ]

    lines += [
        "## Contribution Statistics",
        "",
        "### Issues",
        f"- Total issues: {counts.total_issues}",
        f"- Open issues: {counts.open_issues}",
        f"- Closed issues: {counts.closed_issues}",
        "",
        "### Pull Requests",
        f"- Total PRs: {counts.total_prs}",
        f"- Open PRs: {counts.open_prs}",
        f"- Closed PRs: {counts.closed_prs}",
        f"- Merged PRs: {counts.merged_prs}",
        "",
        "### Commits",
        f"- Total commits: {counts.total_commits}",
        "",
    ]

    stats = summary.contributor_stats
    if stats:
        lines += [
            "### Contributor Statistics",
            f"- Total commits: {stats.total_commits}",
            f"- Lines added: {stats.total_additions}",
            f"- Lines deleted: {stats.total_deletions}",
            "",
        ]

    breakdown = summary.work_breakdown.model_dump()
    if any(breakdown.values()):
        lines += ["## Work Breakdown", ""]
        lines += [
            f"- {work_type.replace('_', ' ').capitalize()}: {count}"
            for work_type, count in breakdown.items()
            if count
        ]
        lines.append("")

    if summary.top_prs:
        lines += ["## Significant Pull Requests", ""]
        lines += [
            f"- [#{pr.number} {pr.title}]({pr.url}) ({pr.changes} lines changed)"
            for pr in summary.top_prs
        ]
        lines.append("")

    if summary.active_periods:
        lines += ["## Most Active Weeks", ""]
        lines += [
            f"- Week of {week.week.isoformat()}: {week.commits} commits "
            f"(+{week.additions}/-{week.deletions})"
            for week in summary.active_periods
        ]
        lines.append("")

    return "\n".join(lines)


def generate_portfolio_markdown(
    summary: PortfolioSummary,
    owner: str,
    repo: str,
    user: str,
    output_dir: Path | str = "./output",
    name: str = "portfolio",
) -> Path:
    """Write the portfolio summary to ``<output_dir>/<name>.md``.

    Returns:
        Path to written file
    """
    output_path = Path(output_dir) / f"{name}.md"
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_portfolio_markdown(summary, owner, repo, user), encoding="utf-8")

    logger.info("Saved portfolio Markdown: %s", output_path)
    return output_path
