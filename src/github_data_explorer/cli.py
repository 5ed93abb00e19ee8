"""CLI interface for GitHub Data Explorer."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from github_data_explorer import __version__
from github_data_explorer.config import OUTPUT_FORMATS, Config
from github_data_explorer.exceptions import ConfigurationError, GitHubExplorerError
from github_data_explorer.explorer import ExplorerData, GitHubDataExplorer
from github_data_explorer.output.console import Console as OutputConsole
from github_data_explorer.output.exporters import (
    generate_portfolio_markdown,
    save_as_csv,
    save_as_json,
)
from github_data_explorer.utils.rate_limiter import (
    check_and_report_rate_limit,
    check_rate_limit_from_api,
)

app = typer.Typer(
    name="github-data-explorer",
    help="Extract a user's activity in a GitHub repository",
    add_completion=False,
)

console = Console()


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route library logging through rich."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        console.print(f"github-data-explorer version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """GitHub Data Explorer - Extract a user's activity in a GitHub repository."""
    pass


@app.command()
def fetch(
    owner: Optional[str] = typer.Option(
        None, "--owner", "-o", help="Repository owner or organization [env: REPO_OWNER]"
    ),
    repo: Optional[str] = typer.Option(
        None, "--repo", "-r", help="Repository name [env: REPO_NAME]"
    ),
    user: Optional[str] = typer.Option(
        None, "--user", "-u", help="GitHub username to track [env: USER_TO_TRACK]"
    ),
    output_format: Optional[str] = typer.Option(
        None, "--format", "-f", help="Output format: json, csv or markdown [env: OUTPUT_FORMAT]"
    ),
    output_dir: Optional[Path] = typer.Option(
        None, "--dir", "-d", help="Output directory [env: OUTPUT_DIR]"
    ),
    issues: bool = typer.Option(False, "--issues", help="Fetch issues"),
    prs: bool = typer.Option(False, "--prs", help="Fetch pull requests"),
    commits: bool = typer.Option(False, "--commits", help="Fetch commits"),
    comments: bool = typer.Option(
        False, "--comments", help="Fetch issue comments and review comments"
    ),
    stats: bool = typer.Option(False, "--stats", help="Fetch contributor statistics"),
    fetch_all: bool = typer.Option(False, "--all", help="Fetch everything"),
    portfolio: bool = typer.Option(False, "--portfolio", help="Generate portfolio summary"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Minimal output"),
):
    """Fetch a user's issues, pull requests, commits, comments and statistics.

    With no resource flags everything is fetched.

    Examples:
        github-data-explorer fetch -o octo-org -r octo-repo -u octocat
        github-data-explorer fetch -o octo-org -r octo-repo -u octocat --prs -f csv
        github-data-explorer fetch --all --portfolio
    """
    setup_logging(verbose=verbose, quiet=quiet)

    try:
        config = Config.from_env().with_overrides(
            repo_owner=owner,
            repo_name=repo,
            user=user,
            output_format=output_format.lower() if output_format else None,
            output_dir=str(output_dir) if output_dir else None,
        )
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)

    if not (config.repo_owner and config.repo_name and config.user):
        console.print(
            "[red]Repository owner (-o), repository name (-r) and user (-u) are required.[/red]"
        )
        raise typer.Exit(1)

    resources = select_resources(
        issues=issues,
        prs=prs,
        commits=commits,
        comments=comments,
        stats=stats,
        fetch_all=fetch_all,
        portfolio=portfolio,
    )

    try:
        asyncio.run(
            _run_fetch(
                config=config,
                resources=resources,
                portfolio=portfolio or config.output_format == "markdown",
                verbose=verbose,
                quiet=quiet,
            )
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Fetch cancelled[/yellow]")
        raise typer.Exit(1)
    except (GitHubExplorerError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def select_resources(
    issues: bool = False,
    prs: bool = False,
    commits: bool = False,
    comments: bool = False,
    stats: bool = False,
    fetch_all: bool = False,
    portfolio: bool = False,
) -> list[str]:
    """Resource names selected by the fetch command's flags."""
    if fetch_all or not (issues or prs or commits or comments or stats):
        issues = prs = commits = comments = stats = True
    elif portfolio:
        # The portfolio is built from issues, PRs, commits and stats
        issues = prs = commits = stats = True

    selected = []
    if issues:
        selected.append("issues")
    if prs:
        selected.append("pull_requests")
    if commits:
        selected.append("commits")
    if comments:
        selected += ["review_comments", "issue_comments"]
    if stats:
        selected.append("contributor_stats")
    return selected


async def _run_fetch(
    config: Config,
    resources: list[str],
    portfolio: bool,
    verbose: bool,
    quiet: bool,
):
    """Run the fetch asynchronously."""
    output_console = OutputConsole(verbose=verbose, quiet=quiet)
    output_console.print_header(config.repo_owner, config.repo_name, config.user)

    if not config.is_authenticated:
        output_console.print_warning(
            "No GitHub token found. Using unauthenticated access (60 requests/hour).\n"
            "Set GITHUB_TOKEN environment variable for higher rate limits."
        )
        output_console.print()

    # Check rate limit before starting
    snapshot = await check_rate_limit_from_api(
        api_url=config.github_api_url,
        token=config.github_token,
        timeout=config.request_timeout,
    )
    if snapshot is not None and not check_and_report_rate_limit(
        snapshot, config.is_authenticated
    ):
        raise typer.Exit(1)

    async with GitHubDataExplorer(config) as explorer:
        with output_console.create_progress() as progress:
            task = progress.add_task("Fetching...", total=None)
            data = await explorer.collect(
                config.repo_owner,
                config.repo_name,
                config.user,
                resources=resources,
            )
            progress.update(task, completed=True)

    for result in data.results.values():
        output_console.print_result(result)
    output_console.print()
    output_console.print_results_table(data.results)

    for path in export_data(data, config.output_format, config.output_dir):
        output_console.print_output_path(str(path))

    if portfolio:
        summary = data.portfolio()
        output_console.print_portfolio_summary(summary)
        output_console.print_output_path(
            str(save_as_json(summary, "portfolio_data", config.output_dir))
        )
        output_console.print_output_path(
            str(
                generate_portfolio_markdown(
                    summary, data.owner, data.repo, data.user, config.output_dir
                )
            )
        )

    output_console.print_success("\nAll done!")


def export_data(data: ExplorerData, output_format: str, output_dir: str) -> list[Path]:
    """Save each fetched resource in the requested format.

    Markdown output only covers the portfolio, so nothing is written here for it.
    """
    if output_format not in OUTPUT_FORMATS:
        raise ConfigurationError(f"Unknown output format {output_format!r}")

    collections = {
        "issues": data.issues,
        "pull_requests": data.pull_requests,
        "commits": data.commits,
        "review_comments": data.review_comments,
        "issue_comments": data.issue_comments,
    }

    written = []
    for name in data.results:
        if name == "contributor_stats":
            stats = data.contributor_stats
            if stats is None:
                continue
            if output_format == "json":
                written.append(save_as_json(stats, name, output_dir))
            elif output_format == "csv":
                path = save_as_csv(stats.weekly_contributions, name, output_dir)
                if path:
                    written.append(path)
            continue

        records = collections[name]
        if output_format == "json":
            written.append(save_as_json(records, name, output_dir))
        elif output_format == "csv":
            path = save_as_csv(records, name, output_dir)
            if path:
                written.append(path)

    return written


@app.command()
def check_token():
    """Check GitHub token configuration and rate limits."""
    try:
        config = Config.from_env()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)

    if config.is_authenticated:
        console.print("[green]GitHub token is configured[/green]")
    else:
        console.print("[yellow]No GitHub token configured[/yellow]")
        console.print("To configure a token:")
        console.print("  export GITHUB_TOKEN=your_token_here")
        console.print()

    snapshot = asyncio.run(
        check_rate_limit_from_api(
            api_url=config.github_api_url,
            token=config.github_token,
            timeout=config.request_timeout,
        )
    )
    if snapshot is None:
        console.print("[yellow]Could not check the current rate limit[/yellow]")
        raise typer.Exit(1)

    console.print(f"Rate limit: {snapshot.describe()}")
    if not check_and_report_rate_limit(snapshot, config.is_authenticated):
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
