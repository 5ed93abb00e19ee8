"""Rich console output for fetch results."""

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from github_data_explorer.models.portfolio import PortfolioSummary
from github_data_explorer.models.results import FetchResult, FetchStatus

STATUS_STYLES = {
    FetchStatus.COMPLETE: "green",
    FetchStatus.RATE_LIMITED: "red",
    FetchStatus.EXHAUSTED: "yellow",
    FetchStatus.NOT_FOUND: "yellow",
    FetchStatus.FAILED: "red",
}


class Console:
    """Wrapper for rich console output."""

    def __init__(self, verbose: bool = False, quiet: bool = False):
        self.console = RichConsole()
        self.verbose = verbose
        self.quiet = quiet

    def print(self, *args, **kwargs):
        """Print to console (respects quiet mode)."""
        if not self.quiet:
            self.console.print(*args, **kwargs)

    def print_verbose(self, *args, **kwargs):
        """Print only in verbose mode."""
        if self.verbose and not self.quiet:
            self.console.print(*args, **kwargs)

    def print_error(self, message: str):
        """Print error message."""
        self.console.print(f"[red]Error:[/red] {message}")

    def print_warning(self, message: str):
        """Print warning message."""
        self.console.print(f"[yellow]Warning:[/yellow] {message}")

    def print_success(self, message: str):
        """Print success message."""
        if not self.quiet:
            self.console.print(f"[green]{message}[/green]")

    def create_progress(self) -> Progress:
        """Create a spinner for long-running fetches."""
        return Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=self.console,
            disable=self.quiet,
            transient=True,
        )

    def print_header(self, owner: str, repo: str, user: str):
        """Print fetch header."""
        if self.quiet:
            return

        self.console.print()
        self.console.print(
            Panel(
                f"[bold blue]GitHub Data Explorer[/bold blue]\n"
                f"[dim]Repository: {owner}/{repo}[/dim]\n[dim]User: {user}[/dim]",
                expand=False,
            )
        )
        self.console.print()

    def print_result(self, result: FetchResult):
        """Print one line for a finished resource fetch."""
        if result.is_complete:
            self.print(f"Fetched {len(result)} {result.resource.replace('_', ' ')}.")
            return

        # Incomplete results are shown even in quiet mode
        style = STATUS_STYLES[result.status]
        self.console.print(
            f"[{style}]{result.resource.replace('_', ' ')}: "
            f"{result.status.value}[/{style}], kept {len(result)} record(s). {result.error}"
        )

    def print_results_table(self, results: dict[str, FetchResult]):
        """Print a table of every resource fetch and its outcome."""
        if self.quiet or not results:
            return

        table = Table(title="Fetch Results", expand=False)
        table.add_column("Resource")
        table.add_column("Records", justify="right")
        table.add_column("Pages", justify="right")
        table.add_column("Status")

        for name, result in results.items():
            style = STATUS_STYLES[result.status]
            table.add_row(
                name,
                str(len(result)),
                str(result.pages_fetched),
                f"[{style}]{result.status.value}[/{style}]",
            )

        self.console.print(table)
        self.console.print()

    def print_portfolio_summary(self, summary: PortfolioSummary):
        """Print portfolio summary."""
        if self.quiet:
            return

        counts = summary.contributions
        table = Table(title="Portfolio Summary", show_header=False, expand=False)
        table.add_column("Metric", style="dim")
        table.add_column("Value")

        if summary.duration.start_date:
            table.add_row(
                "Active Period",
                f"{summary.duration.start_date} to {summary.duration.end_date} "
                f"({summary.duration.duration_days} days)",
            )
        table.add_row("Issues", str(counts.total_issues))
        table.add_row("Pull Requests", f"{counts.total_prs} ({counts.merged_prs} merged)")
        table.add_row("Commits", str(counts.total_commits))
        if summary.contributor_stats:
            stats = summary.contributor_stats
            table.add_row("Lines Changed", f"+{stats.total_additions} / -{stats.total_deletions}")

        self.console.print(table)
        self.console.print()

    def print_output_path(self, path: str):
        """Print output file path."""
        if not self.quiet:
            self.console.print(f"[green]Saved:[/green] {path}")
