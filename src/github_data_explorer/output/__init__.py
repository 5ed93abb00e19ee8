"""Output handlers for GitHub Data Explorer."""

from github_data_explorer.output.console import Console
from github_data_explorer.output.exporters import (
    generate_portfolio_markdown,
    save_as_csv,
    save_as_json,
)

__all__ = [
    "Console",
    "save_as_json",
    "save_as_csv",
    "generate_portfolio_markdown",
]
