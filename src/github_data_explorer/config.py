"""Configuration management for GitHub Data Explorer."""

import os
from dataclasses import dataclass, replace

from dotenv import find_dotenv, load_dotenv

from github_data_explorer.exceptions import ConfigurationError

MAX_PER_PAGE = 100  # GitHub REST API hard limit
OUTPUT_FORMATS = ("json", "csv", "markdown")


@dataclass(frozen=True)
class Config:
    """Application configuration.

    Instances are immutable; the transport reads them but never changes them,
    so one instance can be shared by every fetch in the process.
    """

    github_token: str | None = None
    github_api_url: str = "https://api.github.com"

    # Defaults for the fetch command
    repo_owner: str | None = None
    repo_name: str | None = None
    user: str | None = None
    output_dir: str = "./output"
    output_format: str = "json"

    # Pagination
    per_page: int = MAX_PER_PAGE
    page_delay: float = 0.1  # seconds between page requests

    # Retries
    max_attempts: int = 3
    retry_delay: float = 1.0  # seconds between attempts

    # Timeouts
    request_timeout: float = 30.0

    def __post_init__(self) -> None:
        if not 1 <= self.per_page <= MAX_PER_PAGE:
            raise ConfigurationError(
                f"per_page must be between 1 and {MAX_PER_PAGE}, got {self.per_page}"
            )
        if self.max_attempts < 1:
            raise ConfigurationError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.retry_delay < 0 or self.page_delay < 0:
            raise ConfigurationError("Delays must not be negative")
        if self.output_format not in OUTPUT_FORMATS:
            raise ConfigurationError(
                f"Unknown output format {self.output_format!r} "
                f"(expected one of {', '.join(OUTPUT_FORMATS)})"
            )

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        # override=False ensures environment variables take precedence over .env
        load_dotenv(find_dotenv(usecwd=True), override=False)

        return cls(
            github_token=os.getenv("GITHUB_TOKEN") or None,
            github_api_url=os.getenv("GITHUB_API_URL", "https://api.github.com"),
            repo_owner=os.getenv("REPO_OWNER") or None,
            repo_name=os.getenv("REPO_NAME") or None,
            user=os.getenv("USER_TO_TRACK") or None,
            output_dir=os.getenv("OUTPUT_DIR", "./output"),
            output_format=os.getenv("OUTPUT_FORMAT", "json").lower(),
            per_page=_env_number("GITHUB_PER_PAGE", int, MAX_PER_PAGE),
            page_delay=_env_number("GITHUB_PAGE_DELAY", float, 0.1),
            max_attempts=_env_number("GITHUB_MAX_ATTEMPTS", int, 3),
            retry_delay=_env_number("GITHUB_RETRY_DELAY", float, 1.0),
        )

    def with_overrides(self, **changes) -> "Config":
        """Return a copy with the given fields replaced (None values are ignored)."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @property
    def is_authenticated(self) -> bool:
        """Check if a GitHub token is configured."""
        return bool(self.github_token)


def _env_number(name: str, kind: type, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return kind(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e
