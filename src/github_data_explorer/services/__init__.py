"""Services for fetching GitHub repository activity."""

from github_data_explorer.services.github_rest_client import ApiResponse, GitHubRestClient
from github_data_explorer.services.paginator import PaginationWalker
from github_data_explorer.services.resource_fetchers import (
    RESOURCES,
    ResourceFetcher,
    ResourceSpec,
)
from github_data_explorer.services.retry import RetryController, RetryPolicy

__all__ = [
    "ApiResponse",
    "GitHubRestClient",
    "RetryController",
    "RetryPolicy",
    "PaginationWalker",
    "ResourceFetcher",
    "ResourceSpec",
    "RESOURCES",
]
