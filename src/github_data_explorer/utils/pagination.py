"""Request descriptors and page cursors for paginated GitHub endpoints."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Union

ParamValue = Union[str, int]


@dataclass(frozen=True)
class RequestDescriptor:
    """Endpoint path plus query parameters for one logical request.

    Descriptors are never mutated; ``with_page`` derives a new one per page.
    """

    endpoint: str
    params: Mapping[str, ParamValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze a private copy so later changes to the caller's dict can't leak in
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def with_page(self, page: int, per_page: int) -> "RequestDescriptor":
        """Return a descriptor for the given page of this request."""
        return RequestDescriptor(
            endpoint=self.endpoint,
            params={**self.params, "page": page, "per_page": per_page},
        )

    def query_params(self) -> dict[str, str]:
        """Query parameters as strings, ready for httpx."""
        return {key: str(value) for key, value in self.params.items()}

    def __str__(self) -> str:
        if not self.params:
            return self.endpoint
        query = "&".join(f"{k}={v}" for k, v in self.params.items())
        return f"{self.endpoint}?{query}"


@dataclass
class PageCursor:
    """Current position within one pagination walk.

    A page with fewer than ``per_page`` records is the last one: GitHub fills
    every page but the final page completely.
    """

    per_page: int = 100
    page: int = 1

    def __post_init__(self) -> None:
        if self.per_page < 1:
            raise ValueError(f"per_page must be positive, got {self.per_page}")
        if self.page < 1:
            raise ValueError(f"page is 1-based, got {self.page}")

    def is_last_page(self, count: int) -> bool:
        """Whether a page holding ``count`` records ends the walk."""
        return count < self.per_page

    def advance(self) -> None:
        self.page += 1

    def request_for(self, descriptor: RequestDescriptor) -> RequestDescriptor:
        """Descriptor for the page this cursor points at."""
        return descriptor.with_page(self.page, self.per_page)
