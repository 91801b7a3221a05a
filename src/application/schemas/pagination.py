"""Pagination helpers for paginated list queries.

Provides a ``PaginationParams`` value object that enforces sensible page /
size defaults and upper bounds before an offset is handed to a repository.
"""

from __future__ import annotations

from dataclasses import dataclass

_DEFAULT_PAGE: int = 1
_DEFAULT_SIZE: int = 10
_MAX_SIZE: int = 100


@dataclass(frozen=True)
class PaginationParams:
    """Immutable pagination request parameters.

    ``page`` is 1-based.  ``size`` is clamped to [1, ``max_size``].
    """

    page: int = _DEFAULT_PAGE
    size: int = _DEFAULT_SIZE
    max_size: int = _MAX_SIZE

    def __post_init__(self) -> None:
        # frozen=True requires object.__setattr__ for validation fixups
        object.__setattr__(self, "page", max(1, self.page))
        object.__setattr__(self, "size", max(1, min(self.size, self.max_size)))

    @property
    def offset(self) -> int:
        """Zero-based offset suitable for SQL ``OFFSET`` clauses."""
        return (self.page - 1) * self.size
