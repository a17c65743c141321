"""Paging parameters for the listing endpoints."""

from dataclasses import dataclass

MAX_PAGE_SIZE = 500
DEFAULT_PAGE_SIZE = 100
# Keeps the offset within a 64-bit integer
MAX_PAGE_NUMBER = 1_000_000


def _positive_int(value: str | int | None) -> int | None:
    if value is None:
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


@dataclass(frozen=True)
class Page:
    """A resolved page: ``limit`` rows starting at ``offset``."""

    number: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.number - 1) * self.limit

    @classmethod
    def from_params(
        cls,
        page: str | int | None,
        page_size: str | int | None,
        default_size: int = DEFAULT_PAGE_SIZE,
        max_size: int = MAX_PAGE_SIZE,
    ) -> "Page":
        """
        Resolve raw query values.

        Missing or invalid ``page_size`` falls back to ``default_size`` and the
        result is clamped to ``max_size``; a missing or invalid ``page`` is 1
        and larger pages are clamped to ``MAX_PAGE_NUMBER``.
        """
        size = _positive_int(page_size) or default_size
        number = min(_positive_int(page) or 1, MAX_PAGE_NUMBER)
        return cls(number=number, limit=min(size, max_size))
