"""
Keyset pagination over listing pages.

A page is addressed by the ordering key of a neighbouring row rather than
by an offset, so concurrent inserts never shift the window. Pages are
always presented newest (or most relevant) first.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

from listd.models.enums import Ordering


PAGE_SIZE = 10

ORDERING_KEYS = {
    Ordering.IDENTITY: "id",
    Ordering.RELEVANCE: "description_similarity",
}

Key = Union[int, float]


class PageDirection(str, Enum):
    """Which way a cursor resumes"""
    FORWARD = "after"
    BACKWARD = "before"


@dataclass(frozen=True)
class Cursor:
    """Exclusive bound on the active ordering key.

    Attributes:
        key: Listing id or relevance score of the row to resume past
        direction: FORWARD continues towards older / less relevant rows,
            BACKWARD towards newer / more relevant ones
    """
    key: Key
    direction: PageDirection

    @property
    def operator(self) -> str:
        return "<" if self.direction is PageDirection.FORWARD else ">"

    @classmethod
    def from_markers(
        cls,
        before: Optional[Any],
        after: Optional[Any],
        ordering: Ordering
    ) -> Optional['Cursor']:
        """Build the cursor of a request; `after` wins when both are given.

        Args:
            before: Raw `before` marker or None
            after: Raw `after` marker or None
            ordering: Active ordering, decides the key's type

        Returns:
            Cursor, or None for a first page
        """
        if after is not None:
            return cls(_cursor_key(after, ordering, math.ceil), PageDirection.FORWARD)
        if before is not None:
            return cls(_cursor_key(before, ordering, math.floor), PageDirection.BACKWARD)
        return None


def _cursor_key(value: Any, ordering: Ordering, to_id: Callable[[Any], int]) -> Key:
    # A fractional id marker rounds outward so no whole id is skipped
    if ordering is Ordering.IDENTITY:
        return to_id(value)
    return float(value)


def _coerce_key(value: Any, ordering: Ordering) -> Key:
    if ordering is Ordering.IDENTITY:
        return int(value)
    return float(value)


def ordering_key(row: Mapping[str, Any], ordering: Ordering) -> Optional[Key]:
    """Read the ordering key of a row."""
    value = row[ORDERING_KEYS[ordering]]
    if value is None:
        return None
    return _coerce_key(value, ordering)


@dataclass
class PageWindow:
    """Rows of one page and the cursor bounds around it"""
    rows: List[Mapping[str, Any]]
    before: Optional[Key]
    after: Optional[Key]


class PaginationController:
    """Derives the presented window and next bounds from fetched rows."""

    def __init__(self, page_size: int = PAGE_SIZE):
        self.page_size = page_size

    def window(
        self,
        rows: Sequence[Mapping[str, Any]],
        ordering: Ordering,
        direction: PageDirection = PageDirection.FORWARD
    ) -> PageWindow:
        """
        Build the page window for rows returned by a page query.

        Backward pages are fetched in ascending key order so the rows
        closest to the cursor come first; they are flipped here so every
        page reads in descending order.

        Args:
            rows: Rows in the order the page query returned them
            ordering: Active ordering key
            direction: Direction the page was fetched in

        Returns:
            PageWindow with `before` = key of the first row and `after` =
            key of the last row, both None for an empty page
        """
        page = list(rows)[:self.page_size]
        if direction is PageDirection.BACKWARD:
            page.reverse()

        if not page:
            return PageWindow(rows=[], before=None, after=None)

        return PageWindow(
            rows=page,
            before=ordering_key(page[0], ordering),
            after=ordering_key(page[-1], ordering),
        )
