"""Cursor ⇄ page-number bridge between Opal and Authentik.

Opal paginates with a single opaque ``cursor`` and treats ``""`` as "no more
pages". Authentik paginates with ``page``/``page_size`` and answers with a
``pagination`` object. The connector keeps no state between requests: the
cursor handed to Opal *is* the next Authentik page number.

Example:
    >>> cursor_to_page(None)
    1
    >>> page_window_to_cursor(PageWindow(page_number=2, current_page=2, total_pages=5))
    '3'
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .errors import ValidationError

DEFAULT_PAGE_SIZE = 100
FIRST_PAGE = 1
END_OF_RESULTS = ""


@dataclass(frozen=True)
class PageWindow:
    """One Authentik list response's position in the result set."""
    page_number: int
    current_page: int
    total_pages: int
    page_size: int = DEFAULT_PAGE_SIZE

    @classmethod
    def from_pagination(cls, page_number: int, pagination: Mapping[str, Any]) -> "PageWindow":
        """Build a window from Authentik's ``pagination`` object.

        Args:
            page_number: Page that was requested
            pagination: e.g. ``{"current": 2, "total_pages": 5, "next": 3, ...}``

        Raises:
            KeyError, TypeError, ValueError: If the object is malformed
        """
        return cls(
            page_number=page_number,
            current_page=int(pagination["current"]),
            total_pages=int(pagination["total_pages"]),
        )


def cursor_to_page(cursor: Optional[str]) -> int:
    """Convert an Opal cursor into an Authentik page number.

    Raises:
        ValidationError: If the cursor is not a positive integer
    """
    if cursor is None or cursor == "":
        return FIRST_PAGE

    if not (cursor.isascii() and cursor.isdigit()):
        raise ValidationError(f"Invalid cursor '{cursor}': expected a page number")

    page = int(cursor)
    if page < FIRST_PAGE:
        raise ValidationError(f"Invalid cursor '{cursor}': page numbers start at {FIRST_PAGE}")
    return page


def page_window_to_cursor(window: PageWindow) -> str:
    """Convert an Authentik page window into the next Opal cursor.

    Returns ``""`` on the last page (or when there are no pages at all).
    """
    if window.total_pages <= 0 or window.current_page >= window.total_pages:
        return END_OF_RESULTS
    return str(window.current_page + 1)
