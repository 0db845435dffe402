"""Cursor-driven walking of GraphQL connections."""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterator, Optional, Set, Tuple

from .errors import MalformedResponseError, PaginationError

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 1000


def require(data: Optional[Dict[str, Any]], *keys: str) -> Any:
    """Walk nested keys, raising MalformedResponseError when one is missing or null."""
    current: Any = data
    walked = []
    for key in keys:
        walked.append(key)
        if not isinstance(current, dict) or current.get(key) is None:
            raise MalformedResponseError(f"response is missing {'.'.join(walked)}")
        current = current[key]
    return current


def iter_pages(
    fetch_page: Callable[[Optional[str]], Dict[str, Any]],
    connection_of: Callable[[Dict[str, Any]], Optional[Dict[str, Any]]],
    max_pages: int = DEFAULT_MAX_PAGES,
    label: str = "connection",
) -> Iterator[Tuple[Dict[str, Any], Dict[str, Any]]]:
    """
    Yield (page, connection) pairs until the connection reports no next page.

    Args:
        fetch_page: Called with the previous page's end cursor (None for the first page)
        connection_of: Extracts the connection ({pageInfo, nodes}) from a page;
            a None connection ends the walk
        max_pages: Hard cap on the number of pages fetched
        label: Name used in log and error messages

    Raises:
        PaginationError: if a cursor repeats, a next page has no cursor,
            or more than max_pages pages would be needed
    """
    cursor: Optional[str] = None
    seen: Set[str] = set()

    for page_number in range(1, max_pages + 1):
        page = fetch_page(cursor)
        connection = connection_of(page) or {}
        LOGGER.debug(
            "%s page %d: %d nodes", label, page_number, len(connection.get("nodes") or [])
        )
        yield page, connection

        page_info = connection.get("pageInfo") or {}
        if not page_info.get("hasNextPage"):
            return

        cursor = page_info.get("endCursor")
        if not cursor:
            raise PaginationError(f"{label} reported another page without an end cursor")
        if cursor in seen:
            raise PaginationError(f"{label} returned cursor {cursor!r} twice")
        seen.add(cursor)

    raise PaginationError(f"{label} did not terminate within {max_pages} pages")
