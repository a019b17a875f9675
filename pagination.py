"""Walk a paginated feed for one category until it is exhausted."""

from __future__ import annotations

import logging
from typing import Iterator

from feed_client import Pause
from feed_sources import FeedSource
from models import CategoryQuery, FeedPage, PageCursor, TimeWindow

LOGGER = logging.getLogger(__name__)


def walk_pages(
    source: FeedSource,
    query: CategoryQuery,
    window: TimeWindow,
    pause: Pause | None = None,
) -> Iterator[FeedPage]:
    """Yield every page for ``query`` in feed order.

    The walk ends after a page with no entries, a short page (offset
    pagination), or a page without a continuation token (token pagination).
    A feed that never signals the end is walked forever.
    """
    cursor = PageCursor.first(source.page_size)
    page_number = 0

    while True:
        if pause is not None:
            pause.wait()

        page_number += 1
        LOGGER.debug(
            "Fetching page category=%s page=%s offset=%s token=%s",
            query.code,
            page_number,
            cursor.offset,
            cursor.token,
        )
        page = source.fetch_page(query, window, cursor)
        yield page

        next_cursor = _next_cursor(source, cursor, page)
        if next_cursor is None:
            LOGGER.debug("Pagination done category=%s pages=%s", query.code, page_number)
            return
        cursor = next_cursor


def _next_cursor(source: FeedSource, cursor: PageCursor, page: FeedPage) -> PageCursor | None:
    if page.entry_count == 0:
        return None

    if source.pagination == "token":
        token = (page.next_token or "").strip()
        return cursor.with_token(token) if token else None

    if page.entry_count < cursor.page_size:
        return None
    return cursor.advance_offset()
