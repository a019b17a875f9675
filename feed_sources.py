"""Feed protocol variants behind a single "fetch one page" capability."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Protocol
from urllib.parse import urlencode

from categories import to_atom_query, to_oai_set
from config import CrawlConfig
from feed_client import FeedClient
from models import CategoryQuery, FeedPage, PageCursor, TimeWindow
from record_parser import parse_atom_page, parse_oai_page

LOGGER = logging.getLogger(__name__)

OAI_METADATA_PREFIX = "arXiv"


class FeedSource(Protocol):
    """Fetches one page of records for (category, window, cursor).

    ``pagination`` is ``"token"`` when the source returns continuation tokens
    and ``"offset"`` when it pages by offset and page size.
    """

    pagination: str
    page_size: int

    def build_query(self, code: str) -> CategoryQuery | None: ...

    def fetch_page(self, query: CategoryQuery, window: TimeWindow, cursor: PageCursor) -> FeedPage: ...


class OaiPmhSource:
    """OAI-PMH ``ListRecords`` with resumption tokens."""

    pagination = "token"
    # The server picks its own page size.
    page_size = 0

    def __init__(self, client: FeedClient, base_url: str) -> None:
        self.client = client
        self.base_url = base_url

    def build_query(self, code: str) -> CategoryQuery | None:
        selector = to_oai_set(code)
        return CategoryQuery(code=code, selector=selector) if selector else None

    def page_uri(self, query: CategoryQuery, window: TimeWindow, cursor: PageCursor) -> str:
        if cursor.token:
            # resumptionToken is an exclusive argument in OAI-PMH.
            params = {"verb": "ListRecords", "resumptionToken": cursor.token}
        else:
            first_day, last_day = oai_day_range(window)
            params = {
                "verb": "ListRecords",
                "metadataPrefix": OAI_METADATA_PREFIX,
                "set": query.selector,
                "from": first_day.isoformat(),
                "until": last_day.isoformat(),
            }
        return f"{self.base_url}?{urlencode(params)}"

    def fetch_page(self, query: CategoryQuery, window: TimeWindow, cursor: PageCursor) -> FeedPage:
        first_day, last_day = oai_day_range(window)
        if not cursor.token and last_day < first_day:
            LOGGER.info(
                "Window %s to %s covers no whole feed day, skipping category=%s",
                window.start.isoformat(),
                window.end.isoformat(),
                query.code,
            )
            return FeedPage(records=[], entry_count=0, next_token=None)
        uri = self.page_uri(query, window, cursor)
        return parse_oai_page(self.client.get(uri), uri=uri)


class AtomApiSource:
    """arXiv query API with ``start``/``max_results`` offset pagination."""

    pagination = "offset"

    def __init__(self, client: FeedClient, base_url: str, page_size: int) -> None:
        self.client = client
        self.base_url = base_url
        self.page_size = page_size

    def build_query(self, code: str) -> CategoryQuery | None:
        selector = to_atom_query(code)
        return CategoryQuery(code=code, selector=selector) if selector else None

    def page_uri(self, query: CategoryQuery, window: TimeWindow, cursor: PageCursor) -> str:
        # submittedDate ranges are inclusive at minute precision.
        last_minute = window.end - timedelta(minutes=1)
        date_range = f"[{window.start:%Y%m%d%H%M} TO {last_minute:%Y%m%d%H%M}]"
        params = {
            "search_query": f"{query.selector} AND submittedDate:{date_range}",
            "start": cursor.offset,
            "max_results": cursor.page_size or self.page_size,
            "sortBy": "submittedDate",
            "sortOrder": "ascending",
        }
        return f"{self.base_url}?{urlencode(params)}"

    def fetch_page(self, query: CategoryQuery, window: TimeWindow, cursor: PageCursor) -> FeedPage:
        uri = self.page_uri(query, window, cursor)
        return parse_atom_page(self.client.get(uri), uri=uri)


def build_source(config: CrawlConfig, client: FeedClient) -> FeedSource:
    """Select the protocol variant named by ``config.protocol``."""
    if config.protocol == "oai":
        source: FeedSource = OaiPmhSource(client, config.base_url)
    elif config.protocol == "atom":
        source = AtomApiSource(client, config.base_url, config.page_size)
    else:
        raise RuntimeError(f"Unsupported feed protocol: {config.protocol!r}")

    LOGGER.info("Using %s feed at %s", config.protocol, config.base_url)
    return source


def oai_day_range(window: TimeWindow) -> tuple[date, date]:
    """Inclusive ``(from, until)`` datestamp days for a window.

    Days are assigned half-open, ``[start.date(), end.date())``, so the windows
    of consecutive runs never request the same day twice. ``until`` comes before
    ``from`` when the window lies inside a single day.
    """
    return window.start.date(), window.end.date() - timedelta(days=1)
