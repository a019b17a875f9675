"""arXiv ingestion: fetch every paper announced since the previous anchor."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from config import CrawlConfig
from feed_client import FeedClient, Pause
from feed_sources import build_source
from merge import MergedIndex
from models import Paper
from pagination import walk_pages
from time_window import compute_window

LOGGER = logging.getLogger(__name__)


def fetch_window_papers(
    config: CrawlConfig,
    now: datetime | None = None,
    client: FeedClient | None = None,
) -> list[Paper]:
    """Fetch, normalize and deduplicate papers for the current crawl window.

    Categories are crawled in configured order, one page at a time. A paper
    listed under several categories is kept once, with the fields of the first
    category that returned it.

    Args:
        config: Crawl configuration, see ``config.load_crawl_config``.
        now: Current instant; defaults to ``datetime.now(UTC)``.
        client: Feed client to use; one is built from ``config`` when omitted.

    Raises:
        FeedRequestError: A request kept failing after all retry attempts.
        MalformedPageError: A page could not be parsed as a feed document.
    """
    window = compute_window(
        now or datetime.now(UTC),
        config.schedule_tz,
        config.anchor_hours,
        config.feed_tz,
    )
    LOGGER.info(
        "Crawl window: start=%s end=%s categories=%s protocol=%s",
        window.start.isoformat(),
        window.end.isoformat(),
        ",".join(config.categories),
        config.protocol,
    )

    owns_client = client is None
    client = client or FeedClient.from_config(config)
    source = build_source(config, client)
    pause = Pause(config.page_delay_seconds)
    index = MergedIndex()

    try:
        for code in config.categories:
            query = source.build_query(code)
            if query is None:
                LOGGER.warning("Skipping malformed category code=%r", code)
                continue

            raw_count = 0
            new_ids = 0
            pages = 0
            for page in walk_pages(source, query, window, pause=pause):
                pages += 1
                raw_count += len(page.records)
                new_ids += index.add_all(page.records)

            LOGGER.info(
                "Category %s: pages=%s raw_count=%s new_unique=%s",
                code,
                pages,
                raw_count,
                new_ids,
            )
    finally:
        if owns_client:
            client.close()

    papers = index.papers()
    LOGGER.info("Crawl complete: unique_papers=%s", len(papers))
    return papers
