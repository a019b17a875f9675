"""Shared typed models for the crawl pipeline."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import datetime

_VERSION_SUFFIX = re.compile(r"(?:v\d+)+$")


@dataclass(slots=True)
class Paper:
    """Normalized paper record handed to the summarizer and the mailer.

    Only ``ai_summary`` is written after ingestion; everything else is set once
    by the merge step.
    """

    paper_id: str
    title: str
    authors: str
    abstract: str
    url: str
    published_at: datetime | None = None
    ai_summary: str | None = None


@dataclass(frozen=True, slots=True)
class TimeWindow:
    """Half-open ``[start, end)`` interval in the feed's reference zone."""

    start: datetime
    end: datetime


@dataclass(frozen=True, slots=True)
class CategoryQuery:
    code: str
    selector: str


@dataclass(frozen=True, slots=True)
class RawRecord:
    """Feed entry as parsed, before ID normalization."""

    raw_id: str
    title: str = ""
    abstract: str = ""
    authors: tuple[str, ...] = ()
    created: datetime | None = None
    deleted: bool = False

    @property
    def paper_id(self) -> str:
        return normalize_paper_id(self.raw_id)


@dataclass(frozen=True, slots=True)
class PageCursor:
    """Position in a paginated feed: an offset window or a continuation token."""

    offset: int = 0
    page_size: int = 0
    token: str | None = None

    @classmethod
    def first(cls, page_size: int) -> PageCursor:
        return cls(offset=0, page_size=page_size, token=None)

    def advance_offset(self) -> PageCursor:
        return replace(self, offset=self.offset + self.page_size)

    def with_token(self, token: str) -> PageCursor:
        return replace(self, token=token)


@dataclass(frozen=True, slots=True)
class FeedPage:
    """One parsed page; ``entry_count`` includes entries dropped while parsing."""

    records: list[RawRecord]
    entry_count: int
    next_token: str | None = None


def normalize_paper_id(raw: str) -> str:
    """Return the canonical, version-free arXiv ID from a URL or OAI identifier.

    ``http://arxiv.org/abs/2401.01234v2``, ``oai:arXiv.org:2401.01234`` and
    ``arXiv:2401.01234`` all map to ``2401.01234``. Stacked suffixes such as
    ``v1v2`` are removed together. Old-style IDs keep their archive prefix
    (``hep-th/9901001``). Applying it to its own output is a no-op.
    """
    value = (raw or "").strip()
    if not value:
        return ""

    if "://" in value:
        path = value.split("://", 1)[1].rstrip("/")
        if "/abs/" in path:
            value = path.split("/abs/", 1)[1]
        else:
            value = path.rsplit("/", 1)[-1]
    elif ":" in value:
        # oai:arXiv.org:<id> and arXiv:<id>
        value = value.rsplit(":", 1)[-1]

    return _VERSION_SUFFIX.sub("", value)
