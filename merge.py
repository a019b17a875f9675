"""First-seen-wins merge of records across categories and pages."""

from __future__ import annotations

from typing import Iterable

from models import Paper, RawRecord

ARXIV_ABS_URL = "https://arxiv.org/abs/{paper_id}"


class MergedIndex:
    """Insertion-ordered ``paper_id -> Paper`` map for one crawl.

    A record whose normalized ID is already present is ignored; the fields of
    the first occurrence are never overwritten.
    """

    def __init__(self) -> None:
        self._papers: dict[str, Paper] = {}

    def add(self, record: RawRecord) -> bool:
        """Insert ``record`` if its ID is new. Returns True when inserted."""
        paper_id = record.paper_id
        if not paper_id or paper_id in self._papers:
            return False
        self._papers[paper_id] = to_paper(record)
        return True

    def add_all(self, records: Iterable[RawRecord]) -> int:
        return sum(1 for record in records if self.add(record))

    def papers(self) -> list[Paper]:
        return list(self._papers.values())

    def __len__(self) -> int:
        return len(self._papers)

    def __contains__(self, paper_id: object) -> bool:
        return paper_id in self._papers


def to_paper(record: RawRecord) -> Paper:
    paper_id = record.paper_id
    return Paper(
        paper_id=paper_id,
        title=record.title,
        authors=", ".join(record.authors),
        abstract=record.abstract,
        url=ARXIV_ABS_URL.format(paper_id=paper_id),
        published_at=record.created,
    )
