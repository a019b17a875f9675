"""Parse feed XML pages into RawRecord lists."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from datetime import UTC, datetime

from models import FeedPage, RawRecord, normalize_paper_id

LOGGER = logging.getLogger(__name__)

OAI_NS = {
    "oai": "http://www.openarchives.org/OAI/2.0/",
    "arxiv": "http://arxiv.org/OAI/arXiv/",
}
ATOM_NS = {"atom": "http://www.w3.org/2005/Atom"}

# OAI-PMH reports an empty result set as an error rather than an empty list.
_OAI_EMPTY_RESULT_CODE = "noRecordsMatch"
_ATOM_ERROR_MARKER = "/api/errors"

__all__ = ["MalformedPageError", "normalize_paper_id", "parse_atom_page", "parse_oai_page"]


class MalformedPageError(RuntimeError):
    """A page body that cannot be read as a feed document."""

    def __init__(self, message: str, uri: str | None = None) -> None:
        super().__init__(f"{message} (uri={uri})" if uri else message)
        self.uri = uri


def parse_oai_page(body: str, uri: str | None = None) -> FeedPage:
    """Parse one OAI-PMH ``ListRecords`` response in the ``arXiv`` metadata format."""
    root = _parse_xml(body, uri)

    error = root.find("oai:error", OAI_NS)
    if error is not None:
        code = error.get("code", "")
        if code == _OAI_EMPTY_RESULT_CODE:
            LOGGER.info("OAI feed reported no matching records uri=%s", uri)
            return FeedPage(records=[], entry_count=0, next_token=None)
        raise MalformedPageError(f"OAI-PMH error {code}: {_text(error)}", uri)

    list_records = root.find("oai:ListRecords", OAI_NS)
    if list_records is None:
        raise MalformedPageError("OAI-PMH response has no ListRecords element", uri)

    entries = list_records.findall("oai:record", OAI_NS)
    records: list[RawRecord] = []
    for entry in entries:
        record = _oai_record(entry)
        if _keep(record):
            records.append(record)

    token_elem = list_records.find("oai:resumptionToken", OAI_NS)
    next_token = _text(token_elem) or None
    return FeedPage(records=records, entry_count=len(entries), next_token=next_token)


def parse_atom_page(body: str, uri: str | None = None) -> FeedPage:
    """Parse one arXiv query API (Atom) response."""
    root = _parse_xml(body, uri)

    entries = root.findall("atom:entry", ATOM_NS)
    records: list[RawRecord] = []
    for entry in entries:
        entry_id = _text(entry.find("atom:id", ATOM_NS))
        if _ATOM_ERROR_MARKER in entry_id:
            # The query API reports bad requests as a single entry, with HTTP 200.
            message = _clean(_text(entry.find("atom:summary", ATOM_NS)))
            raise MalformedPageError(f"arXiv API error: {message or entry_id}", uri)
        record = RawRecord(
            raw_id=entry_id,
            title=_clean(_text(entry.find("atom:title", ATOM_NS))),
            abstract=_clean(_text(entry.find("atom:summary", ATOM_NS))),
            authors=tuple(
                name
                for name in (
                    _clean(_text(author.find("atom:name", ATOM_NS)))
                    for author in entry.findall("atom:author", ATOM_NS)
                )
                if name
            ),
            created=_parse_timestamp(_text(entry.find("atom:published", ATOM_NS))),
        )
        if _keep(record):
            records.append(record)

    return FeedPage(records=records, entry_count=len(entries), next_token=None)


def _oai_record(entry: ET.Element) -> RawRecord:
    header = entry.find("oai:header", OAI_NS)
    header_id = _text(header.find("oai:identifier", OAI_NS)) if header is not None else ""
    deleted = header is not None and header.get("status", "").lower() == "deleted"

    meta = entry.find("oai:metadata/arxiv:arXiv", OAI_NS)
    if meta is None:
        return RawRecord(raw_id=header_id, deleted=deleted)

    authors: list[str] = []
    for author in meta.findall("arxiv:authors/arxiv:author", OAI_NS):
        parts = [
            _clean(_text(author.find(f"arxiv:{tag}", OAI_NS)))
            for tag in ("forenames", "keyname", "suffix")
        ]
        name = " ".join(part for part in parts if part)
        if name:
            authors.append(name)

    return RawRecord(
        raw_id=_text(meta.find("arxiv:id", OAI_NS)) or header_id,
        title=_clean(_text(meta.find("arxiv:title", OAI_NS))),
        abstract=_clean(_text(meta.find("arxiv:abstract", OAI_NS))),
        authors=tuple(authors),
        created=_parse_timestamp(_text(meta.find("arxiv:created", OAI_NS))),
        deleted=deleted,
    )


def _keep(record: RawRecord) -> bool:
    if record.deleted:
        LOGGER.debug("Dropping deleted record raw_id=%s", record.raw_id)
        return False
    if not record.paper_id:
        LOGGER.debug("Dropping record without identifier title=%r", record.title[:80])
        return False
    return True


def _parse_xml(body: str, uri: str | None) -> ET.Element:
    try:
        return ET.fromstring(body)
    except ET.ParseError as exc:
        raise MalformedPageError(f"Feed page is not well-formed XML: {exc}", uri) from exc


def _parse_timestamp(raw: str) -> datetime | None:
    if not raw:
        return None

    # arXiv returns RFC3339 timestamps with trailing Z, or bare dates in OAI metadata.
    value = raw.replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _text(elem: ET.Element | None) -> str:
    if elem is None:
        return ""
    return "".join(elem.itertext()).strip()


def _clean(text: str) -> str:
    return " ".join(text.split())
