"""Category code helpers: config parsing and feed-specific addressing."""

from __future__ import annotations


def parse_category_list(raw: str) -> list[str]:
    """Split a comma-separated category list, keeping configured order."""
    seen: dict[str, None] = {}
    for part in (raw or "").split(","):
        code = part.strip()
        if code:
            seen.setdefault(code, None)
    return list(seen)


def split_category(code: str) -> tuple[str, str] | None:
    """Return ``(archive, subject)`` for ``"cs.AI"``, or None when malformed."""
    archive, sep, subject = code.strip().partition(".")
    if not sep or not archive or not subject:
        return None
    return archive, subject


def to_oai_set(code: str) -> str | None:
    """OAI-PMH set spec for a category, e.g. ``cs.AI`` -> ``cs:cs:AI``."""
    parts = split_category(code)
    if parts is None:
        return None
    archive, subject = parts
    return f"{archive}:{archive}:{subject}"


def to_atom_query(code: str) -> str | None:
    """Query API selector for a category, e.g. ``cs.AI`` -> ``cat:cs.AI``."""
    if split_category(code) is None:
        return None
    return f"cat:{code.strip()}"
