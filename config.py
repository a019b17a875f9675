"""Crawl configuration, read once from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from categories import parse_category_list

OAI_BASE_URL = "https://oaipmh.arxiv.org/oai"
ATOM_BASE_URL = "https://export.arxiv.org/api/query"
DEFAULT_BASE_URLS = {"oai": OAI_BASE_URL, "atom": ATOM_BASE_URL}
DEFAULT_USER_AGENT = "arxiv-digest-crawler/1.0"


@dataclass(frozen=True, slots=True)
class CrawlConfig:
    """Immutable inputs of one crawl. Timezones are resolved up front."""

    protocol: str
    base_url: str
    categories: tuple[str, ...]
    schedule_tz: ZoneInfo
    feed_tz: ZoneInfo
    anchor_hours: tuple[int, ...]
    page_size: int = 100
    request_timeout_seconds: float = 30.0
    retry_delay_seconds: float = 5.0
    page_delay_seconds: float = 3.0
    user_agent: str = DEFAULT_USER_AGENT


def load_crawl_config(env: dict[str, str] | None = None) -> CrawlConfig:
    """Build a CrawlConfig from environment variables (or a supplied mapping)."""
    env = os.environ if env is None else env

    protocol = env.get("FEED_PROTOCOL", "oai").strip().lower()
    if protocol not in DEFAULT_BASE_URLS:
        raise RuntimeError(f"FEED_PROTOCOL must be one of {sorted(DEFAULT_BASE_URLS)}, got {protocol!r}")

    categories = tuple(parse_category_list(env.get("ARXIV_CATEGORIES", "cs.AI")))
    if not categories:
        raise RuntimeError("ARXIV_CATEGORIES environment variable must list at least one category")

    return CrawlConfig(
        protocol=protocol,
        base_url=env.get("FEED_BASE_URL", "").strip() or DEFAULT_BASE_URLS[protocol],
        categories=categories,
        schedule_tz=_zone(env, "SCHEDULE_TIMEZONE", "Asia/Shanghai"),
        feed_tz=_zone(env, "FEED_TIMEZONE", "UTC"),
        anchor_hours=parse_hours(env.get("ANCHOR_HOURS", "10")),
        page_size=_positive_int(env, "PAGE_SIZE", "100"),
        request_timeout_seconds=_positive_float(env, "REQUEST_TIMEOUT_SECONDS", "30"),
        retry_delay_seconds=_non_negative_float(env, "RETRY_DELAY_SECONDS", "5"),
        page_delay_seconds=_non_negative_float(env, "PAGE_DELAY_SECONDS", "3"),
        user_agent=env.get("FEED_USER_AGENT", "").strip() or DEFAULT_USER_AGENT,
    )


def parse_hours(raw: str) -> tuple[int, ...]:
    """Parse ``"10"`` or ``"10,22"`` into sorted, unique anchor hours."""
    hours: set[int] = set()
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            hour = int(part)
        except ValueError as exc:
            raise RuntimeError(f"ANCHOR_HOURS contains a non-integer value: {part!r}") from exc
        if not 0 <= hour <= 23:
            raise RuntimeError(f"ANCHOR_HOURS values must be within 0-23, got {hour}")
        hours.add(hour)

    if not hours:
        raise RuntimeError("ANCHOR_HOURS environment variable must list at least one hour")
    return tuple(sorted(hours))


def _zone(env: dict[str, str], name: str, default: str) -> ZoneInfo:
    value = env.get(name, "").strip() or default
    try:
        return ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise RuntimeError(f"{name} is not a known timezone: {value!r}") from exc


def _positive_int(env: dict[str, str], name: str, default: str) -> int:
    raw = env.get(name, default)
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise RuntimeError(f"{name} must be positive, got {value}")
    return value


def _positive_float(env: dict[str, str], name: str, default: str) -> float:
    value = _non_negative_float(env, name, default)
    if value == 0:
        raise RuntimeError(f"{name} must be positive, got {value}")
    return value


def _non_negative_float(env: dict[str, str], name: str, default: str) -> float:
    raw = env.get(name, default)
    try:
        value = float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from exc
    if value < 0:
        raise RuntimeError(f"{name} must not be negative, got {value}")
    return value
