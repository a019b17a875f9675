"""Crawl window calculation: "everything since the previous anchor"."""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Sequence

from models import TimeWindow

LOGGER = logging.getLogger(__name__)


def compute_window(
    now: datetime,
    schedule_tz: tzinfo,
    anchor_hours: Sequence[int],
    feed_tz: tzinfo = UTC,
) -> TimeWindow:
    """Return the half-open window ending at the current run's anchor.

    With a single anchor hour, ``end`` is today's anchor in ``schedule_tz`` and
    ``start`` is exactly 24 hours earlier. With several anchors (e.g. a morning
    and an evening run) ``end`` is the latest of today's anchors already reached
    by ``now`` (today's first anchor if none has been) and ``start`` is the
    anchor before it, which may fall on the previous day.

    Both bounds are returned in ``feed_tz``.
    """
    if now.tzinfo is None or now.utcoffset() is None:
        raise ValueError("compute_window requires a timezone-aware 'now'")

    hours = sorted(set(anchor_hours))
    if not hours:
        raise ValueError("At least one anchor hour is required")
    if hours[0] < 0 or hours[-1] > 23:
        raise ValueError(f"Anchor hours must be within 0-23, got {hours}")

    local_now = now.astimezone(schedule_tz)
    today = local_now.date()

    if len(hours) == 1:
        end = _at_hour(today, hours[0], schedule_tz)
        start = end.astimezone(UTC) - timedelta(hours=24)
    else:
        anchors = [_at_hour(today, hour, schedule_tz) for hour in hours]
        reached = [index for index, anchor in enumerate(anchors) if anchor <= local_now]
        index = reached[-1] if reached else 0
        end = anchors[index]
        if index > 0:
            start = anchors[index - 1]
        else:
            start = _at_hour(today - timedelta(days=1), hours[-1], schedule_tz)

    window = TimeWindow(start=start.astimezone(feed_tz), end=end.astimezone(feed_tz))
    LOGGER.debug(
        "Computed crawl window start=%s end=%s anchors=%s",
        window.start.isoformat(),
        window.end.isoformat(),
        hours,
    )
    return window


def _at_hour(day: date, hour: int, zone: tzinfo) -> datetime:
    return datetime.combine(day, time(hour=hour), tzinfo=zone)
