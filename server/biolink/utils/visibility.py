# server/biolink/utils/visibility.py
"""Read-time gate for links scheduled to publish in the future."""

import time
from typing import Iterable, List, Optional


def now_ms() -> int:
    return int(time.time() * 1000)


def _scheduled_at(link) -> Optional[int]:
    if isinstance(link, dict):
        return link.get("scheduled_at")
    return getattr(link, "scheduled_at", None)


def is_visible(link, now: Optional[int] = None) -> bool:
    scheduled_at = _scheduled_at(link)
    if scheduled_at is None:
        return True
    if now is None:
        now = now_ms()
    return scheduled_at <= now


def filter_visible(links: Iterable, now: Optional[int] = None) -> List:
    if now is None:
        now = now_ms()
    return [link for link in links if is_visible(link, now)]


def schedule_state(link, now: Optional[int] = None) -> dict:
    if now is None:
        now = now_ms()
    scheduled_at = _scheduled_at(link)
    visible = is_visible(link, now)
    return {
        "scheduled_at": scheduled_at,
        "is_scheduled": scheduled_at is not None and not visible,
        "is_visible": visible,
    }
