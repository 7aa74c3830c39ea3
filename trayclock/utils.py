from __future__ import annotations

from datetime import datetime


def safe_int(value: str | None, default: int | None) -> int | None:
    if value is None:
        return default
    try:
        return int(value)
    except Exception:
        return default


def ms_until_next_minute(now: datetime) -> int:
    return (60 - now.second) * 1000
