"""Timestamp based identifiers for template cache folders."""

from __future__ import annotations

import random
from datetime import datetime


def generate_cache_name(now: datetime | None = None, rng: random.Random | None = None) -> str:
    """Return ``YYYYMMDDHHmmssSSS`` followed by a 4 digit random suffix."""

    moment = now or datetime.now()
    suffix = (rng or random).randint(0, 9999)
    return (
        f"{moment.year:04d}{moment.month:02d}{moment.day:02d}"
        f"{moment.hour:02d}{moment.minute:02d}{moment.second:02d}"
        f"{moment.microsecond // 1000:03d}{suffix:04d}"
    )


__all__ = ["generate_cache_name"]
