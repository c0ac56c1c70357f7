"""Shared arithmetic for the SM-2 policies."""

import math
from datetime import datetime, timedelta, timezone

from noteflash.domain.cards import Card
from noteflash.domain.constants import MIN_EASE_FACTOR


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def sm2_ease(ease_factor: float, quality: int) -> float:
    """
    Canonical SM-2 ease update.

    EF' = max(1.3, EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)))
    """
    penalty = 5 - quality
    return max(MIN_EASE_FACTOR, ease_factor + (0.1 - penalty * (0.08 + penalty * 0.02)))


def round_half_up(value: float) -> float:
    """Round to the nearest whole day with halves rounding up (12.5 -> 13)."""
    return float(math.floor(value + 0.5))


def step_index(ladder: tuple[float, ...], interval: float) -> int:
    """Position of interval in a step ladder, or -1 if it is not a step."""
    for i, step in enumerate(ladder):
        if abs(step - interval) < 1e-9:
            return i
    return -1


def reviewed(card: Card, now: datetime, **changes) -> Card:
    """
    Stamp a review onto a card.

    next_review is always last_reviewed + interval, so sub-day steps keep
    their time of day.
    """
    interval = changes.get("interval", card.interval)
    return card.evolve(
        last_reviewed=now,
        next_review=now + timedelta(days=interval),
        **changes,
    )
