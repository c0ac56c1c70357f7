"""
Simplified three-state SM-2 policy (new / learning / review).

Failures always fall back to a one-day interval. Ease only grows on
quality >= 4; quality 3 keeps the ease and walks a short 1 -> 3 ladder.
"""

import logging
from datetime import datetime

from noteflash.application.quality import validate_quality
from noteflash.domain.cards import Card, CardStatus, SchedulingPolicy
from noteflash.domain.constants import (
    MIN_EASE_FACTOR,
    PASSING_QUALITY,
    SIMPLE_EASY_EASE_BONUS,
    SIMPLE_EASY_MULTIPLIER,
    SIMPLE_FAIL_EASE_PENALTY,
    SIMPLE_FIRST_EASY_INTERVAL,
    SIMPLE_MAX_EASE_FACTOR,
)

from .base import ensure_aware, reviewed, round_half_up, utcnow

logger = logging.getLogger(__name__)


class SimpleSm2Policy(SchedulingPolicy):
    """Three-state scheduling with flat ease adjustments."""

    name = "simple"

    def review(self, card: Card, quality: int, now: datetime | None = None) -> Card:
        quality = validate_quality(quality)
        now = ensure_aware(now) if now is not None else utcnow()

        if quality < PASSING_QUALITY:
            updated = reviewed(
                card,
                now,
                status=CardStatus.LEARNING,
                repetitions=0,
                interval=1.0,
                ease_factor=max(MIN_EASE_FACTOR, card.ease_factor - SIMPLE_FAIL_EASE_PENALTY),
            )
        else:
            if quality == PASSING_QUALITY:
                ease = card.ease_factor
                interval = self._normal_interval(card)
            else:
                ease = min(SIMPLE_MAX_EASE_FACTOR, card.ease_factor + SIMPLE_EASY_EASE_BONUS)
                if card.interval == 0:
                    interval = SIMPLE_FIRST_EASY_INTERVAL
                else:
                    interval = round_half_up(card.interval * ease * SIMPLE_EASY_MULTIPLIER)

            updated = reviewed(
                card,
                now,
                status=CardStatus.LEARNING if card.is_new else CardStatus.REVIEW,
                repetitions=card.repetitions + 1,
                interval=interval,
                ease_factor=ease,
            )

        logger.debug(
            f"[{self.name}] {card.id}: {card.status.value} -> {updated.status.value}, "
            f"q={quality}, interval={updated.interval:.0f}d, ease={updated.ease_factor:.2f}"
        )
        return updated

    @staticmethod
    def _normal_interval(card: Card) -> float:
        if card.interval == 0:
            return 1.0
        if card.interval == 1:
            return 3.0
        return round_half_up(card.interval * card.ease_factor)
