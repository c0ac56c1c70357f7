"""
Strict SM-2 policy with learning and relearning step ladders.

State machine:
- new -> learning (first learning step), whatever the quality
- learning: success advances a step, graduating to review past the last step;
  failure restarts the ladder
- review: success applies the SM-2 ease formula and grows the interval
  (1 day, 6 days, then interval * ease); failure lapses into relearning
  with a flat ease penalty
- relearning: like learning, on its own ladder, graduating back to review
"""

import logging
from datetime import datetime

from noteflash.application.quality import is_success, validate_quality
from noteflash.domain.cards import Card, CardStatus, SchedulingPolicy
from noteflash.domain.constants import (
    GRADUATING_INTERVAL,
    LAPSE_EASE_PENALTY,
    LEARNING_STEPS,
    MIN_EASE_FACTOR,
    RELEARNING_STEPS,
    SECOND_INTERVAL,
)

from .base import ensure_aware, reviewed, round_half_up, sm2_ease, step_index, utcnow

logger = logging.getLogger(__name__)


class StrictSm2Policy(SchedulingPolicy):
    """
    Four-state SM-2 scheduling (new / learning / review / relearning).

    Stateless apart from its step ladders; safe to share between sessions.
    """

    name = "strict"

    def __init__(
        self,
        learning_steps: tuple[float, ...] | list[float] = LEARNING_STEPS,
        relearning_steps: tuple[float, ...] | list[float] = RELEARNING_STEPS,
    ):
        if not learning_steps or not relearning_steps:
            raise ValueError("Step ladders must contain at least one step")
        self.learning_steps = tuple(learning_steps)
        self.relearning_steps = tuple(relearning_steps)

    def review(self, card: Card, quality: int, now: datetime | None = None) -> Card:
        quality = validate_quality(quality)
        now = ensure_aware(now) if now is not None else utcnow()

        if card.status is CardStatus.NEW:
            updated = self._start_learning(card, now)
        elif card.status is CardStatus.LEARNING:
            updated = self._step(card, quality, now, self.learning_steps)
        elif card.status is CardStatus.RELEARNING:
            updated = self._step(card, quality, now, self.relearning_steps)
        else:
            updated = self._review(card, quality, now)

        logger.debug(
            f"[{self.name}] {card.id}: {card.status.value} -> {updated.status.value}, "
            f"q={quality}, interval={updated.interval:.4f}d, ease={updated.ease_factor:.2f}"
        )
        return updated

    def _start_learning(self, card: Card, now: datetime) -> Card:
        # The first quality is recorded by the caller but does not branch here.
        return reviewed(
            card,
            now,
            status=CardStatus.LEARNING,
            repetitions=0,
            interval=self.learning_steps[0],
        )

    def _step(
        self, card: Card, quality: int, now: datetime, ladder: tuple[float, ...]
    ) -> Card:
        if not is_success(quality):
            return reviewed(card, now, interval=ladder[0])

        next_step = step_index(ladder, card.interval) + 1
        if next_step >= len(ladder):
            return reviewed(
                card,
                now,
                status=CardStatus.REVIEW,
                repetitions=1,
                interval=GRADUATING_INTERVAL,
            )
        return reviewed(card, now, interval=ladder[next_step])

    def _review(self, card: Card, quality: int, now: datetime) -> Card:
        if not is_success(quality):
            return reviewed(
                card,
                now,
                status=CardStatus.RELEARNING,
                repetitions=0,
                interval=self.relearning_steps[0],
                ease_factor=max(MIN_EASE_FACTOR, card.ease_factor - LAPSE_EASE_PENALTY),
            )

        ease = sm2_ease(card.ease_factor, quality)
        repetitions = card.repetitions + 1
        if repetitions == 1:
            interval = GRADUATING_INTERVAL
        elif repetitions == 2:
            interval = SECOND_INTERVAL
        else:
            interval = round_half_up(card.interval * ease)

        return reviewed(
            card,
            now,
            ease_factor=ease,
            repetitions=repetitions,
            interval=interval,
        )
