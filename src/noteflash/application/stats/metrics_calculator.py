"""
Metrics calculator for deriving insights from a card collection.

This is a pure computation module with no I/O.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from noteflash.application.scheduling.base import ensure_aware, utcnow
from noteflash.application.selection import due_cards, new_cards
from noteflash.domain.cards import Card, CardStatus
from noteflash.domain.constants import (
    ALL_DECKS,
    DEFAULT_EASE_FACTOR,
    DEFAULT_NEW_CARDS_PER_DAY,
    FORECAST_DAYS,
    MATURE_INTERVAL_DAYS,
)


@dataclass
class RetentionMetrics:
    """
    Collection-wide retention indicators.
    """

    card_count: int
    maturity_rate: float  # % of cards in review with interval >= 21 days
    average_ease_factor: float
    average_interval: float
    total_repetitions: int


@dataclass
class ReviewStats:
    """Workload for the current day."""

    total: int
    due_today: int
    new_today: int  # New cards available, capped by the daily limit
    reviewed_today: int

    @property
    def remaining(self) -> int:
        return max(0, self.due_today + self.new_today)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


class MetricsCalculator:
    """
    Computes derived metrics from Card objects.

    Stateless and side-effect free.
    """

    def retention(self, cards: Iterable[Card], deck: str = ALL_DECKS) -> RetentionMetrics:
        """
        Maturity rate, averages and repetition totals for a deck.
        """
        selected = [c for c in cards if deck == ALL_DECKS or c.deck == deck]
        if not selected:
            return RetentionMetrics(
                card_count=0,
                maturity_rate=0.0,
                average_ease_factor=DEFAULT_EASE_FACTOR,
                average_interval=0.0,
                total_repetitions=0,
            )

        mature = sum(
            1
            for c in selected
            if c.status is CardStatus.REVIEW and c.interval >= MATURE_INTERVAL_DAYS
        )
        count = len(selected)
        return RetentionMetrics(
            card_count=count,
            maturity_rate=mature / count * 100,
            average_ease_factor=sum(c.ease_factor for c in selected) / count,
            average_interval=sum(c.interval for c in selected) / count,
            total_repetitions=sum(c.repetitions for c in selected),
        )

    def review_stats(
        self,
        cards: Iterable[Card],
        deck: str = ALL_DECKS,
        now: datetime | None = None,
        new_cards_per_day: int = DEFAULT_NEW_CARDS_PER_DAY,
    ) -> ReviewStats:
        now = ensure_aware(now) if now is not None else utcnow()
        snapshot = [c for c in cards if deck == ALL_DECKS or c.deck == deck]
        day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)

        return ReviewStats(
            total=len(snapshot),
            due_today=len(due_cards(snapshot, now=now)),
            new_today=len(new_cards(snapshot, limit=new_cards_per_day)),
            reviewed_today=sum(
                1
                for c in snapshot
                if c.last_reviewed is not None and ensure_aware(c.last_reviewed) >= day_start
            ),
        )

    def forecast(
        self,
        cards: Iterable[Card],
        deck: str = ALL_DECKS,
        days: int = FORECAST_DAYS,
        now: datetime | None = None,
    ) -> dict[str, int]:
        """
        Number of cards falling due on each of the next `days` days.

        Keys are ISO dates starting today. Cards already overdue are not counted.
        """
        now = ensure_aware(now) if now is not None else utcnow()
        today = now.date()
        forecast = {(today + timedelta(days=i)).isoformat(): 0 for i in range(days)}

        for card in cards:
            if deck != ALL_DECKS and card.deck != deck:
                continue
            due = ensure_aware(card.next_review)
            if due < now:
                continue
            key = due.date().isoformat()
            if key in forecast:
                forecast[key] += 1

        return forecast

    def due_within(
        self,
        cards: Iterable[Card],
        days: int,
        deck: str = ALL_DECKS,
        now: datetime | None = None,
    ) -> int:
        """Count cards (new ones included) due within `days` days."""
        now = ensure_aware(now) if now is not None else utcnow()
        horizon = now + timedelta(days=days)
        return sum(
            1
            for c in cards
            if (deck == ALL_DECKS or c.deck == deck) and ensure_aware(c.next_review) <= horizon
        )

    def next_review_text(self, card: Card, now: datetime | None = None) -> str:
        """Human-readable time until the card is due."""
        now = ensure_aware(now) if now is not None else utcnow()
        delta = ensure_aware(card.next_review) - now
        seconds = delta.total_seconds()

        if seconds <= 0:
            return "Due now"
        if seconds < 3600:
            return f"Due in {_plural(math.ceil(seconds / 60), 'minute')}"
        if seconds < 86400:
            return f"Due in {_plural(math.ceil(seconds / 3600), 'hour')}"

        days = math.ceil(seconds / 86400)
        if days == 1:
            return "Due tomorrow"
        if days < 7:
            return f"Due in {days} days"
        if days < 30:
            return f"Due in {_plural(days // 7, 'week')}"
        return f"Due in {_plural(days // 30, 'month')}"
