"""
Stats Service: application layer orchestrator.

Coordinates reading cards from the repository and computing metrics over them.
"""

import logging
from datetime import datetime

from noteflash.domain.cards import CardRepository
from noteflash.domain.constants import ALL_DECKS, DEFAULT_NEW_CARDS_PER_DAY, FORECAST_DAYS

from .metrics_calculator import MetricsCalculator, RetentionMetrics, ReviewStats

logger = logging.getLogger(__name__)


class StatsService:
    """
    Application service for collection statistics.

    Depends on the CardRepository abstraction, not a concrete store.
    """

    def __init__(
        self,
        repo: CardRepository,
        calculator: MetricsCalculator | None = None,
        new_cards_per_day: int = DEFAULT_NEW_CARDS_PER_DAY,
    ):
        """
        Args:
            repo: The repository (port) holding the collection.
            calculator: Optional custom calculator; uses default if not provided.
            new_cards_per_day: Daily new-card cap used for the workload numbers.
        """
        self._repo = repo
        self._calc = calculator or MetricsCalculator()
        self._new_cards_per_day = new_cards_per_day

    def retention(self, deck: str = ALL_DECKS) -> RetentionMetrics:
        return self._calc.retention(self._repo.list_cards(), deck=deck)

    def today(self, deck: str = ALL_DECKS, now: datetime | None = None) -> ReviewStats:
        return self._calc.review_stats(
            self._repo.list_cards(),
            deck=deck,
            now=now,
            new_cards_per_day=self._new_cards_per_day,
        )

    def forecast(
        self, deck: str = ALL_DECKS, days: int = FORECAST_DAYS, now: datetime | None = None
    ) -> dict[str, int]:
        return self._calc.forecast(self._repo.list_cards(), deck=deck, days=days, now=now)

    def summary(self, deck: str = ALL_DECKS, now: datetime | None = None) -> dict:
        """
        Combined retention and workload figures, ready for JSON output.
        """
        retention = self.retention(deck)
        today = self.today(deck, now=now)
        logger.debug(f"Computed stats for deck {deck!r}: {today.total} cards")

        return {
            "deck": deck,
            "total": today.total,
            "due_today": today.due_today,
            "new_today": today.new_today,
            "reviewed_today": today.reviewed_today,
            "remaining": today.remaining,
            "maturity_rate": round(retention.maturity_rate, 1),
            "average_ease_factor": round(retention.average_ease_factor, 2),
            "average_interval": round(retention.average_interval, 1),
            "total_repetitions": retention.total_repetitions,
        }
