"""
Review Service: application layer orchestrator.

Coordinates rating normalization, the scheduling policy and the card store
for a single review.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime

from noteflash.application.quality import QualityScale, Rating, get_scale
from noteflash.application.selection import due_cards, new_cards
from noteflash.domain.cards import Card, CardRepository, SchedulingPolicy
from noteflash.domain.constants import ALL_DECKS, DEFAULT_NEW_CARDS_PER_DAY
from noteflash.domain.errors import CardNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class _CardLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class ReviewService:
    """
    Application service for recording reviews against a card store.

    Follows Dependency Inversion: depends on the CardRepository and
    SchedulingPolicy abstractions, not concrete implementations.

    Reviews of the same card are serialized; different cards never wait on
    each other.
    """

    def __init__(
        self,
        repo: CardRepository,
        policy: SchedulingPolicy,
        scale: QualityScale | None = None,
        new_cards_per_day: int = DEFAULT_NEW_CARDS_PER_DAY,
    ):
        self._repo = repo
        self._policy = policy
        self._scale = scale or get_scale("numeric")
        self._new_cards_per_day = new_cards_per_day
        self._locks: dict[str, _CardLock] = {}
        self._registry_lock = threading.Lock()

    @property
    def policy(self) -> SchedulingPolicy:
        return self._policy

    @property
    def scale(self) -> QualityScale:
        return self._scale

    @contextmanager
    def _lock_for(self, card_id: str) -> Iterator[None]:
        """
        Hold the lock of one card id.

        Entries are dropped once no thread holds or awaits the lock.
        """
        with self._registry_lock:
            entry = self._locks.get(card_id)
            if entry is None:
                entry = self._locks[card_id] = _CardLock()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._registry_lock:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._locks[card_id]

    def review(self, card_id: str, rating: Rating, now: datetime | None = None) -> Card | None:
        """
        Record one review and persist the new card state.

        Args:
            card_id: Id of the reviewed card.
            rating: Raw label or number on this service's scale.
            now: Review time; defaults to the current UTC time.

        Returns:
            The updated card, or None when the id is unknown (nothing is written).

        Raises:
            InvalidQualityError: The rating is invalid; nothing is written.
        """
        quality = self._scale.normalize(rating)

        with self._lock_for(card_id):
            try:
                card = self._repo.get(card_id)
            except CardNotFoundError:
                logger.warning(f"Review skipped: card {card_id} not found")
                return None

            updated = self._policy.review(card, quality, now=now)
            self._repo.save(updated)

        logger.info(
            f"Reviewed {card_id} (q={quality}): {updated.status.value}, "
            f"next review {updated.next_review.isoformat()}"
        )
        return updated

    def save_reviewed(self, card: Card) -> None:
        """Persist a card already reviewed elsewhere (e.g. by a StudySession)."""
        with self._lock_for(card.id):
            self._repo.save(card)

    def due(
        self, deck: str = ALL_DECKS, now: datetime | None = None, limit: int | None = None
    ) -> list[Card]:
        return due_cards(self._repo.list_cards(), deck=deck, now=now, limit=limit)

    def new(self, deck: str = ALL_DECKS, limit: int | None = None) -> list[Card]:
        return new_cards(
            self._repo.list_cards(),
            deck=deck,
            limit=self._new_cards_per_day if limit is None else limit,
        )
