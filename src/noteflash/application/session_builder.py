"""
Session builder for interleaved study sessions.

Builds ordered study queues by:
1. Opening with a short warm-up of due cards, then new cards
2. Interleaving the rest in blocks (4 due cards, then 1 new card)
3. Re-inserting cards within the sitting according to how they were rated

In-session re-insertion is separate from SM-2 date scheduling: every rating
still runs the scheduling policy, and the queue only decides what comes
back before the sitting ends.
"""

import logging
from collections import Counter
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from noteflash.application.quality import (
    QualityScale,
    Rating,
    SessionTier,
    get_scale,
    tier_for_quality,
)
from noteflash.application.scheduling.base import ensure_aware, utcnow
from noteflash.domain.cards import Card, SchedulingPolicy, SessionCard
from noteflash.domain.constants import (
    BLOCK_DUE,
    BLOCK_NEW,
    HARD_REINSERT_OFFSET,
    NORMAL_REINSERT_BASE,
    NORMAL_REINSERT_MAX,
    WARMUP_DUE,
    WARMUP_NEW,
)

logger = logging.getLogger(__name__)

ReviewCallback = Callable[[Card], None]


class StudyQueue:
    """
    Index-addressable study queue.

    Insert positions past the end are clamped to the end.
    """

    def __init__(self, items: Iterable[SessionCard] = ()):
        self._items: list[SessionCard] = list(items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[SessionCard]:
        return iter(self._items)

    def __getitem__(self, index: int) -> SessionCard:
        return self._items[index]

    def ids(self) -> list[str]:
        return [item.id for item in self._items]

    def remove_at(self, index: int) -> SessionCard:
        if not 0 <= index < len(self._items):
            raise IndexError(f"Queue position {index} out of range (size {len(self._items)})")
        return self._items.pop(index)

    def insert_at(self, index: int, item: SessionCard) -> int:
        """Insert item at index (clamped to [0, len]) and return the position used."""
        position = max(0, min(index, len(self._items)))
        self._items.insert(position, item)
        return position


def build_session(
    due: Sequence[Card],
    new: Sequence[Card],
    warmup_due: int = WARMUP_DUE,
    warmup_new: int = WARMUP_NEW,
    block_due: int = BLOCK_DUE,
    block_new: int = BLOCK_NEW,
) -> list[SessionCard]:
    """
    Interleave due and new cards into one study queue.

    Args:
        due: Due cards, already in priority order.
        new: New cards, already capped by the daily limit.
        warmup_due: Due cards at the head of the queue.
        warmup_new: New cards following the due warm-up.
        block_due: Due cards per interleaving block.
        block_new: New cards closing each block.

    Returns:
        Session cards in study order. Every input card appears exactly once.
    """
    if block_due < 1 or block_new < 1:
        raise ValueError("Interleaving blocks need at least one due and one new card")
    if warmup_due < 0 or warmup_new < 0:
        raise ValueError("Warm-up sizes cannot be negative")

    due_entries = [SessionCard(card=card) for card in due]
    new_entries = [SessionCard(card=card, is_new=True) for card in new]

    queue = due_entries[:warmup_due] + new_entries[:warmup_new]
    due_rest = due_entries[warmup_due:]
    new_rest = new_entries[warmup_new:]

    d = n = 0
    while d < len(due_rest) or n < len(new_rest):
        queue.extend(due_rest[d : d + block_due])
        d += block_due
        queue.extend(new_rest[n : n + block_new])
        n += block_new

    return queue


@dataclass
class SessionStats:
    """Aggregate statistics for one sitting. Never fed back into scheduling."""

    started_at: datetime
    finished_at: datetime | None = None
    total_reviews: int = 0
    new_cards_studied: int = 0
    seen_ids: set[str] = field(default_factory=set)
    tier_counts: Counter = field(default_factory=Counter)
    quality_counts: Counter = field(default_factory=Counter)

    @property
    def unique_cards(self) -> int:
        return len(self.seen_ids)

    def elapsed_seconds(self, now: datetime | None = None) -> float:
        end = self.finished_at or (ensure_aware(now) if now is not None else utcnow())
        return max(0.0, (end - self.started_at).total_seconds())

    def average_seconds(self, now: datetime | None = None) -> float:
        if self.total_reviews == 0:
            return 0.0
        return self.elapsed_seconds(now) / self.total_reviews

    def record(self, entry: SessionCard, quality: int, tier: SessionTier) -> None:
        self.total_reviews += 1
        self.seen_ids.add(entry.id)
        self.tier_counts[tier.value] += 1
        self.quality_counts[quality] += 1
        if entry.is_new and entry.repetitions_in_session == 1:
            self.new_cards_studied += 1

    def to_dict(self, now: datetime | None = None) -> dict:
        return {
            "unique_cards": self.unique_cards,
            "total_reviews": self.total_reviews,
            "new_cards_studied": self.new_cards_studied,
            "tiers": {tier.value: self.tier_counts[tier.value] for tier in SessionTier},
            "qualities": dict(sorted(self.quality_counts.items())),
            "elapsed_seconds": round(self.elapsed_seconds(now), 1),
            "average_seconds": round(self.average_seconds(now), 1),
        }


class StudySession:
    """
    One sitting over an ordered study queue.

    The current card is always `queue[position]`. Rating it runs the
    scheduling policy, then moves the card within (or out of) the queue.
    """

    def __init__(
        self,
        cards: Iterable[SessionCard],
        policy: SchedulingPolicy,
        scale: QualityScale | None = None,
        on_review: ReviewCallback | None = None,
        now: datetime | None = None,
    ):
        """
        Args:
            cards: Session cards in study order (see build_session).
            policy: Scheduling policy producing the real next-review dates.
            scale: Rating vocabulary; defaults to the three-level scale.
            on_review: Called with each updated card before the queue changes,
                typically to persist it.
            now: Session start time.
        """
        self.queue = StudyQueue(cards)
        self.policy = policy
        self.scale = scale or get_scale("three")
        self.position = 0
        self._on_review = on_review

        started = ensure_aware(now) if now is not None else utcnow()
        self.stats = SessionStats(started_at=started)
        if not self.queue:
            self.stats.finished_at = started

        logger.info(f"Study session started with {len(self.queue)} cards")

    @classmethod
    def from_pools(
        cls,
        due: Sequence[Card],
        new: Sequence[Card],
        policy: SchedulingPolicy,
        scale: QualityScale | None = None,
        on_review: ReviewCallback | None = None,
        now: datetime | None = None,
        **layout: int,
    ) -> "StudySession":
        """Build the interleaved queue and open a session over it."""
        return cls(
            build_session(due, new, **layout),
            policy=policy,
            scale=scale,
            on_review=on_review,
            now=now,
        )

    @property
    def current(self) -> SessionCard | None:
        if not self.queue:
            return None
        return self.queue[self.position]

    @property
    def is_finished(self) -> bool:
        return not self.queue

    def rate(self, rating: Rating, now: datetime | None = None) -> Card:
        """
        Rate the current card.

        Raises:
            InvalidQualityError: The rating is invalid; nothing changes.
            RuntimeError: The session has no cards left.
        """
        entry = self.current
        if entry is None:
            raise RuntimeError("Study session is finished")

        now = ensure_aware(now) if now is not None else utcnow()
        quality = self.scale.normalize(rating)
        updated = self.policy.review(entry.card, quality, now=now)

        if self._on_review is not None:
            self._on_review(updated)

        entry.card = updated
        entry.repetitions_in_session += 1
        entry.last_rating_in_session = quality

        tier = tier_for_quality(quality)
        self._reinsert(entry, tier)
        self.stats.record(entry, quality, tier)

        if self.is_finished:
            self.stats.finished_at = now
            logger.info(
                f"Study session finished: {self.stats.unique_cards} cards, "
                f"{self.stats.total_reviews} reviews"
            )
        return updated

    def _reinsert(self, entry: SessionCard, tier: SessionTier) -> None:
        position = self.position
        self.queue.remove_at(position)

        if tier is SessionTier.HARD:
            self.queue.insert_at(position + HARD_REINSERT_OFFSET, entry)
        elif tier is SessionTier.NORMAL:
            offset = min(NORMAL_REINSERT_BASE + entry.repetitions_in_session, NORMAL_REINSERT_MAX)
            self.queue.insert_at(position + offset, entry)
        # EASY: done for this sitting

        self.position = min(position, max(0, len(self.queue) - 1))
