"""
Domain models for card memory state.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from noteflash.domain.constants import DEFAULT_DECK, DEFAULT_EASE_FACTOR


class CardStatus(str, Enum):
    """Learning status of a card."""

    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    RELEARNING = "relearning"


@dataclass(frozen=True)
class Card:
    """
    Memory state of a single flashcard.

    Attributes:
        id: Opaque unique identifier.
        interval: Days until the next review (fractional for sub-day steps).
        ease_factor: Interval growth multiplier, never below 1.3.
        repetitions: Consecutive successful recalls since the last lapse.
        status: Current learning status.
        last_reviewed: Time of the last review, None while the card is new.
        next_review: Time the card becomes due.
        deck: Grouping key used for filtering.
        tags: Labels for display and related-card lookup.
    """

    id: str
    next_review: datetime
    interval: float = 0.0
    ease_factor: float = DEFAULT_EASE_FACTOR
    repetitions: int = 0
    status: CardStatus = CardStatus.NEW
    last_reviewed: datetime | None = None
    deck: str = DEFAULT_DECK
    tags: tuple[str, ...] = ()

    # Content (for display purposes)
    front: str = ""
    back: str = ""
    related_ids: tuple[str, ...] = ()

    @property
    def is_new(self) -> bool:
        return self.status is CardStatus.NEW

    def evolve(self, **changes) -> "Card":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


@dataclass(frozen=True)
class SimpleCardRecord:
    """
    A card as kept by the simple three-state store.

    Only used as migration input; `status` may be missing in older records.
    """

    id: str
    next_review: datetime
    front: str = ""
    back: str = ""
    deck: str = DEFAULT_DECK
    tags: tuple[str, ...] = ()
    interval: float = 0.0
    ease_factor: float = DEFAULT_EASE_FACTOR
    review_count: int = 0
    last_reviewed: datetime | None = None
    status: CardStatus | None = None


@dataclass
class SessionCard:
    """
    A card inside one study session.

    The session counters only drive in-session re-insertion and are
    discarded when the session ends.
    """

    card: Card
    is_new: bool = False
    repetitions_in_session: int = 0
    last_rating_in_session: int | None = None

    @property
    def id(self) -> str:
        return self.card.id


@dataclass
class MigrationResult:
    """Outcome of a simple-store migration run."""

    migrated: int = 0
    skipped: int = 0
    migrated_ids: list[str] = field(default_factory=list)
