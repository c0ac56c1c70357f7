"""Service for creating cards with stable ids."""

import logging
from collections.abc import Iterable
from datetime import datetime

from ulid import ULID

from noteflash.application.scheduling.base import ensure_aware, utcnow
from noteflash.domain.cards import Card, CardStatus
from noteflash.domain.constants import CARD_ID_PREFIX, DEFAULT_DECK, DEFAULT_EASE_FACTOR

logger = logging.getLogger(__name__)


def generate_card_id() -> str:
    """Generate a stable card ID using ULID."""
    return f"{CARD_ID_PREFIX}{ULID()}"


def create_card(
    front: str = "",
    back: str = "",
    deck: str = DEFAULT_DECK,
    tags: Iterable[str] = (),
    card_id: str | None = None,
    now: datetime | None = None,
) -> Card:
    """
    Create a new card with SM-2 defaults, due immediately.
    """
    now = ensure_aware(now) if now is not None else utcnow()
    card = Card(
        id=card_id or generate_card_id(),
        front=front,
        back=back,
        deck=deck,
        tags=tuple(tags),
        interval=0.0,
        ease_factor=DEFAULT_EASE_FACTOR,
        repetitions=0,
        status=CardStatus.NEW,
        last_reviewed=None,
        next_review=now,
    )
    logger.debug(f"Created card {card.id} in deck {deck!r}")
    return card
