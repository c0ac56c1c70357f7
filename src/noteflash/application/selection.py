"""
Card selection queries over a collection snapshot.

Pure functions: no I/O, no mutation. Empty collections and unknown decks
simply yield empty results.
"""

from collections.abc import Iterable
from datetime import datetime

from noteflash.application.scheduling.base import ensure_aware, utcnow
from noteflash.domain.cards import Card, CardStatus
from noteflash.domain.constants import (
    ALL_DECKS,
    DEFAULT_NEW_CARDS_PER_DAY,
    DEFAULT_RELATED_LIMIT,
)


def _in_deck(card: Card, deck: str) -> bool:
    return deck == ALL_DECKS or card.deck == deck


def _truncate(cards: list[Card], limit: int | None) -> list[Card]:
    if limit is None:
        return cards
    return cards[: max(limit, 0)]


def due_cards(
    cards: Iterable[Card],
    deck: str = ALL_DECKS,
    now: datetime | None = None,
    limit: int | None = None,
) -> list[Card]:
    """
    Cards already introduced whose next review has passed.

    Args:
        cards: The collection snapshot.
        deck: Deck name, or 'all'.
        now: Reference time; defaults to the current UTC time.
        limit: Keep only the first `limit` cards (None keeps all).

    Returns:
        Due cards, most overdue first.
    """
    now = ensure_aware(now) if now is not None else utcnow()
    due = [
        card
        for card in cards
        if card.status is not CardStatus.NEW
        and _in_deck(card, deck)
        and ensure_aware(card.next_review) <= now
    ]
    due.sort(key=lambda card: ensure_aware(card.next_review))
    return _truncate(due, limit)


def new_cards(
    cards: Iterable[Card],
    deck: str = ALL_DECKS,
    limit: int | None = DEFAULT_NEW_CARDS_PER_DAY,
) -> list[Card]:
    """
    Never-reviewed cards in insertion order, capped by the daily new-card limit.
    """
    fresh = [card for card in cards if card.status is CardStatus.NEW and _in_deck(card, deck)]
    return _truncate(fresh, limit)


def find_card(cards: Iterable[Card], card_id: str) -> Card | None:
    return next((card for card in cards if card.id == card_id), None)


def related_cards(
    cards: Iterable[Card],
    card_id: str,
    limit: int = DEFAULT_RELATED_LIMIT,
) -> list[Card]:
    """
    Cards related to `card_id`: explicit links first, then shared tags.

    Returns an empty list when the card is unknown.
    """
    snapshot = list(cards)
    card = find_card(snapshot, card_id)
    if card is None:
        return []

    by_id = {c.id: c for c in snapshot}
    related = [by_id[rid] for rid in card.related_ids if rid in by_id and rid != card_id]

    if len(related) < limit and card.tags:
        seen = {c.id for c in related} | {card_id}
        tags = set(card.tags)
        for other in snapshot:
            if len(related) >= limit:
                break
            if other.id not in seen and tags.intersection(other.tags):
                related.append(other)
                seen.add(other.id)

    return related[:limit]
