"""
In-memory card repository.

Keeps cards in an insertion-ordered dict; the order new cards are added is
the order new-card selection returns them.
"""

from collections.abc import Iterable

from noteflash.domain.cards import Card, CardRepository
from noteflash.domain.errors import CardNotFoundError


class InMemoryCardRepository(CardRepository):
    def __init__(self, cards: Iterable[Card] = ()):
        self._cards: dict[str, Card] = {}
        for card in cards:
            self.add(card)

    def get(self, card_id: str) -> Card:
        try:
            return self._cards[card_id]
        except KeyError:
            raise CardNotFoundError(card_id) from None

    def list_cards(self) -> list[Card]:
        return list(self._cards.values())

    def add(self, card: Card) -> None:
        if card.id in self._cards:
            raise ValueError(f"Card {card.id} already exists")
        self._cards[card.id] = card

    def save(self, card: Card) -> None:
        if card.id not in self._cards:
            raise CardNotFoundError(card.id)
        self._cards[card.id] = card

    def contains(self, card_id: str) -> bool:
        return card_id in self._cards
