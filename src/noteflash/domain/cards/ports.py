"""
Ports (interfaces) for scheduling and card storage.

These define the contract that policies and infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from datetime import datetime

from .models import Card


class SchedulingPolicy(ABC):
    """
    Port for computing a card's next memory state from a review.

    Implementations:
        - StrictSm2Policy: Four-state SM-2 with learning/relearning ladders.
        - SimpleSm2Policy: Three-state SM-2 with a collapsed ease/interval policy.
    """

    name: str = ""

    @abstractmethod
    def review(self, card: Card, quality: int, now: datetime | None = None) -> Card:
        """
        Compute the card state after one review.

        Args:
            card: The card being reviewed.
            quality: Recall quality, an integer in [0, 5].
            now: Review time; defaults to the current UTC time.

        Returns:
            A new Card. The input card is never modified.

        Raises:
            InvalidQualityError: If quality is not an integer in [0, 5].
        """
        pass


class CardRepository(ABC):
    """
    Port for the external card store.

    Implementations:
        - InMemoryCardRepository: Insertion-ordered dict, used by tests and sessions.
        - YamlCardRepository: A YAML file holding one collection.
    """

    @abstractmethod
    def get(self, card_id: str) -> Card:
        """
        Fetch a card by id.

        Raises:
            CardNotFoundError: If no card has this id.
        """
        pass

    @abstractmethod
    def list_cards(self) -> list[Card]:
        """Return all cards in insertion order."""
        pass

    @abstractmethod
    def add(self, card: Card) -> None:
        """Insert a card. Fails with ValueError if the id already exists."""
        pass

    @abstractmethod
    def save(self, card: Card) -> None:
        """Replace the stored state of an existing card."""
        pass

    def contains(self, card_id: str) -> bool:
        return any(card.id == card_id for card in self.list_cards())

    def __iter__(self) -> Iterator[Card]:
        return iter(self.list_cards())

    def __len__(self) -> int:
        return len(self.list_cards())
