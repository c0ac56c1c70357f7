"""
YAML file repository: infrastructure adapter for a card collection on disk.

The file holds a single mapping with a `cards` list. Every mutation rewrites
the file through a temporary sibling so a crash never leaves half a file.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from noteflash.domain.cards import Card, SimpleCardRecord
from noteflash.domain.errors import CollectionFormatError
from noteflash.infrastructure.serialization import (
    card_from_dict,
    card_to_dict,
    simple_record_from_dict,
)

from .memory_repository import InMemoryCardRepository

logger = logging.getLogger(__name__)


def _read_document(path: Path) -> Any:
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise CollectionFormatError(f"Could not parse {path}: {e}") from e


def _entries(doc: Any, path: Path, key: str = "cards") -> list:
    if doc is None:
        return []
    if isinstance(doc, list):
        return doc
    if isinstance(doc, dict):
        entries = doc.get(key, doc.get("flashcards", []))
        if entries is None:
            return []
        if isinstance(entries, list):
            return entries
    raise CollectionFormatError(f"{path}: expected a list of cards under '{key}'")


class YamlCardRepository(InMemoryCardRepository):
    """
    Card collection persisted as a YAML document.

    The whole collection is loaded on construction; `add` and `save`
    write it back immediately.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__()
        if self.path.exists():
            for entry in _entries(_read_document(self.path), self.path):
                card = card_from_dict(entry)
                self._cards[card.id] = card
            logger.debug(f"Loaded {len(self._cards)} cards from {self.path}")

    def add(self, card: Card) -> None:
        super().add(card)
        self.flush()

    def save(self, card: Card) -> None:
        super().save(card)
        self.flush()

    def flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        doc = {"cards": [card_to_dict(card) for card in self._cards.values()]}
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(
            yaml.safe_dump(doc, sort_keys=False, allow_unicode=True),
            encoding="utf-8",
        )
        os.replace(tmp, self.path)


def load_simple_records(path: Path, now: datetime) -> list[SimpleCardRecord]:
    """
    Read simple-store records from a YAML or JSON file.

    Accepts a bare list or a mapping with a `cards` (or `flashcards`) list.
    """
    path = Path(path)
    if not path.exists():
        raise CollectionFormatError(f"File not found: {path}")
    return [simple_record_from_dict(entry, now) for entry in _entries(_read_document(path), path)]
