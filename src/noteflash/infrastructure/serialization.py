"""
Conversion between card models and plain dicts (YAML/JSON documents).

Card documents use snake_case keys. Simple-store records may also use
camelCase keys (easeFactor, reviewCount, ...).
"""

from datetime import datetime, timezone
from typing import Any

from noteflash.domain.cards import Card, CardStatus, SimpleCardRecord
from noteflash.domain.constants import DEFAULT_DECK, DEFAULT_EASE_FACTOR
from noteflash.domain.errors import CollectionFormatError

_CAMEL_KEYS = {
    "easeFactor": "ease_factor",
    "reviewCount": "review_count",
    "lastReviewed": "last_reviewed",
    "nextReview": "next_review",
    "relatedCardIds": "related_ids",
}


def _parse_datetime(value: Any, field_name: str) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            raise CollectionFormatError(f"Invalid timestamp for {field_name}: {value!r}") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_status(value: Any) -> CardStatus | None:
    if value is None:
        return None
    try:
        return CardStatus(str(value).lower())
    except ValueError:
        raise CollectionFormatError(f"Unknown card status: {value!r}") from None


def _strings(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)


def _normalize_keys(data: dict[str, Any]) -> dict[str, Any]:
    return {_CAMEL_KEYS.get(k, k): v for k, v in data.items()}


def card_to_dict(card: Card) -> dict[str, Any]:
    return {
        "id": card.id,
        "front": card.front,
        "back": card.back,
        "deck": card.deck,
        "tags": list(card.tags),
        "status": card.status.value,
        "interval": card.interval,
        "ease_factor": card.ease_factor,
        "repetitions": card.repetitions,
        "last_reviewed": _format_datetime(card.last_reviewed),
        "next_review": _format_datetime(card.next_review),
        "related_ids": list(card.related_ids),
    }


def card_from_dict(data: dict[str, Any]) -> Card:
    if not isinstance(data, dict):
        raise CollectionFormatError(f"Card entry must be a mapping, got {type(data).__name__}")
    data = _normalize_keys(data)
    if not data.get("id"):
        raise CollectionFormatError("Card entry is missing an id")

    next_review = _parse_datetime(data.get("next_review"), "next_review")
    if next_review is None:
        raise CollectionFormatError(f"Card {data['id']} is missing next_review")

    try:
        return Card(
            id=str(data["id"]),
            front=str(data.get("front") or ""),
            back=str(data.get("back") or ""),
            deck=str(data.get("deck") or DEFAULT_DECK),
            tags=_strings(data.get("tags")),
            status=_parse_status(data.get("status")) or CardStatus.NEW,
            interval=float(data.get("interval") or 0),
            ease_factor=float(data.get("ease_factor") or DEFAULT_EASE_FACTOR),
            repetitions=int(data.get("repetitions") or 0),
            last_reviewed=_parse_datetime(data.get("last_reviewed"), "last_reviewed"),
            next_review=next_review,
            related_ids=_strings(data.get("related_ids")),
        )
    except (TypeError, ValueError) as e:
        raise CollectionFormatError(f"Invalid card {data['id']}: {e}") from e


def simple_record_from_dict(data: dict[str, Any], now: datetime) -> SimpleCardRecord:
    """
    Parse a record of the simple three-state store.

    Missing next_review defaults to `now` (due immediately), as the simple
    store does for freshly added cards.
    """
    if not isinstance(data, dict):
        raise CollectionFormatError(f"Record must be a mapping, got {type(data).__name__}")
    data = _normalize_keys(data)
    if not data.get("id"):
        raise CollectionFormatError("Record is missing an id")

    try:
        return SimpleCardRecord(
            id=str(data["id"]),
            front=str(data.get("front") or ""),
            back=str(data.get("back") or ""),
            deck=str(data.get("deck") or DEFAULT_DECK),
            tags=_strings(data.get("tags")),
            interval=float(data.get("interval") or 0),
            ease_factor=float(data.get("ease_factor") or DEFAULT_EASE_FACTOR),
            review_count=int(data.get("review_count") or 0),
            last_reviewed=_parse_datetime(data.get("last_reviewed"), "last_reviewed"),
            next_review=_parse_datetime(data.get("next_review"), "next_review") or now,
            status=_parse_status(data.get("status")),
        )
    except (TypeError, ValueError) as e:
        raise CollectionFormatError(f"Invalid record {data['id']}: {e}") from e
