"""Migration of simple three-state store records into canonical SM-2 cards."""

import logging
from collections.abc import Iterable
from datetime import datetime

from noteflash.application.id_service import create_card
from noteflash.application.scheduling.base import ensure_aware, utcnow
from noteflash.domain.cards import (
    Card,
    CardRepository,
    CardStatus,
    MigrationResult,
    SimpleCardRecord,
)
from noteflash.domain.constants import MIN_EASE_FACTOR

logger = logging.getLogger(__name__)

REVIEW_STATUS_MIN_INTERVAL = 7


def infer_status(record: SimpleCardRecord) -> CardStatus:
    """Status for records that predate the explicit status field."""
    if record.status is not None:
        return record.status
    if record.interval > REVIEW_STATUS_MIN_INTERVAL:
        return CardStatus.REVIEW
    if record.interval > 0 or record.review_count > 0:
        return CardStatus.LEARNING
    return CardStatus.NEW


def repetitions_for(status: CardStatus, review_count: int) -> int:
    """
    Map a total review count onto consecutive successful repetitions.

    The simple store never tracked lapses, so this is an estimate.
    """
    if status is CardStatus.NEW:
        return 0
    if status is CardStatus.LEARNING:
        return min(review_count, 2) if review_count > 0 else 1
    if status is CardStatus.REVIEW:
        return max(3, review_count)
    return review_count


def convert_record(record: SimpleCardRecord, now: datetime | None = None) -> Card:
    """
    Convert one simple record into a canonical card.

    Unreviewed records become fresh new cards; reviewed ones keep their
    interval, ease and review dates.
    """
    now = ensure_aware(now) if now is not None else utcnow()
    fresh = create_card(
        front=record.front,
        back=record.back,
        deck=record.deck,
        tags=record.tags,
        card_id=record.id,
        now=now,
    )

    status = infer_status(record)
    if record.review_count <= 0 or status is CardStatus.NEW:
        return fresh

    last_reviewed = ensure_aware(record.last_reviewed) if record.last_reviewed else now
    return fresh.evolve(
        interval=record.interval,
        ease_factor=max(MIN_EASE_FACTOR, record.ease_factor),
        repetitions=repetitions_for(status, record.review_count),
        status=status,
        last_reviewed=last_reviewed,
        next_review=ensure_aware(record.next_review),
    )


def migrate_simple_cards(
    records: Iterable[SimpleCardRecord],
    target: CardRepository,
    now: datetime | None = None,
) -> MigrationResult:
    """
    Copy simple-store records into a canonical card repository.

    Records whose id already exists in the target are skipped and never
    overwritten, so re-running a migration is safe.

    Returns:
        MigrationResult with migrated and skipped counts.
    """
    result = MigrationResult()

    for record in records:
        if target.contains(record.id):
            result.skipped += 1
            logger.debug(f"Skipping {record.id}: already present")
            continue

        target.add(convert_record(record, now=now))
        result.migrated += 1
        result.migrated_ids.append(record.id)

    logger.info(f"Migration finished: {result.migrated} migrated, {result.skipped} skipped")
    return result
