from datetime import timedelta

import pytest

from noteflash.application.migration import (
    convert_record,
    infer_status,
    migrate_simple_cards,
    repetitions_for,
)
from noteflash.domain.cards import CardStatus, SimpleCardRecord


@pytest.fixture
def records(now):
    return [
        SimpleCardRecord(id="fresh", next_review=now, front="hola", back="hello"),
        SimpleCardRecord(
            id="learning",
            next_review=now + timedelta(days=2),
            interval=2,
            review_count=1,
            last_reviewed=now - timedelta(days=1),
        ),
        SimpleCardRecord(
            id="mature",
            next_review=now + timedelta(days=10),
            interval=10,
            ease_factor=2.3,
            review_count=5,
            last_reviewed=now - timedelta(days=10),
            deck="Spanish",
            tags=("verbs",),
        ),
    ]


def test_infer_status(now):
    assert infer_status(SimpleCardRecord(id="a", next_review=now)) is CardStatus.NEW
    assert infer_status(SimpleCardRecord(id="a", next_review=now, interval=8)) is CardStatus.REVIEW
    assert infer_status(SimpleCardRecord(id="a", next_review=now, interval=7)) is CardStatus.LEARNING
    assert (
        infer_status(SimpleCardRecord(id="a", next_review=now, review_count=2))
        is CardStatus.LEARNING
    )
    explicit = SimpleCardRecord(id="a", next_review=now, interval=30, status=CardStatus.LEARNING)
    assert infer_status(explicit) is CardStatus.LEARNING


def test_repetitions_for():
    assert repetitions_for(CardStatus.NEW, 4) == 0
    assert repetitions_for(CardStatus.LEARNING, 0) == 1
    assert repetitions_for(CardStatus.LEARNING, 5) == 2
    assert repetitions_for(CardStatus.REVIEW, 1) == 3
    assert repetitions_for(CardStatus.REVIEW, 9) == 9


def test_convert_unreviewed_record(records, now):
    card = convert_record(records[0], now=now)

    assert card.id == "fresh"
    assert card.status is CardStatus.NEW
    assert card.repetitions == 0
    assert card.last_reviewed is None
    assert card.next_review == now
    assert card.front == "hola"


def test_convert_reviewed_record(records, now):
    card = convert_record(records[2], now=now)

    assert card.status is CardStatus.REVIEW
    assert card.repetitions == 5
    assert card.interval == 10
    assert card.ease_factor == 2.3
    assert card.deck == "Spanish"
    assert card.tags == ("verbs",)
    assert card.last_reviewed == now - timedelta(days=10)
    assert card.next_review == now + timedelta(days=10)


def test_convert_clamps_ease(now):
    record = SimpleCardRecord(id="x", next_review=now, interval=3, ease_factor=1.1, review_count=2)
    assert convert_record(record, now=now).ease_factor == 1.3


def test_convert_missing_last_reviewed(now):
    record = SimpleCardRecord(id="x", next_review=now, interval=3, review_count=2)
    assert convert_record(record, now=now).last_reviewed == now


def test_migration(records, repo, now):
    result = migrate_simple_cards(records, repo, now=now)

    assert result.migrated == 3
    assert result.skipped == 0
    assert result.migrated_ids == ["fresh", "learning", "mature"]
    assert [c.id for c in repo] == ["fresh", "learning", "mature"]


def test_migration_is_idempotent(records, repo, now):
    migrate_simple_cards(records, repo, now=now)
    snapshot = repo.list_cards()

    result = migrate_simple_cards(records, repo, now=now + timedelta(days=1))

    assert result.migrated == 0
    assert result.skipped == 3
    assert repo.list_cards() == snapshot


def test_existing_cards_never_overwritten(records, repo, make_card, now):
    existing = make_card("mature", status=CardStatus.REVIEW, interval=99.0)
    repo.add(existing)

    result = migrate_simple_cards(records, repo, now=now)

    assert result.skipped == 1
    assert repo.get("mature") == existing
