import pytest

from noteflash.domain.errors import CardNotFoundError
from noteflash.infrastructure.adapters import InMemoryCardRepository


def test_add_and_get(repo, make_card):
    card = make_card("a")
    repo.add(card)

    assert repo.get("a") == card
    assert repo.contains("a")
    assert len(repo) == 1


def test_insertion_order(make_card):
    repo = InMemoryCardRepository([make_card("b"), make_card("a"), make_card("c")])
    assert [c.id for c in repo.list_cards()] == ["b", "a", "c"]


def test_duplicate_add_rejected(repo, make_card):
    repo.add(make_card("a"))
    with pytest.raises(ValueError, match="already exists"):
        repo.add(make_card("a"))


def test_get_unknown(repo):
    with pytest.raises(CardNotFoundError) as exc:
        repo.get("ghost")
    assert str(exc.value) == "Card not found: ghost"


def test_save_replaces(repo, make_card):
    repo.add(make_card("a"))
    repo.save(make_card("a", front="updated"))

    assert repo.get("a").front == "updated"


def test_save_unknown(repo, make_card):
    with pytest.raises(CardNotFoundError):
        repo.save(make_card("ghost"))
