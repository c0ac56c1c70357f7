from datetime import datetime, timedelta, timezone

import pytest

from noteflash.domain.cards import Card, CardStatus
from noteflash.infrastructure.adapters import InMemoryCardRepository


@pytest.fixture
def now():
    """A fixed, timezone-aware reference time."""
    return datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_card(now):
    """Factory for cards with sensible defaults relative to `now`."""

    def _make(card_id="card_1", **fields):
        status = fields.pop("status", CardStatus.NEW)
        if status is not CardStatus.NEW:
            fields.setdefault("last_reviewed", now - timedelta(days=1))
            fields.setdefault("repetitions", 1)
            fields.setdefault("interval", 1.0)
        fields.setdefault("next_review", now)
        return Card(id=card_id, status=status, **fields)

    return _make


@pytest.fixture
def repo():
    return InMemoryCardRepository()


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Isolate config files and logs from the real home directory
    monkeypatch.setenv("HOME", str(home))
    for var in (
        "NOTEFLASH_POLICY",
        "NOTEFLASH_RATING_SCALE",
        "NOTEFLASH_COLLECTION",
        "NOTEFLASH_VERBOSE",
    ):
        monkeypatch.delenv(var, raising=False)
    return home
