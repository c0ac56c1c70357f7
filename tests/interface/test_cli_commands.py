"""Tests for CLI commands: collection queries, reviews, study sessions, stats, migration, config."""

import json
import logging
from datetime import datetime, timedelta, timezone

import pytest
from typer.testing import CliRunner

from noteflash.domain.cards import Card, CardStatus
from noteflash.infrastructure.adapters import YamlCardRepository
from noteflash.interface.cli import app

runner = CliRunner()


@pytest.fixture
def collection(tmp_path, mock_home):
    return tmp_path / "cards.yaml"


@pytest.fixture
def seeded(collection):
    """Collection with one overdue review card and two new cards."""
    now = datetime.now(timezone.utc)
    repo = YamlCardRepository(collection)
    repo.add(
        Card(
            id="card_due",
            front="hablar",
            back="to speak",
            deck="Spanish",
            status=CardStatus.REVIEW,
            interval=3.0,
            repetitions=2,
            last_reviewed=now - timedelta(days=4),
            next_review=now - timedelta(days=1),
        )
    )
    repo.add(Card(id="card_new1", front="comer", back="to eat", deck="Spanish", next_review=now))
    repo.add(Card(id="card_new2", front="Bonjour", back="Hello", deck="French", next_review=now))
    return collection


def invoke(collection, *args, **kwargs):
    return runner.invoke(app, ["--collection", str(collection), *args], **kwargs)


# --- Help ---


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "noteflash: SM-2 spaced-repetition scheduling" in result.stdout
    for command in ("add", "due", "review", "study", "migrate", "config"):
        assert command in result.stdout


# --- Collection ---


def test_add_creates_collection(collection):
    result = invoke(collection, "add", "Q?", "A!", "--deck", "Trivia", "-t", "fun")

    assert result.exit_code == 0
    assert "Added card_" in result.stdout

    (card,) = YamlCardRepository(collection).list_cards()
    assert card.id.startswith("card_")
    assert card.deck == "Trivia"
    assert card.tags == ("fun",)
    assert card.status is CardStatus.NEW


def test_due_json(seeded):
    result = invoke(seeded, "due", "--json")

    assert result.exit_code == 0
    assert [c["id"] for c in json.loads(result.stdout)] == ["card_due"]


def test_due_empty_deck(seeded):
    result = invoke(seeded, "due", "--deck", "French")
    assert result.exit_code == 0
    assert "No cards due." in result.stdout


def test_new_listing(seeded):
    result = invoke(seeded, "new")

    assert result.exit_code == 0
    assert "card_new1" in result.stdout
    assert "card_new2" in result.stdout
    assert "card_due" not in result.stdout


def test_new_limit(seeded):
    result = invoke(seeded, "new", "--limit", "1", "--json")
    assert [c["id"] for c in json.loads(result.stdout)] == ["card_new1"]


# --- Review ---


def test_review_updates_card(seeded):
    result = invoke(seeded, "--scale", "numeric", "review", "card_new1", "4", "--json")

    assert result.exit_code == 0
    assert json.loads(result.stdout)["status"] == "learning"
    assert YamlCardRepository(seeded).get("card_new1").status is CardStatus.LEARNING


def test_review_with_label(seeded):
    result = invoke(seeded, "review", "card_due", "hard")

    assert result.exit_code == 0
    assert YamlCardRepository(seeded).get("card_due").status is CardStatus.RELEARNING


def test_review_simple_policy(seeded):
    result = invoke(seeded, "--policy", "simple", "review", "card_due", "easy", "--json")

    assert result.exit_code == 0
    assert json.loads(result.stdout)["interval"] == round(3.0 * 2.65 * 1.3)


def test_review_unknown_card(seeded):
    result = invoke(seeded, "review", "card_ghost", "easy")

    assert result.exit_code == 1
    assert "Card not found: card_ghost" in result.output


def test_review_invalid_rating(seeded):
    result = invoke(seeded, "review", "card_due", "superb")

    assert result.exit_code == 1
    assert "Invalid quality" in result.output
    assert YamlCardRepository(seeded).get("card_due").status is CardStatus.REVIEW


def test_invalid_policy(seeded):
    result = invoke(seeded, "--policy", "fsrs", "due")

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_malformed_collection(collection):
    collection.write_text("cards: [\n")

    result = invoke(collection, "due")

    assert result.exit_code == 1
    assert "Could not parse" in result.output


# --- Study ---


def test_study_session(seeded):
    # due card first, then both new cards; every rating is easy
    result = invoke(seeded, "study", input="\neasy\n\neasy\n\neasy\n")

    assert result.exit_code == 0
    assert "Studied 3 cards (2 new) in 3 reviews." in result.stdout

    repo = YamlCardRepository(seeded)
    assert repo.get("card_due").repetitions == 3
    assert repo.get("card_new1").status is CardStatus.LEARNING
    assert repo.get("card_new2").status is CardStatus.LEARNING


def test_study_hard_card_comes_back(seeded):
    result = invoke(
        seeded, "study", "--deck", "Spanish", input="\nhard\n\neasy\n\neasy\n"
    )

    assert result.exit_code == 0
    assert result.stdout.count("hablar") == 2
    assert "Studied 2 cards (1 new) in 3 reviews." in result.stdout


def test_study_invalid_rating_then_quit(seeded):
    result = invoke(seeded, "study", input="\nsuperb\n\nq\n")

    assert result.exit_code == 0
    assert "Invalid quality" in result.stdout
    assert "Studied 0 cards" in result.stdout
    assert YamlCardRepository(seeded).get("card_due").status is CardStatus.REVIEW


def test_study_zero_new_cards(seeded):
    result = invoke(seeded, "study", "--new", "0", input="\neasy\n")

    assert result.exit_code == 0
    assert "Studied 1 cards (0 new) in 1 reviews." in result.stdout
    assert YamlCardRepository(seeded).get("card_new1").status is CardStatus.NEW


def test_new_zero_limit(seeded):
    result = invoke(seeded, "new", "--limit", "0", "--json")
    assert json.loads(result.stdout) == []


def test_study_nothing_due(collection):
    result = invoke(collection, "study")

    assert result.exit_code == 0
    assert "Nothing to study." in result.stdout


# --- Stats ---


def test_stats_json(seeded):
    result = invoke(seeded, "stats", "--json")

    assert result.exit_code == 0
    summary = json.loads(result.stdout)
    assert summary["total"] == 3
    assert summary["due_today"] == 1
    assert summary["new_today"] == 2


def test_stats_text(seeded):
    result = invoke(seeded, "stats", "--deck", "French")
    assert result.exit_code == 0
    assert "Deck: French  Cards: 1" in result.stdout


def test_forecast_json(seeded):
    result = invoke(seeded, "forecast", "--days", "3", "--json")

    assert result.exit_code == 0
    assert len(json.loads(result.stdout)) == 3


# --- Migrate ---


def test_migrate_is_idempotent(collection, tmp_path):
    source = tmp_path / "flashcards.json"
    source.write_text(
        json.dumps(
            [
                {"id": "s1", "front": "Q1", "back": "A1"},
                {
                    "id": "s2",
                    "front": "Q2",
                    "back": "A2",
                    "interval": 12,
                    "easeFactor": 2.4,
                    "reviewCount": 3,
                    "nextReview": "2030-01-01T00:00:00Z",
                },
            ]
        )
    )

    first = invoke(collection, "migrate", str(source))
    second = invoke(collection, "migrate", str(source))

    assert first.exit_code == 0
    assert "Migrated 2 cards, skipped 0" in first.stdout
    assert "Migrated 0 cards, skipped 2" in second.stdout

    repo = YamlCardRepository(collection)
    assert repo.get("s1").status is CardStatus.NEW
    assert repo.get("s2").status is CardStatus.REVIEW
    assert repo.get("s2").repetitions == 3


def test_migrate_dry_run(collection, tmp_path):
    source = tmp_path / "flashcards.yaml"
    source.write_text("- id: s1\n  front: Q\n")

    result = invoke(collection, "migrate", str(source), "--dry-run")

    assert result.exit_code == 0
    assert "[dry-run] Migrated 1 cards" in result.stdout
    assert not collection.exists()


def test_migrate_missing_source(collection, tmp_path):
    result = invoke(collection, "migrate", str(tmp_path / "nope.json"))

    assert result.exit_code == 1
    assert "File not found" in result.output


# --- Config ---


def test_config_show(mock_home, monkeypatch):
    monkeypatch.setenv("NOTEFLASH_POLICY", "simple")

    result = runner.invoke(app, ["--scale", "four", "config", "show"])

    assert result.exit_code == 0
    output_data = json.loads(result.stdout)
    assert output_data["policy"] == "simple"
    assert output_data["rating_scale"] == "four"
    assert output_data["block_due"] == 4
    assert "log_dir" not in output_data


# --- Verbosity ---


@pytest.fixture
def package_logger():
    log = logging.getLogger("noteflash")
    level = log.level
    yield log
    log.setLevel(level)


def test_verbosity_from_config(collection, monkeypatch, package_logger):
    monkeypatch.setenv("NOTEFLASH_VERBOSE", "0")

    result = invoke(collection, "due")

    assert result.exit_code == 0
    assert package_logger.level == logging.WARNING


def test_verbose_flags_add_to_config(collection, package_logger):
    result = invoke(collection, "-v", "due")

    assert result.exit_code == 0
    assert package_logger.level == logging.DEBUG


def test_default_verbosity_is_info(collection, package_logger):
    invoke(collection, "due")
    assert package_logger.level == logging.INFO
