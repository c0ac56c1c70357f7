import math

import pytest

from noteflash.application.quality import (
    SessionTier,
    Sm2Quality,
    get_scale,
    normalize,
    quality_feedback,
    quality_label,
    tier_for_quality,
    to_quality,
    validate_quality,
)
from noteflash.domain.errors import InvalidQualityError


@pytest.mark.parametrize(
    "label, expected",
    [("hard", 1), ("normal", 3), ("easy", 5)],
)
def test_three_level_scale(label, expected):
    assert get_scale("three").normalize(label) == expected


@pytest.mark.parametrize(
    "label, expected",
    [("again", 1), ("hard", 2), ("good", 3), ("easy", 4)],
)
def test_four_level_scale(label, expected):
    assert get_scale("four").normalize(label) == expected


def test_labels_are_case_insensitive_and_trimmed():
    assert get_scale("three").normalize("  EASY ") == 5
    assert get_scale("four").normalize("Good") == 3


@pytest.mark.parametrize(
    "value, expected",
    [(7, 5), (-2, 0), (3.7, 3), (0.99, 0), (5, 5), (4.0, 4)],
)
def test_numbers_are_clamped_then_floored(value, expected):
    assert normalize(value) == expected


def test_numbers_accepted_on_label_scales():
    assert get_scale("three").normalize(4) == 4
    assert get_scale("four").normalize("2") == 2


def test_numeric_scale_accepts_numeric_strings():
    assert normalize("5") == 5
    assert normalize(" 2.9 ") == 2


@pytest.mark.parametrize("bad", ["excellent", "", "abc"])
def test_unknown_label_rejected(bad):
    with pytest.raises(InvalidQualityError):
        get_scale("three").normalize(bad)


@pytest.mark.parametrize("bad", [math.nan, True, None, [3]])
def test_non_numbers_rejected(bad):
    with pytest.raises(InvalidQualityError):
        normalize(bad)


def test_invalid_quality_is_value_error():
    with pytest.raises(ValueError):
        to_quality(float("nan"))


def test_to_quality_returns_enum():
    assert to_quality(4.5) is Sm2Quality.EASY


@pytest.mark.parametrize("bad", [6, -1, 2.5, True, "3"])
def test_validate_quality_rejects(bad):
    with pytest.raises(InvalidQualityError):
        validate_quality(bad)


def test_validate_quality_accepts_enum():
    assert validate_quality(Sm2Quality.FAIR) == 3


@pytest.mark.parametrize(
    "quality, tier",
    [
        (0, SessionTier.HARD),
        (2, SessionTier.HARD),
        (3, SessionTier.NORMAL),
        (4, SessionTier.EASY),
        (5, SessionTier.EASY),
    ],
)
def test_tier_for_quality(quality, tier):
    assert tier_for_quality(quality) is tier


def test_labels_and_feedback():
    assert quality_label(0) == "Again"
    assert quality_label(5) == "Perfect"
    assert quality_label(9) == "Unknown"
    assert "Perfect recall" in quality_feedback(5)
    assert quality_feedback(-1) == "Card has been reviewed"


def test_get_scale_unknown():
    with pytest.raises(ValueError, match="Unknown rating scale"):
        get_scale("five")


def test_choices_in_quality_order():
    assert get_scale("four").choices() == ["again", "hard", "good", "easy"]
    assert get_scale("three").choices() == ["hard", "normal", "easy"]
