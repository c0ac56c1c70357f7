"""
Quality scales for turning user-facing ratings into SM-2 quality values.

Three rating vocabularies are supported:
1. Three-level buttons (hard / normal / easy)
2. Anki-style four-level buttons (again / hard / good / easy)
3. Raw SM-2 numbers (0..5)

Every scale produces an integer in [0, 5]. Numbers are clamped and floored,
never rejected; unknown labels are rejected.
"""

import logging
import math
from abc import ABC
from enum import Enum, IntEnum

from noteflash.domain.constants import MAX_QUALITY, MIN_QUALITY, PASSING_QUALITY
from noteflash.domain.errors import InvalidQualityError

logger = logging.getLogger(__name__)

Rating = str | int | float


class Sm2Quality(IntEnum):
    """Quality rating for the SM-2 algorithm."""

    AGAIN = 0  # Complete blackout
    HARD = 1  # Incorrect, but the answer felt familiar
    GOOD = 2  # Incorrect, but easy to recall once seen
    FAIR = 3  # Correct after hesitation
    EASY = 4  # Correct with little effort
    PERFECT = 5  # Effortless recall


class SessionTier(str, Enum):
    """In-session rating tier that drives queue re-insertion."""

    HARD = "hard"
    NORMAL = "normal"
    EASY = "easy"


_LABELS = {
    Sm2Quality.AGAIN: "Again",
    Sm2Quality.HARD: "Hard",
    Sm2Quality.GOOD: "Good",
    Sm2Quality.FAIR: "Fair",
    Sm2Quality.EASY: "Easy",
    Sm2Quality.PERFECT: "Perfect",
}

_FEEDBACK = {
    Sm2Quality.AGAIN: "You'll see this card again very soon",
    Sm2Quality.HARD: "This card was difficult - you'll review it again soon",
    Sm2Quality.GOOD: "Good job! You remembered this card",
    Sm2Quality.FAIR: "You'll see this card again in a few days",
    Sm2Quality.EASY: "Nice work! You've got a good grasp of this card",
    Sm2Quality.PERFECT: "Perfect recall! This card is becoming well-known",
}


def to_quality(value: int | float) -> Sm2Quality:
    """
    Coerce any real number into the quality domain.

    The value is clamped to [0, 5] and then floored.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidQualityError(value, "not a number")
    if math.isnan(value):
        raise InvalidQualityError(value, "not a number")

    clamped = max(MIN_QUALITY, min(MAX_QUALITY, value))
    return Sm2Quality(math.floor(clamped))


def validate_quality(quality: object) -> int:
    """
    Check a quality handed to a scheduling policy.

    Policies do not clamp: anything but an integer in [0, 5] is a caller bug.
    """
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidQualityError(quality)
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidQualityError(quality)
    return int(quality)


def is_success(quality: int) -> bool:
    return quality >= PASSING_QUALITY


def tier_for_quality(quality: int) -> SessionTier:
    """Map a quality onto the hard / normal / easy session tiers."""
    if quality < PASSING_QUALITY:
        return SessionTier.HARD
    if quality == PASSING_QUALITY:
        return SessionTier.NORMAL
    return SessionTier.EASY


def quality_label(quality: int) -> str:
    try:
        return _LABELS[Sm2Quality(quality)]
    except ValueError:
        return "Unknown"


def quality_feedback(quality: int) -> str:
    """Short learner-facing message for a rating."""
    try:
        return _FEEDBACK[Sm2Quality(quality)]
    except ValueError:
        return "Card has been reviewed"


class QualityScale(ABC):
    """
    A rating vocabulary and its mapping onto SM-2 quality.

    Subclasses fill in `labels`. Numeric input is accepted by every scale.
    """

    name: str = ""
    labels: dict[str, int] = {}

    def normalize(self, rating: Rating) -> int:
        """
        Convert a label or number into an integer quality in [0, 5].

        Raises:
            InvalidQualityError: For unknown labels or non-numeric input.
        """
        if isinstance(rating, str):
            key = rating.strip().lower()
            if key in self.labels:
                return self.labels[key]
            try:
                number = float(key)
            except ValueError:
                raise InvalidQualityError(
                    rating, f"unknown label for the {self.name} scale"
                ) from None
            return int(to_quality(number))

        return int(to_quality(rating))

    def choices(self) -> list[str]:
        """Labels in ascending quality order."""
        return sorted(self.labels, key=lambda label: self.labels[label])


class ThreeLevelScale(QualityScale):
    name = "three"
    labels = {"hard": 1, "normal": 3, "easy": 5}


class FourLevelScale(QualityScale):
    name = "four"
    labels = {"again": 1, "hard": 2, "good": 3, "easy": 4}


class NumericScale(QualityScale):
    name = "numeric"
    labels = {str(q): q for q in range(MIN_QUALITY, MAX_QUALITY + 1)}


_SCALES: dict[str, type[QualityScale]] = {
    ThreeLevelScale.name: ThreeLevelScale,
    FourLevelScale.name: FourLevelScale,
    NumericScale.name: NumericScale,
}


def get_scale(name: str) -> QualityScale:
    """Resolve a scale by name: 'three', 'four' or 'numeric'."""
    try:
        return _SCALES[name]()
    except KeyError:
        raise ValueError(
            f"Unknown rating scale {name!r}. Expected one of: {', '.join(_SCALES)}"
        ) from None


def normalize(rating: Rating, scale: QualityScale | str = "numeric") -> int:
    """Normalize a rating on the given scale (a scale object or its name)."""
    if isinstance(scale, str):
        scale = get_scale(scale)
    quality = scale.normalize(rating)
    logger.debug(f"Normalized rating {rating!r} on {scale.name} scale to {quality}")
    return quality
