"""Error taxonomy for the scheduling core."""


class NoteflashError(Exception):
    """Base class for all scheduler errors."""


class InvalidQualityError(NoteflashError, ValueError):
    """A rating could not be turned into a quality in [0, 5]."""

    def __init__(self, value: object, reason: str = "expected an integer in [0, 5]"):
        self.value = value
        super().__init__(f"Invalid quality {value!r}: {reason}")


class CardNotFoundError(NoteflashError, KeyError):
    """No card with the given id exists in the collection."""

    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(card_id)

    def __str__(self) -> str:
        return f"Card not found: {self.card_id}"


class CollectionFormatError(NoteflashError):
    """A stored collection could not be parsed."""
