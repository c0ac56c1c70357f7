"""
Scheduling Policy Factory
Centralizes the logic for selecting the scheduling policy.
"""

from typing import TYPE_CHECKING

from noteflash.domain.cards import SchedulingPolicy

from .simple import SimpleSm2Policy
from .strict import StrictSm2Policy

if TYPE_CHECKING:
    from noteflash.application.config import AppConfig


def get_policy(name: str = "strict", config: "AppConfig | None" = None) -> SchedulingPolicy:
    """
    Returns the scheduling policy registered under `name`.

    The strict policy takes its step ladders from config when given.
    """
    if name == StrictSm2Policy.name:
        if config is None:
            return StrictSm2Policy()
        return StrictSm2Policy(
            learning_steps=config.learning_steps,
            relearning_steps=config.relearning_steps,
        )

    if name == SimpleSm2Policy.name:
        return SimpleSm2Policy()

    raise ValueError(f"Unknown scheduling policy {name!r}. Expected 'strict' or 'simple'.")
