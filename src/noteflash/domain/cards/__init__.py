# Domain Cards Package
from .models import Card, CardStatus, MigrationResult, SessionCard, SimpleCardRecord
from .ports import CardRepository, SchedulingPolicy

__all__ = [
    "Card",
    "CardStatus",
    "SimpleCardRecord",
    "SessionCard",
    "MigrationResult",
    "CardRepository",
    "SchedulingPolicy",
]
