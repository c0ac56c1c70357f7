# Scheduling Policies Package
from .factory import get_policy
from .simple import SimpleSm2Policy
from .strict import StrictSm2Policy

__all__ = ["StrictSm2Policy", "SimpleSm2Policy", "get_policy"]
