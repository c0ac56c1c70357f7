# Card Repository Adapters
from .memory_repository import InMemoryCardRepository
from .yaml_repository import YamlCardRepository, load_simple_records

__all__ = ["InMemoryCardRepository", "YamlCardRepository", "load_simple_records"]
