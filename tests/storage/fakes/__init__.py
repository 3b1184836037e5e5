# Fake implementations for testing

from .fake_store import InMemoryStore

__all__ = ["InMemoryStore"]
