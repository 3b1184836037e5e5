# Fake implementations for testing

from .fake_history import FakeHistory

__all__ = ["FakeHistory"]
