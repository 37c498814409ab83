"""External service integrations."""

from .ivao_client import FakeIvaoClient, IvaoClient, IvaoError, IvaoProfile

__all__ = ["FakeIvaoClient", "IvaoClient", "IvaoError", "IvaoProfile"]
