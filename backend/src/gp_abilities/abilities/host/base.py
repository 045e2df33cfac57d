"""Base classes for ability host capabilities."""

from __future__ import annotations

from typing import Any


class ImmutableCapabilityMixin:
    """Mixin that makes a __slots__ class immutable after __init__.

    Classes using this mixin must:
    1. Define __slots__ for all instance attributes
    2. Use object.__setattr__ in __init__ to set attributes

    Handlers receive capabilities bound to one request; they must not be able
    to rebind the store or the caller identity behind them.
    """

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{self.__class__.__name__} attributes are immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{self.__class__.__name__} attributes are immutable")
