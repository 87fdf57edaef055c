from abc import ABC, abstractmethod
from typing import Any


class SerdeTransformer[T](ABC):
    """Plugin teaching a ``Serde`` how to handle values it cannot encode itself.

    The ``name`` routes serialized payloads back to the transformer family
    that produced them; ``is_applicable`` picks the transformer for a live
    value.
    """

    @property
    @abstractmethod
    def name(self) -> tuple[str, ...]:
        """Non-empty tokens identifying the transformer within a registry."""

    @abstractmethod
    def is_applicable(self, value: object) -> bool: ...

    @abstractmethod
    def serialize(self, value: T) -> Any:
        """Convert the value to JSON-compatible data."""

    @abstractmethod
    def deserialize(self, payload: Any) -> T:
        """Rebuild a value from the data produced by ``serialize``."""
