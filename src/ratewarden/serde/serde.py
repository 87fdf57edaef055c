"""JSON codec with pluggable transformers for live objects."""

from typing import Any

import logfire_api as logfire
from pydantic import BaseModel
from pydantic_core import from_json, to_json

from ..errors import SerdeLookupError, SerdeRegistrationError
from .transformer import SerdeTransformer

CORE = "ratewarden"
USER = "user"

CUSTOM_MARKER = "$custom"

type TransformerKey = tuple[str, ...]


class _TransformerRegistry:
    def __init__(self):
        self._transformers: dict[TransformerKey, SerdeTransformer[Any]] = {}

    def register(self, transformer: SerdeTransformer[Any], context_tag: str) -> None:
        name = tuple(transformer.name)
        if not name or not all(name):
            raise SerdeRegistrationError(
                f"Transformer {type(transformer).__name__} must have a non-empty name"
            )

        key = (context_tag, *name)
        if key in self._transformers:
            raise SerdeRegistrationError(
                f"A transformer is already registered for {key}"
            )

        self._transformers[key] = transformer

    def find_for_value(
        self, value: object
    ) -> tuple[TransformerKey, SerdeTransformer[Any]] | None:
        for key, transformer in self._transformers.items():
            if transformer.is_applicable(value):
                return key, transformer
        return None

    def get(self, key: TransformerKey) -> SerdeTransformer[Any]:
        try:
            return self._transformers[key]
        except KeyError as err:
            raise SerdeLookupError(f"No transformer registered for {key}") from err

    def __contains__(self, key: TransformerKey) -> bool:
        return key in self._transformers

    def __len__(self) -> int:
        return len(self._transformers)


class _CustomPayload(BaseModel):
    context: str
    name: list[str]
    value: Any


class Serde:
    """Serializes values to JSON, delegating non-JSON values to transformers.

    Transformers are registered under ``(context_tag, *transformer.name)``;
    the key must be unique per ``Serde`` and duplicates are rejected when
    registered. Payloads are routed back to their transformer by exact key
    lookup.

    Examples
    --------
    >>> serde = Serde()
    >>> provider = RateLimiterProvider(adapter=adapter, serde=serde)
    >>> data = serde.serialize({"limiter": provider.create("a", limit=5)})
    >>> serde.deserialize(data)["limiter"].limit
    5
    """

    def __init__(self):
        self._registry = _TransformerRegistry()

    def register_custom(
        self, transformer: SerdeTransformer[Any], context_tag: str = USER
    ) -> None:
        """Register a transformer.

        Parameters
        ----------
        transformer : SerdeTransformer
            The transformer to add.
        context_tag : str
            Separates transformers registered by ratewarden (``CORE``) from
            user ones (``USER``) sharing this codec.

        Raises
        ------
        SerdeRegistrationError
            If a transformer with the same context tag and name is registered.
        """
        self._registry.register(transformer, context_tag)
        logfire.debug(
            "serde.transformer.registered",
            context=context_tag,
            name=list(transformer.name),
        )

    def is_registered(self, name: tuple[str, ...], context_tag: str = USER) -> bool:
        return (context_tag, *name) in self._registry

    def serialize(self, value: Any) -> str:
        return to_json(self._encode(value)).decode()

    def deserialize(self, data: str | bytes) -> Any:
        return self._decode(from_json(data))

    def _encode(self, value: Any) -> Any:
        if value is None or isinstance(value, (bool, int, float, str)):
            return value

        found = self._registry.find_for_value(value)
        if found is not None:
            (context, *name), transformer = found
            return {
                CUSTOM_MARKER: {
                    "context": context,
                    "name": name,
                    "value": self._encode(transformer.serialize(value)),
                }
            }

        if isinstance(value, dict):
            return {str(k): self._encode(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._encode(item) for item in value]
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json")

        # Left to pydantic_core, which raises for unsupported types.
        return value

    def _decode(self, data: Any) -> Any:
        if isinstance(data, list):
            return [self._decode(item) for item in data]
        if not isinstance(data, dict):
            return data

        if set(data) == {CUSTOM_MARKER}:
            payload = _CustomPayload.model_validate(data[CUSTOM_MARKER])
            transformer = self._registry.get((payload.context, *payload.name))
            return transformer.deserialize(self._decode(payload.value))

        return {k: self._decode(v) for k, v in data.items()}
