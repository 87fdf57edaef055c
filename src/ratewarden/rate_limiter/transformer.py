from typing import Any, override

from ..error_policy import ErrorPolicy
from ..events import EventBus
from ..namespace import Namespace
from ..serde import SerdeTransformer
from ..tasks import BackgroundTasks
from ..utils import type_name
from .contracts import BaseRateLimiterAdapter
from .rate_limiter import RateLimiter, RateLimiterSettings, SerializedRateLimiter


class RateLimiterSerdeTransformer(SerdeTransformer[RateLimiter]):
    """Serializes rate limiters to ``{version, key, limit}`` and reconnects them.

    Deserialized rate limiters are bound to this transformer's adapter, event
    bus, namespace and defaults, never to anything carried in the payload.
    One transformer is registered per provider; it only accepts rate limiters
    whose transformer name, namespace and adapter kind match its own.
    """

    def __init__(
        self,
        *,
        adapter: BaseRateLimiterAdapter,
        namespace: Namespace,
        event_bus: EventBus,
        error_policy: ErrorPolicy,
        only_error: bool,
        enable_async_tracking: bool,
        background_tasks: BackgroundTasks,
        serde_transformer_name: str = "",
    ):
        self._adapter = adapter
        self._namespace = namespace
        self._event_bus = event_bus
        self._error_policy = error_policy
        self._only_error = only_error
        self._enable_async_tracking = enable_async_tracking
        self._background_tasks = background_tasks
        self._serde_transformer_name = serde_transformer_name

    @property
    @override
    def name(self) -> tuple[str, ...]:
        tokens = (
            "rate_limiter",
            self._serde_transformer_name,
            type_name(self._adapter),
            str(self._namespace),
        )
        return tuple(token for token in tokens if token)

    @override
    def is_applicable(self, value: object) -> bool:
        if not isinstance(value, RateLimiter):
            return False

        return (
            value.serde_transformer_name == self._serde_transformer_name
            and str(value.namespace) == str(self._namespace)
            and type_name(value.adapter) == type_name(self._adapter)
        )

    @override
    def serialize(self, value: RateLimiter) -> dict[str, Any]:
        return value.serialize().model_dump(mode="json")

    @override
    def deserialize(self, payload: Any) -> RateLimiter:
        serialized = SerializedRateLimiter.model_validate(payload)
        return RateLimiter(
            RateLimiterSettings(
                key=self._namespace.create(serialized.key),
                limit=serialized.limit,
                adapter=self._adapter,
                event_bus=self._event_bus,
                error_policy=self._error_policy,
                only_error=self._only_error,
                enable_async_tracking=self._enable_async_tracking,
                background_tasks=self._background_tasks,
                namespace=self._namespace,
                serde_transformer_name=self._serde_transformer_name,
            )
        )
