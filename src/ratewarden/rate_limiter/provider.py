"""Factory for rate limiters sharing one adapter, event bus and configuration."""

from typing import Any, ClassVar, override

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, PrivateAttr

from ..config import RATEWARDEN_SETTINGS
from ..error_policy import ErrorPolicy, match_all_errors
from ..events import EventBus, Listener, RateLimiterEvent
from ..namespace import Namespace
from ..serde import CORE, Serde
from ..tasks import BackgroundTasks
from ..utils import NOT_PROVIDED, NotProvided, resolve_not_provided
from .contracts import BaseRateLimiterAdapter
from .rate_limiter import RateLimiter, RateLimiterSettings
from .transformer import RateLimiterSerdeTransformer


class RateLimiterProvider(BaseModel):
    """Creates rate limiters bound to a shared adapter and configuration.

    The configuration is immutable once the provider is built. On
    construction the provider registers one ``RateLimiterSerdeTransformer``
    into each given ``Serde`` so the rate limiters it creates can be
    serialized and later reconnected to this provider's adapter.

    Parameters
    ----------
    adapter : BaseRateLimiterAdapter
        Store holding the attempt counters.
    namespace : Namespace
        Prefix applied to every key. Defaults to no prefix.
    event_bus : EventBus
        Receives lifecycle events of every rate limiter.
    default_error_policy : ErrorPolicy
        Errors counted in track-on-failure mode. Defaults to every error.
    only_error : bool
        Default tracking mode; True counts only failing calls.
    enable_async_tracking : bool
        Count failures in the background instead of waiting for the adapter.
        Only has an effect when ``only_error`` is True.
    serde : Serde | list[Serde]
        Codecs the transformer is registered into.
    serde_transformer_name : str
        Tells apart providers sharing a codec, namespace and adapter kind.

    Examples
    --------
    >>> provider = RateLimiterProvider(
    ...     adapter=DatabaseRateLimiterAdapter(MemoryRateLimiterStorageAdapter()),
    ...     namespace=Namespace("@api"),
    ... )
    >>> rate_limiter = provider.create("login", limit=5)
    >>> await rate_limiter.run_or_fail(send_login_email)
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(
        frozen=True, arbitrary_types_allowed=True
    )

    adapter: BaseRateLimiterAdapter
    namespace: Namespace = Field(default_factory=Namespace)
    background_tasks: BackgroundTasks = Field(default_factory=BackgroundTasks)
    # Declared after background_tasks so the default bus shares its task set
    event_bus: EventBus = Field(
        default_factory=lambda data: EventBus(data["background_tasks"])
    )
    default_error_policy: ErrorPolicy = Field(default=match_all_errors)
    only_error: bool = Field(default_factory=lambda: RATEWARDEN_SETTINGS.only_error)
    enable_async_tracking: bool = Field(
        default_factory=lambda: RATEWARDEN_SETTINGS.enable_async_tracking
    )
    serde: Serde | list[Serde] = Field(default_factory=list)
    serde_transformer_name: str = Field(default="")

    _transformer: RateLimiterSerdeTransformer = PrivateAttr()

    @override
    def model_post_init(self, context: Any, /) -> None:
        self._transformer = RateLimiterSerdeTransformer(
            adapter=self.adapter,
            namespace=self.namespace,
            event_bus=self.event_bus,
            error_policy=self.default_error_policy,
            only_error=self.only_error,
            enable_async_tracking=self.enable_async_tracking,
            background_tasks=self.background_tasks,
            serde_transformer_name=self.serde_transformer_name,
        )
        serdes = self.serde if isinstance(self.serde, list) else [self.serde]
        for serde in serdes:
            serde.register_custom(self._transformer, CORE)

        super().model_post_init(context)

    @property
    def transformer(self) -> RateLimiterSerdeTransformer:
        return self._transformer

    @property
    def events(self) -> EventBus:
        return self.event_bus

    def create(
        self,
        key: str,
        *,
        limit: PositiveInt,
        error_policy: ErrorPolicy | NotProvided = NOT_PROVIDED,
        only_error: bool | NotProvided = NOT_PROVIDED,
    ) -> RateLimiter:
        """Create a rate limiter for a key.

        Parameters
        ----------
        key : str
            The key, prefixed with the provider's namespace before it reaches
            the adapter.
        limit : int
            Number of allowed attempts. Must be greater than 0.
        error_policy : ErrorPolicy, optional
            Overrides the provider's default error policy.
        only_error : bool, optional
            Overrides the provider's default tracking mode.

        Returns
        -------
        RateLimiter
            A rate limiter bound to the provider's adapter and event bus.
        """
        return RateLimiter(
            RateLimiterSettings(
                key=self.namespace.create(key),
                limit=limit,
                adapter=self.adapter,
                event_bus=self.event_bus,
                error_policy=resolve_not_provided(
                    error_policy, self.default_error_policy
                ),
                only_error=resolve_not_provided(only_error, self.only_error),
                enable_async_tracking=self.enable_async_tracking,
                background_tasks=self.background_tasks,
                namespace=self.namespace,
                serde_transformer_name=self.serde_transformer_name,
            )
        )

    def add_listener[E: RateLimiterEvent](
        self, event_type: type[E], listener: Listener[E]
    ) -> None:
        self.event_bus.add_listener(event_type, listener)

    def remove_listener[E: RateLimiterEvent](
        self, event_type: type[E], listener: Listener[E]
    ) -> None:
        self.event_bus.remove_listener(event_type, listener)

    def listen_once[E: RateLimiterEvent](
        self, event_type: type[E], listener: Listener[E]
    ) -> None:
        self.event_bus.listen_once(event_type, listener)

    def subscribe[E: RateLimiterEvent](self, event_type: type[E], listener: Listener[E]):
        return self.event_bus.subscribe(event_type, listener)
