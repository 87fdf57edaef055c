"""Provider factory choosing between several named adapters."""

from typing import Any, ClassVar, Self

import logfire_api as logfire
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from ..config import RATEWARDEN_SETTINGS
from ..error_policy import ErrorPolicy, match_all_errors
from ..errors import DefaultAdapterNotDefinedError, UnregisteredAdapterError
from ..events import EventBus
from ..namespace import Namespace
from ..serde import Serde
from ..tasks import BackgroundTasks
from .contracts import BaseRateLimiterAdapter
from .provider import RateLimiterProvider


class RateLimiterProviderFactory(BaseModel):
    """Builds ``RateLimiterProvider`` instances for named adapters.

    Every provider shares the factory's configuration. Its namespace gets the
    adapter name appended, so counters kept by different adapters never share
    keys. The ``set_*`` methods return a new factory and leave this one as is.

    Providers are built once per adapter name and reused by later ``use``
    calls, so their serde transformers are registered only once.

    Parameters
    ----------
    adapters : dict[str, BaseRateLimiterAdapter]
        Adapters by name.
    default_adapter : str | None
        Name used when ``use`` is called without one.

    Examples
    --------
    >>> factory = RateLimiterProviderFactory(
    ...     adapters={"memory": memory_adapter, "redis": redis_adapter},
    ...     default_adapter="memory",
    ... )
    >>> factory.use().create("login", limit=5)
    >>> factory.use("redis").create("login", limit=5)
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(
        frozen=True, arbitrary_types_allowed=True
    )

    adapters: dict[str, BaseRateLimiterAdapter]
    default_adapter: str | None = Field(default=None)
    namespace: Namespace = Field(default_factory=Namespace)
    background_tasks: BackgroundTasks = Field(default_factory=BackgroundTasks)
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

    _providers: dict[str, RateLimiterProvider] = PrivateAttr(default_factory=dict)

    def _copy_with(self, **update: Any) -> Self:
        copy = self.model_copy(update=update)
        # model_copy shares private values; a new configuration needs new providers
        copy._providers = {}
        return copy

    def set_namespace(self, namespace: Namespace) -> Self:
        return self._copy_with(namespace=namespace)

    def set_event_bus(self, event_bus: EventBus) -> Self:
        return self._copy_with(
            event_bus=event_bus, background_tasks=event_bus.background_tasks
        )

    def set_only_error(self, only_error: bool) -> Self:
        return self._copy_with(only_error=only_error)

    def set_default_error_policy(self, error_policy: ErrorPolicy) -> Self:
        return self._copy_with(default_error_policy=error_policy)

    def use(self, adapter_name: str | None = None) -> RateLimiterProvider:
        """Return the provider bound to an adapter.

        Parameters
        ----------
        adapter_name : str | None
            Name of a registered adapter. Defaults to ``default_adapter``.

        Returns
        -------
        RateLimiterProvider
            Provider whose namespace ends with the adapter name.

        Raises
        ------
        DefaultAdapterNotDefinedError
            If no name is given and the factory has no default adapter.
        UnregisteredAdapterError
            If no adapter is registered under the name.
        """
        if adapter_name is None:
            adapter_name = self.default_adapter
        if adapter_name is None:
            raise DefaultAdapterNotDefinedError(type(self).__name__)

        provider = self._providers.get(adapter_name)
        if provider is not None:
            return provider

        adapter = self.adapters.get(adapter_name)
        if adapter is None:
            raise UnregisteredAdapterError(adapter_name)

        logfire.debug(
            "rate_limiter.provider_factory.use",
            adapter_name=adapter_name,
            namespace=str(self.namespace),
        )
        provider = RateLimiterProvider(
            adapter=adapter,
            namespace=self.namespace.append_root(adapter_name),
            event_bus=self.event_bus,
            background_tasks=self.background_tasks,
            default_error_policy=self.default_error_policy,
            only_error=self.only_error,
            enable_async_tracking=self.enable_async_tracking,
            serde=self.serde,
            serde_transformer_name=self.serde_transformer_name,
        )
        self._providers[adapter_name] = provider
        return provider
