import pytest
from conftest import OtherSpyAdapter, SpyAdapter
from pydantic import ValidationError
from ratewarden import (
    AllowedRateLimiterEvent,
    EventBus,
    Namespace,
    RateLimiterProvider,
    Serde,
)


def _provider(adapter=None, **kwargs) -> RateLimiterProvider:
    return RateLimiterProvider(
        adapter=adapter or SpyAdapter(), enable_async_tracking=False, **kwargs
    )


class TestName:
    def test_includes_adapter_kind_and_namespace(self):
        provider = _provider(namespace=Namespace("@api"))
        assert provider.transformer.name == ("rate_limiter", "SpyAdapter", "@api:_rt")

    def test_includes_transformer_name(self):
        provider = _provider(serde_transformer_name="primary")
        assert provider.transformer.name == ("rate_limiter", "primary", "SpyAdapter")

    def test_skips_empty_tokens(self):
        assert _provider().transformer.name == ("rate_limiter", "SpyAdapter")


class TestIsApplicable:
    def test_accepts_rate_limiters_of_matching_provider(self):
        provider = _provider(namespace=Namespace("@api"))
        other = _provider(namespace=Namespace("@api"))

        assert provider.transformer.is_applicable(provider.create("a", limit=1))
        assert provider.transformer.is_applicable(other.create("a", limit=1))

    @pytest.mark.parametrize(
        "other_kwargs",
        [
            {"namespace": Namespace("@other")},
            {"adapter": OtherSpyAdapter()},
            {"serde_transformer_name": "secondary"},
        ],
    )
    def test_rejects_rate_limiters_of_other_providers(self, other_kwargs):
        provider = _provider(namespace=Namespace("@api"))
        kwargs = {"namespace": Namespace("@api"), **other_kwargs}
        other = _provider(**kwargs)

        assert not provider.transformer.is_applicable(other.create("a", limit=1))

    def test_rejects_other_values(self):
        provider = _provider()
        assert not provider.transformer.is_applicable({"key": "a", "limit": 1})
        assert not provider.transformer.is_applicable(None)


class TestSerializeDeserialize:
    def test_serialized_form_carries_key_and_limit(self):
        provider = _provider(namespace=Namespace("@api"))

        payload = provider.transformer.serialize(provider.create("login", limit=5))

        assert payload == {"version": "1", "key": "login", "limit": 5}

    def test_deserialize_binds_to_own_dependencies(self):
        adapter = SpyAdapter()
        event_bus = EventBus()
        provider = _provider(
            adapter, namespace=Namespace("@api"), event_bus=event_bus, only_error=True
        )

        rate_limiter = provider.transformer.deserialize(
            {"version": "1", "key": "login", "limit": 5}
        )

        assert rate_limiter.key == "login"
        assert rate_limiter.full_key == "@api:_rt:login"
        assert rate_limiter.limit == 5
        assert rate_limiter.adapter is adapter
        assert rate_limiter.settings.event_bus is event_bus
        assert rate_limiter.settings.only_error is True

    async def test_deserialized_rate_limiter_behaves_like_original(self):
        adapter = SpyAdapter()
        event_bus = EventBus()
        events = []
        event_bus.add_listener(AllowedRateLimiterEvent, events.append)
        provider = _provider(adapter, event_bus=event_bus)

        original = provider.create("login", limit=5)
        restored = provider.transformer.deserialize(
            provider.transformer.serialize(original)
        )
        _ = await restored.run_or_fail(lambda: None)

        assert adapter.calls == [("update_state", "login", 5)]
        assert len(events) == 1

    def test_round_trip_is_repeatable(self):
        provider = _provider(namespace=Namespace("@api"))
        original = provider.create("login", limit=5)

        once = provider.transformer.deserialize(provider.transformer.serialize(original))
        twice = provider.transformer.deserialize(provider.transformer.serialize(once))

        assert provider.transformer.serialize(twice) == provider.transformer.serialize(
            original
        )
        assert twice.full_key == original.full_key

    @pytest.mark.parametrize(
        "payload",
        [
            {"version": "2", "key": "a", "limit": 1},
            {"version": "1", "key": "a", "limit": 0},
            {"version": "1", "limit": 1},
        ],
    )
    def test_deserialize_rejects_invalid_payloads(self, payload):
        with pytest.raises(ValidationError):
            _ = _provider().transformer.deserialize(payload)


class TestWithSerde:
    def test_round_trip_through_serde(self):
        serde = Serde()
        adapter = SpyAdapter()
        provider = _provider(adapter, namespace=Namespace("@api"), serde=serde)

        data = serde.serialize({"limiter": provider.create("login", limit=5)})
        restored = serde.deserialize(data)["limiter"]

        assert restored.full_key == "@api:_rt:login"
        assert restored.limit == 5
        assert restored.adapter is adapter

    def test_routes_to_the_provider_that_produced_the_value(self):
        serde = Serde()
        first_adapter = SpyAdapter()
        second_adapter = OtherSpyAdapter()
        first = _provider(first_adapter, serde=serde)
        second = _provider(second_adapter, serde=serde)

        data = serde.serialize(
            [first.create("a", limit=1), second.create("b", limit=2)]
        )
        restored = serde.deserialize(data)

        assert restored[0].adapter is first_adapter
        assert restored[1].adapter is second_adapter
        assert [r.limit for r in restored] == [1, 2]
