import pytest
from ratewarden.config import RateWardenSettings, _env_flag


@pytest.mark.parametrize(
    ("value", "expected"),
    [("true", True), ("1", True), ("YES", True), ("false", False), ("0", False)],
)
def test_env_flag_parses_value(monkeypatch, value, expected):
    monkeypatch.setenv("RATEWARDEN_TEST_FLAG", value)
    assert _env_flag("RATEWARDEN_TEST_FLAG", not expected) is expected


@pytest.mark.parametrize("default", [True, False])
def test_env_flag_falls_back_to_default(monkeypatch, default):
    monkeypatch.delenv("RATEWARDEN_TEST_FLAG", raising=False)
    assert _env_flag("RATEWARDEN_TEST_FLAG", default) is default


def test_settings_can_be_overridden():
    settings = RateWardenSettings(only_error=True, namespace_delimiter="/")

    assert settings.only_error is True
    assert settings.namespace_delimiter == "/"
