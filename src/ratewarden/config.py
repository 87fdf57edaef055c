import os

from pydantic import BaseModel


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes")


class RateWardenSettings(BaseModel):
    # Run failure tracking in the background when only errors are tracked
    enable_async_tracking: bool = _env_flag("RATEWARDEN_ENABLE_ASYNC_TRACKING", True)
    # Track only failing calls instead of every call
    only_error: bool = _env_flag("RATEWARDEN_ONLY_ERROR", False)
    namespace_delimiter: str = os.environ.get("RATEWARDEN_NAMESPACE_DELIMITER", ":")
    namespace_root_identifier: str = os.environ.get(
        "RATEWARDEN_NAMESPACE_ROOT_IDENTIFIER", "_rt"
    )


RATEWARDEN_SETTINGS = RateWardenSettings()
