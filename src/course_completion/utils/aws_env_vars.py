import logging
import os

_LOGGER = logging.getLogger(__name__)

DEFAULT_WS_CACHE_TTL_SECONDS = 300


def _get_resource_by_env_var(env_var: str) -> str:
    value = os.environ.get(env_var)
    if not value:
        raise ValueError(f"Missing environment variable: {env_var}")
    return value


def get_aws_region() -> str:
    return _get_resource_by_env_var("AWS_REGION")


def get_ws_cache_table_name() -> str:
    return _get_resource_by_env_var("WS_CACHE_TABLE_NAME")


def get_ws_cache_ttl_seconds() -> int:
    """
    Lifetime of a cached web-service response before it is considered expired.
    Defaults to 5 minutes if not set or invalid value.
    """
    raw_value = os.environ.get("WS_CACHE_TTL_SECONDS")
    if not raw_value:
        return DEFAULT_WS_CACHE_TTL_SECONDS

    try:
        ttl = int(raw_value)
    except ValueError:
        _LOGGER.warning(f"Invalid WS_CACHE_TTL_SECONDS value: {raw_value}")
        return DEFAULT_WS_CACHE_TTL_SECONDS

    if ttl <= 0:
        _LOGGER.warning(f"Non-positive WS_CACHE_TTL_SECONDS value: {raw_value}")
        return DEFAULT_WS_CACHE_TTL_SECONDS
    return ttl
