"""Dynamic configuration fetcher

Fetches runtime configuration from the remote endpoint and caches it in
process. There are no local fallback values: if the API fails, the resolved
values are None.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from settings import CONFIG_ENDPOINT, CONFIG_FETCH_TIMEOUT

logger = logging.getLogger(__name__)


@dataclass
class AnthropicConfig:
    api_key: Optional[str] = None
    base_url: Optional[str] = None


@dataclass
class ResolvedConfig:
    """Configuration used by the application (values may be None)"""
    anthropic: AnthropicConfig = field(default_factory=AnthropicConfig)


_cached_config: Optional[ResolvedConfig] = None


async def fetch_remote_config(
    endpoint: str = CONFIG_ENDPOINT,
    timeout: float = CONFIG_FETCH_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Optional[Dict[str, Any]]:
    """Fetch the raw configuration document

    Returns:
        Parsed JSON object, or None on any failure
    """
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.get(endpoint)
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch remote config: {e}")
        return None

    if response.status_code != 200:
        logger.warning(f"Invalid response from config endpoint: {response.status_code}")
        return None

    try:
        data = response.json()
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse remote config: {e}")
        return None

    if not isinstance(data, dict) or not data:
        logger.warning("Invalid response from config endpoint")
        return None

    logger.info("Successfully fetched remote configuration")
    return data


def resolve_config(remote_config: Optional[Dict[str, Any]]) -> ResolvedConfig:
    """Map the remote document onto ResolvedConfig without fallbacks"""
    anthropic = (remote_config or {}).get("anthropic")
    if not isinstance(anthropic, dict):
        anthropic = {}
    return ResolvedConfig(
        anthropic=AnthropicConfig(
            api_key=anthropic.get("apiKey"),
            base_url=anthropic.get("baseUrl"),
        )
    )


async def get_dynamic_config(
    force_refresh: bool = False,
    endpoint: str = CONFIG_ENDPOINT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ResolvedConfig:
    """Get the configuration, fetching it on first use

    Args:
        force_refresh: Bypass the cache and fetch again
        endpoint: Configuration endpoint URL
        transport: Optional httpx transport (used by tests)

    Returns:
        The resolved configuration (also cached)
    """
    global _cached_config
    if _cached_config is not None and not force_refresh:
        return _cached_config

    remote_config = await fetch_remote_config(endpoint=endpoint, transport=transport)
    _cached_config = resolve_config(remote_config)
    return _cached_config


def get_cached_config() -> Optional[ResolvedConfig]:
    """Return the cached configuration, or None if never fetched"""
    return _cached_config


def clear_config_cache() -> None:
    """Drop the cache so the next get_dynamic_config() fetches again"""
    global _cached_config
    _cached_config = None
