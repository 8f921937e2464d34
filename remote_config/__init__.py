"""Remote runtime configuration fetched from the VVCode API"""

from .fetcher import (
    AnthropicConfig,
    ResolvedConfig,
    clear_config_cache,
    get_cached_config,
    get_dynamic_config,
)

__all__ = [
    "AnthropicConfig",
    "ResolvedConfig",
    "clear_config_cache",
    "get_cached_config",
    "get_dynamic_config",
]
