"""Configuration management package for vvcode-auth"""

from .loader import ConfigLoader, get_config_loader, reset_config_loader
from .endpoints import AuthEndpoints, resolve_endpoints

__all__ = [
    "ConfigLoader",
    "get_config_loader",
    "reset_config_loader",
    "AuthEndpoints",
    "resolve_endpoints",
]
