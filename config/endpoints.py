"""Backend endpoint resolution

The API base URL and the login page URL are resolved from the environment
when an auth service is constructed. Precedence: an explicit
``VV_API_BASE_URL`` override, then dev mode, then production.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .loader import ConfigLoader, get_config_loader

logger = logging.getLogger(__name__)

PRODUCTION_SITE_URL = "https://vvcode.top"
DEFAULT_DEV_BASE_URL = "http://127.0.0.1:3000"
AUTH_PAGE_PATH = "/oauth/vscode/login"


@dataclass(frozen=True)
class AuthEndpoints:
    """Resolved backend addresses

    Attributes:
        api_base_url: Base URL of the VVCode REST API (ends with /api)
        auth_page_url: Browser login page that starts the PKCE flow
        dev_mode: True only when IS_DEV is set; forces the local base URL
            onto applied group settings
        dev_base_url: Local development server address
    """
    api_base_url: str
    auth_page_url: str
    dev_mode: bool = False
    dev_base_url: str = DEFAULT_DEV_BASE_URL


def resolve_endpoints(loader: Optional[ConfigLoader] = None) -> AuthEndpoints:
    """Resolve endpoints from IS_DEV, DEV_BASE_URL and VV_API_BASE_URL

    Args:
        loader: Config loader to read from (default: global loader)

    Returns:
        AuthEndpoints for the current environment
    """
    loader = loader or get_config_loader()

    dev_mode = loader.get("IS_DEV", False)
    dev_base_url = loader.get("DEV_BASE_URL", DEFAULT_DEV_BASE_URL)
    override = loader.get("VV_API_BASE_URL", "")

    if override:
        api_base_url = override
        auth_page_url = f"{override.replace('/api', '', 1)}{AUTH_PAGE_PATH}"
        logger.info(f"Using API override {api_base_url}")
    elif dev_mode:
        api_base_url = f"{dev_base_url}/api"
        auth_page_url = f"{dev_base_url}{AUTH_PAGE_PATH}"
        logger.info(f"Development mode, using local API {api_base_url}")
    else:
        api_base_url = f"{PRODUCTION_SITE_URL}/api"
        auth_page_url = f"{PRODUCTION_SITE_URL}{AUTH_PAGE_PATH}"

    return AuthEndpoints(
        api_base_url=api_base_url,
        auth_page_url=auth_page_url,
        dev_mode=dev_mode,
        dev_base_url=dev_base_url,
    )
