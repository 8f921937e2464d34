"""Login page URL construction"""

import logging
from urllib.parse import urlencode

from .constants import CALLBACK_URI

logger = logging.getLogger(__name__)


class AuthorizationURLBuilder:
    """Builds login page URLs carrying the PKCE challenge"""

    def __init__(self, auth_page_url: str, redirect_uri: str = CALLBACK_URI):
        """
        Args:
            auth_page_url: VVCode login page
            redirect_uri: Custom-scheme URI the page redirects back to
        """
        self.auth_page_url = auth_page_url
        self.redirect_uri = redirect_uri

    def get_authorize_url(self, state: str, code_challenge: str) -> str:
        """Construct the login URL

        Args:
            state: CSRF state token
            code_challenge: S256 challenge of the session's verifier

        Returns:
            Full login URL
        """
        params = {
            "state": state,
            "code_challenge": code_challenge,
            "redirect_uri": self.redirect_uri,
        }
        separator = "&" if "?" in self.auth_page_url else "?"
        url = f"{self.auth_page_url}{separator}{urlencode(params)}"
        logger.debug(f"Built login URL for {self.auth_page_url}")
        return url
