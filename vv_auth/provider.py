"""HTTP client for the VVCode auth and profile API"""

import logging
from typing import Any, Dict, Optional

import httpx

from settings import REQUEST_TIMEOUT
from .constants import (
    GROUP_TOKENS_PATH,
    LOGOUT_PATH,
    TOKEN_PATH,
    USER_CONFIG_PATH,
    USER_ID_HEADER,
    USER_INFO_PATH,
)
from .exceptions import AuthProviderError
from .models import AuthInfo, GroupConfig, parse_group_config

logger = logging.getLogger(__name__)


def _unwrap(payload: Any, what: str) -> Any:
    """Return the data of a {success, message, data} envelope

    Bodies without a success field are returned unchanged.

    Raises:
        AuthProviderError: If the envelope reports success=false
    """
    if isinstance(payload, dict) and "success" in payload:
        if not payload.get("success"):
            message = payload.get("message") or f"Failed to fetch {what}"
            raise AuthProviderError(message)
        return payload.get("data")
    return payload


class VVAuthProvider:
    """Stateless client bound to one API base URL

    No call is retried; callers decide how to treat failures.
    """

    def __init__(
        self,
        api_base_url: str,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            api_base_url: Base URL of the API, e.g. https://vvcode.top/api
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    @staticmethod
    def _auth_headers(access_token: str, user_id: Optional[int] = None) -> Dict[str, str]:
        headers = {"Authorization": f"Bearer {access_token}"}
        if user_id is not None:
            headers[USER_ID_HEADER] = str(user_id)
        return headers

    async def exchange_code_for_token(self, code: str, code_verifier: str, state: str) -> AuthInfo:
        """Exchange an authorization code for an access token

        Args:
            code: Authorization code from the callback
            code_verifier: PKCE verifier of the pending session
            state: State echoed back by the login page

        Returns:
            AuthInfo with access token and user id

        Raises:
            AuthProviderError: On a non-2xx answer (429 flagged as rate
                limited) or a malformed response
        """
        url = f"{self.api_base_url}{TOKEN_PATH}"
        logger.info(f"Exchanging authorization code for token at {url}")

        async with self._client() as client:
            response = await client.post(
                url,
                json={
                    "code": code,
                    "code_verifier": code_verifier,
                    "state": state,
                },
                headers={"Content-Type": "application/json"},
            )

        if not response.is_success:
            logger.error(f"Token exchange failed with status {response.status_code}")
            raise AuthProviderError(
                f"Token exchange failed: {response.status_code} {response.reason_phrase} - {response.text}",
                status_code=response.status_code,
            )

        data = _unwrap(response.json(), "token") or {}
        access_token = data.get("access_token") or data.get("accessToken")
        user_id = data.get("user_id", data.get("userId"))

        if not access_token or user_id is None:
            raise AuthProviderError("Token exchange response missing access token or user id")

        logger.info("Authorization code exchanged successfully")
        return AuthInfo(access_token=access_token, user_id=int(user_id))

    async def _get(self, path: str, access_token: str, user_id: int, what: str) -> Any:
        async with self._client() as client:
            response = await client.get(
                f"{self.api_base_url}{path}",
                headers=self._auth_headers(access_token, user_id),
            )
        response.raise_for_status()
        return _unwrap(response.json(), what)

    async def get_user_info(self, access_token: str, user_id: int) -> Dict[str, Any]:
        """Fetch the user's profile

        Raises:
            httpx.HTTPError: On network errors or non-2xx answers
            AuthProviderError: If the API reports failure
        """
        data = await self._get(USER_INFO_PATH, access_token, user_id, "user info")
        if not isinstance(data, dict):
            raise AuthProviderError("Unexpected user info response")
        return data

    async def get_user_config(self, access_token: str, user_id: int) -> Dict[str, Any]:
        """Fetch the user's preferences"""
        data = await self._get(USER_CONFIG_PATH, access_token, user_id, "user config")
        return data if isinstance(data, dict) else {}

    async def get_group_tokens(self, access_token: str, user_id: int) -> GroupConfig:
        """Fetch the user's group list (API key, model and base URL per group)"""
        data = await self._get(GROUP_TOKENS_PATH, access_token, user_id, "group config")
        return parse_group_config(data)

    async def logout(self, access_token: str) -> None:
        """Revoke the access token on the server

        Raises:
            httpx.HTTPError: On network errors or non-2xx answers
        """
        async with self._client() as client:
            response = await client.post(
                f"{self.api_base_url}{LOGOUT_PATH}",
                headers=self._auth_headers(access_token),
            )
        response.raise_for_status()
        logger.info("Access token revoked")
