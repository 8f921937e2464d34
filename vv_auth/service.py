"""VVCode auth service

Coordinates the PKCE login flow: builds the login request, completes it
when the browser callback arrives, keeps the token and profile data in
durable storage, applies the selected group to the host's API settings and
broadcasts status changes to subscribers.
"""

import asyncio
import logging
import webbrowser
from typing import Any, Callable, Dict, Optional, Tuple

from config.endpoints import AuthEndpoints, resolve_endpoints
from utils.storage import StateManager
from .authorization import AuthorizationURLBuilder
from .constants import (
    ACCESS_TOKEN_KEY,
    ACT_MODE_MODEL_KEY,
    ANTHROPIC_BASE_URL_KEY,
    API_KEY_KEY,
    AUTH_STATE_KEY,
    CODE_VERIFIER_KEY,
    GROUP_CONFIG_KEY,
    PLAN_MODE_MODEL_KEY,
    REFRESH_TOKEN_KEY,
    USER_CONFIG_KEY,
    USER_ID_KEY,
    USER_INFO_KEY,
)
from .exceptions import (
    AuthExchangeFailedError,
    AuthProviderError,
    AuthStatePersistError,
    ControllerUninitializedError,
    CSRFMismatchError,
    GroupMissingKeyError,
    GroupNotFoundError,
    RateLimitedError,
    StateNotFoundError,
    VerifierMissingError,
)
from .models import (
    AuthPhase,
    AuthSession,
    AuthState,
    GroupConfig,
    GroupItem,
    dump_group_config,
    parse_group_config,
)
from .pkce import generate_code_challenge, generate_code_verifier, generate_state
from .provider import VVAuthProvider
from .subscriptions import Deliver, StatusRegistry, StatusStream

logger = logging.getLogger(__name__)

_FLOW_ERRORS = (StateNotFoundError, CSRFMismatchError, VerifierMissingError)


class VVAuthService:
    """Process-wide VVCode login state

    All durable state lives in the state manager; the service itself only
    holds the flow phase, the last processed authorization code and the
    status subscribers.
    """

    def __init__(
        self,
        state_manager: StateManager,
        provider: Optional[VVAuthProvider] = None,
        endpoints: Optional[AuthEndpoints] = None,
        open_external: Optional[Callable[[str], Any]] = None,
    ):
        """
        Args:
            state_manager: Durable storage for secrets and state
            provider: API client (default: bound to the resolved API URL)
            endpoints: Backend addresses (default: resolved from environment)
            open_external: Browser launcher (default: webbrowser.open)
        """
        self.state = state_manager
        self.endpoints = endpoints or resolve_endpoints()
        self.provider = provider or VVAuthProvider(self.endpoints.api_base_url)
        self.auth_builder = AuthorizationURLBuilder(self.endpoints.auth_page_url)
        self._open_external = open_external or webbrowser.open
        self._registry = StatusRegistry()
        self._last_processed_code: Optional[str] = None
        self._phase = self._phase_from_storage()

    def _phase_from_storage(self) -> AuthPhase:
        if self.get_access_token():
            return AuthPhase.AUTHENTICATED
        if self.state.get_global_state_key(AUTH_STATE_KEY):
            return AuthPhase.PENDING_CALLBACK
        return AuthPhase.UNAUTHENTICATED

    @property
    def phase(self) -> AuthPhase:
        return self._phase

    @property
    def is_authenticated(self) -> bool:
        return bool(self.get_access_token())

    # Getters

    def get_info(self) -> AuthState:
        """Current status as broadcast to subscribers"""
        return AuthState(user=self.get_user_info())

    def get_access_token(self) -> Optional[str]:
        return self.state.get_secret_key(ACCESS_TOKEN_KEY)

    def get_user_info(self) -> Optional[Dict[str, Any]]:
        return self.state.get_global_state_key(USER_INFO_KEY)

    def get_user_config(self) -> Optional[Dict[str, Any]]:
        return self.state.get_global_state_key(USER_CONFIG_KEY)

    def get_group_config(self) -> Optional[GroupConfig]:
        raw = self.state.get_global_state_key(GROUP_CONFIG_KEY)
        if raw is None:
            return None
        return parse_group_config(raw)

    # Login flow

    async def initialize(self) -> None:
        """Refresh the group config on startup when already logged in"""
        if not self.is_authenticated:
            return

        if await self.refresh_group_config() is not None:
            logger.info("Group config initialized on startup")

    async def create_auth_request(self) -> str:
        """Start a login: persist a PKCE session and open the login page

        Returns:
            The login URL that was opened

        Raises:
            AuthStatePersistError: If the session cannot be read back from
                disk after flushing
        """
        session = AuthSession(state=generate_state(), code_verifier=generate_code_verifier())

        # The session must survive a host restart between request and callback
        self._save_session(session)
        await self.state.flush_pending_state()

        if self._read_session_from_disk() != session:
            logger.error("Auth session was not found on disk after flush")
            raise AuthStatePersistError()

        code_challenge = generate_code_challenge(session.code_verifier)
        auth_url = self.auth_builder.get_authorize_url(session.state, code_challenge)
        if self._phase is not AuthPhase.PROCESSING_CALLBACK:
            self._phase = AuthPhase.PENDING_CALLBACK

        logger.info("Opening browser for VVCode login")
        await asyncio.to_thread(self._open_external, auth_url)
        return auth_url

    def _save_session(self, session: AuthSession) -> None:
        self.state.set_global_state(AUTH_STATE_KEY, session.state)
        self.state.set_global_state(CODE_VERIFIER_KEY, session.code_verifier)

    def _read_session_from_disk(self) -> Optional[AuthSession]:
        state = self.state.read_global_state_from_disk(AUTH_STATE_KEY)
        if not state:
            return None
        return AuthSession(
            state=state,
            code_verifier=self.state.read_global_state_from_disk(CODE_VERIFIER_KEY) or "",
        )

    def _load_session(self) -> Optional[AuthSession]:
        """Pending session from the cache, else from disk

        The cache may predate a reload between request and callback. A
        session whose verifier is missing comes back with an empty
        code_verifier.
        """
        state = self.state.get_global_state_key(AUTH_STATE_KEY)
        if not state:
            return self._read_session_from_disk()

        code_verifier = self.state.get_global_state_key(CODE_VERIFIER_KEY)
        if not code_verifier:
            code_verifier = self.state.read_global_state_from_disk(CODE_VERIFIER_KEY)
        return AuthSession(state=state, code_verifier=code_verifier or "")

    def _clear_session(self) -> None:
        self.state.set_global_state(AUTH_STATE_KEY, None)
        self.state.set_global_state(CODE_VERIFIER_KEY, None)

    async def _clear_session_quietly(self) -> None:
        try:
            self._clear_session()
            await self.state.flush_pending_state()
        except Exception as e:
            logger.error(f"Failed to clear auth session: {e}")

    async def handle_auth_callback(self, code: str, state: str) -> bool:
        """Complete a login from the browser callback

        Duplicate deliveries are ignored: a call made while another callback
        is being processed, or with the last successfully processed code,
        returns without doing anything.

        Args:
            code: Authorization code
            state: State echoed back by the login page

        Returns:
            True if the callback was processed, False if it was ignored

        Raises:
            RateLimitedError: If the backend answered 429
            StateNotFoundError: If no login session is pending
            CSRFMismatchError: If state does not match the pending session
            VerifierMissingError: If the session has no code verifier
            AuthExchangeFailedError: For any other failure
        """
        if self._phase is AuthPhase.PROCESSING_CALLBACK:
            logger.debug("Auth callback already being processed, ignoring")
            return False

        if code == self._last_processed_code:
            logger.debug("Auth code already processed, ignoring")
            return False

        self._phase = AuthPhase.PROCESSING_CALLBACK
        try:
            await self._complete_login(code, state)
            return True
        except Exception as e:
            await self._clear_session_quietly()
            logger.error(f"Authentication failed: {e}")
            raise self._classify_error(e) from e
        finally:
            if self._phase is AuthPhase.PROCESSING_CALLBACK:
                self._phase = self._phase_from_storage()

    @staticmethod
    def _classify_error(error: Exception) -> Exception:
        message = str(error)
        if isinstance(error, RateLimitedError):
            return error
        if isinstance(error, AuthProviderError) and error.is_rate_limited:
            return RateLimitedError()
        if "Too Many Requests" in message or "429" in message:
            return RateLimitedError()
        if isinstance(error, _FLOW_ERRORS):
            return type(error)(f"Authentication failed: {message}")
        return AuthExchangeFailedError(f"Authentication failed: {message}")

    async def _complete_login(self, code: str, state: str) -> None:
        session = self._load_session()
        if session is None:
            raise StateNotFoundError()

        if state != session.state:
            raise CSRFMismatchError()

        if not session.code_verifier:
            raise VerifierMissingError()

        auth_info = await self.provider.exchange_code_for_token(code, session.code_verifier, state)
        self.state.set_secret(ACCESS_TOKEN_KEY, auth_info.access_token)
        self.state.set_secret(USER_ID_KEY, str(auth_info.user_id))

        user_info = await self.provider.get_user_info(auth_info.access_token, auth_info.user_id)
        self.state.set_global_state(USER_INFO_KEY, user_info)

        try:
            user_config = await self.provider.get_user_config(auth_info.access_token, auth_info.user_id)
            self.state.set_global_state(USER_CONFIG_KEY, user_config)
        except Exception as e:
            logger.warning(f"Failed to fetch user config: {e}")

        try:
            groups = await self.provider.get_group_tokens(auth_info.access_token, auth_info.user_id)
            groups, default_group = self._single_default(groups)
            self.state.set_global_state(GROUP_CONFIG_KEY, dump_group_config(groups))
            if default_group and default_group.api_key:
                await self._apply_group_config(default_group)
        except Exception as e:
            logger.warning(f"Failed to fetch group config: {e}")

        await self.state.flush_pending_state()

        self._clear_session()
        await self.state.flush_pending_state()

        self._last_processed_code = code
        self._phase = AuthPhase.AUTHENTICATED
        logger.info(f"Logged in as user {auth_info.user_id}")
        await self._send_auth_status_update()

    @staticmethod
    def _single_default(groups: GroupConfig) -> Tuple[GroupConfig, Optional[GroupItem]]:
        """Keep only the first isDefault flag, returning that group alongside the list"""
        default_index = next((i for i, g in enumerate(groups) if g.is_default), None)
        normalized = [
            g.model_copy(update={"is_default": i == default_index}) for i, g in enumerate(groups)
        ]
        if default_index is None:
            return normalized, None
        return normalized, normalized[default_index]

    async def handle_deauth(self) -> None:
        """Log out: revoke the token if possible and clear all login data"""
        access_token = self.get_access_token()

        if access_token:
            try:
                await self.provider.logout(access_token)
            except Exception as e:
                logger.warning(f"Logout API call failed: {e}")

        self.state.set_secret(ACCESS_TOKEN_KEY, None)
        self.state.set_secret(REFRESH_TOKEN_KEY, None)
        self.state.set_secret(USER_ID_KEY, None)
        self.state.set_global_state(USER_INFO_KEY, None)
        self.state.set_global_state(USER_CONFIG_KEY, None)
        self._clear_session()

        await self.state.flush_pending_state()

        self._phase = AuthPhase.UNAUTHENTICATED
        logger.info("Logged out")
        await self._send_auth_status_update()

    # Groups

    async def switch_group(self, group_type: str) -> None:
        """Make another group the default and apply it

        Args:
            group_type: Group type, e.g. discount, daily or performance

        Raises:
            GroupNotFoundError: If there is no group config or no such group
            GroupMissingKeyError: If the group has no API key
        """
        groups = self.get_group_config()
        if not groups:
            raise GroupNotFoundError("Group config not found. Please login first.")

        target = next((g for g in groups if g.type == group_type), None)
        if target is None:
            raise GroupNotFoundError(f'Group "{group_type}" not found')

        if not target.api_key:
            raise GroupMissingKeyError(
                f'Group "{group_type}" has no API key configured. Please configure it first.'
            )

        updated = [g.model_copy(update={"is_default": g.type == group_type}) for g in groups]
        self.state.set_global_state(GROUP_CONFIG_KEY, dump_group_config(updated))

        await self._apply_group_config(target)

        await self.state.flush_pending_state()
        logger.info(f"Switched to group {group_type}")
        await self._send_auth_status_update()

    async def _apply_group_config(self, group: GroupItem) -> None:
        """Write a group's key, model and base URL into the host API settings"""
        self.state.set_secret(API_KEY_KEY, group.api_key)

        # Plan and act mode use the same model
        self.state.set_global_state(PLAN_MODE_MODEL_KEY, group.default_model_id)
        self.state.set_global_state(ACT_MODE_MODEL_KEY, group.default_model_id)

        # Dev mode always points at the local server
        base_url = self.endpoints.dev_base_url if self.endpoints.dev_mode else group.api_base_url
        if base_url:
            self.state.set_global_state(ANTHROPIC_BASE_URL_KEY, base_url)

        await self.state.flush_pending_state()

    async def refresh_group_config(self) -> Optional[GroupConfig]:
        """Re-fetch the group config

        Returns:
            The new group list, or None when logged out or the fetch failed
        """
        access_token = self.get_access_token()
        user_id = self.state.get_secret_key(USER_ID_KEY)

        if not access_token or not user_id:
            return None

        try:
            groups = await self.provider.get_group_tokens(access_token, int(user_id))
            self.state.set_global_state(GROUP_CONFIG_KEY, dump_group_config(groups))
            await self.state.flush_pending_state()
            return groups
        except Exception as e:
            logger.error(f"Failed to refresh group config: {e}")
            return None

    # Status subscriptions

    async def subscribe(self, deliver: Deliver) -> Callable[[], None]:
        """Subscribe to auth status updates

        The current status is delivered immediately.

        Returns:
            Function that cancels the subscription
        """
        return await self._registry.subscribe(deliver, self.get_info())

    async def status_updates(self) -> StatusStream:
        """Subscribe and return an async iterator over the current status and every later update"""
        return await self._registry.stream(self.get_info())

    async def _send_auth_status_update(self) -> None:
        await self._registry.broadcast(self.get_info())


_auth_service: Optional[VVAuthService] = None


async def init_auth_service(state_manager: StateManager, **kwargs: Any) -> VVAuthService:
    """Create the process-wide auth service once and run its startup refresh

    Later calls return the existing instance.
    """
    global _auth_service
    if _auth_service is None:
        _auth_service = VVAuthService(state_manager, **kwargs)
        await _auth_service.initialize()
    return _auth_service


def get_auth_service() -> VVAuthService:
    """Get the process-wide auth service

    Raises:
        ControllerUninitializedError: If init_auth_service() was never called
    """
    if _auth_service is None:
        raise ControllerUninitializedError()
    return _auth_service


def reset_auth_service() -> None:
    """Forget the process-wide auth service"""
    global _auth_service
    _auth_service = None
