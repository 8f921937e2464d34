"""VVCode authentication package

PKCE login against the VVCode backend, profile and group storage, group
switching and auth status subscriptions.
"""

from .callback import parse_callback_uri
from .constants import CALLBACK_URI
from .exceptions import (
    AuthExchangeFailedError,
    AuthProviderError,
    AuthStatePersistError,
    ControllerUninitializedError,
    CSRFMismatchError,
    GroupError,
    GroupMissingKeyError,
    GroupNotFoundError,
    RateLimitedError,
    StateNotFoundError,
    VerifierMissingError,
    VVAuthError,
)
from .models import AuthInfo, AuthPhase, AuthSession, AuthState, GroupConfig, GroupItem
from .pkce import generate_code_challenge, generate_code_verifier, generate_state
from .provider import VVAuthProvider
from .service import VVAuthService, get_auth_service, init_auth_service, reset_auth_service
from .subscriptions import StatusRegistry, StatusStream

__all__ = [
    "parse_callback_uri",
    "CALLBACK_URI",
    "AuthExchangeFailedError",
    "AuthProviderError",
    "AuthStatePersistError",
    "ControllerUninitializedError",
    "CSRFMismatchError",
    "GroupError",
    "GroupMissingKeyError",
    "GroupNotFoundError",
    "RateLimitedError",
    "StateNotFoundError",
    "VerifierMissingError",
    "VVAuthError",
    "AuthInfo",
    "AuthPhase",
    "AuthSession",
    "AuthState",
    "GroupConfig",
    "GroupItem",
    "generate_code_challenge",
    "generate_code_verifier",
    "generate_state",
    "VVAuthProvider",
    "VVAuthService",
    "get_auth_service",
    "init_auth_service",
    "reset_auth_service",
    "StatusRegistry",
    "StatusStream",
]
