"""Exception taxonomy for VVCode authentication

Every error raised by this package derives from VVAuthError. Messages are
written for display: front-ends surface them verbatim.
"""

from typing import Optional


class VVAuthError(Exception):
    """Base class for all VVCode auth errors"""


class AuthExchangeFailedError(VVAuthError):
    """Generic login failure ("Authentication failed: ...")"""


class StateNotFoundError(AuthExchangeFailedError):
    """No pending login session exists (stale or expired flow)"""

    def __init__(self, message: str = (
        "Authentication state not found. This may happen if the extension was reloaded. "
        "Please try logging in again."
    )):
        super().__init__(message)


class CSRFMismatchError(AuthExchangeFailedError):
    """Callback state does not match the pending session"""

    def __init__(self, message: str = "Invalid state parameter - possible CSRF attack"):
        super().__init__(message)


class VerifierMissingError(AuthExchangeFailedError):
    """Pending session has no PKCE code verifier"""

    def __init__(self, message: str = "Code verifier not found. Please try logging in again."):
        super().__init__(message)


class RateLimitedError(VVAuthError):
    """The backend rejected the login with HTTP 429"""

    def __init__(self, message: str = (
        "Authentication rate limit exceeded. Please wait a moment and try logging in again."
    )):
        super().__init__(message)


class AuthProviderError(VVAuthError):
    """The VVCode API answered a call with an error

    Attributes:
        status_code: HTTP status, or None when the error came from a
            success=false response envelope
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429


class AuthStatePersistError(VVAuthError):
    """The login session could not be verified on disk before the redirect"""

    def __init__(self, message: str = "Failed to save authentication state. Please try again."):
        super().__init__(message)


class GroupError(VVAuthError):
    """Base class for group switching errors"""


class GroupNotFoundError(GroupError):
    """Requested group type is not in the group config"""


class GroupMissingKeyError(GroupError):
    """Requested group has no API key configured"""


class ControllerUninitializedError(VVAuthError):
    """The process-wide auth service was used before initialization"""

    def __init__(self, message: str = (
        "VVAuthService not initialized. Call init_auth_service(state_manager) first."
    )):
        super().__init__(message)
