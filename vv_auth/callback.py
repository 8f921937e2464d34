"""Parsing of the vscode:// callback delivered after browser login"""

from typing import Tuple
from urllib.parse import parse_qs, urlparse

from .exceptions import AuthExchangeFailedError


def parse_callback_uri(uri: str) -> Tuple[str, str]:
    """Extract (code, state) from a callback URI

    Accepts the full URI or just its query string.

    Raises:
        AuthExchangeFailedError: If the login page reported an error or the
            code/state parameters are missing
    """
    uri = uri.strip()
    query = urlparse(uri).query if "://" in uri else uri.lstrip("?")
    params = parse_qs(query)

    def first(name: str) -> str:
        values = params.get(name)
        return values[0] if values else ""

    error = first("error")
    if error:
        description = first("error_description")
        detail = f"{error}: {description}" if description else error
        raise AuthExchangeFailedError(f"Authentication failed: {detail}")

    code = first("code")
    state = first("state")
    if not code or not state:
        raise AuthExchangeFailedError("Authentication failed: missing code or state parameter")

    return code, state
