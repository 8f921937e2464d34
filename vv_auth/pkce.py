"""PKCE (Proof Key for Code Exchange) and state generation"""

import base64
import hashlib
import secrets


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode('utf-8').rstrip('=')


def generate_state() -> str:
    """Generate an opaque CSRF state token (256 bits of entropy)"""
    return _b64url(secrets.token_bytes(32))


def generate_code_verifier() -> str:
    """Generate a PKCE code verifier

    Returns:
        43-character string from the RFC 7636 unreserved character set
    """
    return _b64url(secrets.token_bytes(32))


def generate_code_challenge(code_verifier: str) -> str:
    """Derive the S256 code challenge for a verifier

    Args:
        code_verifier: Verifier from generate_code_verifier()

    Returns:
        base64url(SHA-256(verifier)) without padding
    """
    return _b64url(hashlib.sha256(code_verifier.encode('utf-8')).digest())
