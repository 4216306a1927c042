"""Bearer token signing and verification.

Tokens are ``<payload>.<signature>`` where payload is base64url JSON
``{"sub": owner_id, "exp": unix_seconds}`` and signature is HMAC-SHA256
of the payload with the configured secret.
"""

import base64
import binascii
import hashlib
import hmac
import json
import time
from typing import Optional

from papertrade.core.exceptions import AuthenticationError


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(value: str) -> bytes:
    padding = "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(value + padding)


def _sign(payload: str, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), payload.encode("ascii"), hashlib.sha256).digest()
    return _b64encode(digest)


def create_access_token(
    owner_id: str,
    secret: str,
    ttl_seconds: int,
    now: Optional[float] = None,
) -> str:
    """Mint a signed token for ``owner_id`` valid for ``ttl_seconds``."""
    issued = int(now if now is not None else time.time())
    body = json.dumps({"sub": owner_id, "exp": issued + ttl_seconds}, separators=(",", ":"))
    payload = _b64encode(body.encode("utf-8"))
    return f"{payload}.{_sign(payload, secret)}"


def verify_access_token(token: str, secret: str, now: Optional[float] = None) -> str:
    """
    Verify a token and return the owner id it was issued for.

    Raises:
        AuthenticationError: malformed token, bad signature or expired.
    """
    # Headers arrive latin-1 decoded, so non-ASCII input must fail as a bad token
    try:
        payload, signature = token.split(".", 1)
        expected = _sign(payload, secret)
        valid = hmac.compare_digest(signature.encode("utf-8"), expected.encode("ascii"))
    except (ValueError, TypeError, UnicodeEncodeError):
        raise AuthenticationError("Not authorized, token failed")

    if not valid:
        raise AuthenticationError("Not authorized, token failed")

    try:
        claims = json.loads(_b64decode(payload))
    except (ValueError, UnicodeDecodeError, binascii.Error):
        raise AuthenticationError("Not authorized, token failed")
    if not isinstance(claims, dict):
        raise AuthenticationError("Not authorized, token failed")

    owner_id = claims.get("sub")
    expires = claims.get("exp")
    if not owner_id or not isinstance(expires, int):
        raise AuthenticationError("Not authorized, token failed")

    current = now if now is not None else time.time()
    if current >= expires:
        raise AuthenticationError("Not authorized, token expired")
    return owner_id
