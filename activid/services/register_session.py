"""Stateless session cookie for the invitation register flow.

The cookie value is ``"<expire>.<signature>"`` where the signature is an
HMAC-SHA256 of a prefixed expiry, keyed by INVITATION_REGISTER_SESSION_SECRET.
Nothing is stored server side, so the only way to revoke issued cookies is to
rotate the secret, which invalidates every outstanding session at once.
"""
from __future__ import annotations

import base64
import hmac
import hashlib
import time

from activid.config import ConfigError

COOKIE_NAME = "invitation_register_session"
COOKIE_TTL_SECONDS = 60 * 60 * 12
SIGNING_PREFIX = "invitation-register:"
SECRET_ENV = "INVITATION_REGISTER_SESSION_SECRET"

def _b64url_encode(b: bytes) -> str:
    return base64.urlsafe_b64encode(b).decode("ascii").rstrip("=")

def _sign(payload: str, secret: str) -> str:
    mac = hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).digest()
    return _b64url_encode(mac)

def _now() -> int:
    return int(time.time())

def make_session_cookie(secret: str | None, ttl_seconds: int = COOKIE_TTL_SECONDS, now: int | None = None) -> str:
    if not secret:
        raise ConfigError(f"Missing environment variable: {SECRET_ENV}")
    expire = (_now() if now is None else int(now)) + int(ttl_seconds)
    signature = _sign(f"{SIGNING_PREFIX}{expire}", secret)
    return f"{expire}.{signature}"

def is_session_valid(value: str | None, secret: str | None, now: int | None = None) -> bool:
    if not value or not secret:
        return False

    parts = value.split(".")
    if len(parts) != 2:
        return False
    expire_raw, signature = parts
    if not expire_raw or not signature:
        return False

    if not (expire_raw.isascii() and expire_raw.isdigit()):
        return False
    try:
        expire = int(expire_raw)
    except ValueError:
        return False
    if expire <= 0:
        return False

    if (_now() if now is None else int(now)) > expire:
        return False

    expected = _sign(f"{SIGNING_PREFIX}{expire}", secret)
    try:
        return hmac.compare_digest(signature.encode("utf-8"), expected.encode("ascii"))
    except (TypeError, UnicodeError):
        return False
