from __future__ import annotations

import hmac
import hashlib
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any

from activid.services.register_session import is_session_valid

logger = logging.getLogger(__name__)

UPLOAD_TOKEN_TTL_SECONDS = 10 * 60
MISSING_KEYS_ERROR = "Server is missing ImageKit keys (IMAGEKIT_PUBLIC_KEY / IMAGEKIT_PRIVATE_KEY)."

@dataclass(frozen=True)
class UploadAuthorization:
    token: str
    expire: int
    signature: str
    public_key: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "token": self.token,
            "expire": self.expire,
            "signature": self.signature,
            "publicKey": self.public_key,
        }

def sign_upload_token(token: str, expire: int, private_key: str) -> str:
    # ImageKit verifies HMAC-SHA1(token + expire) as lowercase hex
    return hmac.new(private_key.encode("utf-8"), f"{token}{expire}".encode("utf-8"), hashlib.sha1).hexdigest()

def issue_upload_authorization(public_key: str, private_key: str, now: int | None = None) -> UploadAuthorization:
    token = str(uuid.uuid4())
    expire = (int(time.time()) if now is None else int(now)) + UPLOAD_TOKEN_TTL_SECONDS
    return UploadAuthorization(
        token=token,
        expire=expire,
        signature=sign_upload_token(token, expire, private_key),
        public_key=public_key,
    )

def authorize_upload(
    session_cookie: str | None,
    *,
    session_secret: str | None,
    public_key: str | None,
    private_key: str | None,
    now: int,
) -> tuple[int, dict[str, Any]]:
    """Gate an ImageKit upload token behind a valid register session.

    Returns ``(status_code, body)``. Callers never learn why a session was
    rejected; a missing key pair is reported as a server error instead.
    """
    if not is_session_valid(session_cookie, session_secret, now=now):
        logger.info("Upload authorization denied")
        return 401, {"error": "Unauthorized"}

    if not public_key or not private_key:
        logger.error("ImageKit keys are not configured")
        return 500, {"error": MISSING_KEYS_ERROR}

    auth = issue_upload_authorization(public_key, private_key, now=now)
    return 200, auth.as_dict()
