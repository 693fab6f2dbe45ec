from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from activid.db.models import Wish

MAX_INVITATION_ID_LEN = 255
MAX_NAME_LEN = 80
MAX_NAME_KEY_LEN = 120
MAX_MESSAGE_LEN = 800

class WishValidationError(ValueError):
    pass

def _read_str(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    return value.strip() if isinstance(value, str) else ""

def parse_wish_payload(body: Any) -> tuple[str, str, str, str]:
    """Return ``(invitation_id, name, name_key, message)`` or raise WishValidationError."""
    payload = body if isinstance(body, dict) else {}
    invitation_id = _read_str(payload, "invitationId")
    name = _read_str(payload, "name")
    name_key = _read_str(payload, "nameKey")
    message = _read_str(payload, "message")

    if not invitation_id or not name or not name_key or not message:
        raise WishValidationError("Missing invitationId, name, nameKey, or message")
    if len(invitation_id) > MAX_INVITATION_ID_LEN:
        raise WishValidationError("invitationId is too long")
    if len(name) > MAX_NAME_LEN:
        raise WishValidationError("Name is too long")
    if len(name_key) > MAX_NAME_KEY_LEN:
        raise WishValidationError("nameKey is too long")
    if len(message) > MAX_MESSAGE_LEN:
        raise WishValidationError("Message is too long")
    return invitation_id, name, name_key, message

def _epoch_ms(dt: datetime | None) -> int | None:
    if dt is None:
        return None
    # SQLite hands timestamps back without tzinfo; they were written as UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)

def serialize_wish(wish: Wish) -> dict[str, Any]:
    return {
        "id": wish.id,
        "invitationId": wish.invitation_id,
        "name": wish.name,
        "nameKey": wish.name_key,
        "message": wish.message,
        "createdAt": _epoch_ms(wish.created_at),
    }
