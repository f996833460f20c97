import secrets
from fastapi import Request

from dropx.config import get_settings
from dropx.utils.errors import ValidationError

# cart_sessions.session_key is String(128)
MAX_SESSION_KEY_LENGTH = 128


def resolve_session_key(request: Request, user_id: int) -> str:
    """Cart session key for this client: header first, then cookie, else a new token tied to the user."""
    settings = get_settings()
    key = (request.headers.get(settings.CART_SESSION_HEADER) or "").strip()
    if not key:
        key = (request.cookies.get(settings.CART_SESSION_COOKIE) or "").strip()
    if not key:
        return f"u{user_id}-{secrets.token_hex(16)}"
    if len(key) > MAX_SESSION_KEY_LENGTH:
        raise ValidationError(f"Cart session key must be at most {MAX_SESSION_KEY_LENGTH} characters")
    return key
