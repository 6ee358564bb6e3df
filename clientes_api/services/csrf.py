import hashlib
import hmac
from typing import Optional

from clientes_api.config import settings

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


def derive_csrf_token(session_token: Optional[str], secret: Optional[str] = None) -> Optional[str]:
    """HMAC-SHA256 of the session token, hex encoded.

    Nothing is stored: the value is recomputed from the live cookie on every
    check, so it dies together with the session. ``None`` is returned when
    there is no session token.
    """
    if not session_token:
        return None
    key = (secret if secret is not None else settings.csrf_secret).encode("utf-8")
    return hmac.new(key, session_token.encode("utf-8"), hashlib.sha256).hexdigest()


def is_safe_method(method: str) -> bool:
    return method.upper() in SAFE_METHODS


def tokens_match(expected: Optional[str], supplied: Optional[str]) -> bool:
    if not expected or not supplied:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), supplied.encode("utf-8"))
