from typing import Callable

from fastapi import Depends, Request
from sqlalchemy.exc import SQLAlchemyError

from clientes_api.config import settings
from clientes_api.logging import get_logger
from clientes_api.services.captcha import CaptchaService, captcha_service
from clientes_api.services.csrf import derive_csrf_token, is_safe_method, tokens_match
from clientes_api.services.errors import (
    Forbidden,
    Internal,
    NotAuthenticated,
    TooManyRequests,
)
from clientes_api.services.permissions import (
    PermissionAction,
    PermissionStore,
    permission_store,
)
from clientes_api.services.rate_limit import RateLimiter, login_rate_limiter
from clientes_api.services.sessions import (
    CurrentUser,
    InvalidSessionIdentity,
    SessionStore,
    session_store,
)

logger = get_logger(__name__)


def get_captcha_service() -> CaptchaService:
    return captcha_service


def get_session_store() -> SessionStore:
    return session_store


def get_permission_store() -> PermissionStore:
    return permission_store


def get_login_rate_limiter() -> RateLimiter:
    return login_rate_limiter


def client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


def session_token(request: Request) -> str | None:
    return request.cookies.get(settings.session_cookie_name) or None


def require_auth(
    request: Request, sessions: SessionStore = Depends(get_session_store)
) -> CurrentUser:
    token = session_token(request)
    if not token:
        raise NotAuthenticated("Not authenticated")
    try:
        user = sessions.resolve(token)
    except InvalidSessionIdentity as exc:
        logger.error("session_identity_invalid", error=str(exc))
        raise NotAuthenticated("Invalid session") from exc
    except SQLAlchemyError as exc:
        logger.error("session_lookup_failed", error=str(exc))
        raise Internal("Internal error while validating session") from exc
    if user is None:
        logger.info("session_rejected", ip=client_ip(request))
        raise NotAuthenticated("Invalid or expired session. Please log in again.")
    request.state.user = user
    return user


def require_permission(option_name: str, action: PermissionAction) -> Callable:
    action = PermissionAction(action)

    def check_permission(
        request: Request, permissions: PermissionStore = Depends(get_permission_store)
    ) -> None:
        user: CurrentUser | None = getattr(request.state, "user", None)
        if user is None:
            raise NotAuthenticated("Not authenticated")
        try:
            allowed = permissions.has_permission(user.id, option_name, action)
        except SQLAlchemyError as exc:
            logger.error(
                "permission_lookup_failed",
                user_id=user.id,
                option=option_name,
                action=action.value,
                error=str(exc),
            )
            raise Internal("Internal authorization error") from exc
        if not allowed:
            logger.info(
                "permission_denied",
                user_id=user.id,
                option=option_name,
                action=action.value,
            )
            raise Forbidden("Access denied")

    return check_permission


def require_csrf(request: Request) -> None:
    if is_safe_method(request.method):
        return
    token = session_token(request)
    if not token:
        raise NotAuthenticated("Session not valid for CSRF verification")
    expected = derive_csrf_token(token)
    supplied = request.headers.get(settings.csrf_header_name)
    if not supplied:
        logger.info("csrf_rejected", reason="missing_header", path=request.url.path)
        raise Forbidden(
            "Missing CSRF header",
            details=f"Send the '{settings.csrf_header_name}' header on requests that modify data.",
        )
    if not tokens_match(expected, supplied):
        logger.info("csrf_rejected", reason="mismatch", path=request.url.path)
        raise Forbidden("Invalid CSRF token")


def login_rate_limit(
    request: Request, limiter: RateLimiter = Depends(get_login_rate_limiter)
) -> None:
    key = f"login:{client_ip(request) or 'unknown'}"
    allowed, retry_after = limiter.check(
        key, settings.login_rate_window_seconds, settings.login_rate_limit
    )
    if not allowed:
        logger.warning("login_rate_limited", ip=client_ip(request), retry_after=retry_after)
        raise TooManyRequests(
            "Too many login attempts. Try again in a few minutes.",
            retry_after=retry_after or 1,
        )
