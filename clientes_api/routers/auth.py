from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.exc import SQLAlchemyError

from clientes_api.config import settings
from clientes_api.logging import get_logger
from clientes_api.routers.dependencies import (
    client_ip,
    get_captcha_service,
    get_session_store,
    login_rate_limit,
    require_csrf,
    session_token,
)
from clientes_api.schemas.auth import (
    CaptchaResponse,
    CsrfTokenResponse,
    LoginRequest,
    LoginResponse,
    UserPublic,
)
from clientes_api.schemas.clientes import MessageResponse
from clientes_api.services.audit import record_audit
from clientes_api.services.captcha import CaptchaService
from clientes_api.services.csrf import derive_csrf_token
from clientes_api.services.errors import (
    BadRequest,
    Forbidden,
    Internal,
    NotAuthenticated,
)
from clientes_api.services.passwords import verify_password
from clientes_api.services.sessions import SessionStore
from clientes_api.services.users import user_store

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

INVALID_CREDENTIALS = "Invalid credentials (user or password)."


@router.get("/captcha", response_model=CaptchaResponse)
def get_captcha(captcha: CaptchaService = Depends(get_captcha_service)) -> CaptchaResponse:
    challenge = captcha.create()
    return CaptchaResponse(id=challenge.id, question=challenge.question)


@router.post(
    "/login",
    response_model=LoginResponse,
    dependencies=[Depends(login_rate_limit)],
)
def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    captcha: CaptchaService = Depends(get_captcha_service),
    sessions: SessionStore = Depends(get_session_store),
) -> LoginResponse:
    if not captcha.verify(payload.captcha_id, payload.captcha_respuesta):
        raise BadRequest("Captcha incorrect or expired.")

    try:
        user = user_store.get_by_login(payload.usuario)
    except SQLAlchemyError as exc:
        logger.error("login_lookup_failed", error=str(exc))
        raise Internal("Internal error during login") from exc
    if user is None:
        logger.info("login_failed", reason="unknown_user", ip=client_ip(request))
        raise NotAuthenticated(INVALID_CREDENTIALS)
    if not user.active:
        logger.info("login_failed", reason="inactive_user", user_id=user.id)
        raise Forbidden("Inactive user. Contact the administrator.")
    if not verify_password(payload.password, user.password_hash):
        logger.info("login_failed", reason="bad_password", user_id=user.id)
        raise NotAuthenticated(INVALID_CREDENTIALS)

    try:
        issued = sessions.create_session(
            user.id,
            user_agent=request.headers.get("user-agent"),
            ip_address=client_ip(request),
        )
    except SQLAlchemyError as exc:
        logger.error("session_create_failed", user_id=user.id, error=str(exc))
        raise Internal("Internal error during login") from exc

    response.set_cookie(
        key=settings.session_cookie_name,
        value=issued.token,
        max_age=sessions.ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    logger.info("login_succeeded", user_id=user.id)
    record_audit(
        "Usuarios",
        "LOGIN",
        entidad_id=user.id,
        realizado_por=user.id,
        ip=client_ip(request),
    )
    return LoginResponse(
        message="Login successful.",
        user=UserPublic(
            id_usuario=user.id,
            usuario_login=user.login,
            nombre_completo=user.full_name,
            correo=user.email,
        ),
        csrf_token=derive_csrf_token(issued.token),
    )


@router.get("/csrf-token", response_model=CsrfTokenResponse)
def get_csrf_token(request: Request) -> CsrfTokenResponse:
    token = session_token(request)
    if not token:
        raise NotAuthenticated("Session not valid.")
    return CsrfTokenResponse(csrf_token=derive_csrf_token(token))


@router.post(
    "/logout",
    response_model=MessageResponse,
    dependencies=[Depends(require_csrf)],
)
def logout(
    request: Request,
    response: Response,
    sessions: SessionStore = Depends(get_session_store),
) -> MessageResponse:
    token = session_token(request)
    message = "Session closed."
    if token:
        try:
            sessions.revoke_session(token)
        except SQLAlchemyError as exc:
            logger.error("logout_revoke_failed", error=str(exc))
            message = "Session closed (with internal error)."
        else:
            record_audit("SesionesSeguras", "LOGOUT", ip=client_ip(request))
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return MessageResponse(message=message)
