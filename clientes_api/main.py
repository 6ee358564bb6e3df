from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from clientes_api.config import settings
from clientes_api.database import init_db
from clientes_api.logging import get_logger
from clientes_api.routers import auth, clientes, health
from clientes_api.services.errors import ApiError
from clientes_api.services.users import user_store

logger = get_logger(__name__)

app = FastAPI(title="Clientes API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.frontend_origins),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", settings.csrf_header_name],
)

app.include_router(health.router, prefix="/api")
app.include_router(auth.router, prefix="/api")
app.include_router(clientes.router, prefix="/api")


def _validation_messages(exc: RequestValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = str(error.get("msg", "Invalid value"))
        messages.append(f"{location}: {message}" if location else message)
    return messages


@app.exception_handler(ApiError)
async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code, content=exc.to_body(), headers=exc.headers
    )


@app.exception_handler(HTTPException)
async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid data", "errors": _validation_messages(exc)},
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path, method=request.method)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


def check_csrf_secret() -> None:
    if not settings.csrf_secret_is_placeholder:
        return
    if settings.is_production:
        raise RuntimeError("CSRF_SECRET must be set in production")
    logger.warning("csrf_secret_placeholder", environment=settings.environment)


@app.on_event("startup")
def startup() -> None:
    check_csrf_secret()
    init_db()
    user_store.ensure_seed_admin()


@app.get("/")
def root():
    return {"status": "Backend running"}
