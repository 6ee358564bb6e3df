import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv(override=True)

PLACEHOLDER_CSRF_SECRET = "change-me-in-production"


def _env_bool(name: str, default: bool = False) -> bool:
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_list(name: str, default: str) -> tuple[str, ...]:
    raw_value = os.getenv(name, default)
    return tuple(item.strip() for item in raw_value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    environment: str = os.getenv("APP_ENV", "development").strip().lower()
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./clientes.db")
    csrf_secret: str = os.getenv("CSRF_SECRET", "") or PLACEHOLDER_CSRF_SECRET
    csrf_header_name: str = os.getenv("CSRF_HEADER_NAME", "X-CSRF-Token")
    session_ttl_seconds: int = int(os.getenv("SESSION_TTL_SECONDS", "7200"))
    session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "sid")
    session_cookie_secure: bool = _env_bool("SESSION_COOKIE_SECURE", False)
    captcha_ttl_seconds: int = int(os.getenv("CAPTCHA_TTL_SECONDS", "300"))
    captcha_max_entries: int = int(os.getenv("CAPTCHA_MAX_ENTRIES", "10000"))
    login_rate_limit: int = int(os.getenv("LOGIN_RATE_LIMIT", "5"))
    login_rate_window_seconds: int = int(
        os.getenv("LOGIN_RATE_WINDOW_SECONDS", "900")
    )
    frontend_origins: tuple[str, ...] = field(
        default_factory=lambda: _env_list("FRONTEND_ORIGINS", "http://localhost:8080")
    )
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_json: bool = _env_bool("LOG_JSON", True)
    seed_admin_login: str = os.getenv("SEED_ADMIN_LOGIN", "").strip()
    seed_admin_password: str = os.getenv("SEED_ADMIN_PASSWORD", "")
    seed_admin_name: str = os.getenv("SEED_ADMIN_NAME", "Administrador").strip()
    seed_admin_email: str = os.getenv("SEED_ADMIN_EMAIL", "").strip().lower()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def csrf_secret_is_placeholder(self) -> bool:
        return self.csrf_secret == PLACEHOLDER_CSRF_SECRET


settings = Settings()
