from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import secrets
from typing import Optional

from sqlalchemy import func, select, update

from clientes_api.config import settings
from clientes_api.database import session_scope
from clientes_api.models.session import SessionEntry
from clientes_api.models.user import UserEntry

TOKEN_BYTES = 48


class InvalidSessionIdentity(ValueError):
    pass


@dataclass(frozen=True)
class CurrentUser:
    id: int
    full_name: Optional[str]
    email: Optional[str]
    login: str


@dataclass(frozen=True)
class IssuedSession:
    token: str
    expires_at: datetime


def _coerce_user_id(raw_value) -> int:
    if isinstance(raw_value, bool):
        raise InvalidSessionIdentity(f"Invalid user id {raw_value!r}")
    try:
        user_id = int(raw_value)
    except (TypeError, ValueError) as exc:
        raise InvalidSessionIdentity(f"Invalid user id {raw_value!r}") from exc
    if user_id <= 0:
        raise InvalidSessionIdentity(f"Invalid user id {raw_value!r}")
    return user_id


class SessionStore:
    def __init__(self, ttl_seconds: int) -> None:
        self._ttl_seconds = ttl_seconds

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def create_session(
        self,
        user_id: int,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> IssuedSession:
        now = datetime.now(timezone.utc)
        token = secrets.token_hex(TOKEN_BYTES)
        expires_at = now + timedelta(seconds=self._ttl_seconds)
        with session_scope() as session:
            session.add(
                SessionEntry(
                    token=token,
                    user_id=user_id,
                    created_at=now,
                    expires_at=expires_at,
                    user_agent=user_agent[:300] if user_agent else None,
                    ip_address=ip_address[:50] if ip_address else None,
                    active=True,
                )
            )
        return IssuedSession(token=token, expires_at=expires_at)

    def resolve(self, token: str) -> Optional[CurrentUser]:
        """Return the identity behind an active, unexpired session.

        Expiry is compared against the database clock. A session found to be
        past its expiry while still flagged active is deactivated on the way
        out. Raises ``InvalidSessionIdentity`` when the stored user id is not a
        positive integer.
        """
        with session_scope() as session:
            row = session.execute(
                select(
                    UserEntry.id,
                    UserEntry.full_name,
                    UserEntry.email,
                    UserEntry.login,
                )
                .join(SessionEntry, SessionEntry.user_id == UserEntry.id)
                .where(
                    SessionEntry.token == token,
                    SessionEntry.active.is_(True),
                    SessionEntry.expires_at > func.now(),
                )
                .limit(1)
            ).first()
            if row is None:
                session.execute(
                    update(SessionEntry)
                    .where(
                        SessionEntry.token == token,
                        SessionEntry.active.is_(True),
                        SessionEntry.expires_at <= func.now(),
                    )
                    .values(active=False)
                )
                return None
        return CurrentUser(
            id=_coerce_user_id(row.id),
            full_name=row.full_name,
            email=row.email,
            login=row.login,
        )

    def revoke_session(self, token: str) -> bool:
        with session_scope() as session:
            result = session.execute(
                update(SessionEntry)
                .where(SessionEntry.token == token, SessionEntry.active.is_(True))
                .values(active=False)
            )
            return result.rowcount > 0


session_store = SessionStore(settings.session_ttl_seconds)
