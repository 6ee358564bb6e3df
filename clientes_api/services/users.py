from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select

from clientes_api.config import settings
from clientes_api.database import session_scope
from clientes_api.logging import get_logger
from clientes_api.models.permisos import (
    MenuOptionEntry,
    PermissionEntry,
    ProfileEntry,
    UserProfileEntry,
)
from clientes_api.models.user import UserEntry
from clientes_api.services.passwords import hash_password

logger = get_logger(__name__)

ADMIN_PROFILE = "ADMINISTRADOR"
CLIENTES_OPTION = "CLIENTES"


@dataclass(frozen=True)
class UserRecord:
    id: int
    login: str
    full_name: Optional[str]
    email: Optional[str]
    password_hash: str
    active: bool


def _to_record(entry: UserEntry) -> UserRecord:
    return UserRecord(
        id=entry.id,
        login=entry.login,
        full_name=entry.full_name,
        email=entry.email,
        password_hash=entry.password_hash,
        active=bool(entry.active),
    )


class UserStore:
    def get_by_login(self, login: str) -> UserRecord | None:
        with session_scope() as session:
            entry = session.execute(
                select(UserEntry).where(UserEntry.login == login).limit(1)
            ).scalar_one_or_none()
            if entry is None:
                return None
            return _to_record(entry)

    def ensure_seed_admin(self) -> None:
        if not settings.seed_admin_login or not settings.seed_admin_password:
            return
        with session_scope() as session:
            user = session.execute(
                select(UserEntry).where(UserEntry.login == settings.seed_admin_login)
            ).scalar_one_or_none()
            if user is None:
                user = UserEntry(
                    login=settings.seed_admin_login,
                    full_name=settings.seed_admin_name or None,
                    email=settings.seed_admin_email or None,
                    password_hash=hash_password(settings.seed_admin_password),
                    active=True,
                )
                session.add(user)
                logger.info("seed_admin_created", login=user.login)

            profile = session.execute(
                select(ProfileEntry).where(ProfileEntry.name == ADMIN_PROFILE)
            ).scalar_one_or_none()
            if profile is None:
                profile = ProfileEntry(name=ADMIN_PROFILE)
                session.add(profile)

            option = session.execute(
                select(MenuOptionEntry).where(MenuOptionEntry.name == CLIENTES_OPTION)
            ).scalar_one_or_none()
            if option is None:
                option = MenuOptionEntry(name=CLIENTES_OPTION)
                session.add(option)
            session.flush()

            permission = session.execute(
                select(PermissionEntry).where(
                    PermissionEntry.profile_id == profile.id,
                    PermissionEntry.option_id == option.id,
                )
            ).scalar_one_or_none()
            if permission is None:
                permission = PermissionEntry(profile_id=profile.id, option_id=option.id)
                session.add(permission)
            permission.can_read = True
            permission.can_create = True
            permission.can_update = True
            permission.can_delete = True

            assignment = session.execute(
                select(UserProfileEntry).where(
                    UserProfileEntry.user_id == user.id,
                    UserProfileEntry.profile_id == profile.id,
                )
            ).scalar_one_or_none()
            if assignment is None:
                session.add(UserProfileEntry(user_id=user.id, profile_id=profile.id))


user_store = UserStore()
