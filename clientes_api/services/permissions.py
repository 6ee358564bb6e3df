from enum import Enum

from sqlalchemy import func, select

from clientes_api.database import session_scope
from clientes_api.models.permisos import MenuOptionEntry, PermissionEntry, UserProfileEntry


class PermissionAction(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


_CAPABILITY_COLUMNS = {
    PermissionAction.READ: PermissionEntry.can_read,
    PermissionAction.CREATE: PermissionEntry.can_create,
    PermissionAction.UPDATE: PermissionEntry.can_update,
    PermissionAction.DELETE: PermissionEntry.can_delete,
}


def capability_column(action: PermissionAction):
    return _CAPABILITY_COLUMNS[PermissionAction(action)]


class PermissionStore:
    def has_permission(self, user_id: int, option_name: str, action: PermissionAction) -> bool:
        """True when any profile held by the user grants ``action`` on the menu option."""
        column = capability_column(action)
        with session_scope() as session:
            granted = session.execute(
                select(func.count())
                .select_from(UserProfileEntry)
                .join(PermissionEntry, PermissionEntry.profile_id == UserProfileEntry.profile_id)
                .join(MenuOptionEntry, MenuOptionEntry.id == PermissionEntry.option_id)
                .where(
                    UserProfileEntry.user_id == user_id,
                    MenuOptionEntry.name == option_name,
                    column.is_(True),
                )
            ).scalar_one()
        return granted > 0


permission_store = PermissionStore()
