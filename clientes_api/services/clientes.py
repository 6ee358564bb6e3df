from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update

from clientes_api.database import session_scope
from clientes_api.models.cliente import ClienteEntry
from clientes_api.schemas.clientes import ClienteCreate, ClienteResponse, ClienteUpdate


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ClienteStore:
    def list_clientes(self, nombre: Optional[str] = None) -> list[ClienteResponse]:
        stmt = select(ClienteEntry).where(ClienteEntry.activo.is_(True))
        if nombre:
            stmt = stmt.where(
                ClienteEntry.nombre.like(f"%{_escape_like(nombre)}%", escape="\\")
            )
        stmt = stmt.order_by(ClienteEntry.cliente_id.desc())
        with session_scope() as session:
            entries = session.execute(stmt).scalars().all()
            return [self._to_response(entry) for entry in entries]

    def get_cliente(self, cliente_id: int) -> ClienteResponse | None:
        with session_scope() as session:
            entry = session.execute(
                select(ClienteEntry).where(
                    ClienteEntry.cliente_id == cliente_id,
                    ClienteEntry.activo.is_(True),
                )
            ).scalar_one_or_none()
            if entry is None:
                return None
            return self._to_response(entry)

    def create_cliente(self, payload: ClienteCreate, user_id: int) -> ClienteResponse:
        with session_scope() as session:
            entry = ClienteEntry(
                **payload.model_dump(),
                creado_por=user_id,
                activo=True,
            )
            session.add(entry)
            session.flush()
            session.refresh(entry)
            return self._to_response(entry)

    def update_cliente(
        self, cliente_id: int, payload: ClienteUpdate, user_id: int
    ) -> ClienteResponse | None:
        now = datetime.now(timezone.utc)
        with session_scope() as session:
            entry = session.get(ClienteEntry, cliente_id)
            if entry is None:
                return None
            for field, value in payload.model_dump().items():
                setattr(entry, field, value)
            entry.modificado_por = user_id
            entry.fecha_modificacion = now
            session.flush()
            return self._to_response(entry)

    def deactivate_cliente(self, cliente_id: int, user_id: int) -> ClienteResponse | None:
        now = datetime.now(timezone.utc)
        with session_scope() as session:
            entry = session.execute(
                select(ClienteEntry).where(
                    ClienteEntry.cliente_id == cliente_id,
                    ClienteEntry.activo.is_(True),
                )
            ).scalar_one_or_none()
            if entry is None:
                return None
            session.execute(
                update(ClienteEntry)
                .where(ClienteEntry.cliente_id == cliente_id)
                .values(activo=False, modificado_por=user_id, fecha_modificacion=now)
            )
            return self._to_response(entry)

    def _to_response(self, entry: ClienteEntry) -> ClienteResponse:
        return ClienteResponse.model_validate(entry.to_dict())


cliente_store = ClienteStore()
