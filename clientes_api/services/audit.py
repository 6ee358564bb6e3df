import json
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

from clientes_api.database import session_scope
from clientes_api.logging import get_logger
from clientes_api.models.auditoria import AuditEntry

logger = get_logger(__name__)


def record_audit(
    entidad: str,
    operacion: str,
    *,
    entidad_id: Optional[Any] = None,
    realizado_por: Optional[int] = None,
    detalles: Optional[dict] = None,
    ip: Optional[str] = None,
) -> None:
    """Write an audit row in its own transaction. Failures are logged, never raised."""
    try:
        with session_scope() as session:
            session.add(
                AuditEntry(
                    entidad=entidad,
                    entidad_id=str(entidad_id) if entidad_id is not None else None,
                    operacion=operacion,
                    realizado_por=realizado_por,
                    detalles=json.dumps(detalles, default=str) if detalles else None,
                    ip=ip[:50] if ip else None,
                )
            )
    except SQLAlchemyError as exc:
        logger.error(
            "audit_write_failed",
            entidad=entidad,
            operacion=operacion,
            entidad_id=entidad_id,
            error=str(exc),
        )
