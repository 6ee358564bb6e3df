from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy.exc import SQLAlchemyError

from clientes_api.logging import get_logger
from clientes_api.routers.dependencies import (
    client_ip,
    require_auth,
    require_csrf,
    require_permission,
)
from clientes_api.schemas.clientes import (
    ClienteCreate,
    ClienteResponse,
    ClienteUpdate,
    MessageResponse,
)
from clientes_api.services.audit import record_audit
from clientes_api.services.clientes import cliente_store
from clientes_api.services.errors import Internal, NotFound
from clientes_api.services.permissions import PermissionAction
from clientes_api.services.sessions import CurrentUser

logger = get_logger(__name__)

RESOURCE = "CLIENTES"

router = APIRouter(
    prefix="/clientes",
    tags=["clientes"],
    dependencies=[Depends(require_auth)],
)


@router.get(
    "",
    response_model=list[ClienteResponse],
    dependencies=[Depends(require_permission(RESOURCE, PermissionAction.READ))],
)
def list_clientes(
    nombre: Optional[str] = Query(default=None, max_length=255),
) -> list[ClienteResponse]:
    try:
        return cliente_store.list_clientes(nombre.strip() if nombre else None)
    except SQLAlchemyError as exc:
        logger.error("clientes_list_failed", error=str(exc))
        raise Internal("Error listing clientes") from exc


@router.get(
    "/{cliente_id}",
    response_model=ClienteResponse,
    dependencies=[Depends(require_permission(RESOURCE, PermissionAction.READ))],
)
def get_cliente(cliente_id: int = Path(gt=0)) -> ClienteResponse:
    try:
        cliente = cliente_store.get_cliente(cliente_id)
    except SQLAlchemyError as exc:
        logger.error("clientes_get_failed", cliente_id=cliente_id, error=str(exc))
        raise Internal("Error fetching cliente") from exc
    if cliente is None:
        raise NotFound("Cliente not found.")
    return cliente


@router.post(
    "",
    response_model=ClienteResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[
        Depends(require_permission(RESOURCE, PermissionAction.CREATE)),
        Depends(require_csrf),
    ],
)
def create_cliente(
    payload: ClienteCreate,
    request: Request,
    user: CurrentUser = Depends(require_auth),
) -> ClienteResponse:
    try:
        cliente = cliente_store.create_cliente(payload, user.id)
    except SQLAlchemyError as exc:
        logger.error("clientes_create_failed", user_id=user.id, error=str(exc))
        raise Internal("Error creating cliente") from exc
    record_audit(
        "Clientes",
        "CREATE",
        entidad_id=cliente.cliente_id,
        realizado_por=user.id,
        detalles={"nombre": cliente.nombre, "numero_documento": cliente.numero_documento},
        ip=client_ip(request),
    )
    return cliente


@router.put(
    "/{cliente_id}",
    response_model=ClienteResponse,
    dependencies=[
        Depends(require_permission(RESOURCE, PermissionAction.UPDATE)),
        Depends(require_csrf),
    ],
)
def update_cliente(
    payload: ClienteUpdate,
    request: Request,
    cliente_id: int = Path(gt=0),
    user: CurrentUser = Depends(require_auth),
) -> ClienteResponse:
    try:
        cliente = cliente_store.update_cliente(cliente_id, payload, user.id)
    except SQLAlchemyError as exc:
        logger.error("clientes_update_failed", cliente_id=cliente_id, error=str(exc))
        raise Internal("Error updating cliente") from exc
    if cliente is None:
        raise NotFound("Cliente not found.")
    record_audit(
        "Clientes",
        "UPDATE",
        entidad_id=cliente.cliente_id,
        realizado_por=user.id,
        detalles={"nombre": cliente.nombre},
        ip=client_ip(request),
    )
    return cliente


@router.delete(
    "/{cliente_id}",
    response_model=MessageResponse,
    dependencies=[
        Depends(require_permission(RESOURCE, PermissionAction.DELETE)),
        Depends(require_csrf),
    ],
)
def delete_cliente(
    request: Request,
    cliente_id: int = Path(gt=0),
    user: CurrentUser = Depends(require_auth),
) -> MessageResponse:
    try:
        cliente = cliente_store.deactivate_cliente(cliente_id, user.id)
    except SQLAlchemyError as exc:
        logger.error("clientes_delete_failed", cliente_id=cliente_id, error=str(exc))
        raise Internal("Error deactivating cliente") from exc
    if cliente is None:
        raise NotFound("Cliente not found.")
    record_audit(
        "Clientes",
        "DELETE",
        entidad_id=cliente.cliente_id,
        realizado_por=user.id,
        detalles={"nombre": cliente.nombre},
        ip=client_ip(request),
    )
    return MessageResponse(message="Cliente deactivated successfully.")
