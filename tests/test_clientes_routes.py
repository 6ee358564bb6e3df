import pytest
from sqlalchemy import select

from clientes_api.database import session_scope
from clientes_api.models.auditoria import AuditEntry
from clientes_api.models.cliente import ClienteEntry
from clientes_api.services.csrf import derive_csrf_token

from conftest import create_user, grant, grant_all, login

NUEVO_CLIENTE = {
    "tipo_documento": "DNI",
    "numero_documento": "12345678",
    "nombre": "Comercial Andina",
    "correo": "ventas@andina.example",
    "telefono": "555-0101",
    "direccion": "Av. Siempre Viva 742",
}


@pytest.fixture
def admin_client(client):
    user_id = create_user()
    grant_all(user_id)
    response = login(client)
    client.headers["X-CSRF-Token"] = response.json()["csrfToken"]
    client.user_id = user_id
    return client


def _create(client, **overrides) -> dict:
    response = client.post("/api/clientes", json={**NUEVO_CLIENTE, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


def test_end_to_end_login_list_and_create(client):
    user_id = create_user()
    grant_all(user_id)

    logged_in = login(client)
    assert logged_in.status_code == 200
    session_token = logged_in.cookies.get("sid")
    csrf = logged_in.json()["csrfToken"]

    assert client.get("/api/clientes").status_code == 200

    without_header = client.post("/api/clientes", json=NUEVO_CLIENTE)
    assert without_header.status_code == 403

    created = client.post(
        "/api/clientes",
        json=NUEVO_CLIENTE,
        headers={"X-CSRF-Token": derive_csrf_token(session_token)},
    )
    assert created.status_code == 201
    body = created.json()
    assert body["cliente_id"] > 0
    assert body["activo"] is True
    assert body["nombre"] == "Comercial Andina"
    assert body["creado_por"] == user_id
    assert body["fecha_creacion"]
    assert csrf == derive_csrf_token(session_token)


def test_csrf_header_for_another_session_is_rejected(client):
    user_id = create_user()
    grant_all(user_id)
    login(client)

    response = client.post(
        "/api/clientes",
        json=NUEVO_CLIENTE,
        headers={"X-CSRF-Token": derive_csrf_token("some-other-session")},
    )

    assert response.status_code == 403
    assert response.json()["message"] == "Invalid CSRF token"


def test_read_only_user_cannot_modify(client):
    user_id = create_user()
    grant(user_id, read=True)
    csrf = login(client).json()["csrfToken"]
    with session_scope() as session:
        entry = ClienteEntry(nombre="Existente SA", creado_por=user_id, activo=True)
        session.add(entry)
        session.flush()
        cliente_id = entry.cliente_id
    headers = {"X-CSRF-Token": csrf}

    assert client.get("/api/clientes").status_code == 200
    assert client.get(f"/api/clientes/{cliente_id}").status_code == 200
    assert client.post("/api/clientes", json=NUEVO_CLIENTE, headers=headers).status_code == 403
    assert (
        client.put(f"/api/clientes/{cliente_id}", json=NUEVO_CLIENTE, headers=headers).status_code
        == 403
    )
    assert client.delete(f"/api/clientes/{cliente_id}", headers=headers).status_code == 403


def test_user_without_grants_cannot_read(client):
    create_user()
    login(client)

    response = client.get("/api/clientes")

    assert response.status_code == 403
    assert response.json() == {"message": "Access denied"}


def test_list_filters_by_nombre_and_orders_newest_first(admin_client):
    first = _create(admin_client, nombre="Ferreteria Central")
    second = _create(admin_client, nombre="Panaderia Central")
    _create(admin_client, nombre="Libreria Norte")

    response = admin_client.get("/api/clientes", params={"nombre": "Central"})

    assert response.status_code == 200
    assert [item["cliente_id"] for item in response.json()] == [
        second["cliente_id"],
        first["cliente_id"],
    ]


def test_list_filter_treats_wildcards_literally(admin_client):
    _create(admin_client, nombre="Cien por ciento")
    _create(admin_client, nombre="Descuento 100% real")

    response = admin_client.get("/api/clientes", params={"nombre": "%"})

    assert [item["nombre"] for item in response.json()] == ["Descuento 100% real"]


def test_get_cliente(admin_client):
    created = _create(admin_client)

    response = admin_client.get(f"/api/clientes/{created['cliente_id']}")

    assert response.status_code == 200
    assert response.json()["numero_documento"] == "12345678"


def test_get_missing_cliente(admin_client):
    response = admin_client.get("/api/clientes/9999")

    assert response.status_code == 404
    assert response.json()["message"] == "Cliente not found."


def test_invalid_id_is_bad_request(admin_client):
    assert admin_client.get("/api/clientes/0").status_code == 400
    assert admin_client.get("/api/clientes/abc").status_code == 400


def test_create_validates_payload(admin_client):
    response = admin_client.post(
        "/api/clientes", json={"nombre": "  ab ", "correo": "sin-arroba"}
    )

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid data"
    assert len(body["errors"]) == 2


def test_create_normalizes_empty_strings(admin_client):
    created = _create(admin_client, correo="", telefono="  ", nombre="  Trimmed Name  ")

    assert created["correo"] is None
    assert created["telefono"] is None
    assert created["nombre"] == "Trimmed Name"


def test_update_cliente(admin_client):
    created = _create(admin_client)

    response = admin_client.put(
        f"/api/clientes/{created['cliente_id']}",
        json={**NUEVO_CLIENTE, "nombre": "Comercial Andina SAC", "telefono": None},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["nombre"] == "Comercial Andina SAC"
    assert body["telefono"] is None
    assert body["modificado_por"] == admin_client.user_id
    assert body["fecha_modificacion"]
    assert body["activo"] is True


def test_update_missing_cliente(admin_client):
    response = admin_client.put("/api/clientes/424242", json=NUEVO_CLIENTE)

    assert response.status_code == 404


def test_delete_is_soft(admin_client):
    created = _create(admin_client)
    cliente_id = created["cliente_id"]

    response = admin_client.delete(f"/api/clientes/{cliente_id}")

    assert response.status_code == 200
    assert response.json() == {"message": "Cliente deactivated successfully."}
    assert admin_client.get(f"/api/clientes/{cliente_id}").status_code == 404
    assert admin_client.get("/api/clientes").json() == []
    assert admin_client.delete(f"/api/clientes/{cliente_id}").status_code == 404
    with session_scope() as session:
        entry = session.get(ClienteEntry, cliente_id)
        assert entry.activo is False
        assert entry.modificado_por == admin_client.user_id


def test_mutations_are_audited(admin_client):
    created = _create(admin_client)
    cliente_id = created["cliente_id"]
    admin_client.put(f"/api/clientes/{cliente_id}", json=NUEVO_CLIENTE)
    admin_client.delete(f"/api/clientes/{cliente_id}")

    with session_scope() as session:
        rows = session.execute(
            select(AuditEntry).where(AuditEntry.entidad == "Clientes").order_by(AuditEntry.id)
        ).scalars().all()
        assert [row.operacion for row in rows] == ["CREATE", "UPDATE", "DELETE"]
        assert {row.entidad_id for row in rows} == {str(cliente_id)}
        assert {row.realizado_por for row in rows} == {admin_client.user_id}


def test_audit_failure_does_not_break_request(admin_client, monkeypatch):
    from sqlalchemy.exc import OperationalError

    from clientes_api.services import audit

    def broken_scope():
        raise OperationalError("INSERT INTO Auditoria", {}, Exception("down"))

    monkeypatch.setattr(audit, "session_scope", broken_scope)

    created = _create(admin_client)

    assert created["cliente_id"] > 0


def test_unauthenticated_mutation_is_rejected_before_validation(client):
    response = client.post("/api/clientes", json={})

    assert response.status_code == 401
