from mida_app.models.chemical import ChemicalInventory
from mida_app.models.user import User
from tests.conftest import DEFAULT_PASSWORD, auth_headers_for

NEW_USER = {
    "username": "jperez",
    "password": "segura123",
    "full_name": "Juan Pérez",
    "email": "jperez@mida.gob.pa",
}


def test_create_user_with_role_defaults(client, admin_headers):
    response = client.post("/api/users/", json=NEW_USER, headers=admin_headers)

    assert response.status_code == 201
    user = response.json()["user"]
    assert user["role"] == "user"
    assert user["is_active"] is True
    assert user["permissions"]["inventory"] == ["read", "write"]
    assert "users" not in user["permissions"]
    assert "password" not in user and "password_hash" not in user

    login = client.post("/api/auth/login", json={"username": "jperez", "password": "segura123"})
    assert login.status_code == 200


def test_legacy_operativo_role_maps_to_user(client, admin_headers):
    response = client.post("/api/users/", json={**NEW_USER, "role": "Operativo"}, headers=admin_headers)

    assert response.json()["user"]["role"] == "user"


def test_create_user_validation(client, admin_headers):
    response = client.post(
        "/api/users/",
        json={"username": "ab", "password": "123", "full_name": "", "role": "root", "email": "no-es-correo"},
        headers=admin_headers,
    )

    assert response.status_code == 400
    fields = {detail["field"] for detail in response.json()["details"]}
    assert {"username", "password", "full_name", "role", "email"} <= fields


def test_unknown_permission_resource_is_rejected(client, admin_headers):
    response = client.post(
        "/api/users/",
        json={**NEW_USER, "permissions": {"inventario": ["read"]}},
        headers=admin_headers,
    )

    assert response.status_code == 400


def test_duplicate_username_conflicts(client, admin_headers):
    client.post("/api/users/", json=NEW_USER, headers=admin_headers)

    response = client.post("/api/users/", json=NEW_USER, headers=admin_headers)

    assert response.status_code == 400
    assert response.json() == {"error": "El nombre de usuario ya existe", "code": "CONFLICT"}


def test_list_and_filter_users(client, admin_headers, operator_user, make_user):
    make_user(username="inactivo", is_active=False)

    everyone = client.get("/api/users/", headers=admin_headers).json()
    inactive = client.get("/api/users/", params={"is_active": "false"}, headers=admin_headers).json()
    admins = client.get("/api/users/", params={"role": "admin"}, headers=admin_headers).json()
    search = client.get("/api/users/", params={"search": "OPERA"}, headers=admin_headers).json()

    assert len(everyone) == 3
    assert [u["username"] for u in inactive] == ["inactivo"]
    assert [u["username"] for u in admins] == ["admin"]
    assert [u["id"] for u in search] == [operator_user.id]


def test_partial_update_only_touches_sent_fields(client, admin_headers, operator_user):
    original_email = operator_user.email

    response = client.put(
        f"/api/users/{operator_user.id}", json={"full_name": "Nombre Nuevo"}, headers=admin_headers
    )

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["full_name"] == "Nombre Nuevo"
    assert user["email"] == original_email
    assert user["role"] == "user"


def test_admin_resets_password(client, admin_headers, operator_user):
    response = client.patch(
        f"/api/users/{operator_user.id}/password", json={"newPassword": "otra-clave"}, headers=admin_headers
    )

    assert response.status_code == 200
    login = client.post("/api/auth/login", json={"username": "operador", "password": "otra-clave"})
    assert login.status_code == 200


def test_toggle_status(client, admin_headers, operator_user):
    first = client.patch(f"/api/users/{operator_user.id}/toggle-status", headers=admin_headers)
    second = client.patch(f"/api/users/{operator_user.id}/toggle-status", headers=admin_headers)

    assert first.json()["user"]["is_active"] is False
    assert first.json()["message"] == "Usuario desactivado exitosamente"
    assert second.json()["user"]["is_active"] is True


def test_cannot_deactivate_self(client, admin_user, admin_headers):
    response = client.patch(f"/api/users/{admin_user.id}/toggle-status", headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["code"] == "CONFLICT"


def test_permissions_get_and_replace(client, admin_headers, operator_user):
    current = client.get(f"/api/users/{operator_user.id}/permissions", headers=admin_headers)
    assert current.status_code == 200
    assert current.json()["permissions"]["inventory"] == ["read", "write"]

    response = client.put(
        f"/api/users/{operator_user.id}/permissions",
        json={"permissions": {"reports": ["read", "read"], "inventory": ["read"]}},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["user"]["permissions"] == {"reports": ["read"], "inventory": ["read"]}
    denied = client.post(
        "/api/inventory/",
        json={"chemical_name": "Cal", "quantity": 1, "unit": "kg", "area": "PSA"},
        headers=auth_headers_for(operator_user),
    )
    assert denied.status_code == 403


def test_profile_me(client, operator_user, operator_headers):
    me = client.get("/api/users/profile/me", headers=operator_headers)
    assert me.json()["id"] == operator_user.id

    response = client.put(
        "/api/users/profile/me",
        json={"full_name": "Operador Actualizado", "email": "operador@mida.gob.pa"},
        headers=operator_headers,
    )

    assert response.status_code == 200
    assert response.json()["user"]["full_name"] == "Operador Actualizado"
    assert response.json()["user"]["role"] == "user"


def test_non_admin_cannot_delete_users(client, db_session, admin_user, operator_headers):
    before = db_session.query(User).count()

    response = client.delete(f"/api/users/{admin_user.id}", headers=operator_headers)

    assert response.status_code == 403
    assert db_session.query(User).count() == before


def test_cannot_delete_self(client, admin_user, admin_headers):
    response = client.delete(f"/api/users/{admin_user.id}", headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["code"] == "CANNOT_DELETE_SELF"


def test_deleting_user_keeps_their_records(client, db_session, admin_headers, operator_user, operator_headers):
    created = client.post(
        "/api/inventory/",
        json={"chemical_name": "Cal", "quantity": 1, "unit": "kg", "area": "PSA"},
        headers=operator_headers,
    ).json()["chemical"]

    response = client.delete(f"/api/users/{operator_user.id}", headers=admin_headers)
    assert response.status_code == 200

    chemical = client.get(f"/api/inventory/{created['id']}", headers=admin_headers).json()
    assert chemical["registered_by"] is None
    assert chemical["registered_by_name"] is None
    assert db_session.query(ChemicalInventory).count() == 1


def test_stats(client, admin_headers, operator_user, make_user):
    make_user(username="inactivo", is_active=False)

    stats = client.get("/api/users/stats/overview", headers=admin_headers).json()

    assert stats == {"total_users": 3, "active_users": 2, "inactive_users": 1, "admin_users": 1}


def test_login_after_password_reset_with_old_password_fails(client, admin_headers, operator_user):
    client.patch(
        f"/api/users/{operator_user.id}/password", json={"new_password": "otra-clave"}, headers=admin_headers
    )

    response = client.post("/api/auth/login", json={"username": "operador", "password": DEFAULT_PASSWORD})

    assert response.status_code == 401


def _user_manager(make_user):
    """Puede leer y editar usuarios, pero no es ADMIN ni puede borrar."""
    return make_user(username="gestor", permissions={"users": ["read", "write"]})


def test_user_manager_cannot_promote_self(client, db_session, make_user, operator_user):
    manager = _user_manager(make_user)
    headers = auth_headers_for(manager)

    promote = client.put(f"/api/users/{manager.id}", json={"role": "admin"}, headers=headers)
    grant = client.put(
        f"/api/users/{manager.id}",
        json={"permissions": {"users": ["read", "write", "delete"]}},
        headers=headers,
    )

    assert promote.status_code == 403
    assert promote.json()["code"] == "PERMISSION_DENIED"
    assert grant.status_code == 403
    db_session.refresh(manager)
    assert manager.role == "user"
    assert manager.permissions == {"users": ["read", "write"]}
    assert client.delete(f"/api/users/{operator_user.id}", headers=headers).status_code == 403


def test_user_manager_cannot_create_privileged_users(client, db_session, make_user):
    headers = auth_headers_for(_user_manager(make_user))
    before = db_session.query(User).count()

    admin = client.post("/api/users/", json={**NEW_USER, "role": "admin"}, headers=headers)
    custom = client.post(
        "/api/users/", json={**NEW_USER, "permissions": {"users": ["delete"]}}, headers=headers
    )

    assert admin.status_code == 403
    assert custom.status_code == 403
    assert db_session.query(User).count() == before


def test_user_manager_can_create_and_edit_regular_users(client, make_user, operator_user):
    headers = auth_headers_for(_user_manager(make_user))

    created = client.post("/api/users/", json=NEW_USER, headers=headers)
    renamed = client.put(
        f"/api/users/{operator_user.id}", json={"full_name": "Operador Renombrado"}, headers=headers
    )

    assert created.status_code == 201
    assert created.json()["user"]["role"] == "user"
    assert renamed.status_code == 200
    assert renamed.json()["user"]["full_name"] == "Operador Renombrado"


def test_admin_can_change_roles(client, admin_headers, operator_user):
    response = client.put(f"/api/users/{operator_user.id}", json={"role": "admin"}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["user"]["role"] == "admin"


def test_cannot_deactivate_self_through_update(client, db_session, admin_user, admin_headers):
    response = client.put(f"/api/users/{admin_user.id}", json={"is_active": False}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["code"] == "CONFLICT"
    db_session.refresh(admin_user)
    assert admin_user.is_active is True


def test_admin_can_deactivate_others_through_update(client, admin_headers, operator_user):
    response = client.put(f"/api/users/{operator_user.id}", json={"is_active": False}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["user"]["is_active"] is False


def test_search_treats_wildcards_literally(client, admin_headers, operator_user):
    underscore = client.get("/api/users/", params={"search": "_"}, headers=admin_headers).json()
    percent = client.get("/api/users/", params={"search": "%"}, headers=admin_headers).json()

    assert underscore == []
    assert percent == []
