"""
Tests for the role, permission and user-role endpoints and their guard.
"""

import pytest
from httpx import AsyncClient

from securegate.repositories.rbac import PermissionRepository
from securegate.services.user import UserService


@pytest.mark.asyncio
async def test_management_routes_require_token(client: AsyncClient):
    response = await client.get("/api/roles")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_management_routes_require_admin_and_write(
    client: AsyncClient, rbac, user_factory, headers_for
):
    admin_role = await rbac.role("admin")
    admin_without_write = await user_factory.create()
    await rbac.bind(admin_without_write, admin_role)

    for user in (await user_factory.create(), admin_without_write):
        response = await client.get("/api/permissions", headers=headers_for(user))
        assert response.status_code == 401
        assert response.json() == {
            "error": "unauthorized",
            "message": "You do not have permission to access this resource.",
        }


@pytest.mark.asyncio
async def test_permission_crud(client: AsyncClient, admin_auth_headers):
    created = await client.post(
        "/api/permissions", json={"name": "Publish"}, headers=admin_auth_headers
    )
    assert created.status_code == 201
    permission = created.json()
    assert permission["name"] == "publish"

    duplicate = await client.post(
        "/api/permissions", json={"name": "publish"}, headers=admin_auth_headers
    )
    assert duplicate.status_code == 400
    assert duplicate.json()["error"] == "conflict"

    numeric = await client.post(
        "/api/permissions", json={"name": "123"}, headers=admin_auth_headers
    )
    assert numeric.status_code == 400

    renamed = await client.patch(
        f"/api/permissions/{permission['id']}",
        json={"name": "release"},
        headers=admin_auth_headers,
    )
    assert renamed.json()["name"] == "release"

    deactivated = await client.post(
        f"/api/permissions/{permission['id']}/deactivate", headers=admin_auth_headers
    )
    assert deactivated.json()["status"] == "deleted"

    missing = await client.get(
        f"/api/permissions/{permission['id']}", headers=admin_auth_headers
    )
    assert missing.status_code == 404

    deleted = await client.get("/api/permissions/deleted", headers=admin_auth_headers)
    assert [p["name"] for p in deleted.json()] == ["release"]

    removed = await client.delete(
        f"/api/permissions/{permission['id']}", headers=admin_auth_headers
    )
    assert removed.status_code == 204


@pytest.mark.asyncio
async def test_role_lifecycle_and_associations(client: AsyncClient, admin_auth_headers):
    publish = (
        await client.post("/api/permissions", json={"name": "publish"}, headers=admin_auth_headers)
    ).json()

    created = await client.post("/api/roles", json={"name": "editor"}, headers=admin_auth_headers)
    assert created.status_code == 201
    role_id = created.json()["id"]

    connected = await client.put(
        f"/api/roles/{role_id}/permissions",
        json={"permission_ids": [publish["id"]]},
        headers=admin_auth_headers,
    )
    assert connected.status_code == 200
    assert [p["name"] for p in connected.json()["permissions"]] == ["publish"]

    again = await client.put(
        f"/api/roles/{role_id}/permissions",
        json={"permission_ids": [publish["id"]]},
        headers=admin_auth_headers,
    )
    assert again.status_code == 400

    empty = await client.put(
        f"/api/roles/{role_id}/permissions",
        json={"permission_ids": []},
        headers=admin_auth_headers,
    )
    assert empty.status_code == 422

    removed = await client.post(
        f"/api/roles/{role_id}/permissions/remove",
        json={"permission_ids": [publish["id"]]},
        headers=admin_auth_headers,
    )
    assert removed.json()["permissions"] == []

    deactivated = await client.post(f"/api/roles/{role_id}/deactivate", headers=admin_auth_headers)
    assert deactivated.json()["status"] == "deleted"

    listed = await client.get("/api/roles", headers=admin_auth_headers)
    assert "editor" not in [r["name"] for r in listed.json()]

    recreate = await client.post("/api/roles", json={"name": "editor"}, headers=admin_auth_headers)
    assert recreate.status_code == 400
    assert "restore" in recreate.json()["message"]

    restored = await client.post(f"/api/roles/{role_id}/restore", headers=admin_auth_headers)
    assert restored.json()["status"] == "active"

    restored_again = await client.post(f"/api/roles/{role_id}/restore", headers=admin_auth_headers)
    assert restored_again.status_code == 400

    deleted = await client.delete(f"/api/roles/{role_id}", headers=admin_auth_headers)
    assert deleted.status_code == 204

    gone = await client.get(f"/api/roles/{role_id}", headers=admin_auth_headers)
    assert gone.status_code == 404


@pytest.mark.asyncio
async def test_user_role_endpoints(client: AsyncClient, admin_auth_headers, rbac, test_user):
    publish = await rbac.permission("publish")
    editor = await rbac.role("editor", [publish])
    base = f"/api/users/{test_user.id}"

    assigned = await client.post(
        f"{base}/roles", json={"role_id": editor.id}, headers=admin_auth_headers
    )
    assert assigned.status_code == 201
    assert assigned.json()["status"] == "active"

    duplicate = await client.post(
        f"{base}/roles", json={"role_id": editor.id}, headers=admin_auth_headers
    )
    assert duplicate.status_code == 400

    roles = await client.get(f"{base}/roles", headers=admin_auth_headers)
    assert [r["name"] for r in roles.json()] == ["editor"]

    permissions = await client.get(f"{base}/permissions", headers=admin_auth_headers)
    assert [p["name"] for p in permissions.json()] == ["publish"]

    check = await client.post(
        f"{base}/permissions/check", json={"names": ["publish"]}, headers=admin_auth_headers
    )
    assert check.json() == {"user_id": test_user.id, "allowed": True}

    revoked = await client.post(f"{base}/roles/{editor.id}/revoke", headers=admin_auth_headers)
    assert revoked.json()["status"] == "deleted"

    role_check = await client.post(
        f"{base}/roles/check", json={"names": ["editor"]}, headers=admin_auth_headers
    )
    assert role_check.json()["allowed"] is False

    revoke_again = await client.post(
        f"{base}/roles/{editor.id}/revoke", headers=admin_auth_headers
    )
    assert revoke_again.status_code == 404

    restored = await client.post(f"{base}/roles/{editor.id}/restore", headers=admin_auth_headers)
    assert restored.json()["status"] == "active"

    dropped = await client.delete(f"{base}/roles/{editor.id}", headers=admin_auth_headers)
    assert dropped.status_code == 204


@pytest.mark.asyncio
async def test_user_endpoints(client: AsyncClient, admin_auth_headers):
    created = await client.post(
        "/api/users",
        json={"email": "staff@example.com", "password": "password123"},
        headers=admin_auth_headers,
    )
    assert created.status_code == 201
    user_id = created.json()["id"]

    detail = await client.get(f"/api/users/{user_id}", headers=admin_auth_headers)
    assert detail.json()["roles"] == []

    listed = await client.get("/api/users", headers=admin_auth_headers)
    assert listed.json()["total"] == 2

    deactivated = await client.post(
        f"/api/users/{user_id}/deactivate", headers=admin_auth_headers
    )
    assert deactivated.json()["status"] == "deleted"

    missing = await client.get(f"/api/users/{user_id}", headers=admin_auth_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_deactivated_admin_loses_access(
    client: AsyncClient, db, admin_user, admin_auth_headers
):
    await UserService(db).deactivate_user(admin_user.id)

    response = await client.get("/api/roles", headers=admin_auth_headers)

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_duplicate_permission_race_answers_conflict(
    client: AsyncClient, admin_auth_headers, monkeypatch
):
    created = await client.post(
        "/api/permissions", json={"name": "publish"}, headers=admin_auth_headers
    )
    assert created.status_code == 201

    async def not_found(self, name, deleted=False):
        return None

    monkeypatch.setattr(PermissionRepository, "get_by_name", not_found)

    duplicate = await client.post(
        "/api/permissions", json={"name": "publish"}, headers=admin_auth_headers
    )
    assert duplicate.status_code == 400
    assert duplicate.json()["error"] == "conflict"
