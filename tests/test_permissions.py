"""
Tests for the permission registry.
"""

import pytest

from securegate.core.exceptions import BadRequestError, ConflictError, NotFoundError
from securegate.models.base import EntityStatus
from securegate.services.permission import PermissionService
from securegate.services.role import RoleService


@pytest.mark.asyncio
async def test_create_permission_normalizes_name(db):
    service = PermissionService(db)

    permission = await service.create_permission("  Publish ")

    assert permission.id is not None
    assert permission.name == "publish"
    assert permission.status is EntityStatus.ACTIVE


@pytest.mark.asyncio
async def test_create_duplicate_permission_conflicts(db):
    service = PermissionService(db)
    await service.create_permission("write")

    with pytest.raises(ConflictError):
        await service.create_permission("write")


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["123", "42abc", "-7", "   "])
async def test_create_permission_rejects_numeric_and_blank(db, name):
    with pytest.raises(BadRequestError):
        await PermissionService(db).create_permission(name)


@pytest.mark.asyncio
async def test_get_permission_not_found(db):
    with pytest.raises(NotFoundError):
        await PermissionService(db).get_permission_by_id(999)


@pytest.mark.asyncio
async def test_update_permission(db):
    service = PermissionService(db)
    permission = await service.create_permission("write")

    updated = await service.update_permission(permission.id, "edit")

    assert updated.name == "edit"


@pytest.mark.asyncio
async def test_update_permission_same_name_rejected(db):
    service = PermissionService(db)
    permission = await service.create_permission("write")

    with pytest.raises(BadRequestError, match="same as old name"):
        await service.update_permission(permission.id, "WRITE")


@pytest.mark.asyncio
async def test_update_permission_to_taken_name_conflicts(db):
    service = PermissionService(db)
    await service.create_permission("read")
    write = await service.create_permission("write")

    with pytest.raises(ConflictError):
        await service.update_permission(write.id, "read")


@pytest.mark.asyncio
async def test_update_missing_permission(db):
    with pytest.raises(NotFoundError):
        await PermissionService(db).update_permission(404, "anything")


@pytest.mark.asyncio
async def test_deactivated_permission_hidden_from_list(db):
    service = PermissionService(db)
    read = await service.create_permission("read")
    write = await service.create_permission("write")

    await service.deactivate_permission(write.id)

    assert [p.id for p in await service.list_permissions()] == [read.id]
    assert [p.id for p in await service.list_deleted_permissions()] == [write.id]
    with pytest.raises(NotFoundError):
        await service.get_permission_by_id(write.id)


@pytest.mark.asyncio
async def test_deactivate_and_reactivate_state_checks(db):
    service = PermissionService(db)
    permission = await service.create_permission("write")

    with pytest.raises(BadRequestError):
        await service.reactivate_permission(permission.id)

    deactivated = await service.deactivate_permission(permission.id)
    assert deactivated.status is EntityStatus.DELETED

    with pytest.raises(BadRequestError):
        await service.deactivate_permission(permission.id)

    restored = await service.reactivate_permission(permission.id)
    assert restored.status is EntityStatus.ACTIVE


@pytest.mark.asyncio
async def test_deactivated_permission_name_can_be_reused(db):
    service = PermissionService(db)
    old = await service.create_permission("write")
    await service.deactivate_permission(old.id)

    new = await service.create_permission("write")

    assert new.id != old.id
    with pytest.raises(ConflictError):
        await service.reactivate_permission(old.id)


@pytest.mark.asyncio
async def test_delete_permission_detaches_from_roles(db):
    permissions = PermissionService(db)
    roles = RoleService(db)
    write = await permissions.create_permission("write")
    read = await permissions.create_permission("read")
    role = await roles.create_role("editor")
    await roles.update_permissions_to_roles(role.id, [write.id, read.id])

    await permissions.delete_permission(write.id)

    role = await roles.get_role_by_id(role.id)
    assert [p.name for p in role.permissions] == ["read"]
    assert await permissions.list_deleted_permissions() == []
    with pytest.raises(NotFoundError):
        await permissions.delete_permission(write.id)


@pytest.mark.asyncio
async def test_create_permission_lost_race_is_conflict(db, monkeypatch):
    service = PermissionService(db)
    await service.create_permission("write")

    async def not_found(name, deleted=False):
        return None

    # Another request inserted the name between the lookup and the insert
    monkeypatch.setattr(service.permissions, "get_by_name", not_found)

    with pytest.raises(ConflictError, match="Permission already exists"):
        await service.create_permission("write")


@pytest.mark.asyncio
async def test_rename_permission_lost_race_is_conflict(db, monkeypatch):
    service = PermissionService(db)
    await service.create_permission("write")
    read = await service.create_permission("read")
    read_id = read.id

    async def not_found(name, deleted=False):
        return None

    monkeypatch.setattr(service.permissions, "get_by_name", not_found)

    with pytest.raises(ConflictError):
        await service.update_permission(read_id, "write")
