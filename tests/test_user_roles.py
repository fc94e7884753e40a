"""
Tests for user-role bindings.
"""

import pytest
from sqlalchemy import inspect, update

from securegate.core.exceptions import BadRequestError, ConflictError, NotFoundError
from securegate.models.base import EntityStatus
from securegate.models.rbac import UserRole
from securegate.services.role import RoleService
from securegate.services.user import UserService
from securegate.services.user_role import UserRoleService


@pytest.fixture
def bindings(db) -> UserRoleService:
    return UserRoleService(db)


@pytest.mark.asyncio
async def test_assign_role_twice_fails(bindings, rbac, test_user):
    role = await rbac.role("editor")

    binding = await bindings.assign_role_to_user(test_user.id, role.id)
    assert binding.status is EntityStatus.ACTIVE

    with pytest.raises(BadRequestError, match="already has this role"):
        await bindings.assign_role_to_user(test_user.id, role.id)


@pytest.mark.asyncio
async def test_assign_missing_user_or_role(bindings, rbac, test_user):
    role = await rbac.role("editor")

    with pytest.raises(NotFoundError):
        await bindings.assign_role_to_user(999, role.id)
    with pytest.raises(NotFoundError):
        await bindings.assign_role_to_user(test_user.id, 999)


@pytest.mark.asyncio
async def test_assign_deactivated_role_fails(db, bindings, rbac, test_user):
    role = await rbac.role("temp")
    await RoleService(db).deactivate_role(role.id)

    with pytest.raises(NotFoundError):
        await bindings.assign_role_to_user(test_user.id, role.id)


@pytest.mark.asyncio
async def test_revoke_without_binding_fails(bindings, rbac, test_user):
    role = await rbac.role("editor")

    with pytest.raises(NotFoundError):
        await bindings.revoke_role_of_user(test_user.id, role.id)
    with pytest.raises(NotFoundError):
        await bindings.revoke_role_of_user(999, role.id)


@pytest.mark.asyncio
async def test_revoke_then_reassign_reuses_binding(bindings, rbac, test_user):
    role = await rbac.role("editor")
    first = await bindings.assign_role_to_user(test_user.id, role.id)

    revoked = await bindings.revoke_role_of_user(test_user.id, role.id)
    assert revoked.status is EntityStatus.DELETED
    assert await bindings.list_roles_of_user(test_user.id) == []

    with pytest.raises(NotFoundError):
        await bindings.revoke_role_of_user(test_user.id, role.id)

    again = await bindings.assign_role_to_user(test_user.id, role.id)
    assert again.id == first.id
    assert again.status is EntityStatus.ACTIVE


@pytest.mark.asyncio
async def test_restore_role_of_user(bindings, rbac, test_user):
    role = await rbac.role("editor")

    with pytest.raises(NotFoundError):
        await bindings.restore_role_of_user(test_user.id, role.id)

    await bindings.assign_role_to_user(test_user.id, role.id)
    with pytest.raises(BadRequestError):
        await bindings.restore_role_of_user(test_user.id, role.id)

    await bindings.revoke_role_of_user(test_user.id, role.id)
    restored = await bindings.restore_role_of_user(test_user.id, role.id)

    assert restored.status is EntityStatus.ACTIVE
    assert [r.name for r in await bindings.list_roles_of_user(test_user.id)] == ["editor"]


@pytest.mark.asyncio
async def test_delete_role_binding(bindings, rbac, test_user):
    role = await rbac.role("editor")
    await bindings.assign_role_to_user(test_user.id, role.id)

    await bindings.delete_role_binding(test_user.id, role.id)

    assert await bindings.list_roles_of_user(test_user.id) == []
    with pytest.raises(NotFoundError):
        await bindings.delete_role_binding(test_user.id, role.id)


@pytest.mark.asyncio
async def test_list_roles_excludes_deactivated_roles(db, bindings, rbac, test_user):
    editor = await rbac.role("editor")
    temp = await rbac.role("temp")
    await bindings.assign_role_to_user(test_user.id, editor.id)
    await bindings.assign_role_to_user(test_user.id, temp.id)

    await RoleService(db).deactivate_role(temp.id)

    assert [r.name for r in await bindings.list_roles_of_user(test_user.id)] == ["editor"]


@pytest.mark.asyncio
async def test_list_roles_of_deactivated_user(db, bindings, test_user):
    await UserService(db).deactivate_user(test_user.id)

    with pytest.raises(NotFoundError):
        await bindings.list_roles_of_user(test_user.id)


@pytest.mark.asyncio
async def test_reassign_after_concurrent_restore_conflicts(db, bindings, rbac, test_user):
    role = await rbac.role("editor")
    binding = await bindings.assign_role_to_user(test_user.id, role.id)
    await bindings.revoke_role_of_user(test_user.id, role.id)

    # Another request restores the row; this session still sees it revoked
    await db.execute(
        update(UserRole)
        .where(UserRole.id == binding.id)
        .values(deleted_at=None)
        .execution_options(synchronize_session=False)
    )
    assert binding.status is EntityStatus.DELETED

    with pytest.raises(ConflictError, match="already has this role"):
        await bindings.assign_role_to_user(test_user.id, role.id)
    with pytest.raises(ConflictError, match="already has this role"):
        await bindings.restore_role_of_user(test_user.id, role.id)



def test_binding_rows_load_without_joined_relationships():
    assert list(inspect(UserRole).relationships) == []
