"""
Permission management API routes.

Provides endpoints for the permission catalog, roles, and role/permission
assignments. Reads require ``roles.view``; changes require ``roles.manage``.
"""
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ikada_access.core.database.engine import get_db
from ikada_access.features.permissions import service
from ikada_access.features.permissions.dependencies import AccessContext, require_permission
from ikada_access.features.permissions.schemas import (
    PermissionCreate,
    PermissionResponse,
    PermissionCatalogResponse,
    RoleCreate,
    RoleUpdate,
    RoleResponse,
    RoleSummaryResponse,
    RoleListResponse,
    RoleWithPermissions,
    AssignPermissionToRole,
    ModuleToggleResponse,
)
router = APIRouter()

CanView = Annotated[AccessContext, Depends(require_permission("roles", "view"))]
CanManage = Annotated[AccessContext, Depends(require_permission("roles", "manage"))]
Db = Annotated[AsyncSession, Depends(get_db)]


# ============================================================================
# Permission Catalog Routes
# ============================================================================

@router.get("/permissions", response_model=PermissionCatalogResponse)
async def list_permissions(
    db: Db,
    access: CanView,
    module: Optional[str] = None
):
    """List the permission catalog, also grouped by module."""
    permissions = await service.list_permissions(db, module=module)
    grouped = service.group_by_module(permissions)
    return PermissionCatalogResponse(
        permissions=[PermissionResponse.model_validate(p) for p in permissions],
        grouped={
            name: [PermissionResponse.model_validate(p) for p in entries]
            for name, entries in grouped.items()
        },
        total=len(permissions)
    )


@router.post("/permissions", response_model=PermissionResponse, status_code=status.HTTP_201_CREATED)
async def create_permission(
    permission: PermissionCreate,
    db: Db,
    access: CanManage
):
    """Add a permission to the catalog."""
    return await service.create_permission(
        db,
        module=permission.module,
        action=permission.action,
        description=permission.description
    )


@router.delete("/permissions/{permission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_permission(
    permission_id: str,
    db: Db,
    access: CanManage
):
    """Delete a permission and revoke it from every role."""
    await service.delete_permission(db, permission_id)
    return None


# ============================================================================
# Role Routes
# ============================================================================

@router.post("/roles", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    role: RoleCreate,
    db: Db,
    access: CanManage
):
    """Create a new role."""
    return await service.create_role(
        db,
        name=role.name,
        description=role.description,
        is_active=role.is_active
    )


@router.get("/roles", response_model=RoleListResponse)
async def list_roles(
    db: Db,
    access: CanView,
    search: Optional[str] = None,
    is_active: Optional[bool] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500)
):
    """List roles with their permission and assignee counts."""
    summaries, total = await service.list_roles(db, search=search, is_active=is_active, skip=skip, limit=limit)
    items = [
        RoleSummaryResponse(
            **RoleResponse.model_validate(s.role).model_dump(),
            permission_count=s.permission_count,
            assignee_count=s.assignee_count
        )
        for s in summaries
    ]
    return RoleListResponse(items=items, total=total, skip=skip, limit=limit)


@router.get("/roles/{role_id}", response_model=RoleWithPermissions)
async def get_role(
    role_id: str,
    db: Db,
    access: CanView
):
    """Get a specific role with its permissions."""
    role = await service.get_role(db, role_id)
    permissions = await service.list_role_permissions(db, role_id)
    return RoleWithPermissions(
        **RoleResponse.model_validate(role).model_dump(),
        permissions=[PermissionResponse.model_validate(p) for p in permissions]
    )


@router.patch("/roles/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: str,
    role_update: RoleUpdate,
    db: Db,
    access: CanManage
):
    """Rename a role, change its description, or (de)activate it."""
    update_data = role_update.model_dump(exclude_unset=True)
    return await service.update_role(db, role_id, **update_data)


@router.delete("/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(
    role_id: str,
    db: Db,
    access: CanManage
):
    """Delete a role and all of its permission and actor assignments."""
    await service.delete_role(db, role_id)
    return None


# ============================================================================
# Role Permission Routes
# ============================================================================

@router.get("/roles/{role_id}/permissions", response_model=list[PermissionResponse])
async def list_role_permissions(
    role_id: str,
    db: Db,
    access: CanView
):
    """List the permissions granted to a role."""
    return await service.list_role_permissions(db, role_id)


@router.post("/roles/{role_id}/permissions", status_code=status.HTTP_200_OK)
async def grant_permission(
    role_id: str,
    assignment: AssignPermissionToRole,
    db: Db,
    access: CanManage
):
    """Grant a permission to a role. Granting twice is a no-op."""
    created = await service.grant_permission(db, role_id, assignment.permission_id)
    if not created:
        return {"message": "Permission already granted to role", "changed": False}
    return {"message": "Permission granted to role", "changed": True}


@router.delete("/roles/{role_id}/permissions", status_code=status.HTTP_200_OK)
async def revoke_permission(
    role_id: str,
    assignment: AssignPermissionToRole,
    db: Db,
    access: CanManage
):
    """Revoke a permission from a role. Revoking twice is a no-op."""
    removed = await service.revoke_permission(db, role_id, assignment.permission_id)
    if not removed:
        return {"message": "Permission was not granted to role", "changed": False}
    return {"message": "Permission revoked from role", "changed": True}


@router.post("/roles/{role_id}/permissions/module/{module}/toggle", response_model=ModuleToggleResponse)
async def toggle_module_permissions(
    role_id: str,
    module: str,
    db: Db,
    access: CanManage
):
    """Grant every permission of a module, or revoke them all if the role already holds every one."""
    outcome = await service.toggle_module_permissions(db, role_id, module)
    return ModuleToggleResponse(
        role_id=outcome.role_id,
        module=outcome.module,
        state=outcome.state,
        granted=outcome.granted,
        revoked=outcome.revoked
    )
