"""
Actor feature routes.

Role assignment plus read-only views of an actor's effective permissions.
The permission listing is for display; enforcement always goes through the
gate on the server, never through a client-supplied permission list.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ikada_access.core.database.engine import get_db
from ikada_access.features.actors.schemas import (
    ActorRolesResponse,
    ActorPermissionsResponse,
    AssignRoleToActor,
    AuthorizeResponse,
    CurrentActorResponse,
)
from ikada_access.features.permissions import service
from ikada_access.features.permissions.catalog import PermissionKey
from ikada_access.features.permissions.dependencies import (
    AccessContext,
    get_access_context,
    require_permission,
    require_self_or_permission,
)
from ikada_access.features.permissions.gate import authorize
from ikada_access.features.permissions.resolver import resolve_permissions
from ikada_access.features.permissions.schemas import PermissionResponse, RoleResponse


router = APIRouter(tags=["actors"])

Db = Annotated[AsyncSession, Depends(get_db)]


@router.get("/me", response_model=CurrentActorResponse)
async def get_current_actor_profile(
    access: Annotated[AccessContext, Depends(get_access_context)]
):
    """Get the authenticated actor with their effective permission keys."""
    profile = CurrentActorResponse.model_validate(access.actor)
    return profile.model_copy(update={"permissions": sorted(str(key) for key in access.permissions)})


@router.get("/{actor_id}/roles", response_model=ActorRolesResponse)
async def list_actor_roles(
    actor_id: str,
    db: Db,
    access: Annotated[AccessContext, Depends(require_self_or_permission("roles", "view"))]
):
    """List the roles assigned to an actor, active or not."""
    roles = await service.list_actor_roles(db, actor_id)
    return ActorRolesResponse(
        actor_id=actor_id,
        roles=[RoleResponse.model_validate(r) for r in roles]
    )


@router.post("/{actor_id}/roles", status_code=status.HTTP_200_OK)
async def assign_role(
    actor_id: str,
    assignment: AssignRoleToActor,
    db: Db,
    access: Annotated[AccessContext, Depends(require_permission("roles", "manage"))]
):
    """Assign a role to an actor. Assigning twice is a no-op."""
    created = await service.assign_role(db, actor_id, assignment.role_id, assigned_by_id=access.actor.id)
    if not created:
        return {"message": "Role already assigned to actor", "changed": False}
    return {"message": "Role assigned to actor", "changed": True}


@router.delete("/{actor_id}/roles", status_code=status.HTTP_200_OK)
async def unassign_role(
    actor_id: str,
    assignment: AssignRoleToActor,
    db: Db,
    access: Annotated[AccessContext, Depends(require_permission("roles", "manage"))]
):
    """Remove a role from an actor. Removing twice is a no-op."""
    removed = await service.unassign_role(db, actor_id, assignment.role_id)
    if not removed:
        return {"message": "Role was not assigned to actor", "changed": False}
    return {"message": "Role removed from actor", "changed": True}


@router.get("/{actor_id}/permissions", response_model=ActorPermissionsResponse)
async def get_actor_permissions(
    actor_id: str,
    db: Db,
    access: Annotated[AccessContext, Depends(require_self_or_permission("roles", "view"))]
):
    """Get the effective permission set of an actor."""
    actor = await service.get_actor(db, actor_id)
    # Deactivated actors are denied everything by the gate, show them the same
    permissions = await resolve_permissions(db, actor_id) if actor.is_active else []
    return ActorPermissionsResponse(
        actor_id=actor_id,
        permissions=[PermissionResponse.model_validate(p) for p in permissions],
        keys=[p.name for p in permissions]
    )


@router.get("/{actor_id}/authorize", response_model=AuthorizeResponse)
async def authorize_actor(
    actor_id: str,
    db: Db,
    access: Annotated[AccessContext, Depends(require_self_or_permission("roles", "view"))],
    permission: str = Query(..., description="Permission key as module.action")
):
    """Ask the gate whether an actor holds a permission."""
    required = PermissionKey.parse(permission)
    decision = await authorize(db, actor_id, required)
    return AuthorizeResponse(
        actor_id=actor_id,
        permission=str(required),
        decision=decision.value,
        allowed=decision.allowed
    )
