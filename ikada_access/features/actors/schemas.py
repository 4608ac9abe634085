"""
Pydantic schemas for actor responses and role assignment.
"""
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

from ikada_access.features.tenancy.scoper import ActorScope
from ikada_access.features.permissions.schemas import PermissionResponse, RoleResponse


class ActorResponse(BaseModel):
    """Actor identity as read from the identity provider sync."""
    id: str
    name: str
    email: EmailStr
    scope: ActorScope
    branch_id: str | None = None
    is_active: bool
    created_at: datetime
    
    model_config = {"from_attributes": True}


class AssignRoleToActor(BaseModel):
    """Schema for assigning a role to an actor (or removing it)."""
    role_id: str = Field(..., min_length=1, description="Role ID")


class ActorRolesResponse(BaseModel):
    actor_id: str
    roles: list[RoleResponse] = []


class ActorPermissionsResponse(BaseModel):
    """Effective permissions of an actor, for display only."""
    actor_id: str
    permissions: list[PermissionResponse] = []
    keys: list[str] = []


class AuthorizeResponse(BaseModel):
    actor_id: str
    permission: str
    decision: str
    allowed: bool


class CurrentActorResponse(ActorResponse):
    permissions: list[str] = []
