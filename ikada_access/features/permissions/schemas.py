"""
Pydantic schemas for permission management.

Request and response models for the permission catalog, roles and their
assignments.
"""
from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator


# ============================================================================
# Permission Schemas
# ============================================================================

class PermissionBase(BaseModel):
    """Base permission schema."""
    module: str = Field(..., min_length=1, max_length=100, description="Module namespace (e.g., 'alumni', 'news')")
    action: str = Field(..., min_length=1, max_length=50, description="Action verb (e.g., 'view', 'edit', 'delete')")
    description: Optional[str] = Field(None, max_length=1000, description="Permission description")


class PermissionCreate(PermissionBase):
    """Schema for adding a permission to the catalog."""
    
    @field_validator('module', 'action')
    @classmethod
    def lowercase_identifier(cls, v: str) -> str:
        """Module and action are lowercase identifiers without dots."""
        v = v.strip().lower()
        if not v.replace('_', '').isalnum():
            raise ValueError('Must contain only alphanumeric characters and underscores')
        return v


class PermissionResponse(PermissionBase):
    """Schema for permission response."""
    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class PermissionCatalogResponse(BaseModel):
    """Full catalog plus the same entries grouped by module."""
    permissions: List[PermissionResponse] = []
    grouped: Dict[str, List[PermissionResponse]] = {}
    total: int


# ============================================================================
# Role Schemas
# ============================================================================

def _clean_role_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError('Role name is required')
    return v


class RoleBase(BaseModel):
    """Base role schema."""
    name: str = Field(..., min_length=1, max_length=50, description="Unique role name")
    description: Optional[str] = Field(None, max_length=1000, description="Role description")


class RoleCreate(RoleBase):
    """Schema for creating a new role."""
    is_active: bool = Field(True, description="Inactive roles contribute no permissions")
    
    @field_validator('name')
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return _clean_role_name(v)


class RoleUpdate(BaseModel):
    """Schema for updating a role."""
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=1000)
    is_active: Optional[bool] = None
    
    @field_validator('name')
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _clean_role_name(v)


class RoleResponse(RoleBase):
    """Schema for role response."""
    id: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class RoleSummaryResponse(RoleResponse):
    """Role with edge counts, as listed on the roles page."""
    permission_count: int = 0
    assignee_count: int = 0


class RoleListResponse(BaseModel):
    """Schema for paginated role list."""
    items: List[RoleSummaryResponse]
    total: int
    skip: int
    limit: int


class RoleWithPermissions(RoleResponse):
    """Schema for role with permissions."""
    permissions: List[PermissionResponse] = []


# ============================================================================
# Assignment Schemas
# ============================================================================

class AssignPermissionToRole(BaseModel):
    """Schema for granting a permission to a role (or revoking it)."""
    permission_id: str = Field(..., min_length=1, description="Permission ID")


class ModuleToggleResponse(BaseModel):
    """Result of toggling every permission of one module on a role."""
    role_id: str
    module: str
    state: str = Field(..., description="'granted' or 'revoked'")
    granted: List[str] = []
    revoked: List[str] = []
