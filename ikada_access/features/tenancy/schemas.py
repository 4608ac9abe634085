"""
Pydantic fields shared by every scoped content schema.
"""
from pydantic import BaseModel, Field

from ikada_access.features.tenancy.scoper import VisibilityMode


class VisibilityFields(BaseModel):
    """Visibility policy as carried on request and response bodies."""
    visibility: VisibilityMode = Field(VisibilityMode.ALL_BRANCHES, description="ALL_BRANCHES or SPECIFIC_BRANCHES")
    target_branch_ids: list[str] = Field(default_factory=list, description="Target branch IDs for SPECIFIC_BRANCHES")


class VisibilityUpdate(BaseModel):
    """Optional visibility fields for partial updates."""
    visibility: VisibilityMode | None = None
    target_branch_ids: list[str] | None = None
