"""
Pydantic schemas for branch requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, Field


class BranchBase(BaseModel):
    """Base branch schema."""
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    province: str | None = Field(None, max_length=100)
    regency: str | None = Field(None, max_length=100)


class BranchCreate(BranchBase):
    """Schema for creating a new branch."""
    pass


class BranchUpdate(BaseModel):
    """Schema for updating branch information."""
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    province: str | None = Field(None, max_length=100)
    regency: str | None = Field(None, max_length=100)


class BranchResponse(BranchBase):
    """Schema for branch responses."""
    id: str
    created_at: datetime
    updated_at: datetime
    
    model_config = {"from_attributes": True}
