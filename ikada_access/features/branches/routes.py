"""
Branch (syubiyah) routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ikada_access.core.database.engine import get_db
from ikada_access.features.branches import service
from ikada_access.features.branches.schemas import BranchCreate, BranchUpdate, BranchResponse
from ikada_access.features.permissions.dependencies import AccessContext, require_permission


router = APIRouter(tags=["branches"])

Db = Annotated[AsyncSession, Depends(get_db)]


@router.get("", response_model=list[BranchResponse])
async def list_branches(
    db: Db,
    access: Annotated[AccessContext, Depends(require_permission("syubiyah", "view"))],
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500)
):
    """List branches by name."""
    return await service.list_branches(db, skip=skip, limit=limit)


@router.get("/{branch_id}", response_model=BranchResponse)
async def get_branch(
    branch_id: str,
    db: Db,
    access: Annotated[AccessContext, Depends(require_permission("syubiyah", "view"))]
):
    """Get a branch by ID."""
    return await service.get_branch(db, branch_id)


@router.post("", response_model=BranchResponse, status_code=status.HTTP_201_CREATED)
async def create_branch(
    branch: BranchCreate,
    db: Db,
    access: Annotated[AccessContext, Depends(require_permission("syubiyah", "create"))]
):
    """Create a branch."""
    return await service.create_branch(db, **branch.model_dump())


@router.patch("/{branch_id}", response_model=BranchResponse)
async def update_branch(
    branch_id: str,
    branch_update: BranchUpdate,
    db: Db,
    access: Annotated[AccessContext, Depends(require_permission("syubiyah", "edit"))]
):
    """Update a branch."""
    return await service.update_branch(db, branch_id, **branch_update.model_dump(exclude_unset=True))


@router.delete("/{branch_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_branch(
    branch_id: str,
    db: Db,
    access: Annotated[AccessContext, Depends(require_permission("syubiyah", "delete"))]
):
    """Delete a branch that no actor is scoped to."""
    await service.delete_branch(db, branch_id)
    return None
