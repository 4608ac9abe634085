"""
Visibility policy handling shared by the scoped content features.
"""
from sqlalchemy.ext.asyncio import AsyncSession

from ikada_access.features.branches.service import ensure_branches_exist
from ikada_access.features.tenancy.scoper import (
    ScopedActor,
    VisibilityMode,
    VisibilityPolicy,
    ensure_writable,
)


async def policy_for_write(
    db: AsyncSession,
    actor: ScopedActor,
    mode: VisibilityMode,
    target_branch_ids: list[str] | None,
) -> VisibilityPolicy:
    """
    Build the policy a create or update will store.

    Raises:
        ValidationError: empty SPECIFIC_BRANCHES targets, an unknown target
            branch, or a policy that hides the record from its branch writer
    """
    policy = VisibilityPolicy.create(mode, target_branch_ids)
    await ensure_branches_exist(db, policy.target_branch_ids)
    ensure_writable(actor, policy)
    return policy


async def policy_for_update(
    db: AsyncSession,
    actor: ScopedActor,
    current: VisibilityPolicy,
    mode: VisibilityMode | None,
    target_branch_ids: list[str] | None,
) -> VisibilityPolicy | None:
    """Merge a partial visibility update onto ``current``; None when nothing changes."""
    if mode is None and target_branch_ids is None:
        return None
    return await policy_for_write(
        db,
        actor,
        mode if mode is not None else current.mode,
        target_branch_ids if target_branch_ids is not None else list(current.target_branch_ids),
    )
