"""
Branch lookups and mutations.
"""
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ikada_access.core.errors import NotFoundError, ConflictError, ValidationError
from ikada_access.features.actors.models import Actor
from ikada_access.features.articles.models import Article
from ikada_access.features.events.models import Event
from ikada_access.features.branches.models import Branch
from ikada_access.utils import get_logger


log = get_logger(__name__)


async def get_branch(db: AsyncSession, branch_id: str) -> Branch:
    branch = await db.get(Branch, branch_id)
    if branch is None:
        raise NotFoundError("Branch not found")
    return branch


async def list_branches(db: AsyncSession, skip: int = 0, limit: int = 100) -> list[Branch]:
    result = await db.execute(select(Branch).order_by(Branch.name).offset(skip).limit(limit))
    return list(result.scalars().all())


async def _name_taken(db: AsyncSession, name: str, exclude_id: str | None = None) -> bool:
    stmt = select(Branch.id).where(Branch.name == name)
    if exclude_id:
        stmt = stmt.where(Branch.id != exclude_id)
    result = await db.execute(stmt)
    return result.first() is not None


async def create_branch(db: AsyncSession, **fields) -> Branch:
    """
    Raises:
        ConflictError: a branch with this name already exists
    """
    if await _name_taken(db, fields["name"]):
        raise ConflictError("Branch with this name already exists")

    branch = Branch(**fields)
    db.add(branch)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Branch with this name already exists")
    await db.refresh(branch)
    log.info("Created branch %s (%s)", branch.id, branch.name)
    return branch


async def update_branch(db: AsyncSession, branch_id: str, **fields) -> Branch:
    branch = await get_branch(db, branch_id)
    name = fields.get("name")
    if name is not None and name != branch.name and await _name_taken(db, name, exclude_id=branch_id):
        raise ConflictError("Branch with this name already exists")

    for key, value in fields.items():
        if value is not None:
            setattr(branch, key, value)
    await db.commit()
    await db.refresh(branch)
    return branch


async def delete_branch(db: AsyncSession, branch_id: str) -> None:
    """
    Delete a branch that no actor is scoped to and no content targets.

    Raises:
        NotFoundError: unknown branch
        ConflictError: actors are still scoped to the branch, or articles or
            events still list it among their target branches
    """
    branch = await get_branch(db, branch_id)
    scoped = await db.execute(select(Actor.id).where(Actor.branch_id == branch_id).limit(1))
    if scoped.first():
        raise ConflictError("Branch still has actors scoped to it")

    for model in (Article, Event):
        targeting = await db.execute(select(model.id).where(model.targets_branch(branch_id)).limit(1))
        if targeting.first():
            raise ConflictError("Branch is still targeted by scoped content")

    await db.delete(branch)
    await db.commit()
    log.info("Deleted branch %s", branch_id)


async def ensure_branches_exist(db: AsyncSession, branch_ids) -> None:
    """
    Raises:
        ValidationError: one of ``branch_ids`` is not a known branch
    """
    wanted = set(branch_ids)
    if not wanted:
        return
    result = await db.execute(select(Branch.id).where(Branch.id.in_(wanted)))
    missing = wanted - set(result.scalars().all())
    if missing:
        raise ValidationError(f"Unknown target branch: {', '.join(sorted(missing))}")
