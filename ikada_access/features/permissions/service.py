"""
Administration operations over roles, the permission catalog and the
assignment graph.

Every edge operation (grant, revoke, assign, unassign) is idempotent: granting
an already-granted permission or revoking one that is not held succeeds
without changing anything. Each function commits its own unit of work.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Optional, List, Dict

from sqlalchemy import select, delete, insert, func, or_, and_
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ikada_access.core.errors import NotFoundError, ConflictError
from ikada_access.features.actors.models import Actor
from ikada_access.features.permissions.models import Permission, Role, role_permissions, user_roles
from ikada_access.utils import get_logger


log = get_logger(__name__)


@dataclass
class RoleSummary:
    role: Role
    permission_count: int
    assignee_count: int


@dataclass
class ToggleResult:
    """Outcome of a module toggle: the role ends fully granted or fully revoked."""
    role_id: str
    module: str
    granted: List[str] = field(default_factory=list)
    revoked: List[str] = field(default_factory=list)

    @property
    def state(self) -> str:
        return "revoked" if self.revoked else "granted"


def _insert_ignoring_duplicates(db: AsyncSession, table):
    # Concurrent duplicate grants converge on the same row instead of failing
    dialect = db.get_bind().dialect.name
    if dialect == "sqlite":
        return sqlite_insert(table).on_conflict_do_nothing()
    if dialect == "postgresql":
        return pg_insert(table).on_conflict_do_nothing()
    return insert(table)


# ============================================================================
# Lookups
# ============================================================================

async def get_role(db: AsyncSession, role_id: str) -> Role:
    role = await db.get(Role, role_id)
    if role is None:
        raise NotFoundError("Role not found")
    return role


async def get_permission(db: AsyncSession, permission_id: str) -> Permission:
    permission = await db.get(Permission, permission_id)
    if permission is None:
        raise NotFoundError("Permission not found")
    return permission


async def get_actor(db: AsyncSession, actor_id: str) -> Actor:
    actor = await db.get(Actor, actor_id)
    if actor is None:
        raise NotFoundError("Actor not found")
    return actor


async def _role_name_taken(db: AsyncSession, name: str, exclude_id: Optional[str] = None) -> bool:
    stmt = select(Role.id).where(Role.name == name)
    if exclude_id:
        stmt = stmt.where(Role.id != exclude_id)
    result = await db.execute(stmt)
    return result.first() is not None


# ============================================================================
# Roles
# ============================================================================

async def create_role(
    db: AsyncSession,
    name: str,
    description: Optional[str] = None,
    is_active: bool = True
) -> Role:
    """
    Create a role.

    Raises:
        ConflictError: a role with ``name`` already exists
    """
    if await _role_name_taken(db, name):
        raise ConflictError("Role with this name already exists")

    role = Role(name=name, description=description, is_active=is_active)
    db.add(role)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race against another request creating the same name
        await db.rollback()
        raise ConflictError("Role with this name already exists")
    await db.refresh(role)
    log.info("Created role %s (%s)", role.id, role.name)
    return role


async def list_roles(
    db: AsyncSession,
    search: Optional[str] = None,
    is_active: Optional[bool] = None,
    skip: int = 0,
    limit: int = 100
) -> tuple[List[RoleSummary], int]:
    """List roles with their permission and assignee counts, newest first."""
    filters = []
    if search:
        pattern = f"%{search}%"
        filters.append(or_(Role.name.ilike(pattern), Role.description.ilike(pattern)))
    if is_active is not None:
        filters.append(Role.is_active == is_active)

    permission_count = (
        select(func.count())
        .select_from(role_permissions)
        .where(role_permissions.c.role_id == Role.id)
        .correlate(Role)
        .scalar_subquery()
    )
    assignee_count = (
        select(func.count())
        .select_from(user_roles)
        .where(user_roles.c.role_id == Role.id)
        .correlate(Role)
        .scalar_subquery()
    )

    stmt = (
        select(Role, permission_count, assignee_count)
        .where(*filters)
        .order_by(Role.created_at.desc(), Role.name)
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(stmt)
    items = [RoleSummary(role, p_count, a_count) for role, p_count, a_count in result.all()]

    total_result = await db.execute(select(func.count()).select_from(Role).where(*filters))
    total = total_result.scalar() or 0

    return items, total


async def update_role(
    db: AsyncSession,
    role_id: str,
    name: Optional[str] = None,
    description: Optional[str] = None,
    is_active: Optional[bool] = None
) -> Role:
    """
    Rename, describe or (de)activate a role. ``None`` leaves a field unchanged.

    Raises:
        NotFoundError: unknown role
        ConflictError: ``name`` belongs to another role
    """
    role = await get_role(db, role_id)

    if name is not None and name != role.name:
        if await _role_name_taken(db, name, exclude_id=role_id):
            raise ConflictError("Role with this name already exists")
        role.name = name
    if description is not None:
        role.description = description
    if is_active is not None:
        role.is_active = is_active

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Role with this name already exists")
    await db.refresh(role)
    log.info("Updated role %s", role_id)
    return role


async def set_role_active(db: AsyncSession, role_id: str, is_active: bool) -> Role:
    """
    Flip the role's kill switch.

    Existing edges are kept; while inactive they simply contribute nothing.
    """
    return await update_role(db, role_id, is_active=is_active)


async def delete_role(db: AsyncSession, role_id: str) -> None:
    """
    Delete a role together with all its permission and actor edges.

    Deletion is allowed even while actors still hold the role.

    Raises:
        NotFoundError: unknown role
    """
    role = await get_role(db, role_id)

    revoked = await db.execute(delete(role_permissions).where(role_permissions.c.role_id == role_id))
    unassigned = await db.execute(delete(user_roles).where(user_roles.c.role_id == role_id))
    await db.delete(role)
    await db.commit()

    log.info(
        "Deleted role %s, removed %s permission edge(s) and %s assignment(s)",
        role_id, revoked.rowcount, unassigned.rowcount
    )


# ============================================================================
# Permission catalog
# ============================================================================

async def create_permission(
    db: AsyncSession,
    module: str,
    action: str,
    description: Optional[str] = None
) -> Permission:
    """
    Add a permission to the catalog.

    Raises:
        ConflictError: ``(module, action)`` already exists
    """
    existing = await db.execute(
        select(Permission.id).where(and_(Permission.module == module, Permission.action == action))
    )
    if existing.first():
        raise ConflictError("Permission with this module and action already exists")

    permission = Permission(module=module, action=action, description=description)
    db.add(permission)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Permission with this module and action already exists")
    await db.refresh(permission)
    log.info("Created permission %s", permission.name)
    return permission


async def list_permissions(db: AsyncSession, module: Optional[str] = None) -> List[Permission]:
    stmt = select(Permission).order_by(Permission.module, Permission.action)
    if module:
        stmt = stmt.where(Permission.module == module)
    result = await db.execute(stmt)
    return list(result.scalars().all())


def group_by_module(permissions: List[Permission]) -> Dict[str, List[Permission]]:
    """Group catalog entries by module, keeping input order within each group."""
    grouped: Dict[str, List[Permission]] = defaultdict(list)
    for permission in permissions:
        grouped[permission.module].append(permission)
    return dict(grouped)


async def delete_permission(db: AsyncSession, permission_id: str) -> None:
    """
    Remove a permission from the catalog and from every role holding it.

    Raises:
        NotFoundError: unknown permission
    """
    permission = await get_permission(db, permission_id)

    revoked = await db.execute(
        delete(role_permissions).where(role_permissions.c.permission_id == permission_id)
    )
    await db.delete(permission)
    await db.commit()
    log.info("Deleted permission %s, revoked from %s role(s)", permission.name, revoked.rowcount)


# ============================================================================
# Role <-> Permission edges
# ============================================================================

async def role_permission_ids(db: AsyncSession, role_id: str) -> frozenset[str]:
    result = await db.execute(
        select(role_permissions.c.permission_id).where(role_permissions.c.role_id == role_id)
    )
    return frozenset(result.scalars().all())


async def list_role_permissions(db: AsyncSession, role_id: str) -> List[Permission]:
    await get_role(db, role_id)
    stmt = (
        select(Permission)
        .join(role_permissions, role_permissions.c.permission_id == Permission.id)
        .where(role_permissions.c.role_id == role_id)
        .order_by(Permission.module, Permission.action)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def _insert_grant(db: AsyncSession, role_id: str, permission_id: str) -> None:
    await db.execute(
        _insert_ignoring_duplicates(db, role_permissions).values(role_id=role_id, permission_id=permission_id)
    )


async def grant_permission(db: AsyncSession, role_id: str, permission_id: str) -> bool:
    """
    Grant ``permission_id`` to ``role_id``.

    Returns:
        True if the edge was created, False if it already existed

    Raises:
        NotFoundError: unknown role or permission
    """
    await get_role(db, role_id)
    await get_permission(db, permission_id)

    if permission_id in await role_permission_ids(db, role_id):
        return False

    await _insert_grant(db, role_id, permission_id)
    await db.commit()
    log.info("Granted permission %s to role %s", permission_id, role_id)
    return True


async def revoke_permission(db: AsyncSession, role_id: str, permission_id: str) -> bool:
    """
    Revoke ``permission_id`` from ``role_id``.

    Returns:
        True if an edge was removed, False if there was none

    Raises:
        NotFoundError: unknown role or permission
    """
    await get_role(db, role_id)
    await get_permission(db, permission_id)

    result = await db.execute(
        delete(role_permissions).where(
            and_(
                role_permissions.c.role_id == role_id,
                role_permissions.c.permission_id == permission_id
            )
        )
    )
    await db.commit()
    removed = bool(result.rowcount)
    if removed:
        log.info("Revoked permission %s from role %s", permission_id, role_id)
    return removed


async def toggle_module_permissions(db: AsyncSession, role_id: str, module: str) -> ToggleResult:
    """
    Bring a role to "all of ``module``" or "none of ``module``".

    If the role already holds every permission of the module, all of them are
    revoked; otherwise the missing ones are granted. A partially granted
    module therefore always ends fully granted.

    Raises:
        NotFoundError: unknown role, or the module has no permissions
    """
    await get_role(db, role_id)

    module_permission_ids = [p.id for p in await list_permissions(db, module=module)]
    if not module_permission_ids:
        raise NotFoundError("Module not found")

    held = await role_permission_ids(db, role_id)
    outcome = ToggleResult(role_id=role_id, module=module)

    if all(pid in held for pid in module_permission_ids):
        await db.execute(
            delete(role_permissions).where(
                and_(
                    role_permissions.c.role_id == role_id,
                    role_permissions.c.permission_id.in_(module_permission_ids)
                )
            )
        )
        outcome.revoked = list(module_permission_ids)
    else:
        for permission_id in module_permission_ids:
            if permission_id not in held:
                await _insert_grant(db, role_id, permission_id)
                outcome.granted.append(permission_id)

    await db.commit()
    log.info(
        "Toggled module %s on role %s: granted %d, revoked %d",
        module, role_id, len(outcome.granted), len(outcome.revoked)
    )
    return outcome


# ============================================================================
# Actor <-> Role edges
# ============================================================================

async def list_actor_roles(db: AsyncSession, actor_id: str) -> List[Role]:
    await get_actor(db, actor_id)
    stmt = (
        select(Role)
        .join(user_roles, user_roles.c.role_id == Role.id)
        .where(user_roles.c.actor_id == actor_id)
        .order_by(Role.name)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def assign_role(
    db: AsyncSession,
    actor_id: str,
    role_id: str,
    assigned_by_id: Optional[str] = None
) -> bool:
    """
    Give ``role_id`` to ``actor_id``.

    Returns:
        True if the assignment was created, False if it already existed

    Raises:
        NotFoundError: unknown actor or role
    """
    await get_actor(db, actor_id)
    await get_role(db, role_id)

    existing = await db.execute(
        select(user_roles.c.role_id).where(
            and_(user_roles.c.actor_id == actor_id, user_roles.c.role_id == role_id)
        )
    )
    if existing.first():
        return False

    await db.execute(
        _insert_ignoring_duplicates(db, user_roles).values(
            actor_id=actor_id,
            role_id=role_id,
            assigned_by_id=assigned_by_id
        )
    )
    await db.commit()
    log.info("Assigned role %s to actor %s", role_id, actor_id)
    return True


async def unassign_role(db: AsyncSession, actor_id: str, role_id: str) -> bool:
    """
    Take ``role_id`` away from ``actor_id``.

    Returns:
        True if an assignment was removed, False if there was none

    Raises:
        NotFoundError: unknown actor or role
    """
    await get_actor(db, actor_id)
    await get_role(db, role_id)

    result = await db.execute(
        delete(user_roles).where(
            and_(user_roles.c.actor_id == actor_id, user_roles.c.role_id == role_id)
        )
    )
    await db.commit()
    removed = bool(result.rowcount)
    if removed:
        log.info("Unassigned role %s from actor %s", role_id, actor_id)
    return removed
