"""
Permission resolver.

An actor's effective permission set is the union of the permissions of every
*active* role assigned to them. Resolution reads the current assignment graph
on every call; nothing is cached across requests.
"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ikada_access.features.permissions.catalog import PermissionKey
from ikada_access.features.permissions.models import Permission, Role, role_permissions, user_roles


def _active_grants_for(actor_id: str):
    return (
        select(role_permissions.c.permission_id)
        .join(user_roles, user_roles.c.role_id == role_permissions.c.role_id)
        .join(Role, Role.id == role_permissions.c.role_id)
        .where(
            user_roles.c.actor_id == actor_id,
            Role.is_active.is_(True),
        )
    )


async def resolve(db: AsyncSession, actor_id: str) -> frozenset[str]:
    """
    Return the ids of every permission reachable from ``actor_id`` through active roles.
    
    Unknown actors and actors without active roles resolve to the empty set.
    """
    result = await db.execute(_active_grants_for(actor_id).distinct())
    return frozenset(result.scalars().all())


async def resolve_keys(db: AsyncSession, actor_id: str) -> frozenset[PermissionKey]:
    """Same as ``resolve`` but returns ``(module, action)`` keys."""
    grants = _active_grants_for(actor_id).subquery()
    stmt = (
        select(Permission.module, Permission.action)
        .where(Permission.id.in_(select(grants.c.permission_id)))
    )
    result = await db.execute(stmt)
    return frozenset(PermissionKey(module, action) for module, action in result.all())


async def resolve_permissions(db: AsyncSession, actor_id: str) -> list[Permission]:
    """Effective permissions as rows, ordered by module and action, for display."""
    grants = _active_grants_for(actor_id).subquery()
    stmt = (
        select(Permission)
        .where(Permission.id.in_(select(grants.c.permission_id)))
        .order_by(Permission.module, Permission.action)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())
