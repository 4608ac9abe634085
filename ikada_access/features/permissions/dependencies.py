"""
Route guards built on the enforcement gate.

The route -> ``(module, action)`` mapping lives with each route definition:

    @router.delete("/{article_id}")
    async def delete_article(
        access: AccessContext = Depends(require_permission("news", "delete"))
    ):
        ...

A guard resolves the current actor's permissions once per request and hands
them back as an ``AccessContext`` so handlers can make further decisions
(other permissions, tenancy scoping) without resolving again.
"""
from dataclasses import dataclass
from typing import Annotated
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ikada_access.core.database.engine import get_db
from ikada_access.core.errors import NotAuthorizedError, NotFoundError
from ikada_access.features.actors.dependencies import get_current_actor
from ikada_access.features.actors.models import Actor
from ikada_access.features.permissions.catalog import PermissionKey
from ikada_access.features.permissions.gate import Decision, decide, effective_permissions
from ikada_access.features.tenancy.scoper import VisibilityPolicy, in_scope, filter_in_scope
from ikada_access.utils import get_logger


log = get_logger(__name__)


@dataclass(frozen=True)
class AccessContext:
    """The current actor and their permissions, resolved once for this request."""
    actor: Actor
    permissions: frozenset[PermissionKey]

    def decide(self, module: str, action: str) -> Decision:
        return decide(self.permissions, PermissionKey(module, action))

    def can(self, module: str, action: str) -> bool:
        return self.decide(module, action).allowed

    def require(self, module: str, action: str) -> None:
        if not self.can(module, action):
            raise NotAuthorizedError()

    def in_scope(self, policy: VisibilityPolicy) -> bool:
        return in_scope(self.actor, policy)

    def visible(self, records: list) -> list:
        return filter_in_scope(self.actor, records)

    def ensure_visible(self, record, label: str = "Record"):
        """Return ``record`` if the actor may see it, else 404 so nothing leaks."""
        if record is None or not self.in_scope(record.visibility_policy):
            raise NotFoundError(f"{label} not found")
        return record


async def get_access_context(
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)]
) -> AccessContext:
    permissions = await effective_permissions(db, actor.id)
    return AccessContext(actor=actor, permissions=permissions)


def require_permission(module: str, action: str):
    """
    FastAPI dependency to require a specific permission.
    
    Args:
        module: Permission module
        action: Permission action
    
    Returns:
        Dependency function that returns the request's AccessContext
    
    Raises:
        NotAuthorizedError: 403 with a generic message if the gate denies
    """
    required = PermissionKey(module, action)

    async def permission_dependency(
        access: Annotated[AccessContext, Depends(get_access_context)]
    ) -> AccessContext:
        if not decide(access.permissions, required).allowed:
            log.debug("Denied %s to actor %s", required, access.actor.id)
            raise NotAuthorizedError()
        return access

    return permission_dependency


def require_self_or_permission(module: str, action: str):
    """
    Allow an actor to read their own data, anyone else needs the permission.
    
    The guarded route must take an ``actor_id`` path parameter.
    """
    required = PermissionKey(module, action)

    async def permission_dependency(
        actor_id: str,
        access: Annotated[AccessContext, Depends(get_access_context)]
    ) -> AccessContext:
        if actor_id != access.actor.id and not decide(access.permissions, required).allowed:
            raise NotAuthorizedError()
        return access

    return permission_dependency
