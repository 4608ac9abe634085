"""
Enforcement gate.

``authorize`` answers allow/deny for one actor and one permission key. It is
fail-closed: an unknown or deactivated actor, a role that is inactive, a
permission that no longer exists and any error talking to the database all
come out as ``Decision.DENY``.

The gate has no side effects. Turning a denial into an HTTP response is the
route guard's job (see ``dependencies.require_permission``).
"""
import enum

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ikada_access.features.actors.models import Actor
from ikada_access.features.permissions.catalog import PermissionKey
from ikada_access.features.permissions.resolver import resolve_keys
from ikada_access.utils import get_logger


log = get_logger(__name__)


class Decision(str, enum.Enum):
    ALLOW = "allow"
    DENY = "deny"

    @property
    def allowed(self) -> bool:
        return self is Decision.ALLOW


def decide(granted: frozenset[PermissionKey], required: PermissionKey) -> Decision:
    """Membership test on an already-resolved permission set."""
    if not isinstance(required, PermissionKey):
        return Decision.DENY
    return Decision.ALLOW if required in granted else Decision.DENY


async def effective_permissions(db: AsyncSession, actor_id: str | None) -> frozenset[PermissionKey]:
    """
    Resolve ``actor_id`` for an enforcement decision.
    
    Returns the empty set for unknown or inactive actors and when the
    database cannot be read, so callers built on it deny by default.
    """
    if not actor_id:
        return frozenset()
    try:
        actor = await db.get(Actor, actor_id)
        if actor is None or not actor.is_active:
            log.debug("Actor %s unknown or inactive, resolving to no permissions", actor_id)
            return frozenset()
        return await resolve_keys(db, actor_id)
    except SQLAlchemyError:
        log.warning("Permission lookup failed for actor %s, denying", actor_id, exc_info=True)
        return frozenset()


async def authorize(db: AsyncSession, actor_id: str | None, required: PermissionKey) -> Decision:
    """Return ALLOW iff ``required`` is in the actor's effective permission set."""
    granted = await effective_permissions(db, actor_id)
    decision = decide(granted, required)
    log.debug("authorize actor=%s permission=%s -> %s", actor_id, required, decision.value)
    return decision
