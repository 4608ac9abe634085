"""
Tenancy scoper.

Decides whether a content record is visible to an actor given the actor's
organizational scope and the record's visibility policy:

    CENTRAL    + any policy              -> visible
    BRANCH(b)  + ALL_BRANCHES            -> visible
    BRANCH(b)  + SPECIFIC_BRANCHES(ts)   -> visible iff b in ts

Listing code always runs records through ``filter_in_scope`` (central actors
included, they simply pass every record).
"""
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol, TypeVar
import enum

from ikada_access.core.errors import ValidationError


class ActorScope(str, enum.Enum):
    """Organizational scope of an actor."""
    CENTRAL = "CENTRAL"
    BRANCH = "BRANCH"


class VisibilityMode(str, enum.Enum):
    """Which branches a content record targets."""
    ALL_BRANCHES = "ALL_BRANCHES"
    SPECIFIC_BRANCHES = "SPECIFIC_BRANCHES"


class ScopedActor(Protocol):
    scope: ActorScope
    branch_id: str | None


@dataclass(frozen=True)
class VisibilityPolicy:
    """Visibility rule embedded on a scoped content record."""
    mode: VisibilityMode
    target_branch_ids: frozenset[str] = frozenset()

    @classmethod
    def create(cls, mode: VisibilityMode, target_branch_ids: Iterable[str] | None = None) -> "VisibilityPolicy":
        """
        Build a policy for a write, rejecting invalid combinations.

        Raises:
            ValidationError: SPECIFIC_BRANCHES with no target branch
        """
        targets = frozenset(t for t in (target_branch_ids or ()) if t)
        if mode == VisibilityMode.SPECIFIC_BRANCHES and not targets:
            raise ValidationError("At least one target branch is required for SPECIFIC_BRANCHES visibility")
        if mode == VisibilityMode.ALL_BRANCHES:
            # Targets are meaningless here; drop them so stored rows stay canonical
            targets = frozenset()
        return cls(mode=mode, target_branch_ids=targets)

    @classmethod
    def from_record(cls, record) -> "VisibilityPolicy":
        """Read the policy stored on a record carrying ``VisibilityMixin`` columns."""
        return cls(
            mode=VisibilityMode(record.visibility),
            target_branch_ids=frozenset(record.target_branch_ids or ()),
        )


def in_scope(actor: ScopedActor, policy: VisibilityPolicy) -> bool:
    """Return True when ``policy`` makes the record visible to ``actor``."""
    if actor.scope == ActorScope.CENTRAL:
        return True
    if policy.mode == VisibilityMode.ALL_BRANCHES:
        return True
    return actor.branch_id is not None and actor.branch_id in policy.target_branch_ids


R = TypeVar("R")


def filter_in_scope(actor: ScopedActor, records: Iterable[R]) -> list[R]:
    """Keep the records visible to ``actor``, preserving order."""
    return [record for record in records if in_scope(actor, VisibilityPolicy.from_record(record))]


def ensure_writable(actor: ScopedActor, policy: VisibilityPolicy) -> None:
    """
    Reject a write that would leave the record outside the writer's own scope.

    Branch actors may only publish to all branches or to a set that includes
    their own branch; central actors may write any valid policy.
    """
    if not in_scope(actor, policy):
        raise ValidationError("Visibility must include your own branch")
