"""
Column mixin embedding a visibility policy on scoped content tables.
"""
from sqlalchemy import JSON, String, and_, cast, or_, true, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from ikada_access.features.tenancy.scoper import ActorScope, ScopedActor, VisibilityMode, VisibilityPolicy


class VisibilityMixin:
    """
    Adds ``visibility`` and ``target_branch_ids`` columns.

    Usage:
        class Article(Base, TimestampMixin, VisibilityMixin):
            __tablename__ = "articles"
    """
    visibility: Mapped[VisibilityMode] = mapped_column(
        SQLEnum(VisibilityMode),
        default=VisibilityMode.ALL_BRANCHES,
        nullable=False,
        index=True
    )
    # Branch ids; empty unless visibility is SPECIFIC_BRANCHES
    target_branch_ids: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    @property
    def visibility_policy(self) -> VisibilityPolicy:
        return VisibilityPolicy.from_record(self)

    def apply_visibility(self, policy: VisibilityPolicy) -> None:
        self.visibility = policy.mode
        self.target_branch_ids = sorted(policy.target_branch_ids)

    @classmethod
    def targets_branch(cls, branch_id: str):
        """SQL clause: SPECIFIC_BRANCHES records whose targets include ``branch_id``."""
        # The JSON array text quotes every id, so the quoted id only matches a whole element
        return and_(
            cls.visibility == VisibilityMode.SPECIFIC_BRANCHES,
            cast(cls.target_branch_ids, String).like(f'%"{branch_id}"%')
        )

    @classmethod
    def visible_to(cls, actor: ScopedActor):
        """
        SQL pre-filter matching the rows ``in_scope`` accepts for ``actor``.

        Narrows the query only; listings still run ``filter_in_scope`` on the rows.
        """
        if actor.scope == ActorScope.CENTRAL:
            return true()
        if actor.branch_id is None:
            return cls.visibility == VisibilityMode.ALL_BRANCHES
        return or_(cls.visibility == VisibilityMode.ALL_BRANCHES, cls.targets_branch(actor.branch_id))
