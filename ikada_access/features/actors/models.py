"""
Actor model with ULID primary keys.
"""
from sqlalchemy import String, Boolean, ForeignKey, CheckConstraint, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from ikada_access.core.database.base import Base, TimestampMixin, generate_ulid
from ikada_access.features.tenancy.scoper import ActorScope


class Actor(Base, TimestampMixin):
    """
    Administrative identity evaluated for authorization.
    
    Central actors see every record; branch actors are scoped to one branch.
    """
    __tablename__ = "actors"
    __table_args__ = (
        CheckConstraint(
            "(scope = 'CENTRAL' AND branch_id IS NULL) OR (scope = 'BRANCH' AND branch_id IS NOT NULL)",
            name="ck_actors_scope_branch",
        ),
    )
    
    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    
    scope: Mapped[ActorScope] = mapped_column(
        SQLEnum(ActorScope),
        default=ActorScope.CENTRAL,
        nullable=False,
        index=True
    )
    branch_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("branches.id", ondelete="RESTRICT"),
        nullable=True,
        index=True
    )
    
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    
    def __repr__(self) -> str:
        return f"<Actor(id={self.id}, email={self.email!r}, scope={self.scope})>"
