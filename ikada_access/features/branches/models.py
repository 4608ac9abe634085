"""
Branch model.

A branch ("syubiyah") is one regional sub-unit of the alumni organization.
It is only a scoping key: actors and content records point at branches,
branches carry no permissions of their own.
"""
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ikada_access.core.database.base import Base, TimestampMixin, generate_ulid


class Branch(Base, TimestampMixin):
    """Organizational sub-unit used to scope actors and content."""
    __tablename__ = "branches"
    
    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    
    # Region the branch covers
    province: Mapped[str | None] = mapped_column(String(100), nullable=True)
    regency: Mapped[str | None] = mapped_column(String(100), nullable=True)
    
    def __repr__(self) -> str:
        return f"<Branch(id={self.id}, name={self.name!r})>"
