"""
News article model.
"""
from datetime import datetime
from sqlalchemy import String, Text, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
import enum

from ikada_access.core.database.base import Base, TimestampMixin, generate_ulid
from ikada_access.features.tenancy.models import VisibilityMixin


class ArticleStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class Article(Base, TimestampMixin, VisibilityMixin):
    """News article, visible to the branches its visibility policy targets."""
    __tablename__ = "articles"
    
    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(300), unique=True, nullable=False, index=True)
    excerpt: Mapped[str | None] = mapped_column(String(500), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    
    status: Mapped[ArticleStatus] = mapped_column(
        SQLEnum(ArticleStatus),
        default=ArticleStatus.DRAFT,
        nullable=False,
        index=True
    )
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    
    author_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("actors.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    
    def __repr__(self) -> str:
        return f"<Article(id={self.id}, slug={self.slug!r}, visibility={self.visibility})>"
