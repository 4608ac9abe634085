"""
Event model.
"""
from datetime import datetime
from sqlalchemy import String, Text, Integer, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
import enum

from ikada_access.core.database.base import Base, TimestampMixin, generate_ulid
from ikada_access.features.tenancy.models import VisibilityMixin


class EventType(str, enum.Enum):
    OFFLINE = "OFFLINE"
    ONLINE = "ONLINE"
    HYBRID = "HYBRID"


class EventStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    CANCELLED = "CANCELLED"


class Event(Base, TimestampMixin, VisibilityMixin):
    """Alumni event, visible to the branches its visibility policy targets."""
    __tablename__ = "events"
    
    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    
    event_type: Mapped[EventType] = mapped_column(SQLEnum(EventType), default=EventType.OFFLINE, nullable=False)
    location: Mapped[str | None] = mapped_column(String(500), nullable=True)
    online_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    max_participants: Mapped[int | None] = mapped_column(Integer, nullable=True)
    
    status: Mapped[EventStatus] = mapped_column(
        SQLEnum(EventStatus),
        default=EventStatus.DRAFT,
        nullable=False,
        index=True
    )
    
    author_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("actors.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    
    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title!r}, visibility={self.visibility})>"
