"""
Permission and Role models for RBAC.

The assignment graph is two bipartite relations:
- role_permissions: Role <-> Permission
- user_roles: Actor <-> Role

There is no role-to-role edge, so resolution never needs cycle detection.
"""
from datetime import datetime
from sqlalchemy import String, ForeignKey, Table, Column, Text, DateTime, Boolean, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ikada_access.core.database.base import Base, TimestampMixin, generate_ulid
from ikada_access.features.permissions.catalog import PermissionKey


# ============================================================================
# Association Tables for Many-to-Many Relationships
# ============================================================================

# Role-Permission relationship
role_permissions = Table(
    "role_permissions",
    Base.metadata,
    Column("role_id", String(26), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column("permission_id", String(26), ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True),
    Column("granted_at", DateTime(timezone=True), nullable=False, default=datetime.now),
)

# Actor-Role relationship
user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("actor_id", String(26), ForeignKey("actors.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", String(26), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column("assigned_at", DateTime(timezone=True), nullable=False, default=datetime.now),
    Column("assigned_by_id", String(26), ForeignKey("actors.id", ondelete="SET NULL"), nullable=True),
)


# ============================================================================
# Core Models
# ============================================================================

class Permission(Base, TimestampMixin):
    """
    An atomic capability: an action on a module.
    
    Examples:
    - module="alumni", action="edit"
    - module="news", action="delete"
    """
    __tablename__ = "permissions"
    __table_args__ = (
        UniqueConstraint("module", "action", name="uq_permissions_module_action"),
    )
    
    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    
    module: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    
    @property
    def key(self) -> PermissionKey:
        return PermissionKey(self.module, self.action)
    
    @property
    def name(self) -> str:
        return str(self.key)
    
    def __repr__(self) -> str:
        return f"<Permission(id={self.id}, key={self.name!r})>"


class Role(Base, TimestampMixin):
    """
    Named, activatable bundle of permissions.
    
    An inactive role keeps its edges but contributes nothing to resolution.
    Examples: Super Admin, Admin Berita, Viewer
    """
    __tablename__ = "roles"
    
    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    
    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name!r}, active={self.is_active})>"
