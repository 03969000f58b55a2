"""
Role and permission ORM models.

A role owns at most one permission row per module. Each row carries four
independent CRUD flags; a module without a row is not accessible at all.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum as PyEnum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from rbac_portal.app.core.database import Base


class PermissionModule(str, PyEnum):
    """Functional areas subject to independent CRUD permissions."""
    DASHBOARD = "dashboard"
    USERS = "users"
    ROLES = "roles"
    ENTERPRISES = "enterprises"
    EMPLOYEES = "employees"
    PRODUCTS = "products"
    REPORTS = "reports"


class RoleORM(Base):
    __tablename__ = "roles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(50), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    is_system_role = Column(Boolean, default=False, nullable=False)
    # Grants every permission. Only the bootstrap seed sets it; the API never writes it.
    is_super_admin = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    permissions = relationship(
        "RolePermissionORM",
        back_populates="role",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="RolePermissionORM.module",
    )

    def __repr__(self):
        return f"<Role {self.name}>"


class RolePermissionORM(Base):
    __tablename__ = "role_permissions"
    __table_args__ = (
        UniqueConstraint("role_id", "module", name="uq_role_permissions_role_module"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    role_id = Column(String(36), ForeignKey("roles.id", ondelete="CASCADE"), nullable=False, index=True)
    module = Column(String(32), nullable=False, index=True)  # PermissionModule value
    can_create = Column(Boolean, default=False, nullable=False)
    can_read = Column(Boolean, default=False, nullable=False)
    can_update = Column(Boolean, default=False, nullable=False)
    can_delete = Column(Boolean, default=False, nullable=False)

    role = relationship(RoleORM, back_populates="permissions")

    def __repr__(self):
        return f"<RolePermission {self.role_id}:{self.module}>"
