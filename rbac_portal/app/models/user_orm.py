import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Boolean, DateTime, Integer, ForeignKey
from sqlalchemy.orm import relationship
from rbac_portal.app.core.database import Base


class UserORM(Base):
    """
    Principal. Lockout state (login_attempts, locked_until) and the reset token
    live on the row so every change to them is a single-row update.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    status = Column(String(16), default="active", nullable=False)  # active, inactive, locked

    login_attempts = Column(Integer, default=0, nullable=False)
    locked_until = Column(DateTime(timezone=True), nullable=True)
    last_login = Column(DateTime(timezone=True), nullable=True)

    # SHA-256 digest of the outstanding reset token, never the token itself
    reset_password_token = Column(String(64), nullable=True, index=True)
    reset_password_expires = Column(DateTime(timezone=True), nullable=True)

    role_id = Column(String(36), ForeignKey("roles.id"), nullable=False, index=True)
    enterprise_id = Column(String(36), ForeignKey("enterprises.id"), nullable=False, index=True)
    is_system = Column(Boolean, default=False, nullable=False)  # bootstrap principal, undeletable

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    role = relationship("RoleORM", lazy="selectin")
    enterprise = relationship("EnterpriseORM", lazy="selectin")

    def __repr__(self):
        return f"<User {self.username}>"
