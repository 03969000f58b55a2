import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, JSON
from rbac_portal.app.core.database import Base


class EnterpriseORM(Base):
    """
    Tenant. Users, employees and products all belong to exactly one enterprise.
    """
    __tablename__ = "enterprises"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False, index=True)
    location = Column(String(255), nullable=True)
    contact_info = Column(JSON, nullable=True)  # {"email": ..., "phone": ..., "website": ...}
    status = Column(String(16), default="active", nullable=False)  # active, inactive
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self):
        return f"<Enterprise {self.name}>"
