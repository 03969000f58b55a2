import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from rbac_portal.app.core.database import Base


class EmployeeORM(Base):
    __tablename__ = "employees"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    email = Column(String(100), nullable=False, index=True)
    department = Column(String(50), nullable=False)
    role = Column(String(50), nullable=False)  # job title, unrelated to RBAC roles
    salary = Column(Numeric(12, 2), nullable=True)
    status = Column(String(16), default="active", nullable=False)  # active, inactive
    enterprise_id = Column(String(36), ForeignKey("enterprises.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    enterprise = relationship("EnterpriseORM", lazy="selectin")

    def __repr__(self):
        return f"<Employee {self.name} ({self.enterprise_id})>"
