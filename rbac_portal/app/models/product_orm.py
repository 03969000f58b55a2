import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Integer, Numeric, Text, ForeignKey
from sqlalchemy.orm import relationship
from rbac_portal.app.core.database import Base


class ProductORM(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    sku = Column(String(50), unique=True, nullable=False, index=True)
    price = Column(Numeric(12, 2), nullable=False)
    category = Column(String(50), nullable=False, index=True)
    description = Column(Text, nullable=True)
    stock_quantity = Column(Integer, default=0, nullable=False)
    status = Column(String(16), default="active", nullable=False)  # active, inactive, discontinued
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
        return f"<Product {self.sku}>"
