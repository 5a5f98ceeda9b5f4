import enum
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from marketplace.db import Base


class ProductStatus(str, enum.Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    SOLD = "sold"


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=True, index=True)
    condition = Column(String(20), nullable=True)  # new, like_new, good, fair
    price_cents = Column(Integer, nullable=False, default=0)
    status = Column(
        String(20), nullable=False, default=ProductStatus.AVAILABLE.value, index=True
    )
    image_url = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # seller
    user = relationship("User")

    def is_purchasable(self) -> bool:
        return bool(self.is_active) and self.status == ProductStatus.AVAILABLE.value

    def __repr__(self):
        return f"<Product id={self.id} name={self.name} status={self.status}>"
