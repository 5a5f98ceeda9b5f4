from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from marketplace.schemas.product_schema import ProductOut, UserOut


class CreateOrderIn(BaseModel):
    payment_method: str = Field(..., min_length=1, max_length=50)
    shipping_address: Optional[str] = None
    notes: Optional[str] = None


# Typed partial updates: an order only ever changes these two fields.
# Values are validated by the service so callers get InvalidStatusError.
class OrderStatusUpdate(BaseModel):
    status: str


class PaymentStatusUpdate(BaseModel):
    payment_status: str


class OrderItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    product_id: int
    quantity: int
    price_cents: int
    subtotal_cents: int
    product: Optional[ProductOut] = None


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    order_number: str
    user_id: int
    total_cents: int
    status: str
    payment_method: Optional[str] = None
    payment_status: str
    shipping_address: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    user: Optional[UserOut] = None
    items: List[OrderItemOut] = []
