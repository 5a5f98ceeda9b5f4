from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from marketplace.schemas.product_schema import ProductOut


class AddItemIn(BaseModel):
    product_id: int
    quantity: int = 1


class UpdateQuantityIn(BaseModel):
    # the only mutable field of a cart line
    quantity: int


class CartItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    user_id: int
    product_id: int
    quantity: int
    created_at: Optional[datetime] = None
    product: Optional[ProductOut] = None


class CartOut(BaseModel):
    items: List[CartItemOut]
    total_cents: int
