from typing import Optional

from pydantic import BaseModel, ConfigDict


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    username: str
    full_name: Optional[str] = None


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    user_id: int
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    condition: Optional[str] = None
    price_cents: int
    status: str
    image_url: Optional[str] = None
    is_active: bool
    user: Optional[UserOut] = None
