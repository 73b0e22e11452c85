# backend/schemas/orders.py
from typing import List, Optional, NewType
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, constr

AddressStr = NewType("AddressStr", constr(strip_whitespace=True, min_length=1, max_length=1000))

class OrderItemIn(BaseModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(gt=0)

class OrderCreate(BaseModel):
    shipping_address: AddressStr
    items: List[OrderItemIn] = Field(min_length=1)

class OrderStatusUpdate(BaseModel):
    status: str
    tracking_number: Optional[str] = Field(default=None, max_length=100)
    expected_version: Optional[int] = Field(default=None, ge=1)

class OrderItemResponse(BaseModel):
    id: str
    product_id: str
    product_name: Optional[str] = None
    seller_id: str
    quantity: int
    price: float
    line_total: float

class OrderResponse(BaseModel):
    """Full order snapshot, also what the realtime channel pushes."""
    id: str
    short_id: str
    buyer_id: str
    status: str
    total_amount: float
    shipping_address: str
    tracking_number: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    version: int
    items: List[OrderItemResponse] = []

class OrderStatusUpdateResult(BaseModel):
    changed: bool
    order: OrderResponse

class OrderStatusEventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    order_id: str
    from_status: Optional[str] = None
    status: str
    actor_id: Optional[str] = None
    created_at: datetime
