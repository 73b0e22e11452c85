# backend/schemas/messages.py
from typing import Optional, NewType
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, constr

ContentStr = NewType("ContentStr", constr(max_length=5000))

class ConversationCreate(BaseModel):
    seller_id: str = Field(min_length=1)
    product_id: Optional[str] = None

class ConversationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    buyer_id: str
    seller_id: str
    product_id: Optional[str] = None
    last_message_at: Optional[datetime] = None
    created_at: datetime

class MessageCreate(BaseModel):
    content: ContentStr

class MessageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    conversation_id: str
    sender_id: str
    content: str
    is_read: bool
    created_at: datetime
