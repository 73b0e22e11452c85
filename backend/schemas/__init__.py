# backend/schemas/__init__.py

# orders
from .orders import (
    OrderCreate, OrderItemIn, OrderItemResponse, OrderResponse,
    OrderStatusUpdate, OrderStatusUpdateResult, OrderStatusEventOut,
)

# notifications
from .notifications import NotificationOut, NotificationType, UnreadCount, ActionResult

# tracking
from .tracking import TrackingStep, TrackingView

# messaging
from .messages import ConversationCreate, ConversationOut, MessageCreate, MessageOut

# companies
from .companies import (
    CompanyProfileIn, CompanyProfileOut, VerificationStatusUpdate, VerificationUpdateResult,
)

__all__ = [
    # orders
    "OrderCreate", "OrderItemIn", "OrderItemResponse", "OrderResponse",
    "OrderStatusUpdate", "OrderStatusUpdateResult", "OrderStatusEventOut",
    # notifications
    "NotificationOut", "NotificationType", "UnreadCount", "ActionResult",
    # tracking
    "TrackingStep", "TrackingView",
    # messaging
    "ConversationCreate", "ConversationOut", "MessageCreate", "MessageOut",
    # companies
    "CompanyProfileIn", "CompanyProfileOut", "VerificationStatusUpdate", "VerificationUpdateResult",
]
