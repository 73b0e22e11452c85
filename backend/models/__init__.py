# backend/models/__init__.py
from .user_model import User, UserRole
from .product_model import Product
from .order_model import Order, ORDER_STATUS_VALUES
from .order_item_model import OrderItem
from .order_status_event_model import OrderStatusEvent
from .notification_model import Notification
from .email_outbox_model import EmailOutbox
from .conversation_model import Conversation, Message
from .company_profile_model import CompanyProfile, VERIFICATION_STATUS_VALUES
