# backend/services/messaging_service.py
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from models.conversation_model import Conversation, Message
from models.product_model import Product
from models.user_model import User
from schemas.messages import MessageOut
from services.errors import AuthorizationError, NotFoundError, ValidationError
from services.identity_service import Actor
from services.realtime_service import ChangeFeedHub, change_feed, conversation_channel

logger = logging.getLogger(__name__)


def start_conversation(db: Session, actor: Actor, seller_id: str, product_id: Optional[str] = None) -> Conversation:
    """Get or create the (buyer, seller, product) conversation; the caller is the buyer."""
    if seller_id == actor.user_id:
        raise ValidationError("Cannot open a conversation with yourself")
    if not db.get(User, seller_id):
        raise NotFoundError("Seller not found")
    if product_id is not None:
        p = db.get(Product, product_id)
        if not p or p.seller_id != seller_id:
            raise NotFoundError("Product not found for this seller")

    q = db.query(Conversation).filter(
        Conversation.buyer_id == actor.user_id,
        Conversation.seller_id == seller_id,
    )
    q = q.filter(Conversation.product_id.is_(None)) if product_id is None else q.filter(Conversation.product_id == product_id)
    c = q.first()
    if c:
        return c

    c = Conversation(buyer_id=actor.user_id, seller_id=seller_id, product_id=product_id)
    db.add(c)
    db.commit()
    db.refresh(c)
    return c


def _party_conversation(db: Session, actor: Actor, conversation_id: str) -> Conversation:
    c = db.get(Conversation, conversation_id)
    if not c:
        raise NotFoundError("Conversation not found")
    if not c.has_party(actor.user_id):
        raise AuthorizationError("You are not part of this conversation")
    return c


def list_conversations(db: Session, actor: Actor) -> List[Conversation]:
    return (
        db.query(Conversation)
        .filter(or_(Conversation.buyer_id == actor.user_id, Conversation.seller_id == actor.user_id))
        .order_by(Conversation.last_message_at.desc())
        .all()
    )


def list_messages(db: Session, actor: Actor, conversation_id: str) -> List[Message]:
    c = _party_conversation(db, actor, conversation_id)
    return (
        db.query(Message)
        .filter(Message.conversation_id == c.id)
        .order_by(Message.created_at, Message.id)
        .all()
    )


def send_message(
    db: Session,
    actor: Actor,
    conversation_id: str,
    content: str,
    hub: Optional[ChangeFeedHub] = None,
) -> Message:
    hub = hub or change_feed
    c = _party_conversation(db, actor, conversation_id)
    content = (content or "").strip()
    if not content:
        raise ValidationError("Message cannot be empty")

    m = Message(conversation_id=c.id, sender_id=actor.user_id, content=content, is_read=False)
    db.add(m)
    c.last_message_at = datetime.utcnow()
    db.commit()
    db.refresh(m)

    hub.publish(conversation_channel(c.id), MessageOut.model_validate(m))
    return m


def mark_conversation_read(db: Session, actor: Actor, conversation_id: str) -> int:
    """Mark the other party's messages as read. Returns how many changed."""
    c = _party_conversation(db, actor, conversation_id)
    affected = (
        db.query(Message)
        .filter(
            Message.conversation_id == c.id,
            Message.sender_id != actor.user_id,
            Message.is_read.is_(False),
        )
        .update({Message.is_read: True}, synchronize_session=False)
    )
    db.commit()
    return affected
