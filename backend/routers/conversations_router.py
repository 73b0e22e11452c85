# backend/routers/conversations_router.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.session import get_db
from schemas.messages import ConversationCreate, ConversationOut, MessageCreate, MessageOut
from schemas.notifications import ActionResult
from services import messaging_service
from services.identity_service import Actor, get_current_actor

router = APIRouter(prefix="/conversations", tags=["conversations"])

@router.post("/", response_model=ConversationOut)
def start_conversation(body: ConversationCreate, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return messaging_service.start_conversation(db, actor, body.seller_id, body.product_id)

@router.get("/", response_model=List[ConversationOut])
def list_conversations(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return messaging_service.list_conversations(db, actor)

@router.get("/{conversation_id}/messages", response_model=List[MessageOut])
def list_messages(conversation_id: str, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return messaging_service.list_messages(db, actor, conversation_id)

@router.post("/{conversation_id}/messages", response_model=MessageOut, status_code=201)
def send_message(
    conversation_id: str,
    body: MessageCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    return messaging_service.send_message(db, actor, conversation_id, body.content)

@router.put("/{conversation_id}/read", response_model=ActionResult)
def mark_conversation_read(conversation_id: str, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return ActionResult(affected=messaging_service.mark_conversation_read(db, actor, conversation_id))
