from typing import List

from fastapi import APIRouter, Depends, status

from careconnect.models import User
from careconnect.schemas import ConversationOut, MessageIn, MessageOut
from careconnect.security import get_current_user
from careconnect.services import chat_service
from careconnect.utils.ids import to_oid

router = APIRouter(prefix="/api", tags=["chat"])


@router.get("/chat", response_model=List[ConversationOut])
async def list_conversations(current: User = Depends(get_current_user)):
    return await chat_service.list_conversations(current)


@router.get("/chat/{chat_id}", response_model=List[MessageOut])
async def get_messages(chat_id: str, current: User = Depends(get_current_user)):
    """Messages of a chat, oldest first."""
    chat = await chat_service.resolve_chat(chat_id, current)
    return await chat_service.list_messages(chat)


@router.post("/chat/{chat_id}", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
async def send_message(chat_id: str, payload: MessageIn, current: User = Depends(get_current_user)):
    chat = await chat_service.resolve_chat(chat_id, current)
    return await chat_service.send_message(chat, current, payload.message)


@router.patch("/chat/{chat_id}/read")
async def mark_chat_read(chat_id: str, current: User = Depends(get_current_user)):
    chat = await chat_service.resolve_chat(chat_id, current)
    await chat_service.mark_read(chat, current)
    return {"ok": True}


@router.get("/messages/{message_id}", response_model=MessageOut)
async def get_message(message_id: str, current: User = Depends(get_current_user)):
    return await chat_service.get_message_for_party(current, to_oid(message_id, "message ID"))
