"""
Chat endpoints
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from docintel.api.dependencies import get_chat_service, get_store
from docintel.schemas import ChatMessage, ChatMessageCreate, ChatSendRequest, ChatSendResponse
from docintel.services.chat import ChatService
from docintel.state.store import DataStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/messages", response_model=List[ChatMessage])
def list_messages(store: DataStore = Depends(get_store)):
    return store.chat_messages


@router.post("/messages", response_model=ChatMessage, status_code=status.HTTP_201_CREATED)
def add_message(message_in: ChatMessageCreate, store: DataStore = Depends(get_store)):
    """Record a chat turn; user turns count against usage"""
    data = message_in.model_dump(exclude={"id"})
    message = ChatMessage(id=message_in.id or store.new_id(), **data)
    return store.add_chat_message(message)


@router.post("/send", response_model=ChatSendResponse)
async def send_message(
        request: ChatSendRequest,
        chat_service: ChatService = Depends(get_chat_service)
):
    """
    Ask the selected engine about the selected folder and record both turns
    """
    user_message, reply = await chat_service.send(
        message=request.message,
        engine=request.engine,
        folder_id=request.folder_id,
        file_id=request.file_id,
    )
    return ChatSendResponse(user_message=user_message, reply=reply)
