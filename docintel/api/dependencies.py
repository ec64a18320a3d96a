# docintel/api/dependencies.py
from typing import Optional

from fastapi import Depends, Header

from docintel.core.config import settings
from docintel.services.chat import ChatService
from docintel.services.credentials import StoreCredentialProvider
from docintel.services.llm.transport import create_transport
from docintel.state.registry import state_registry
from docintel.state.store import DataStore


async def get_session_id(x_session_id: Optional[str] = Header(None)) -> str:
    """
    Session the request belongs to (the X-Session-Id header)
    """
    return x_session_id or settings.DEFAULT_SESSION_ID


def get_store(session_id: str = Depends(get_session_id)) -> DataStore:
    return state_registry.get(session_id)


def get_chat_service(store: DataStore = Depends(get_store)) -> ChatService:
    return ChatService(
        store=store,
        transport=create_transport(),
        credentials=StoreCredentialProvider(store),
    )
