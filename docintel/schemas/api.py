# docintel/schemas/api.py
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from docintel.schemas.state import (
    AIEngine, AIStatus, Analytics, CamelModel, ChatMessage, Role, UsageKind
)


class FileCreate(CamelModel):
    """Upload request; id and timestamps are allocated server-side when absent."""
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    type: str
    size: int = Field(..., ge=0)
    folder_id: str = "root"
    uploaded_by: str = "1"
    tags: List[str] = Field(default_factory=list)
    ai_status: AIStatus = "pending"
    ai_engine: Optional[AIEngine] = None
    category: Optional[str] = None
    summary: Optional[str] = None
    preview_url: Optional[str] = None
    download_url: str = ""


class FolderCreate(CamelModel):
    name: str = Field(..., min_length=1)
    parent_id: Optional[str] = None


class CurrentFolderUpdate(CamelModel):
    folder_id: Optional[str] = None


class UsageUpdate(CamelModel):
    kind: UsageKind
    amount: int


class ChatMessageCreate(CamelModel):
    id: Optional[str] = None
    content: str
    role: Role
    file_id: Optional[str] = None
    ai_engine: AIEngine


class ChatSendRequest(CamelModel):
    message: str = Field(..., min_length=1, max_length=10000)
    engine: AIEngine = "qwen"
    folder_id: Optional[str] = None
    file_id: Optional[str] = None


class ChatSendResponse(CamelModel):
    user_message: ChatMessage
    reply: ChatMessage


class AnalyticsResponse(Analytics):
    ai_engine_usage_percent: Dict[str, float] = Field(default_factory=dict)


class AIProxyRequest(CamelModel):
    messages: Optional[List[Dict[str, Any]]] = None
    context_info: Optional[str] = None
    user_message: str
    engine: Optional[str] = None
    api_key: Optional[str] = None


class AIProxyResponse(BaseModel):
    content: Optional[str] = None
    usage: Optional[Dict[str, Any]] = None


class HealthCheck(BaseModel):
    status: str = "OK"
    timestamp: str
