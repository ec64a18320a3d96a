# docintel/schemas/__init__.py
from docintel.schemas.state import (
    AIEngine, AIStatus, Role, Plan, Period, UsageKind,
    DocumentFile, Folder, Usage, ApiKeys, OrganizationSettings, Organization,
    EngineUsage, MonthlyDataPoint, TopFile, Analytics, ChatUsage, ChatMessage
)
from docintel.schemas.api import (
    FileCreate, FolderCreate, CurrentFolderUpdate, UsageUpdate,
    ChatMessageCreate, ChatSendRequest, ChatSendResponse, AnalyticsResponse,
    AIProxyRequest, AIProxyResponse, HealthCheck
)

__all__ = [
    # Types
    "AIEngine", "AIStatus", "Role", "Plan", "Period", "UsageKind",
    # State
    "DocumentFile", "Folder", "Usage", "ApiKeys", "OrganizationSettings",
    "Organization", "EngineUsage", "MonthlyDataPoint", "TopFile", "Analytics",
    "ChatUsage", "ChatMessage",
    # API
    "FileCreate", "FolderCreate", "CurrentFolderUpdate", "UsageUpdate",
    "ChatMessageCreate", "ChatSendRequest", "ChatSendResponse", "AnalyticsResponse",
    "AIProxyRequest", "AIProxyResponse", "HealthCheck"
]
