# docintel/schemas/state.py
"""
Entities held by the local state aggregator.

Python attributes are snake_case; the persisted and HTTP representation uses
camelCase aliases (``uploadsUsed``, ``aiEngine``...).
"""
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

AIStatus = Literal["pending", "processing", "completed", "failed"]
AIEngine = Literal["openai", "docintel", "qwen"]
Role = Literal["user", "assistant"]
Plan = Literal["free", "pro", "enterprise"]
Period = Literal["monthly", "yearly"]
UsageKind = Literal["uploads", "chats", "storage"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}")


def revive_dates(value: Any) -> Any:
    """Recursively turn ISO-8601 date-time strings into datetime objects."""
    if isinstance(value, str):
        if DATE_PATTERN.match(value):
            try:
                return datetime.fromisoformat(value.replace("Z", "+00:00"))
            except ValueError:
                return value
        return value
    if isinstance(value, list):
        return [revive_dates(item) for item in value]
    if isinstance(value, dict):
        return {key: revive_dates(item) for key, item in value.items()}
    return value


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_storage(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class DocumentFile(CamelModel):
    id: str
    name: str
    type: str
    size: int = Field(ge=0)
    folder_id: str = "root"
    uploaded_by: str = "1"
    uploaded_at: datetime = Field(default_factory=utcnow)
    tags: List[str] = Field(default_factory=list)
    ai_status: AIStatus = "pending"
    ai_engine: Optional[AIEngine] = None
    category: Optional[str] = None
    ocr_text: Optional[str] = None
    extracted_data: Optional[Dict[str, Any]] = None
    summary: Optional[str] = None
    preview_url: Optional[str] = None
    download_url: str = ""

    @field_validator("extracted_data", mode="before")
    @classmethod
    def _revive_extracted_dates(cls, value: Any) -> Any:
        # free-form payload: typed datetime fields are parsed by pydantic itself
        return revive_dates(value)


class Folder(CamelModel):
    id: str
    name: str
    parent_id: Optional[str] = None
    path: str
    permissions: Dict[str, List[str]] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)
    created_by: str = "1"


class Usage(CamelModel):
    uploads_used: int = Field(0, ge=0)
    uploads_limit: int = 100
    chats_used: int = Field(0, ge=0)
    chats_limit: int = 50
    storage_used: int = Field(0, ge=0)
    storage_limit: int = 5368709120  # 5GB in bytes
    tokens_used: int = Field(0, ge=0)
    tokens_limit: int = 10000
    requests_made: int = Field(0, ge=0)
    requests_limit: int = 100
    period: Period = "monthly"


class ApiKeys(CamelModel):
    openai: Optional[str] = None
    qwen: Optional[str] = None
    docintel: Optional[str] = None

    def for_engine(self, engine: str) -> Optional[str]:
        return getattr(self, engine, None) or None


class OrganizationSettings(CamelModel):
    default_ai_engine: str = "qwen"
    enabled_ai_engines: List[str] = Field(default_factory=lambda: ["openai", "docintel", "qwen"])
    api_keys: ApiKeys = Field(default_factory=lambda: ApiKeys(qwen=""))
    language: str = "en"
    retention_days: int = 365
    theme: Optional[str] = "dark"


class Organization(CamelModel):
    id: str = "1"
    name: str = "DocIntel Enterprise"
    plan: Plan = "free"
    usage: Usage = Field(default_factory=Usage)
    settings: OrganizationSettings = Field(default_factory=OrganizationSettings)


class EngineUsage(CamelModel):
    """Raw per-engine counts, not percentages."""
    openai: int = 0
    docintel: int = 0
    qwen: int = 0


class MonthlyDataPoint(CamelModel):
    month: str
    uploads: int = 0
    chats: int = 0
    storage: int = 0


class TopFile(CamelModel):
    name: str
    views: int = 0
    chats: int = 0


class Analytics(CamelModel):
    total_files: int = Field(0, ge=0)
    total_chats: int = Field(0, ge=0)
    total_uploads: int = Field(0, ge=0)
    total_storage: int = Field(0, ge=0)
    tokens_used: int = Field(0, ge=0)
    requests_made: int = Field(0, ge=0)
    monthly_data: List[MonthlyDataPoint] = Field(default_factory=list)
    top_files: List[TopFile] = Field(default_factory=list)
    ai_engine_usage: EngineUsage = Field(default_factory=EngineUsage)


class ChatUsage(CamelModel):
    tokens_used: int
    cost: float


class ChatMessage(CamelModel):
    id: str
    content: str
    role: Role
    timestamp: datetime = Field(default_factory=utcnow)
    file_id: Optional[str] = None
    ai_engine: AIEngine
    usage: Optional[ChatUsage] = None
