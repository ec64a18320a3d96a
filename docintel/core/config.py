# docintel/core/config.py

from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Основные
    HOST: str = Field("0.0.0.0")
    PORT: int = Field(3001)
    ALLOWED_ORIGINS: str = Field("*")

    # Upstream AI providers
    QWEN_API_KEY: str = Field("")
    QWEN_API_URL: str = Field(
        "https://dashscope.aliyuncs.com/api/v1/services/aigc/text-generation/generation"
    )
    QWEN_MODEL: str = Field("qwen-plus")
    OPENAI_API_KEY: str = Field("")
    OPENAI_API_URL: str = Field("https://api.openai.com/v1/chat/completions")
    OPENAI_MODEL: str = Field("gpt-4")
    DEFAULT_AI_ENGINE: str = Field("qwen")
    AI_PROXY_TIMEOUT_SECONDS: float = Field(120.0)

    # Chat orchestration: "direct" calls providers in-process, "gateway" goes over HTTP
    CHAT_MODE: str = Field("direct")
    AI_GATEWAY_URL: str = Field("http://localhost:3001/api/ai-proxy")

    # Local state
    STORAGE_BACKEND: str = Field("file")  # memory, file, sql
    STORAGE_DIR: str = Field(".docintel_state")
    DATABASE_URL: str = Field("sqlite:///./docintel.db")
    SIMULATE_AI_PROCESSING: bool = Field(False)
    DEFAULT_SESSION_ID: str = Field("default")
    STATE_MAX_SESSIONS: int = Field(1000)  # loaded session stores kept in memory

    # Системные параметры
    LOG_LEVEL: str = Field("INFO")
    LOG_FILE: str = Field("")

    def get_storage_dir(self) -> Path:
        path = Path(self.STORAGE_DIR)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def get_allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


settings = Settings()
