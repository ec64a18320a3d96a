"""
Base AI Provider Interface
Базовый интерфейс для всех провайдеров AI-прокси
"""
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from docintel.core.config import settings
from docintel.core.exceptions import GatewayError
from docintel.observability.metrics import metrics

logger = logging.getLogger(__name__)


def build_user_content(context_info: Optional[str], user_message: str) -> str:
    if context_info:
        return f"Context: {context_info}\n\nQuestion: {user_message}"
    return user_message


class BaseAIProvider(ABC):
    """Один upstream-провайдер: формат запроса, разбор ответа и ошибок"""

    name: str
    display_name: str
    system_prompt: str
    temperature: float = 0.7
    max_tokens: int = 1500

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        # transport is swapped for httpx.MockTransport in tests
        self.transport = transport

    @property
    @abstractmethod
    def endpoint(self) -> str:
        pass

    @property
    def env_api_key(self) -> str:
        """Server-held fallback key, read from settings on every call"""
        return getattr(settings, f"{self.name.upper()}_API_KEY", "")

    @abstractmethod
    def build_payload(self, context_info: Optional[str], user_message: str) -> Dict[str, Any]:
        pass

    def build_headers(self, api_key: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }

    @abstractmethod
    def extract_error_message(self, data: Dict[str, Any]) -> Optional[str]:
        pass

    @abstractmethod
    def parse_response(self, data: Any) -> Dict[str, Any]:
        """Normalize a successful upstream body to ``{content, usage}``"""
        pass

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(settings.AI_PROXY_TIMEOUT_SECONDS, connect=10.0),
            transport=self.transport,
        )

    async def complete(
            self,
            api_key: str,
            user_message: str,
            context_info: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload = self.build_payload(context_info, user_message)

        logger.info(f"📡 Making request to {self.display_name} API...")
        started = time.perf_counter()
        async with self._client() as client:
            response = await client.post(
                self.endpoint,
                json=payload,
                headers=self.build_headers(api_key),
            )
        metrics.observe_ms("ai_proxy_upstream_ms", (time.perf_counter() - started) * 1000, engine=self.name)
        logger.info(f"{self.display_name} API response status: {response.status_code}")

        if not response.is_success:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {}
            message = self.extract_error_message(error_data) if isinstance(error_data, dict) else None
            logger.error(f"❌ {self.display_name} API error: {error_data}")
            raise GatewayError(
                status_code=response.status_code,
                error=f"{self.display_name} API error ({response.status_code}): {message or 'Unknown error'}",
                details=error_data,
            )

        return self.parse_response(response.json())
