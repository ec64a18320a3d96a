"""
Qwen AI Provider
Провайдер для DashScope text-generation API
"""
import logging
from typing import Any, Dict, Optional

from docintel.core.config import settings
from docintel.core.exceptions import GatewayError
from docintel.services.llm.providers.base import BaseAIProvider, build_user_content

logger = logging.getLogger(__name__)


class QwenProvider(BaseAIProvider):
    name = "qwen"
    display_name = "Qwen"
    system_prompt = (
        "You are an AI assistant specialized in document analysis and OCR. You can analyze "
        "documents, extract information, and answer questions about their content. Provide "
        "helpful, accurate, and detailed responses based on the document context provided."
    )

    @property
    def endpoint(self) -> str:
        return settings.QWEN_API_URL

    def build_payload(self, context_info: Optional[str], user_message: str) -> Dict[str, Any]:
        return {
            "model": settings.QWEN_MODEL,
            "input": {
                "messages": [
                    {"role": "system", "content": self.system_prompt},
                    {"role": "user", "content": build_user_content(context_info, user_message)},
                ]
            },
            "parameters": {
                "temperature": self.temperature,
                "max_tokens": self.max_tokens,
                "result_format": "message",
            },
        }

    def build_headers(self, api_key: str) -> Dict[str, str]:
        headers = super().build_headers(api_key)
        headers["X-DashScope-SSE"] = "disable"
        return headers

    def extract_error_message(self, data: Dict[str, Any]) -> Optional[str]:
        return data.get("message")

    def parse_response(self, data: Any) -> Dict[str, Any]:
        try:
            message = data["output"]["choices"][0]["message"]
            if not isinstance(message, dict):
                raise TypeError("message")
        except (KeyError, IndexError, TypeError):
            logger.error(f"❌ Invalid response format from Qwen API: {data}")
            raise GatewayError(
                status_code=500,
                error="Invalid response format from Qwen API",
                details=data,
            )

        logger.info("✅ Qwen API response received successfully")
        return {
            "content": message.get("content"),
            "usage": data.get("usage"),
        }


qwen_provider = QwenProvider()
