"""
OpenAI AI Provider
Провайдер для OpenAI chat completions API
"""
import logging
from typing import Any, Dict, Optional

from docintel.core.config import settings
from docintel.services.llm.providers.base import BaseAIProvider, build_user_content

logger = logging.getLogger(__name__)

NO_RESPONSE = "No response received from OpenAI"


class OpenAIProvider(BaseAIProvider):
    name = "openai"
    display_name = "OpenAI"
    system_prompt = (
        "You are an AI assistant specialized in document analysis. You can analyze documents, "
        "extract information, and answer questions about their content. Provide helpful, "
        "accurate, and detailed responses based on the document context provided."
    )

    @property
    def endpoint(self) -> str:
        return settings.OPENAI_API_URL

    def build_payload(self, context_info: Optional[str], user_message: str) -> Dict[str, Any]:
        return {
            "model": settings.OPENAI_MODEL,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": build_user_content(context_info, user_message)},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    def extract_error_message(self, data: Dict[str, Any]) -> Optional[str]:
        error = data.get("error")
        return error.get("message") if isinstance(error, dict) else None

    def parse_response(self, data: Any) -> Dict[str, Any]:
        content = None
        usage = None
        if isinstance(data, dict):
            usage = data.get("usage") or None
            choices = data.get("choices") or []
            if choices and isinstance(choices[0], dict):
                content = (choices[0].get("message") or {}).get("content")

        return {
            "content": content or NO_RESPONSE,
            "usage": usage,
        }


openai_provider = OpenAIProvider()
