"""
AI Proxy Gateway
Принимает нормализованный chat-запрос, выбирает провайдера и приводит ответ к {content, usage}
"""
import logging
from typing import Any, Dict, Optional

import httpx

from docintel.core.config import settings
from docintel.core.exceptions import GatewayError
from docintel.observability.metrics import metrics
from docintel.schemas.api import AIProxyRequest
from docintel.services.llm.providers import BaseAIProvider, openai_provider, qwen_provider

logger = logging.getLogger(__name__)


class AIGateway:
    """Stateless: nothing is kept between calls except the provider registry."""

    def __init__(self, providers: Optional[Dict[str, BaseAIProvider]] = None):
        self.providers = providers or {
            qwen_provider.name: qwen_provider,
            openai_provider.name: openai_provider,
        }

    def resolve_provider(self, engine: str) -> BaseAIProvider:
        provider = self.providers.get(engine)
        if provider is None:
            names = " or ".join(f'"{name}"' for name in self.providers)
            raise GatewayError(status_code=400, error=f"Unsupported AI engine. Please use {names}.")
        return provider

    def resolve_api_key(self, provider: BaseAIProvider, api_key: Optional[str]) -> str:
        key = api_key or provider.env_api_key
        if not key:
            raise GatewayError(
                status_code=500,
                error=f"{provider.display_name} API key is not configured. Please add your API key in Settings.",
            )
        return key

    async def complete(self, request: AIProxyRequest, engine: Optional[str] = None) -> Dict[str, Any]:
        engine = engine or request.engine or settings.DEFAULT_AI_ENGINE
        status = 500
        try:
            provider = self.resolve_provider(engine)
            api_key = self.resolve_api_key(provider, request.api_key)
            result = await provider.complete(
                api_key=api_key,
                user_message=request.user_message,
                context_info=request.context_info,
            )
            status = 200
            return result
        except GatewayError as e:
            status = e.status_code
            raise
        except httpx.TransportError as e:
            status = 503
            logger.error(f"❌ Connection to {engine} API failed: {type(e).__name__}: {e}")
            display_name = self.providers[engine].display_name if engine in self.providers else "AI"
            raise GatewayError(
                status_code=503,
                error=(
                    f"Connection to {display_name} API failed. This could be due to network issues "
                    "or server problems. Please try again in a few moments."
                ),
                error_type="connection_error",
            ) from e
        except Exception as e:
            logger.exception(f"❌ AI proxy error: {e}")
            raise GatewayError(
                status_code=500,
                error="Internal server error while processing your request",
                details=str(e),
            ) from e
        finally:
            label = engine if engine in self.providers else "unsupported"
            metrics.inc("ai_proxy_requests_total", engine=label, status=status)


# Singleton instance
ai_gateway = AIGateway()
