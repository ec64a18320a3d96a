"""
Chat transports
How the chat service reaches an AI engine: in-process through the gateway,
or over HTTP against a deployed gateway. Selected by CHAT_MODE.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from docintel.core.config import settings
from docintel.core.exceptions import GatewayError
from docintel.schemas.api import AIProxyRequest
from docintel.services.llm.gateway import AIGateway, ai_gateway

logger = logging.getLogger(__name__)


class ChatTransport(ABC):

    @abstractmethod
    async def complete(
            self,
            engine: str,
            user_message: str,
            context_info: Optional[str] = None,
            api_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Return ``{content, usage}`` or raise GatewayError"""
        pass


class DirectChatTransport(ChatTransport):
    def __init__(self, gateway: Optional[AIGateway] = None):
        self.gateway = gateway or ai_gateway

    async def complete(
            self,
            engine: str,
            user_message: str,
            context_info: Optional[str] = None,
            api_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        request = AIProxyRequest(
            user_message=user_message,
            context_info=context_info,
            engine=engine,
            api_key=api_key,
        )
        return await self.gateway.complete(request)


class GatewayChatTransport(ChatTransport):
    def __init__(self, url: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url or settings.AI_GATEWAY_URL
        self.transport = transport
        self.timeout = httpx.Timeout(settings.AI_PROXY_TIMEOUT_SECONDS, connect=10.0)

    async def complete(
            self,
            engine: str,
            user_message: str,
            context_info: Optional[str] = None,
            api_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        body = {
            "contextInfo": context_info,
            "userMessage": user_message,
            "engine": engine,
            "apiKey": api_key,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                logger.info(f"📡 Sending chat to gateway: {self.url} engine={engine}")
                response = await client.post(self.url, json=body)
        except httpx.TransportError as e:
            logger.error(f"❌ Gateway connection error: {e}")
            raise GatewayError(
                status_code=503,
                error=f"Connection to {engine.upper()} API failed.",
                error_type="connection_error",
            ) from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not response.is_success:
            raise GatewayError(
                status_code=response.status_code,
                error=data.get("error") or f"Gateway error ({response.status_code})",
                details=data.get("details"),
                error_type=data.get("type"),
            )

        return {"content": data.get("content"), "usage": data.get("usage")}


def create_transport(mode: Optional[str] = None) -> ChatTransport:
    mode = (mode or settings.CHAT_MODE).lower()
    if mode == "direct":
        return DirectChatTransport()
    if mode == "gateway":
        return GatewayChatTransport()
    raise ValueError(f"Unknown chat mode: {mode}")
