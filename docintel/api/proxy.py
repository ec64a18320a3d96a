# docintel/api/proxy.py
"""
AI proxy endpoints
Тонкий прокси к Qwen / OpenAI с единым форматом ответа
"""
import logging

from fastapi import APIRouter

from docintel.schemas.api import AIProxyRequest, AIProxyResponse
from docintel.services.llm.gateway import ai_gateway

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/ai-proxy", response_model=AIProxyResponse)
async def ai_proxy(request: AIProxyRequest):
    """Proxy to the engine named in the body (defaults to DEFAULT_AI_ENGINE)"""
    return await ai_gateway.complete(request)


@router.post("/qwen-proxy", response_model=AIProxyResponse)
async def qwen_proxy(request: AIProxyRequest):
    return await ai_gateway.complete(request, engine="qwen")


@router.post("/openai-proxy", response_model=AIProxyResponse)
async def openai_proxy(request: AIProxyRequest):
    return await ai_gateway.complete(request, engine="openai")
