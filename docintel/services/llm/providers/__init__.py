"""
AI Providers
Экспорт всех провайдеров
"""
from docintel.services.llm.providers.base import BaseAIProvider
from docintel.services.llm.providers.qwen import QwenProvider, qwen_provider
from docintel.services.llm.providers.openai import OpenAIProvider, openai_provider

__all__ = [
    "BaseAIProvider",
    "QwenProvider",
    "OpenAIProvider",
    "qwen_provider",
    "openai_provider",
]
