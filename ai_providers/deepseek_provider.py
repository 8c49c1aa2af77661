"""
DeepSeek AI Provider
Vibe Writer - Multi-Provider Support

DeepSeek uses OpenAI-compatible API format.
"""

from .base import AIProviderType
from .openai_provider import OpenAICompatibleProvider


class DeepSeekProvider(OpenAICompatibleProvider):
    """
    DeepSeek AI Provider

    Supports:
    - DeepSeek-Chat (V3)
    - DeepSeek-Reasoner (R1)
    - Streaming
    """

    MODELS = {
        "deepseek-chat": "DeepSeek Chat (V3)",
        "deepseek-reasoner": "DeepSeek Reasoner (R1)",
    }

    DEFAULT_MODEL = "deepseek-chat"
    DISPLAY_NAME = "DeepSeek"
    BASE_URL = "https://api.deepseek.com"

    @property
    def provider_type(self) -> AIProviderType:
        return AIProviderType.DEEPSEEK
