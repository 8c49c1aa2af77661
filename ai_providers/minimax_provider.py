"""
MiniMax Provider
Vibe Writer - Multi-Provider Support
"""

from .base import AIProviderType
from .openai_provider import OpenAICompatibleProvider


class MiniMaxProvider(OpenAICompatibleProvider):
    """MiniMax through its OpenAI-compatible endpoint"""

    MODELS = {
        "MiniMax-M1": "MiniMax M1",
        "MiniMax-Text-01": "MiniMax Text-01",
    }

    DEFAULT_MODEL = "MiniMax-M1"
    DISPLAY_NAME = "MiniMax"
    BASE_URL = "https://api.minimaxi.chat/v1"

    @property
    def provider_type(self) -> AIProviderType:
        return AIProviderType.MINIMAX
