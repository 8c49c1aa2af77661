"""
Qwen Provider - Alibaba DashScope
Vibe Writer - Multi-Provider Support
"""

from .base import AIProviderType
from .openai_provider import OpenAICompatibleProvider


class QwenProvider(OpenAICompatibleProvider):
    """Qwen through DashScope's OpenAI-compatible mode"""

    MODELS = {
        "qwen-plus": "Qwen Plus",
        "qwen-turbo": "Qwen Turbo (Fast)",
    }

    DEFAULT_MODEL = "qwen-plus"
    DISPLAY_NAME = "Qwen"
    BASE_URL = "https://dashscope.aliyuncs.com/compatible-mode/v1"

    @property
    def provider_type(self) -> AIProviderType:
        return AIProviderType.QWEN
