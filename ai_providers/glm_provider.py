"""
GLM Provider - Zhipu AI
Vibe Writer - Multi-Provider Support
"""

from .base import AIProviderType
from .openai_provider import OpenAICompatibleProvider


class GLMProvider(OpenAICompatibleProvider):
    """Zhipu GLM through its OpenAI-compatible endpoint"""

    MODELS = {
        "glm-4.7": "GLM-4.7",
        "glm-4.5": "GLM-4.5",
        "glm-4.5-air": "GLM-4.5 Air (Fast)",
    }

    DEFAULT_MODEL = "glm-4.7"
    DISPLAY_NAME = "GLM"
    BASE_URL = "https://open.bigmodel.cn/api/coding/paas/v4"

    @property
    def provider_type(self) -> AIProviderType:
        return AIProviderType.GLM
