"""
AI Provider Dispatcher
Vibe Writer - Multi-Provider Support

Selects exactly one adapter per request from a closed registry. There is
no fallback to another vendor and no retry: whatever the adapter raises is
what the caller gets.
"""

from typing import Optional, Dict, List, Type, AsyncIterator
from dataclasses import dataclass

from config.logging_config import get_logger
from .base import BaseAIProvider, AIProviderType, AIProviderError, StreamRequest
from .openai_provider import OpenAIProvider
from .claude_provider import ClaudeProvider
from .deepseek_provider import DeepSeekProvider
from .glm_provider import GLMProvider
from .minimax_provider import MiniMaxProvider
from .qwen_provider import QwenProvider

logger = get_logger(__name__)


@dataclass
class ProviderInfo:
    """Information about an AI provider"""
    type: AIProviderType
    name: str
    description: str
    models: Dict[str, str]
    default_model: str


# Registry of all available providers
PROVIDER_REGISTRY: Dict[AIProviderType, Type[BaseAIProvider]] = {
    AIProviderType.OPENAI: OpenAIProvider,
    AIProviderType.ANTHROPIC: ClaudeProvider,
    AIProviderType.DEEPSEEK: DeepSeekProvider,
    AIProviderType.GLM: GLMProvider,
    AIProviderType.MINIMAX: MiniMaxProvider,
    AIProviderType.QWEN: QwenProvider,
}

# Provider information
PROVIDER_INFO: Dict[AIProviderType, ProviderInfo] = {
    AIProviderType.OPENAI: ProviderInfo(
        type=AIProviderType.OPENAI,
        name="OpenAI GPT",
        description="GPT-4o - Versatile general-purpose writer",
        models=OpenAIProvider.MODELS,
        default_model=OpenAIProvider.DEFAULT_MODEL,
    ),
    AIProviderType.ANTHROPIC: ProviderInfo(
        type=AIProviderType.ANTHROPIC,
        name="Anthropic Claude",
        description="Claude - Nuanced long-form prose",
        models=ClaudeProvider.MODELS,
        default_model=ClaudeProvider.DEFAULT_MODEL,
    ),
    AIProviderType.DEEPSEEK: ProviderInfo(
        type=AIProviderType.DEEPSEEK,
        name="DeepSeek",
        description="DeepSeek V3 - Cost-effective, strong Chinese writing",
        models=DeepSeekProvider.MODELS,
        default_model=DeepSeekProvider.DEFAULT_MODEL,
    ),
    AIProviderType.GLM: ProviderInfo(
        type=AIProviderType.GLM,
        name="Zhipu GLM",
        description="GLM - Zhipu AI general models",
        models=GLMProvider.MODELS,
        default_model=GLMProvider.DEFAULT_MODEL,
    ),
    AIProviderType.MINIMAX: ProviderInfo(
        type=AIProviderType.MINIMAX,
        name="MiniMax",
        description="MiniMax - Long-context text models",
        models=MiniMaxProvider.MODELS,
        default_model=MiniMaxProvider.DEFAULT_MODEL,
    ),
    AIProviderType.QWEN: ProviderInfo(
        type=AIProviderType.QWEN,
        name="Alibaba Qwen",
        description="Qwen - DashScope hosted models",
        models=QwenProvider.MODELS,
        default_model=QwenProvider.DEFAULT_MODEL,
    ),
}


class ProviderDispatcher:
    """
    Routes a StreamRequest to the adapter registered for its provider.

    Usage:
        dispatcher = ProviderDispatcher()
        fragments = await dispatcher.stream(StreamRequest(
            provider=AIProviderType.DEEPSEEK,
            model_id="deepseek-chat",
            api_key=key,
            messages=[AIMessage(role="user", content="Hello")],
        ))
        async for text in fragments:
            print(text, end="")
    """

    def __init__(self, registry: Optional[Dict[AIProviderType, Type[BaseAIProvider]]] = None):
        self._registry = registry if registry is not None else PROVIDER_REGISTRY
        self._adapters: Dict[AIProviderType, BaseAIProvider] = {}

    def get_adapter(self, provider: AIProviderType) -> BaseAIProvider:
        """Get the (stateless, cached) adapter for a provider"""
        provider_class = self._registry.get(provider)
        if provider_class is None:
            raise AIProviderError(
                provider,
                f"Unsupported provider: {getattr(provider, 'value', provider)}",
                code="unsupported_provider",
            )
        if provider not in self._adapters:
            self._adapters[provider] = provider_class()
        return self._adapters[provider]

    async def stream(self, request: StreamRequest) -> AsyncIterator[str]:
        """Open the provider stream for one request"""
        adapter = self.get_adapter(request.provider)
        logger.info(
            f"Dispatching to {request.provider.value} "
            f"(model={request.model_id}, messages={len(request.messages)})"
        )
        return await adapter.stream(request.api_key, request.model_id, request.messages)

    @staticmethod
    def list_providers() -> List[ProviderInfo]:
        """List all available providers"""
        return list(PROVIDER_INFO.values())

    @staticmethod
    def get_provider_info(provider_type: AIProviderType) -> ProviderInfo:
        """Get information about a specific provider"""
        return PROVIDER_INFO[provider_type]


_default_dispatcher: Optional[ProviderDispatcher] = None


def get_dispatcher() -> ProviderDispatcher:
    """Get or create the process-wide dispatcher"""
    global _default_dispatcher
    if _default_dispatcher is None:
        _default_dispatcher = ProviderDispatcher()
    return _default_dispatcher


async def stream_generate(request: StreamRequest) -> AsyncIterator[str]:
    """Stream text generation from any supported provider"""
    return await get_dispatcher().stream(request)


def default_model_for(provider: AIProviderType) -> str:
    """Default model id shown for a provider"""
    return PROVIDER_INFO[provider].default_model
