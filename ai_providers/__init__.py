"""
AI Providers Package
Vibe Writer - Multi-Provider Support

Supports:
- OpenAI GPT (gpt-4o, gpt-4o-mini)
- Anthropic Claude (claude-sonnet-4-5)
- DeepSeek (deepseek-chat, deepseek-reasoner)
- Zhipu GLM (glm-4.7, glm-4.5, glm-4.5-air)
- MiniMax (MiniMax-M1, MiniMax-Text-01)
- Alibaba Qwen (qwen-plus, qwen-turbo)

Usage:
    from ai_providers import stream_generate, StreamRequest, AIMessage, AIProviderType

    fragments = await stream_generate(StreamRequest(
        provider=AIProviderType.OPENAI,
        model_id="gpt-4o",
        api_key=api_key,
        messages=[
            AIMessage(role="system", content="You are a helpful writer."),
            AIMessage(role="user", content="Write a short story."),
        ],
    ))
    async for text in fragments:
        print(text, end="")
"""

from .base import (
    BaseAIProvider,
    AIProviderType,
    AIProviderError,
    AIMessage,
    StreamRequest,
)

from .openai_provider import OpenAIProvider, OpenAICompatibleProvider
from .claude_provider import ClaudeProvider
from .deepseek_provider import DeepSeekProvider
from .glm_provider import GLMProvider
from .minimax_provider import MiniMaxProvider
from .qwen_provider import QwenProvider

from .manager import (
    ProviderDispatcher,
    ProviderInfo,
    PROVIDER_REGISTRY,
    PROVIDER_INFO,
    get_dispatcher,
    stream_generate,
    default_model_for,
)

__all__ = [
    # Base classes
    "BaseAIProvider",
    "AIProviderType",
    "AIProviderError",
    "AIMessage",
    "StreamRequest",

    # Providers
    "OpenAIProvider",
    "OpenAICompatibleProvider",
    "ClaudeProvider",
    "DeepSeekProvider",
    "GLMProvider",
    "MiniMaxProvider",
    "QwenProvider",

    # Dispatcher
    "ProviderDispatcher",
    "ProviderInfo",
    "PROVIDER_REGISTRY",
    "PROVIDER_INFO",
    "get_dispatcher",
    "stream_generate",
    "default_model_for",
]

__version__ = "1.0.0"
