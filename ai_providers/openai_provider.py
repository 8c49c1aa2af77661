"""
OpenAI Provider - GPT-4o, GPT-4o-mini
Vibe Writer - Multi-Provider Support

Also hosts OpenAICompatibleProvider, the shared adapter for every vendor
that speaks the OpenAI chat-completions protocol at its own base URL.
"""

from typing import Optional, List, Dict, Any, AsyncIterator

from openai import AsyncOpenAI

from config.constants import PROVIDER_MAX_RETRIES
from .base import (
    BaseAIProvider,
    AIProviderType,
    AIMessage,
)


class OpenAICompatibleProvider(BaseAIProvider):
    """
    Adapter for the OpenAI chat-completions streaming protocol.

    The whole message list is sent verbatim, role for role; the system
    message travels as an ordinary ``system`` turn.
    """

    BASE_URL: Optional[str] = None  # None = the SDK's default endpoint

    def _create_client(self, api_key: str) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=api_key,
            base_url=self.BASE_URL,
            max_retries=PROVIDER_MAX_RETRIES,
        )

    def _build_payload(self, messages: List[AIMessage]) -> Dict[str, Any]:
        return {"messages": [msg.to_dict() for msg in messages]}

    async def _open(self, client: AsyncOpenAI, model_id: str, payload: Dict[str, Any]) -> Any:
        return await client.chat.completions.create(
            model=model_id,
            messages=payload["messages"],
            stream=True,
        )

    async def _iter_text(self, upstream: Any) -> AsyncIterator[str]:
        async for chunk in upstream:
            if not chunk.choices:
                continue
            content = chunk.choices[0].delta.content
            if content:
                yield content


class OpenAIProvider(OpenAICompatibleProvider):
    """
    OpenAI GPT Provider

    Supports:
    - GPT-4o (recommended)
    - GPT-4o-mini (fast, cost-effective)
    - Streaming
    """

    MODELS = {
        "gpt-4o": "GPT-4o",
        "gpt-4o-mini": "GPT-4o Mini (Fast)",
    }

    DEFAULT_MODEL = "gpt-4o"
    DISPLAY_NAME = "OpenAI"

    @property
    def provider_type(self) -> AIProviderType:
        return AIProviderType.OPENAI
