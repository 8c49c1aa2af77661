"""
Claude AI Provider - Anthropic
Vibe Writer - Multi-Provider Support
"""

from typing import List, Dict, Any, AsyncIterator

from anthropic import AsyncAnthropic

from config.constants import PROVIDER_MAX_TOKENS, PROVIDER_MAX_RETRIES
from .base import (
    BaseAIProvider,
    AIProviderType,
    AIMessage,
    split_system_message,
)


class ClaudeProvider(BaseAIProvider):
    """
    Anthropic Claude AI Provider

    The Messages API takes the system instruction as a separate field, and
    needs at least one user/assistant turn besides it.
    """

    MODELS = {
        "claude-sonnet-4-5-20250514": "Claude Sonnet 4.5",
    }

    DEFAULT_MODEL = "claude-sonnet-4-5-20250514"
    DISPLAY_NAME = "Anthropic"

    @property
    def provider_type(self) -> AIProviderType:
        return AIProviderType.ANTHROPIC

    def _create_client(self, api_key: str) -> AsyncAnthropic:
        return AsyncAnthropic(api_key=api_key, max_retries=PROVIDER_MAX_RETRIES)

    def _build_payload(self, messages: List[AIMessage]) -> Dict[str, Any]:
        system_prompt, conversation = split_system_message(messages)

        if not conversation:
            raise self._fail(
                "At least one user or assistant message is required",
                "no_conversation_turns",
            )

        payload = {"messages": [msg.to_dict() for msg in conversation]}
        if system_prompt:
            payload["system"] = system_prompt
        return payload

    async def _open(self, client: AsyncAnthropic, model_id: str, payload: Dict[str, Any]) -> Any:
        return await client.messages.create(
            model=model_id,
            max_tokens=PROVIDER_MAX_TOKENS,
            stream=True,
            **payload
        )

    async def _iter_text(self, upstream: Any) -> AsyncIterator[str]:
        async for event in upstream:
            if event.type != "content_block_delta":
                continue
            if getattr(event.delta, "type", None) == "text_delta":
                yield event.delta.text
