"""
Base AI Provider - Abstract Interface
Vibe Writer - Multi-Provider Support

Every vendor adapter honours one contract:

    fragments = await provider.stream(api_key, model_id, messages)
    async for text in fragments:
        ...

Awaiting ``stream`` validates the request and opens the upstream stream, so
bad input or a refused connection fails there. Anything that goes wrong
after that is raised from the iteration itself.
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any, AsyncIterator, Tuple
from dataclasses import dataclass
from enum import Enum

from config.logging_config import get_logger

logger = get_logger(__name__)


class AIProviderType(str, Enum):
    """Supported AI Providers (closed set)"""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    DEEPSEEK = "deepseek"
    GLM = "glm"
    MINIMAX = "minimax"
    QWEN = "qwen"


MESSAGE_ROLES = ("system", "user", "assistant")


@dataclass
class AIMessage:
    """Unified message format across providers"""
    role: str  # "system", "user", "assistant"
    content: str

    def __post_init__(self):
        if self.role not in MESSAGE_ROLES:
            raise ValueError(f"Unknown message role: {self.role}")

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class StreamRequest:
    """One upstream call: who to ask, with which model and key, and what."""
    provider: AIProviderType
    model_id: str
    api_key: str
    messages: List[AIMessage]

    def __repr__(self) -> str:
        # Never leak the key through logs or tracebacks
        return (
            f"StreamRequest(provider={self.provider.value!r}, "
            f"model_id={self.model_id!r}, messages={len(self.messages)})"
        )


# Precondition failures: the request itself was unusable
REQUEST_ERROR_CODES = frozenset({
    "missing_api_key",
    "missing_model",
    "empty_messages",
    "no_conversation_turns",
    "unsupported_provider",
})


class AIProviderError(Exception):
    """Failure tagged with the vendor that produced it."""

    def __init__(
        self,
        provider: AIProviderType,
        message: str,
        cause: Optional[BaseException] = None,
        code: str = "provider_error",
    ):
        super().__init__(message)
        self.provider = provider
        self.message = message
        self.cause = cause
        self.code = code

    @property
    def is_request_error(self) -> bool:
        """True when the call was rejected before reaching the vendor."""
        return self.code in REQUEST_ERROR_CODES

    def __str__(self) -> str:
        return self.message


def split_system_message(
    messages: List[AIMessage]
) -> Tuple[Optional[str], List[AIMessage]]:
    """Separate the (unique, leading) system instruction from the turns."""
    system_prompt = None
    conversation = []
    for msg in messages:
        if msg.role == "system":
            if system_prompt is None:
                system_prompt = msg.content
            continue
        conversation.append(msg)
    return system_prompt, conversation


class BaseAIProvider(ABC):
    """
    Abstract base class for AI providers.

    Subclasses supply the vendor specifics (client construction, payload
    shape, how to open the stream and how to read text out of it); the
    validation, error tagging and client lifecycle are shared.
    """

    MODELS: Dict[str, str] = {}
    DEFAULT_MODEL: str = ""
    DISPLAY_NAME: str = ""

    @property
    @abstractmethod
    def provider_type(self) -> AIProviderType:
        """Return the provider type"""
        pass

    @property
    def supported_models(self) -> List[str]:
        """Return list of known models (other ids are passed through)"""
        return list(self.MODELS.keys())

    @abstractmethod
    def _create_client(self, api_key: str) -> Any:
        """Build the vendor SDK client for one call"""
        pass

    @abstractmethod
    def _build_payload(self, messages: List[AIMessage]) -> Dict[str, Any]:
        """Translate messages into the vendor request body"""
        pass

    @abstractmethod
    async def _open(self, client: Any, model_id: str, payload: Dict[str, Any]) -> Any:
        """Issue the streaming request; returns the vendor stream object"""
        pass

    @abstractmethod
    def _iter_text(self, upstream: Any) -> AsyncIterator[str]:
        """Yield text deltas from the vendor stream object"""
        pass

    def _fail(self, message: str, code: str, cause: Optional[BaseException] = None) -> AIProviderError:
        return AIProviderError(self.provider_type, message, cause=cause, code=code)

    def _check_request(self, api_key: str, model_id: str, messages: List[AIMessage]) -> None:
        """Fail fast before any network traffic."""
        if not api_key or not api_key.strip():
            raise self._fail(
                f"{self.DISPLAY_NAME} API key is required but was not provided",
                "missing_api_key",
            )
        if not model_id or not model_id.strip():
            raise self._fail("Model ID is required but was not provided", "missing_model")
        if not messages:
            raise self._fail("At least one message is required", "empty_messages")

    async def stream(
        self,
        api_key: str,
        model_id: str,
        messages: List[AIMessage],
    ) -> AsyncIterator[str]:
        """
        Open a streaming completion.

        Args:
            api_key: Vendor API key (caller supplied, never defaulted)
            model_id: Vendor model identifier
            messages: Conversation, optional system message first

        Returns:
            Async iterator of non-empty text fragments in arrival order

        Raises:
            AIProviderError: invalid request or the stream could not be opened
        """
        self._check_request(api_key, model_id, messages)
        payload = self._build_payload(messages)

        client = self._create_client(api_key.strip())
        try:
            upstream = await self._open(client, model_id.strip(), payload)
        except Exception as e:
            await self._close_client(client)
            logger.warning(f"{self.provider_type.value}: failed to open stream: {e}")
            raise self._fail(f"Failed to create stream: {e}", "stream_open_failed", e) from e

        logger.debug(f"{self.provider_type.value}: stream opened for model {model_id.strip()}")
        return self._relay(client, upstream)

    async def _relay(self, client: Any, upstream: Any) -> AsyncIterator[str]:
        try:
            async for text in self._iter_text(upstream):
                if text:
                    yield text
        except Exception as e:
            logger.warning(f"{self.provider_type.value}: stream broke: {e}")
            raise self._fail(f"Streaming error: {e}", "stream_failed", e) from e
        finally:
            await self._close_client(client)

    async def _close_client(self, client: Any) -> None:
        close = getattr(client, "close", None)
        if close is None:
            return
        result = close()
        if hasattr(result, "__await__"):
            await result

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} provider={self.provider_type.value}>"
