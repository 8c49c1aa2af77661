#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Writing Service - server side of every pipeline stage.

Validates a stage request, builds its message list and opens the provider
stream through the dispatcher. Validation failures raise
InputValidationError before any stream is opened; the caller frames the
returned fragments.
"""

from typing import AsyncIterator, List, Optional

from ai_providers import AIMessage, AIProviderType, ProviderDispatcher, StreamRequest, get_dispatcher
from config.logging_config import get_logger
from core.errors import InputValidationError
from core.models import GenerateRequest, ReviewRequest, ReviewStep, ReviseRequest, StageRequest
from core.prompts import (
    REVIEW_SECTION_TITLE,
    REVISE_SECTION_TITLE,
    SOURCE_SECTION_TITLE,
    compose_user_message,
    get_generate_prompt,
    get_review_prompt,
    get_revise_prompt,
    get_system_prompt,
)

logger = get_logger(__name__)


def resolve_provider(value) -> AIProviderType:
    """Turn a provider tag from the wire into the closed enumeration."""
    if isinstance(value, AIProviderType):
        return value
    if value is None or not str(value).strip():
        raise InputValidationError("Provider is required")
    try:
        return AIProviderType(str(value).strip().lower())
    except ValueError:
        raise InputValidationError(f"Unsupported provider: {value}") from None


def build_generate_messages(request: GenerateRequest) -> List[AIMessage]:
    return [
        AIMessage(role="system", content=get_system_prompt()),
        AIMessage(role="user", content=compose_user_message(
            get_generate_prompt(request.config), SOURCE_SECTION_TITLE, request.source_content,
        )),
    ]


def build_review_messages(article: str, step: ReviewStep) -> List[AIMessage]:
    return [
        AIMessage(role="system", content=get_system_prompt()),
        AIMessage(role="user", content=compose_user_message(
            get_review_prompt(step), REVIEW_SECTION_TITLE, article,
        )),
    ]


def build_revise_messages(article: str, instruction: str) -> List[AIMessage]:
    return [
        AIMessage(role="system", content=get_system_prompt()),
        AIMessage(role="user", content=compose_user_message(
            get_revise_prompt(instruction.strip()), REVISE_SECTION_TITLE, article,
        )),
    ]


class WritingService:
    """
    Opens the provider stream for one stage.

    Usage:
        service = WritingService()
        fragments = await service.open_generate(GenerateRequest(...))
        async for text in fragments:
            ...
    """

    def __init__(self, dispatcher: Optional[ProviderDispatcher] = None):
        self.dispatcher = dispatcher or get_dispatcher()

    async def open_generate(self, request: GenerateRequest) -> AsyncIterator[str]:
        if not request.source_content.strip():
            raise InputValidationError("Source content is required")
        self._check_credentials(request)
        return await self._dispatch("generate", request, build_generate_messages(request))

    async def open_review(self, request: ReviewRequest) -> AsyncIterator[str]:
        if not request.article.strip():
            raise InputValidationError("Article to review is required")
        if request.review_step is None:
            raise InputValidationError("Review step is required")
        self._check_credentials(request)
        messages = build_review_messages(request.article, request.review_step)
        return await self._dispatch(f"review:{request.review_step.value}", request, messages)

    async def open_revise(self, request: ReviseRequest) -> AsyncIterator[str]:
        if not request.article.strip():
            raise InputValidationError("Article to revise is required")
        if not request.instruction.strip():
            raise InputValidationError("Revision instruction is required")
        self._check_credentials(request)
        messages = build_revise_messages(request.article, request.instruction)
        return await self._dispatch("revise", request, messages)

    @staticmethod
    def _check_credentials(request: StageRequest) -> None:
        if not request.api_key.strip():
            raise InputValidationError("API key is required")

    async def _dispatch(
        self,
        stage: str,
        request: StageRequest,
        messages: List[AIMessage],
    ) -> AsyncIterator[str]:
        provider = resolve_provider(request.provider)
        logger.info(f"Opening {stage} stream via {provider.value} ({request.model_id or '-'})")
        return await self.dispatcher.stream(StreamRequest(
            provider=provider,
            model_id=request.model_id,
            api_key=request.api_key,
            messages=messages,
        ))
