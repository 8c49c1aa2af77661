#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Session-scoped pipeline state.

One WritingSession per user/client. It owns the article buffer, the
active stage indicator and the instruction log; nothing here is shared
between sessions.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from ai_providers import AIProviderType, default_model_for
from core.models import ReviewStep, WritingConfig


class PipelineStage(str, Enum):
    """The single active stage; a session with ``stage=None`` is idle"""
    GENERATING = "generating"
    REVIEWING_CONTENT = "reviewing:content"
    REVIEWING_STYLE = "reviewing:style"
    REVIEWING_DETAIL = "reviewing:detail"
    REVISING = "revising"

    @classmethod
    def for_review(cls, step: ReviewStep) -> "PipelineStage":
        return cls(f"reviewing:{ReviewStep(step).value}")

    @property
    def endpoint(self) -> str:
        """Server endpoint that serves this stage"""
        if self is PipelineStage.GENERATING:
            return "generate"
        if self is PipelineStage.REVISING:
            return "revise"
        return "review"

    @property
    def appends(self) -> bool:
        """Generation reveals progressively; every other stage rewrites the buffer"""
        return self is PipelineStage.GENERATING


class InstructionStatus(str, Enum):
    APPLIED = "applied"
    FAILED = "failed"
    PENDING = "pending"  # no article yet; folded into the next generation


@dataclass
class InstructionRecord:
    instruction: str
    status: InstructionStatus
    message: str = ""
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class WritingSession:
    """
    Everything one writer is working on.

    ``article`` is the live buffer: it shows partial text while a stage
    streams. ``committed_article`` only changes when a stage finishes with
    a non-empty result.
    """
    source_content: str = ""
    config: WritingConfig = field(default_factory=WritingConfig)
    provider: AIProviderType = AIProviderType.OPENAI
    model_id: str = ""

    article: str = ""
    committed_article: str = ""
    stage: Optional[PipelineStage] = None
    error: Optional[str] = None
    instructions: List[InstructionRecord] = field(default_factory=list)

    def __post_init__(self):
        self.provider = AIProviderType(self.provider)
        if not self.model_id:
            self.model_id = default_model_for(self.provider)

    @property
    def is_busy(self) -> bool:
        return self.stage is not None

    def set_provider(self, provider: AIProviderType) -> None:
        """Switch vendor; the model resets to that vendor's default"""
        self.provider = AIProviderType(provider)
        self.model_id = default_model_for(self.provider)

    def append(self, fragment: str) -> None:
        self.article += fragment

    def replace(self, text: str) -> None:
        self.article = text

    def commit(self, text: str) -> None:
        self.article = text
        self.committed_article = text

    def record_instruction(
        self,
        instruction: str,
        status: InstructionStatus,
        message: str = "",
    ) -> InstructionRecord:
        record = InstructionRecord(instruction=instruction, status=status, message=message)
        self.instructions.append(record)
        return record
