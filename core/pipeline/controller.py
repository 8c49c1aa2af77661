#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Stage Pipeline Controller

State machine over one WritingSession:

    Idle -> Generating -> Reviewing(content) -> Reviewing(style)
         -> Reviewing(detail) -> Idle                       (success)
    any stage -> Idle                                        (failure)
    Idle -> Revising -> Idle                                 (independent)

At most one stage is open at a time. A stage's output becomes the next
stage's input only after its stream ended with DONE and a non-blank text;
any failure aborts the remaining stages. The layout normalizer runs once,
after the last stage of a successful run.
"""

from typing import Optional

from config.logging_config import get_logger
from core.credentials import CredentialStore
from core.errors import InputValidationError, PipelineBusyError
from core.models import (
    REVIEW_SEQUENCE,
    GenerateRequest,
    ReviewRequest,
    ReviewStep,
    ReviseRequest,
)
from core.pipeline.client import PipelineClient, UpdateCallback
from core.pipeline.state import (
    InstructionRecord,
    InstructionStatus,
    PipelineStage,
    WritingSession,
)
from core.pipeline.transport import StageTransport
from core.post_formatting import format_markdown_layout

logger = get_logger(__name__)

PENDING_INSTRUCTION_MESSAGE = "Recorded. There is no article yet; the next generation will follow it."
APPLIED_INSTRUCTION_MESSAGE = "Revision applied."


class StagePipelineController:
    """
    Drives generate / review / revise for one session.

    Usage:
        controller = StagePipelineController(session, transport, credentials)
        article = await controller.run_pipeline()
        record = await controller.revise("Shorter intro")
    """

    def __init__(
        self,
        session: WritingSession,
        transport: StageTransport,
        credentials: CredentialStore,
        on_update: Optional[UpdateCallback] = None,
    ):
        self.session = session
        self.credentials = credentials
        self.client = PipelineClient(session, transport, on_update)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _ensure_idle(self) -> None:
        if self.session.is_busy:
            raise PipelineBusyError(f"A stage is already running: {self.session.stage.value}")

    def _api_key(self) -> Optional[str]:
        key = self.credentials.get(self.session.provider)
        return key.strip() if key and key.strip() else None

    def _require_api_key(self) -> str:
        key = self._api_key()
        if key is None:
            raise InputValidationError(
                f"No API key configured for provider '{self.session.provider.value}'"
            )
        return key

    def _enter(self, stage: PipelineStage) -> None:
        self.session.stage = stage
        logger.info(f"Stage started: {stage.value}")
        self.client.notify()

    def _leave(self) -> None:
        self.session.stage = None
        self.client.notify()

    def _stage_fields(self, api_key: str) -> dict:
        return {
            "provider": self.session.provider.value,
            "model_id": self.session.model_id,
            "api_key": api_key,
        }

    # ------------------------------------------------------------------
    # full pipeline
    # ------------------------------------------------------------------

    async def run_pipeline(self) -> str:
        """
        Generate a draft, then run the three review passes in order.

        Returns:
            The normalized final article

        Raises:
            InputValidationError: no source content or no API key (nothing started)
            PipelineBusyError: another stage is running
            EmptyResultError / StreamProtocolError / StageRequestError /
            AIProviderError: the run aborted at the failing stage
        """
        self._ensure_idle()
        session = self.session
        if not session.source_content.strip():
            raise InputValidationError("Source content is required")
        api_key = self._require_api_key()

        session.error = None
        session.replace("")
        fields = self._stage_fields(api_key)

        try:
            self._enter(PipelineStage.GENERATING)
            article = await self.client.run_stage(
                PipelineStage.GENERATING,
                GenerateRequest(source_content=session.source_content, config=session.config, **fields),
            )
            session.committed_article = article
            logger.info(f"Draft committed ({len(article)} chars)")

            for step in REVIEW_SEQUENCE:
                stage = PipelineStage.for_review(step)
                self._enter(stage)
                article = await self.client.run_stage(
                    stage, ReviewRequest(article=article, review_step=step, **fields),
                )
                session.committed_article = article
                logger.info(f"{stage.value} committed ({len(article)} chars)")

            final = self.client.finalize(article)
        except Exception as e:
            session.error = str(e)
            logger.error(f"Pipeline aborted at {session.stage.value if session.stage else 'start'}: {e}")
            raise
        finally:
            self._leave()

        logger.info(f"Pipeline finished ({len(final)} chars)")
        return final

    # ------------------------------------------------------------------
    # manual actions
    # ------------------------------------------------------------------

    async def review(self, step: ReviewStep) -> str:
        """Run a single review pass on the current article"""
        self._ensure_idle()
        step = ReviewStep(step)
        article = self.session.article
        if not article.strip():
            raise InputValidationError("There is no article to review")
        api_key = self._require_api_key()

        stage = PipelineStage.for_review(step)
        self.session.error = None
        try:
            self._enter(stage)
            result = await self.client.run_stage(
                stage, ReviewRequest(article=article, review_step=step, **self._stage_fields(api_key)),
            )
            final = self.client.finalize(result)
        except Exception as e:
            self.session.error = str(e)
            logger.error(f"{stage.value} failed: {e}")
            raise
        finally:
            self._leave()
        return final

    async def revise(self, instruction: str) -> InstructionRecord:
        """
        Apply one free-text instruction to the current article.

        Never raises for stage failures: the outcome is appended to the
        instruction log and returned. Without an article the instruction is
        folded into the generation config instead.
        """
        text = (instruction or "").strip()
        if not text:
            raise InputValidationError("Revision instruction is required")
        self._ensure_idle()
        session = self.session

        if not session.article.strip():
            session.config = session.config.with_extra_instructions(text)
            logger.info("Instruction recorded for the next generation")
            return session.record_instruction(text, InstructionStatus.PENDING, PENDING_INSTRUCTION_MESSAGE)

        api_key = self._api_key()
        if api_key is None:
            message = f"No API key configured for provider '{session.provider.value}'"
            return session.record_instruction(text, InstructionStatus.FAILED, message)

        previous = session.article
        try:
            self._enter(PipelineStage.REVISING)
            result = await self.client.run_stage(
                PipelineStage.REVISING,
                ReviseRequest(article=previous, instruction=text, **self._stage_fields(api_key)),
            )
            self.client.finalize(result)
        except Exception as e:
            # a failed revision leaves the article as it was
            session.replace(previous)
            logger.warning(f"Revision failed: {e}")
            return session.record_instruction(text, InstructionStatus.FAILED, str(e))
        finally:
            self._leave()

        logger.info(f"Revision applied ({len(session.article)} chars)")
        return session.record_instruction(text, InstructionStatus.APPLIED, APPLIED_INSTRUCTION_MESSAGE)

    def format_article(self) -> str:
        """Run the layout normalizer over the current article"""
        self._ensure_idle()
        normalized = format_markdown_layout(self.session.article)
        self.session.commit(normalized)
        self.client.notify()
        return normalized
