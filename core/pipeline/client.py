#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pipeline Client - consumer side of a stage channel.

Decodes frames as they arrive and writes them into the session's article
buffer: generation appends, review and revise replace the buffer with the
running accumulation.
"""

from typing import Callable, Optional

from config.logging_config import get_logger
from core.errors import EmptyResultError
from core.models import StageRequest
from core.pipeline.state import PipelineStage, WritingSession
from core.pipeline.transport import StageTransport
from core.post_formatting import format_markdown_layout
from core.streaming import iter_fragments

logger = get_logger(__name__)

UpdateCallback = Callable[[WritingSession], None]


class PipelineClient:
    """
    Usage:
        client = PipelineClient(session, LocalStageTransport())
        draft = await client.run_stage(PipelineStage.GENERATING, GenerateRequest(...))
        final = client.finalize(reviewed)
    """

    def __init__(
        self,
        session: WritingSession,
        transport: StageTransport,
        on_update: Optional[UpdateCallback] = None,
    ):
        self.session = session
        self.transport = transport
        self.on_update = on_update

    def notify(self) -> None:
        if self.on_update is not None:
            self.on_update(self.session)

    async def run_stage(self, stage: PipelineStage, request: StageRequest) -> str:
        """
        Stream one stage into the session buffer.

        Returns:
            The stage's accumulated text (non-blank)

        Raises:
            StreamProtocolError: Error frame, or channel closed before DONE
            EmptyResultError: DONE arrived but the text is blank
            whatever the transport raises when the stage is refused
        """
        accumulated = ""
        fragments = 0

        async with self.transport.open(stage.endpoint, request) as channel:
            async for fragment in iter_fragments(channel):
                accumulated += fragment
                fragments += 1
                if stage.appends:
                    self.session.append(fragment)
                else:
                    self.session.replace(accumulated)
                self.notify()

        if not accumulated.strip():
            raise EmptyResultError(stage.value)

        logger.debug(f"{stage.value}: {fragments} fragments, {len(accumulated)} chars")
        return accumulated

    def finalize(self, text: str) -> str:
        """Normalize once and commit the result"""
        normalized = format_markdown_layout(text)
        self.session.commit(normalized)
        self.notify()
        return normalized
