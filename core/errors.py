#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pipeline Error Taxonomy

Vendor failures are ``ai_providers.AIProviderError``; everything the
pipeline itself can report lives here.
"""

from typing import Optional


class PipelineError(Exception):
    """Base error for the writing pipeline"""
    pass


class InputValidationError(PipelineError):
    """Required input missing or malformed; raised before any stream opens"""
    pass


class PipelineBusyError(PipelineError):
    """A stage is already running for this session"""
    pass


class StreamProtocolError(PipelineError):
    """The channel carried an Error frame or ended without completing"""
    pass


class EmptyResultError(PipelineError):
    """A stage completed but produced only whitespace"""

    def __init__(self, stage: str, message: Optional[str] = None):
        self.stage = stage
        super().__init__(message or f"Stage '{stage}' produced an empty result")


class StageRequestError(PipelineError):
    """The stage channel could not be opened or broke at transport level"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class SourceFetchError(PipelineError):
    """The source page could not be downloaded"""
    pass


class ContentExtractionError(SourceFetchError):
    """The page was downloaded but held no usable article text"""
    pass
