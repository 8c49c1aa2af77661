#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Request/response schemas shared by the API and the pipeline client.

JSON bodies use camelCase keys (``sourceContent``, ``modelId``...), Python
code uses snake_case attributes. Required text fields default to "" so that
an empty or missing value reaches the stage validation and is reported as a
single readable message instead of a schema dump.
"""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from config.constants import DEFAULT_WORD_COUNT


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Enums
# ============================================================================

class ArticleType(str, Enum):
    WECHAT = "wechat"
    BLOG = "blog"
    NEWSLETTER = "newsletter"
    TUTORIAL = "tutorial"


class Audience(str, Enum):
    TECH = "tech"
    PM = "pm"
    STARTUP = "startup"
    GENERAL = "general"


class WritingStyle(str, Enum):
    CASUAL = "casual"
    PROFESSIONAL = "professional"
    HUMOROUS = "humorous"


class ReviewStep(str, Enum):
    CONTENT = "content"
    STYLE = "style"
    DETAIL = "detail"


# Fixed order of the automatic review passes
REVIEW_SEQUENCE = (ReviewStep.CONTENT, ReviewStep.STYLE, ReviewStep.DETAIL)


# ============================================================================
# Writing configuration
# ============================================================================

class WritingConfig(CamelModel):
    """Article parameters for the generate stage"""
    article_type: ArticleType = ArticleType.WECHAT
    audience: Audience = Audience.GENERAL
    style: WritingStyle = WritingStyle.CASUAL
    word_count: str = DEFAULT_WORD_COUNT
    extra_instructions: str = ""

    def with_extra_instructions(self, *extra: str) -> "WritingConfig":
        """Copy with additional instructions appended, one per line"""
        parts = [self.extra_instructions.strip()] + [e.strip() for e in extra]
        merged = "\n".join(p for p in parts if p)
        return self.model_copy(update={"extra_instructions": merged})


# ============================================================================
# Stage requests
# ============================================================================

class StageRequest(CamelModel):
    """Fields every streamed stage carries"""
    provider: Optional[str] = Field(default=None, description="Provider tag, e.g. 'openai'")
    model_id: str = Field(default="", description="Vendor model id")
    api_key: str = Field(default="", repr=False, description="Caller-supplied API key")


class GenerateRequest(StageRequest):
    source_content: str = Field(default="", description="Source material")
    config: WritingConfig = Field(default_factory=WritingConfig)


class ReviewRequest(StageRequest):
    article: str = Field(default="", description="Article to review")
    review_step: Optional[ReviewStep] = Field(default=None, description="content | style | detail")


class ReviseRequest(StageRequest):
    article: str = Field(default="", description="Article to revise")
    instruction: str = Field(default="", description="Free-text revision instruction")


# ============================================================================
# Source input
# ============================================================================

class FetchSourceRequest(CamelModel):
    url: str = ""


class SourceResponse(CamelModel):
    content: str
    source: Optional[str] = Field(default=None, description="URL or file name it came from")


# ============================================================================
# Misc responses
# ============================================================================

class ErrorResponse(CamelModel):
    error: str
    provider: Optional[str] = None


class ProviderListing(CamelModel):
    id: str
    name: str
    description: str
    models: Dict[str, str]
    default_model: str
