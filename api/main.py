#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
FastAPI Web Server - REST API for Vibe Writer.

This module wires the streamed writing pipeline to HTTP:
- Stage streams (generate, review, revise) as text/event-stream
- Source input (web page extraction, text file upload)
- Provider catalogue
- Health check

Usage:
    # Start server
    uvicorn api.main:app --host 127.0.0.1 --port 8000

    # Or run directly
    python -m api.main

Key Endpoints:
    POST /api/generate - Stream a draft from source material
    POST /api/review - Stream one review pass (content/style/detail)
    POST /api/revise - Stream a revision by instruction
    POST /api/fetch-url - Extract article text from a URL
    POST /api/upload-source - Read an uploaded .txt/.md file
    GET /api/providers - List vendors and models

Errors are JSON bodies of the form {"error": "..."}; vendor errors also
carry "provider". Failures after a stream opened arrive as an ERROR frame
inside the stream.
"""

from pathlib import Path
from typing import Optional
import sys

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from ai_providers import AIProviderError, __version__
from config.logging_config import get_logger, set_level
from config.settings import settings
from core.errors import (
    ContentExtractionError,
    InputValidationError,
    PipelineError,
    SourceFetchError,
)
from core.models import ErrorResponse

from api.writing_routes import router as writing_router
from api.source_routes import router as source_router
from api.provider_routes import router as provider_router

set_level(settings.log_level)
logger = get_logger(__name__)


def error_response(status_code: int, message: str, provider: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=message, provider=provider)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


# =============================================================================
# Application
# =============================================================================

app = FastAPI(
    title="Vibe Writer API",
    description="Streamed article generation, review and revision",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


# =============================================================================
# Exception handlers
# =============================================================================

@app.exception_handler(InputValidationError)
async def input_validation_handler(request: Request, exc: InputValidationError):
    logger.info(f"{request.url.path}: rejected: {exc}")
    return error_response(400, str(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Malformed request body"
    logger.info(f"{request.url.path}: malformed body: {message}")
    return error_response(400, message)


@app.exception_handler(AIProviderError)
async def provider_error_handler(request: Request, exc: AIProviderError):
    status_code = 400 if exc.is_request_error else 502
    logger.warning(f"{request.url.path}: {exc.provider.value}: {exc}")
    return error_response(status_code, str(exc), provider=exc.provider.value)


@app.exception_handler(ContentExtractionError)
async def content_extraction_handler(request: Request, exc: ContentExtractionError):
    return error_response(422, str(exc))


@app.exception_handler(SourceFetchError)
async def source_fetch_handler(request: Request, exc: SourceFetchError):
    logger.warning(f"{request.url.path}: {exc}")
    return error_response(502, str(exc))


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError):
    logger.error(f"{request.url.path}: {exc}")
    return error_response(500, str(exc))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


# =============================================================================
# Routes
# =============================================================================

app.include_router(writing_router)
app.include_router(source_router)
app.include_router(provider_router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "version": __version__}


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    logger.info("Starting Vibe Writer API Server...")
    logger.info(f"API Documentation: http://{settings.host}:{settings.port}/docs")

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
