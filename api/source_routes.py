"""
Source API Routes
Vibe Writer - source material input (web page, uploaded file)
"""

from fastapi import APIRouter, Depends, File, UploadFile

from config.settings import Settings, get_settings
from core.models import FetchSourceRequest, SourceResponse
from core.url_fetcher import UrlFetcher, read_uploaded_text

router = APIRouter(prefix="/api", tags=["Source"])


def get_url_fetcher(settings: Settings = Depends(get_settings)) -> UrlFetcher:
    return UrlFetcher(
        timeout=settings.fetch_timeout_seconds,
        user_agent=settings.fetch_user_agent,
    )


@router.post("/fetch-url", response_model=SourceResponse)
async def fetch_url(
    payload: FetchSourceRequest,
    fetcher: UrlFetcher = Depends(get_url_fetcher),
):
    """
    Extract article text from a web page.

    Errors:
    - 400: malformed URL
    - 422: the page held no usable text
    - 502: the page could not be downloaded
    """
    content = await fetcher.fetch(payload.url)
    return SourceResponse(content=content, source=payload.url.strip())


@router.post("/upload-source", response_model=SourceResponse)
async def upload_source(
    file: UploadFile = File(...),
    settings: Settings = Depends(get_settings),
):
    """Read a .txt / .md / .markdown file as source material."""
    data = await file.read()
    content = read_uploaded_text(file.filename, data, settings.max_upload_bytes)
    return SourceResponse(content=content, source=file.filename)
