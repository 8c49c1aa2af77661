#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Source input: article text from a web page or an uploaded text file.

Page extraction drops page chrome (scripts, navigation, sidebars...), takes
the first content container holding a real amount of text, falls back to
the whole body, collapses whitespace and prefixes the page title as a
``# title`` heading.
"""

from pathlib import Path
from typing import Optional, Tuple
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from config.constants import (
    FETCH_TIMEOUT_SECONDS,
    FETCH_USER_AGENT,
    MAX_UPLOAD_SIZE_MB,
    SOURCE_CONTENT_SELECTOR_MIN_CHARS,
    SOURCE_MIN_CHARS,
    UPLOAD_EXTENSIONS,
)
from config.logging_config import get_logger
from core.errors import ContentExtractionError, InputValidationError, SourceFetchError

logger = get_logger(__name__)

UNWANTED_SELECTOR = (
    "script, style, nav, footer, header, aside, "
    ".sidebar, .ad, .advertisement, .comment, .comments, #comments"
)

CONTENT_SELECTORS = [
    "article",
    '[role="main"]',
    ".post-content",
    ".article-content",
    ".entry-content",
    ".content",
    "main",
    "#content",
    ".post",
]


def validate_url(url: Optional[str]) -> str:
    """Return the trimmed URL or raise InputValidationError."""
    if not url or not isinstance(url, str) or not url.strip():
        raise InputValidationError("A valid URL is required")

    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InputValidationError(f"Malformed URL: {url}")
    return url


def _collapse(text: str) -> str:
    return " ".join(text.split())


def extract_article(html: str) -> Tuple[Optional[str], str]:
    """
    Pull (title, body text) out of an HTML page.

    The body text is whitespace-collapsed; title is None when the page has
    neither a <title> nor an <h1>.
    """
    soup = BeautifulSoup(html, "html.parser")

    for element in soup.select(UNWANTED_SELECTOR):
        element.decompose()

    content = ""
    for selector in CONTENT_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        content = _collapse(element.get_text(" "))
        if len(content) > SOURCE_CONTENT_SELECTOR_MIN_CHARS:
            break

    if len(content) < SOURCE_CONTENT_SELECTOR_MIN_CHARS:
        body = soup.body or soup
        content = _collapse(body.get_text(" "))

    title = None
    if soup.title is not None:
        title = _collapse(soup.title.get_text())
    if not title:
        h1 = soup.find("h1")
        title = _collapse(h1.get_text()) if h1 is not None else None

    return title or None, content


def extract_article_text(html: str) -> str:
    title, content = extract_article(html)
    if title:
        return f"# {title}\n\n{content}".strip()
    return content


class UrlFetcher:
    """
    Downloads a page and extracts its article text.

    Usage:
        fetcher = UrlFetcher(timeout=20)
        text = await fetcher.fetch("https://example.com/post")
    """

    def __init__(
        self,
        timeout: float = FETCH_TIMEOUT_SECONDS,
        user_agent: str = FETCH_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.user_agent = user_agent
        self._transport = transport

    async def fetch_html(self, url: str) -> str:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            headers={"User-Agent": self.user_agent},
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            try:
                response = await client.get(url)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                raise SourceFetchError(f"HTTP {status}: {e.response.reason_phrase}") from e
            except httpx.HTTPError as e:
                raise SourceFetchError(f"Failed to fetch {url}: {e}") from e
            return response.text

    async def fetch(self, url: str) -> str:
        """
        Fetch a page and return its article text.

        Raises:
            InputValidationError: malformed URL
            SourceFetchError: download failed
            ContentExtractionError: page held less than SOURCE_MIN_CHARS of text
        """
        url = validate_url(url)
        html = await self.fetch_html(url)
        content = extract_article_text(html)

        if len(content) < SOURCE_MIN_CHARS:
            logger.warning(f"No usable content extracted from {url}")
            raise ContentExtractionError("No usable content could be extracted from the page")

        logger.info(f"Fetched source from {url} ({len(content)} chars)")
        return content


def read_uploaded_text(
    filename: str,
    data: bytes,
    max_bytes: int = MAX_UPLOAD_SIZE_MB * 1024 * 1024,
) -> str:
    """Decode an uploaded .txt / .md source file."""
    suffix = Path(filename or "").suffix.lower()
    if suffix not in UPLOAD_EXTENSIONS:
        allowed = ", ".join(UPLOAD_EXTENSIONS)
        raise InputValidationError(f"Unsupported file type '{suffix or filename}'. Allowed: {allowed}")

    if len(data) > max_bytes:
        raise InputValidationError(f"File too large. Max size: {max_bytes // (1024 * 1024)}MB")

    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise InputValidationError("File must be UTF-8 encoded text") from None

    text = text.strip()
    if not text:
        raise InputValidationError("Uploaded file is empty")

    logger.info(f"Read uploaded source {filename} ({len(text)} chars)")
    return text
