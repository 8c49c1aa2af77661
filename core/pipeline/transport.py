#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Stage transports: how the pipeline client reaches the stage endpoints.

Both transports hand the client the same thing, the raw framed channel
(an async iterator of bytes), so decoding is identical whether the stage
ran on a server or in-process.

    async with transport.open("review", ReviewRequest(...)) as channel:
        async for fragment in iter_fragments(channel):
            ...
"""

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Optional

import httpx

from config.constants import DEFAULT_SERVER_URL, STREAM_TIMEOUT_SECONDS
from config.logging_config import get_logger
from core.errors import StageRequestError
from core.models import StageRequest
from core.streaming import encode_stream
from core.writing_service import WritingService

logger = get_logger(__name__)

ENDPOINTS = ("generate", "review", "revise")


class StageTransport(ABC):
    """Opens the framed channel of one stage"""

    @abstractmethod
    def open(self, endpoint: str, request: StageRequest) -> AsyncContextManager[AsyncIterator[bytes]]:
        """
        Open the stage channel.

        Raises on entry when the stage is refused before streaming (bad
        input, unknown vendor, vendor refused the connection).
        """
        pass


def _check_endpoint(endpoint: str) -> None:
    if endpoint not in ENDPOINTS:
        raise ValueError(f"Unknown stage endpoint: {endpoint}")


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return f"HTTP {response.status_code}: {response.reason_phrase}"


class HttpStageTransport(StageTransport):
    """
    Talks to the API server over HTTP.

    A non-200 answer becomes StageRequestError carrying the server's error
    message; so does any transport-level failure while streaming.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_SERVER_URL,
        timeout: float = STREAM_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    @asynccontextmanager
    async def open(self, endpoint: str, request: StageRequest):
        _check_endpoint(endpoint)
        client = self._client or httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        body = request.model_dump(by_alias=True, mode="json")

        try:
            async with client.stream("POST", f"/api/{endpoint}", json=body) as response:
                if response.status_code != 200:
                    await response.aread()
                    message = _error_message(response)
                    logger.warning(f"/api/{endpoint} refused ({response.status_code}): {message}")
                    raise StageRequestError(message, response.status_code)
                yield response.aiter_bytes()
        except httpx.HTTPError as e:
            raise StageRequestError(f"Stage request failed: {e}") from e
        finally:
            if self._client is None:
                await client.aclose()


class LocalStageTransport(StageTransport):
    """
    Runs the stage in-process through a WritingService.

    Fragments go through the same frame encoder the server uses.
    """

    def __init__(self, service: Optional[WritingService] = None):
        self.service = service or WritingService()

    @asynccontextmanager
    async def open(self, endpoint: str, request: StageRequest):
        _check_endpoint(endpoint)
        opener = getattr(self.service, f"open_{endpoint}")
        fragments = await opener(request)

        frames = encode_stream(fragments)
        channel = _encode_bytes(frames)
        try:
            yield channel
        finally:
            await channel.aclose()
            await frames.aclose()
            # the encoder never ran if the consumer bailed out before reading
            aclose = getattr(fragments, "aclose", None)
            if aclose is not None:
                await aclose()


async def _encode_bytes(frames: AsyncIterator[str]) -> AsyncIterator[bytes]:
    async for frame in frames:
        yield frame.encode("utf-8")
