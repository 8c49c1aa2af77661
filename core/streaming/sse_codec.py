#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Event-Stream Frame Codec

Carries provider fragments, completion and failure over one text channel:

    data: "<fragment as JSON string>"\\n\\n     one per fragment
    data: [DONE]\\n\\n                          stream completed
    data: [ERROR] <message>\\n\\n               stream failed

Exactly one DONE or ERROR frame ends a stream. Data payloads are JSON
string literals so that newlines and whitespace-only fragments survive the
line-oriented framing; the decoder still accepts bare text payloads.
"""

import codecs
import json
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterable, AsyncIterator, List, Optional, Union

from config.constants import (
    SSE_DATA_PREFIX,
    SSE_DONE_SENTINEL,
    SSE_ERROR_SENTINEL,
    SSE_GENERIC_ERROR,
)
from config.logging_config import get_logger
from core.errors import StreamProtocolError

logger = get_logger(__name__)

_FIELD_NAME = SSE_DATA_PREFIX.rstrip()  # "data:"


class FrameKind(str, Enum):
    DATA = "data"
    DONE = "done"
    ERROR = "error"


@dataclass(frozen=True)
class Frame:
    """One unit on the wire"""
    kind: FrameKind
    payload: str = ""

    @classmethod
    def data(cls, payload: str) -> "Frame":
        return cls(FrameKind.DATA, payload)

    @classmethod
    def done(cls) -> "Frame":
        return cls(FrameKind.DONE)

    @classmethod
    def error(cls, message: str) -> "Frame":
        return cls(FrameKind.ERROR, message)

    @property
    def is_terminal(self) -> bool:
        return self.kind is not FrameKind.DATA

    def encode(self) -> str:
        if self.kind is FrameKind.DATA:
            body = json.dumps(self.payload, ensure_ascii=False)
        elif self.kind is FrameKind.DONE:
            body = SSE_DONE_SENTINEL
        else:
            message = " ".join(self.payload.split()) or SSE_GENERIC_ERROR
            body = f"{SSE_ERROR_SENTINEL} {message}"
        return f"{SSE_DATA_PREFIX}{body}\n\n"


# ============================================================================
# Provider chunk normalization
# ============================================================================

def _extract_nested_payload(chunk: str) -> Optional[str]:
    """Unwrap fragments that arrive already framed as data lines."""
    decoded = chunk.replace("\\r\\n", "\n").replace("\\n", "\n")
    data_lines = [
        line.strip() for line in decoded.split("\n")
        if line.strip().startswith(SSE_DATA_PREFIX)
    ]
    if not data_lines:
        return None

    payload = "".join(
        body for body in (line[len(SSE_DATA_PREFIX):] for line in data_lines)
        if body and body != SSE_DONE_SENTINEL and not body.startswith(SSE_ERROR_SENTINEL)
    )
    return payload or None


def normalize_provider_chunk(chunk: str) -> str:
    """
    Clean one provider fragment before it is framed.

    Some upstream proxies hand back text that is itself event-stream framed.
    Returns "" when nothing should be emitted for the fragment.
    """
    if not chunk:
        return ""

    nested = _extract_nested_payload(chunk)
    if nested is not None:
        return nested

    if chunk.startswith(SSE_DATA_PREFIX):
        return chunk[len(SSE_DATA_PREFIX):]

    return chunk


# ============================================================================
# Encoding
# ============================================================================

async def encode_stream(fragments: AsyncIterator[str]) -> AsyncIterator[str]:
    """
    Frame a provider fragment stream.

    Yields one Data frame per non-empty normalized fragment, then DONE. A
    failure raised by the fragment source becomes a single ERROR frame and
    ends the channel.
    """
    count = 0
    try:
        async for fragment in fragments:
            payload = normalize_provider_chunk(fragment)
            if not payload:
                continue
            count += 1
            yield Frame.data(payload).encode()
    except Exception as e:
        logger.warning(f"Stream failed after {count} fragments: {e}")
        yield Frame.error(str(e) or SSE_GENERIC_ERROR).encode()
        return
    finally:
        aclose = getattr(fragments, "aclose", None)
        if aclose is not None:
            await aclose()

    logger.debug(f"Stream completed with {count} fragments")
    yield Frame.done().encode()


# ============================================================================
# Decoding
# ============================================================================

def _decode_data(payload: str) -> str:
    if payload.startswith('"'):
        try:
            value = json.loads(payload)
        except ValueError:
            return payload
        if isinstance(value, str):
            return value
    return payload


def parse_frame_line(line: str) -> Optional[Frame]:
    """
    Parse one channel line.

    Returns None for anything that is not a frame: blank separators,
    comments, other fields, and data lines whose payload is blank.
    """
    line = line.rstrip("\r")
    if not line.startswith(_FIELD_NAME):
        return None

    payload = line[len(_FIELD_NAME):]
    if payload.startswith(" "):
        payload = payload[1:]

    marker = payload.strip()
    if not marker:
        return None
    if marker == SSE_DONE_SENTINEL:
        return Frame.done()
    if marker.startswith(SSE_ERROR_SENTINEL):
        message = marker[len(SSE_ERROR_SENTINEL):].strip()
        return Frame.error(message or SSE_GENERIC_ERROR)

    return Frame.data(_decode_data(payload))


class FrameDecoder:
    """
    Incremental channel decoder.

    Feed raw chunks as they arrive; an incomplete trailing line is held
    until more data comes in or ``flush`` is called at channel close.
    """

    def __init__(self):
        self._buffer = ""
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def feed(self, chunk: Union[bytes, str]) -> List[Frame]:
        if isinstance(chunk, bytes):
            chunk = self._utf8.decode(chunk)
        self._buffer += chunk

        lines = self._buffer.split("\n")
        self._buffer = lines.pop()
        return self._parse(lines)

    def flush(self) -> List[Frame]:
        self._buffer += self._utf8.decode(b"", final=True)
        tail, self._buffer = self._buffer, ""
        return self._parse(tail.split("\n"))

    @staticmethod
    def _parse(lines: List[str]) -> List[Frame]:
        frames = []
        for line in lines:
            frame = parse_frame_line(line)
            if frame is not None:
                frames.append(frame)
        return frames


async def iter_frames(channel: AsyncIterable[Union[bytes, str]]) -> AsyncIterator[Frame]:
    """Decode frames from a channel in strict arrival order"""
    decoder = FrameDecoder()
    async for chunk in channel:
        for frame in decoder.feed(chunk):
            yield frame
    for frame in decoder.flush():
        yield frame


async def iter_fragments(
    channel: AsyncIterable[Union[bytes, str]],
    require_done: bool = True,
) -> AsyncIterator[str]:
    """
    Yield fragment text from a framed channel.

    Stops at DONE. An ERROR frame raises StreamProtocolError carrying its
    message, and nothing after it is yielded. With ``require_done`` a channel
    that closes without either terminal frame also raises.
    """
    async for frame in iter_frames(channel):
        if frame.kind is FrameKind.DATA:
            if frame.payload:
                yield frame.payload
        elif frame.kind is FrameKind.ERROR:
            raise StreamProtocolError(frame.payload)
        else:
            return

    if require_done:
        raise StreamProtocolError("Stream closed before completion")


def parse_event_stream(text: str) -> List[Frame]:
    """Decode a complete channel body at once"""
    decoder = FrameDecoder()
    return decoder.feed(text) + decoder.flush()
