"""
Streaming Module - Event-stream framing

Carries provider fragments, completion and failure over one text channel.

Exports:
- Frame / FrameKind (wire units)
- normalize_provider_chunk (unwraps pre-framed provider fragments)
- encode_stream (fragments -> frames, server side)
- FrameDecoder / iter_frames / iter_fragments (channel -> fragments, client side)
"""

from .sse_codec import (
    Frame,
    FrameKind,
    FrameDecoder,
    normalize_provider_chunk,
    encode_stream,
    parse_frame_line,
    parse_event_stream,
    iter_frames,
    iter_fragments,
)

__all__ = [
    'Frame',
    'FrameKind',
    'FrameDecoder',
    'normalize_provider_chunk',
    'encode_stream',
    'parse_frame_line',
    'parse_event_stream',
    'iter_frames',
    'iter_fragments',
]
