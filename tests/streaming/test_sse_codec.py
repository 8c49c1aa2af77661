"""
Tests for the event-stream frame codec (core/streaming/sse_codec.py)
"""
import pytest

from config.constants import SSE_GENERIC_ERROR
from core.errors import StreamProtocolError
from core.streaming import (
    Frame,
    FrameDecoder,
    FrameKind,
    encode_stream,
    iter_fragments,
    normalize_provider_chunk,
    parse_event_stream,
    parse_frame_line,
)


async def _source(*fragments, fail_with=None):
    for fragment in fragments:
        yield fragment
    if fail_with is not None:
        raise fail_with


async def _collect(aiter):
    return [item async for item in aiter]


async def _channel(chunks):
    for chunk in chunks:
        yield chunk


class TestFrameEncoding:
    """Test the wire shape of single frames."""

    def test_data_frame_is_json_string(self):
        assert Frame.data("Hello\nworld").encode() == 'data: "Hello\\nworld"\n\n'

    def test_data_frame_keeps_unicode(self):
        assert Frame.data("你好").encode() == 'data: "你好"\n\n'

    def test_done_frame(self):
        assert Frame.done().encode() == "data: [DONE]\n\n"

    def test_error_frame_collapses_whitespace(self):
        assert Frame.error("rate\n  limited").encode() == "data: [ERROR] rate limited\n\n"

    def test_error_frame_without_message(self):
        assert Frame.error("").encode() == f"data: [ERROR] {SSE_GENERIC_ERROR}\n\n"

    def test_terminal_kinds(self):
        assert not Frame.data("x").is_terminal
        assert Frame.done().is_terminal
        assert Frame.error("x").is_terminal


class TestEncodeStream:
    """Test framing of provider fragment streams."""

    @pytest.mark.asyncio
    async def test_fragments_then_done(self):
        frames = await _collect(encode_stream(_source("Hel", "lo")))

        assert frames == [
            'data: "Hel"\n\n',
            'data: "lo"\n\n',
            "data: [DONE]\n\n",
        ]

    @pytest.mark.asyncio
    async def test_empty_fragments_are_dropped(self):
        frames = await _collect(encode_stream(_source("", "A", "", "data: ")))

        assert frames == ['data: "A"\n\n', "data: [DONE]\n\n"]

    @pytest.mark.asyncio
    async def test_failure_becomes_single_error_frame(self):
        frames = await _collect(encode_stream(
            _source("Hello", fail_with=RuntimeError("rate limited"))
        ))

        assert frames == ['data: "Hello"\n\n', "data: [ERROR] rate limited\n\n"]
        assert "data: [DONE]\n\n" not in frames

    @pytest.mark.asyncio
    async def test_failure_without_message_uses_generic_text(self):
        frames = await _collect(encode_stream(_source(fail_with=RuntimeError())))

        assert frames == [f"data: [ERROR] {SSE_GENERIC_ERROR}\n\n"]

    @pytest.mark.asyncio
    async def test_nested_frames_are_unwrapped(self):
        frames = await _collect(encode_stream(_source("data: Hi\n\n", "data: there")))

        assert frames[:2] == ['data: "Hi"\n\n', 'data: "there"\n\n']

    @pytest.mark.asyncio
    async def test_source_closed_when_consumer_stops(self):
        closed = []

        async def source():
            try:
                yield "one"
                yield "two"
            finally:
                closed.append(True)

        frames = encode_stream(source())
        first = await frames.__anext__()
        await frames.aclose()

        assert first == 'data: "one"\n\n'
        assert closed == [True]


class TestChunkNormalization:
    """Test unwrapping of pre-framed provider chunks."""

    def test_plain_text_passes_through(self):
        assert normalize_provider_chunk("普通文本") == "普通文本"

    def test_whitespace_passes_through(self):
        assert normalize_provider_chunk("\n\n") == "\n\n"

    def test_empty_stays_empty(self):
        assert normalize_provider_chunk("") == ""

    def test_single_prefix_stripped(self):
        assert normalize_provider_chunk("data: Hello") == "Hello"

    def test_multiple_data_lines_concatenated(self):
        assert normalize_provider_chunk("data: Hel\ndata: lo\n\n") == "Hello"

    def test_escaped_newlines_unwrapped(self):
        assert normalize_provider_chunk("data: A\\ndata: B\\r\\n") == "AB"

    def test_sentinels_discarded(self):
        chunk = "data: A\ndata: [DONE]\ndata: [ERROR] nope\n"
        assert normalize_provider_chunk(chunk) == "A"


class TestFrameDecoding:
    """Test line parsing and the incremental decoder."""

    def test_parse_data_line(self):
        frame = parse_frame_line('data: "a\\nb"')
        assert frame == Frame.data("a\nb")

    def test_bare_text_payload(self):
        assert parse_frame_line("data: hello world") == Frame.data("hello world")
        assert parse_frame_line("data:hello") == Frame.data("hello")

    def test_broken_json_kept_as_text(self):
        assert parse_frame_line('data: "unterminated') == Frame.data('"unterminated')

    def test_non_frames_ignored(self):
        assert parse_frame_line("") is None
        assert parse_frame_line(": keep-alive") is None
        assert parse_frame_line("event: message") is None
        assert parse_frame_line("data:   ") is None

    def test_done_and_error(self):
        assert parse_frame_line("data: [DONE]") == Frame.done()
        assert parse_frame_line("data: [ERROR] boom") == Frame.error("boom")
        assert parse_frame_line("data: [ERROR]") == Frame.error(SSE_GENERIC_ERROR)

    def test_crlf_line_endings(self):
        frames = parse_event_stream('data: "a"\r\n\r\ndata: [DONE]\r\n\r\n')
        assert frames == [Frame.data("a"), Frame.done()]

    def test_incomplete_line_held_until_flush(self):
        decoder = FrameDecoder()

        assert decoder.feed('data: "par') == []
        assert decoder.feed('tial"') == []
        assert decoder.flush() == [Frame.data("partial")]

    def test_multibyte_characters_split_across_chunks(self):
        body = Frame.data("标题：中文").encode().encode("utf-8")
        decoder = FrameDecoder()

        frames = []
        for i in range(len(body)):
            frames.extend(decoder.feed(body[i:i + 1]))
        frames.extend(decoder.flush())

        assert frames == [Frame.data("标题：中文")]


class TestRoundTrip:
    """Test encode followed by decode."""

    @pytest.mark.asyncio
    async def test_fragments_survive_in_order(self):
        fragments = ["# 标题\n\n", "  ", "第一段。\n", "\"quoted\"", "end"]

        wire = "".join(await _collect(encode_stream(_source(*fragments))))
        frames = parse_event_stream(wire)

        assert [f.payload for f in frames if f.kind is FrameKind.DATA] == fragments
        assert frames[-1] == Frame.done()

    @pytest.mark.asyncio
    async def test_byte_by_byte_channel(self):
        fragments = ["你好，", "世界。", "\n\n## 小节"]
        wire = "".join(await _collect(encode_stream(_source(*fragments)))).encode("utf-8")
        chunks = [wire[i:i + 1] for i in range(len(wire))]

        received = await _collect(iter_fragments(_channel(chunks)))

        assert received == fragments


class TestIterFragments:
    """Test the consumer side of a channel."""

    @pytest.mark.asyncio
    async def test_error_frame_stops_decoding(self):
        chunks = ['data: "Hello"\n\n', "data: [ERROR] rate limited\n\n", 'data: "late"\n\n']
        received = []

        with pytest.raises(StreamProtocolError, match="rate limited"):
            async for fragment in iter_fragments(_channel(chunks)):
                received.append(fragment)

        assert received == ["Hello"]

    @pytest.mark.asyncio
    async def test_nothing_after_done(self):
        chunks = ['data: "a"\n\ndata: [DONE]\n\ndata: "b"\n\n']

        assert await _collect(iter_fragments(_channel(chunks))) == ["a"]

    @pytest.mark.asyncio
    async def test_missing_done_is_an_error(self):
        with pytest.raises(StreamProtocolError, match="before completion"):
            await _collect(iter_fragments(_channel(['data: "a"\n\n'])))

    @pytest.mark.asyncio
    async def test_missing_done_tolerated_when_not_required(self):
        received = await _collect(iter_fragments(_channel(['data: "a"\n\n']), require_done=False))
        assert received == ["a"]

    @pytest.mark.asyncio
    async def test_unterminated_last_line_is_flushed(self):
        chunks = ['data: "a"\n\n', "data: [DONE]"]

        assert await _collect(iter_fragments(_channel(chunks))) == ["a"]
