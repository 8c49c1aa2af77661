"""
Markdown Layout Normalizer

Reflows streamed model output into a readable article layout:
heading syntax repair, headings on their own blocks, overlong headings
split into title + paragraph, long paragraphs split into groups of at most
two sentences.

Architecture:
    - Config-driven design with LayoutConfig
    - Block helpers: split_overlong_heading(), split_long_paragraph()
    - Main API: format_markdown_layout(text, config) -> str

Guarantees:
    - Deterministic and pure
    - Idempotent: the pass is repeated until the text is stable, so
      format_markdown_layout(format_markdown_layout(t)) == format_markdown_layout(t)
    - Fenced code blocks are passed through verbatim
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple
import re

from config.constants import (
    HARD_STOPS,
    SOFT_STOPS,
    HEADING_SHORT_MAX_CHARS,
    HEADING_HARD_STOP_RANGE,
    HEADING_SOFT_STOP_RANGE,
    HEADING_WIDE_HARD_STOP_RANGE,
    HEADING_WIDE_SOFT_STOP_RANGE,
    HEADING_FALLBACK_MIN_CHARS,
    HEADING_FALLBACK_CUT,
    PARAGRAPH_MIN_SPLIT_CHARS,
    PARAGRAPH_GROUP_MAX_CHARS,
    PARAGRAPH_GROUP_MAX_SENTENCES,
    LAYOUT_MAX_PASSES,
)
from config.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class LayoutConfig:
    """
    Tunable thresholds for the layout pass.

    Attributes:
        heading_short_max: Headings up to this length without a hard stop stay whole
        heading_cut_ranges: (stops, min, max) tried in order to find a heading cut
        heading_fallback_min: Bodies at least this long get a blind cut
        heading_fallback_cut: Index of the blind cut
        paragraph_min_split: Paragraphs shorter than this are never split
        group_max_chars: A sentence group closes before exceeding this length
        group_max_sentences: A sentence group never holds more than this
    """
    hard_stops: str = HARD_STOPS
    soft_stops: str = SOFT_STOPS

    heading_short_max: int = HEADING_SHORT_MAX_CHARS
    heading_fallback_min: int = HEADING_FALLBACK_MIN_CHARS
    heading_fallback_cut: int = HEADING_FALLBACK_CUT

    paragraph_min_split: int = PARAGRAPH_MIN_SPLIT_CHARS
    group_max_chars: int = PARAGRAPH_GROUP_MAX_CHARS
    group_max_sentences: int = PARAGRAPH_GROUP_MAX_SENTENCES

    max_passes: int = LAYOUT_MAX_PASSES

    @property
    def heading_cut_ranges(self) -> List[Tuple[str, int, int]]:
        return [
            (self.hard_stops, *HEADING_HARD_STOP_RANGE),
            (self.soft_stops, *HEADING_SOFT_STOP_RANGE),
            (self.hard_stops, *HEADING_WIDE_HARD_STOP_RANGE),
            (self.soft_stops, *HEADING_WIDE_SOFT_STOP_RANGE),
        ]


DEFAULT_CONFIG = LayoutConfig()

# Closing marks that stay attached to the sentence they end
_CLOSERS = "”’\"'」』）)】》"
# After these no space is needed before the next sentence
_TIGHT_ENDINGS = "。！？…" + "”’」』）】》"

_HEADING_LINE_RE = re.compile(r"^(#{1,6})[ \t]*(.+)$")
_HEADING_BLOCK_RE = re.compile(r"^#{1,6}[ \t]")
_UNTOUCHED_BLOCK_RE = re.compile(r"^(?:[-*+][ \t]|\d+\.[ \t]|>[ \t]|```)")

_MISSING_HEADING_SPACE_RE = re.compile(r"(?m)^(#{1,6})([^\s#])")
_HEADING_AFTER_STOP_RE = re.compile(r"([。！？!?；;])\s*(#{1,6}\s*)")
_HEADING_AFTER_LINE_RE = re.compile(r"([^\n])\n(#{1,6}[ \t])")
_HEADING_WITHOUT_GAP_RE = re.compile(r"(?m)^(#{1,6}[ \t][^\n]+)\n(?!\n)")
_BLOCK_SPLIT_RE = re.compile(r"\n{2,}")
_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")
_TRAILING_SPACE_RE = re.compile(r"[ \t]+$", re.MULTILINE)


def _sentence_pattern(stops: str) -> "re.Pattern":
    s = re.escape(stops)
    c = re.escape(_CLOSERS)
    return re.compile(rf"[^{s}]*[{s}]+[{c}]*|[^{s}]+")


# ============================================================================
# Helpers
# ============================================================================

def split_sentences(text: str, config: Optional[LayoutConfig] = None) -> List[str]:
    """Split on sentence-ending punctuation; each sentence keeps its stop."""
    config = config or DEFAULT_CONFIG
    pieces = _sentence_pattern(config.hard_stops).findall(text)
    return [p.strip() for p in pieces if p.strip()]


def _join_sentence(current: str, sentence: str) -> str:
    if current[-1] in _TIGHT_ENDINGS:
        return current + sentence
    return f"{current} {sentence}"


def split_long_paragraph(block: str, config: Optional[LayoutConfig] = None) -> str:
    """
    Break a long paragraph into groups of at most two sentences.

    Example:
        >>> split_long_paragraph("短段落。")
        '短段落。'

    A group closes once it holds ``group_max_sentences`` sentences or the
    next sentence would push it past ``group_max_chars``. A single sentence
    longer than the limit stays whole.
    """
    config = config or DEFAULT_CONFIG
    compact = re.sub(r"\n+", " ", block).strip()
    if len(compact) < config.paragraph_min_split:
        return compact

    sentences = split_sentences(compact, config)
    if len(sentences) < 2:
        return compact

    groups: List[str] = []
    current = ""
    count = 0
    for sentence in sentences:
        if not current:
            current, count = sentence, 1
            continue

        joined = _join_sentence(current, sentence)
        if len(joined) > config.group_max_chars or count >= config.group_max_sentences:
            groups.append(current)
            current, count = sentence, 1
        else:
            current, count = joined, count + 1

    if current:
        groups.append(current)
    return "\n\n".join(groups)


def _find_heading_cut(body: str, config: LayoutConfig) -> int:
    for stops, low, high in config.heading_cut_ranges:
        for index, ch in enumerate(body):
            if low <= index <= high and ch in stops:
                return index
    return -1


def split_overlong_heading(line: str, config: Optional[LayoutConfig] = None) -> str:
    """
    Move the tail of an overlong heading into a paragraph below it.

    Returns the heading unchanged when it is short, when no cut point is
    found, or when either half of the split would be empty.
    """
    config = config or DEFAULT_CONFIG
    match = _HEADING_LINE_RE.match(line.strip())
    if not match:
        return line.strip()

    level, body = match.group(1), match.group(2).strip()
    unsplit = f"{level} {body}"

    has_hard_stop = any(ch in config.hard_stops for ch in body)
    if len(body) <= config.heading_short_max and not has_hard_stop:
        return unsplit

    cut = _find_heading_cut(body, config)
    if cut == -1:
        if len(body) < config.heading_fallback_min:
            return unsplit
        cut = config.heading_fallback_cut

    title = body[:cut].strip()
    rest = body[cut + 1:].lstrip(" \t\n" + config.hard_stops + config.soft_stops).strip()
    if not title or not rest:
        return unsplit
    return f"{level} {title}\n\n{rest}"


def _normalize_block(block: str, config: LayoutConfig) -> str:
    if _HEADING_BLOCK_RE.match(block):
        return split_overlong_heading(block, config)
    if _UNTOUCHED_BLOCK_RE.match(block):
        return block
    return split_long_paragraph(block, config)


def _split_fenced(text: str) -> List[Tuple[bool, str]]:
    """Split text into (is_code, segment) runs around ``` fences."""
    segments: List[Tuple[bool, str]] = []
    buffer: List[str] = []
    in_code = False

    for line in text.split("\n"):
        if line.lstrip().startswith("```"):
            if in_code:
                buffer.append(line)
                segments.append((True, "\n".join(buffer)))
                buffer = []
                in_code = False
                continue
            if buffer:
                segments.append((False, "\n".join(buffer)))
            buffer = [line]
            in_code = True
        else:
            buffer.append(line)

    if buffer:
        # an unclosed fence runs to the end of the text
        segments.append((in_code, "\n".join(buffer)))
    return segments


def _layout_prose(text: str, config: LayoutConfig) -> List[str]:
    text = _MISSING_HEADING_SPACE_RE.sub(r"\1 \2", text)

    text = _HEADING_AFTER_STOP_RE.sub(r"\1\n\n\2", text)
    # a heading moved to a line start may still lack its space
    text = _MISSING_HEADING_SPACE_RE.sub(r"\1 \2", text)
    text = _HEADING_AFTER_LINE_RE.sub(r"\1\n\n\2", text)
    text = _HEADING_WITHOUT_GAP_RE.sub(r"\1\n\n", text)

    blocks = [b.strip() for b in _BLOCK_SPLIT_RE.split(text)]
    return [
        _EXCESS_NEWLINES_RE.sub("\n\n", _normalize_block(b, config))
        for b in blocks if b
    ]


def _layout_pass(text: str, config: LayoutConfig) -> str:
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _TRAILING_SPACE_RE.sub("", text)

    blocks: List[str] = []
    for is_code, segment in _split_fenced(text):
        if is_code:
            blocks.append(segment.strip("\n"))
        else:
            blocks.extend(_layout_prose(segment, config))

    return "\n\n".join(b for b in blocks if b).strip()


# ============================================================================
# Main API
# ============================================================================

def format_markdown_layout(text: str, config: Optional[LayoutConfig] = None) -> str:
    """
    Normalize the layout of a markdown article.

    Args:
        text: Article text as accumulated from the stream
        config: Optional LayoutConfig (uses defaults if None)

    Returns:
        Reflowed article; blocks separated by exactly one blank line,
        no leading or trailing whitespace.

    Example:
        >>> format_markdown_layout("#标题\\n正文。")
        '# 标题\\n\\n正文。'
    """
    config = config or DEFAULT_CONFIG
    if not text:
        return ""

    result = _layout_pass(text, config)
    for _ in range(config.max_passes - 1):
        again = _layout_pass(result, config)
        if again == result:
            return result
        result = again
    logger.warning(f"Layout not stable after {config.max_passes} passes")

    return result
