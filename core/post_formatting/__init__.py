"""
Post-Formatting Module

Deterministic layout pass applied to an article once its stream has closed.
"""

from core.post_formatting.markdown_layout import (
    LayoutConfig,
    format_markdown_layout,
    split_long_paragraph,
    split_overlong_heading,
    split_sentences,
)

__all__ = [
    'LayoutConfig',
    'format_markdown_layout',
    'split_long_paragraph',
    'split_overlong_heading',
    'split_sentences',
]
