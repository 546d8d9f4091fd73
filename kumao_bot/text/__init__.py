"""Plain-text rendering of model output for LINE."""

from kumao_bot.text.sanitizer import (
    ANSWER_MARK,
    LINE_TEXT_LIMIT,
    extract_latex_block,
    sanitize_text,
    split_text,
    strip_latex_block,
)

__all__ = [
    "ANSWER_MARK",
    "LINE_TEXT_LIMIT",
    "extract_latex_block",
    "sanitize_text",
    "split_text",
    "strip_latex_block",
]
