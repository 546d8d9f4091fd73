"""Rewrite model output into plain chat text.

LINE renders messages as plain text, so LaTeX from the model is turned into
Unicode and ASCII notation that reads well on a phone:  ``\\frac{a}{b}``
becomes ``(a)/(b)``, ``\\sqrt{x}`` becomes ``√(x)``, Greek commands become
letters, and so on.  A single ``<LATEX> ... </LATEX>`` block is reserved for
image rendering and is pulled out before sanitizing.
"""

from __future__ import annotations

import re

LINE_TEXT_LIMIT = 5000
"""Maximum characters per LINE text message."""

ANSWER_MARK = "【答え】"

_LATEX_BLOCK_RE = re.compile(r"<LATEX>\s*([\s\S]*?)\s*</LATEX>", re.IGNORECASE)

# Applied in order; later rules see the output of earlier ones.
_COMMAND_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\$\$?"), ""),
    (re.compile("¥"), "\\\\"),
    (re.compile(r"\\left\s*"), "("),
    (re.compile(r"\\right\s*"), ")"),
    (re.compile(r"\\times"), "×"),
    (re.compile(r"\\cdot"), "×"),
    (re.compile(r"\\div"), "÷"),
    (re.compile(r"\\pm"), "±"),
    (re.compile(r"\\sqrt\{([^{}]+)\}"), r"√(\1)"),
    (re.compile(r"\\frac\{([^{}]+)\}\{([^{}]+)\}"), r"(\1)/(\2)"),
    (re.compile(r"\\overline\{([^{}]+)\}"), r"‾\1"),
    (re.compile(r"\\degree"), "°"),
)

GREEK_LETTERS: dict[str, str] = {
    "alpha": "α",
    "beta": "β",
    "gamma": "γ",
    "delta": "δ",
    "theta": "θ",
    "lambda": "λ",
    "mu": "µ",
    "pi": "π",
    "sigma": "σ",
    "omega": "ω",
    "Omega": "Ω",
    "Delta": "Δ",
}

_GREEK_RE = re.compile(r"\\(" + "|".join(GREEK_LETTERS) + ")")
_ARROW_RE = re.compile(r"\\to|->")
_SQUARE_RE = re.compile(r"([A-Za-z0-9])\^2\b", re.ASCII)
_CUBE_RE = re.compile(r"([A-Za-z0-9])\^3\b", re.ASCII)
_OPERATOR_RE = re.compile(r"([0-9A-Za-z)\]])([=+\-×÷/])([0-9A-Za-z(\[])")
_ANSWER_RE = re.compile(r"\n?" + ANSWER_MARK)
_SPACES_RE = re.compile(r"[ \t]+")


def sanitize_text(text: str) -> str:
    """Convert LaTeX-flavoured model output into readable plain text."""
    if not text:
        return text

    out = text
    for pattern, replacement in _COMMAND_RULES:
        out = pattern.sub(replacement, out)

    out = _GREEK_RE.sub(lambda m: GREEK_LETTERS[m.group(1)], out)
    out = _ARROW_RE.sub("→", out)
    out = _SQUARE_RE.sub(r"\1²", out)
    out = _CUBE_RE.sub(r"\1³", out)
    out = _OPERATOR_RE.sub(r"\1 \2 \3", out)
    out = _ANSWER_RE.sub("\n\n" + ANSWER_MARK, out)
    return _SPACES_RE.sub(" ", out).strip()


def extract_latex_block(text: str) -> str | None:
    """Return the body of the first ``<LATEX>`` block, or None."""
    if not text:
        return None
    match = _LATEX_BLOCK_RE.search(text)
    return match.group(1).strip() if match else None


def strip_latex_block(text: str) -> str:
    """Remove the first ``<LATEX>`` block from *text*."""
    return _LATEX_BLOCK_RE.sub("", text, count=1).strip()


def _pack(parts: list[str], separator: str, max_len: int) -> list[str]:
    """Join *parts* greedily into chunks up to *max_len*, in order.

    A part that cannot fit on its own is split further: paragraphs by line,
    lines by hard cuts.
    """
    chunks: list[str] = []
    current = ""

    for part in parts:
        candidate = f"{current}{separator}{part}" if current else part
        if len(candidate) <= max_len:
            current = candidate
            continue
        if current:
            chunks.append(current)
            current = ""
        if len(part) <= max_len:
            current = part
        elif separator == "\n\n":
            chunks.extend(_pack(part.split("\n"), "\n", max_len))
        else:
            chunks.extend(part[i : i + max_len] for i in range(0, len(part), max_len))

    if current:
        chunks.append(current)
    return chunks


def split_text(text: str, max_len: int = LINE_TEXT_LIMIT) -> list[str]:
    """Split *text* into chunks that fit a single LINE text message.

    Paragraph boundaries are preferred, then line boundaries, then hard
    cuts for lines that are still too long.
    """
    if len(text) <= max_len:
        return [text]

    return _pack(text.split("\n\n"), "\n\n", max_len)
