"""Chalkboard rendering of LaTeX formulas.

Formulas are typeset with matplotlib's mathtext (no TeX installation
needed), one image per line, and composited in white onto a dark green
board with Pillow.
"""

from __future__ import annotations

import asyncio
import io
import logging
import re
import uuid
from pathlib import Path
from typing import TYPE_CHECKING

from matplotlib import mathtext
from matplotlib.font_manager import FontProperties
from PIL import Image

from kumao_bot.errors import BoardRenderError

if TYPE_CHECKING:
    from kumao_bot.config import BoardConfig

logger = logging.getLogger(__name__)

BOARD_SUFFIX = ".png"

_ENVIRONMENT_RE = re.compile(r"\\(?:begin|end)\{[^{}]*\}")
_LINE_BREAK_RE = re.compile(r"\\\\|\n")
_TEXT_CMD_RE = re.compile(r"\\text\{")
_DISPLAY_DELIMS_RE = re.compile(r"\\\[|\\\]|\$")


def split_formula_lines(latex: str) -> list[str]:
    """Normalise *latex* for mathtext and split it into renderable lines.

    Environments, alignment ampersands and display delimiters have no
    mathtext equivalent and are dropped; ``\\text`` becomes ``\\mathrm``.
    """
    cleaned = _ENVIRONMENT_RE.sub("", latex)
    cleaned = _DISPLAY_DELIMS_RE.sub("", cleaned)
    cleaned = _TEXT_CMD_RE.sub(r"\\mathrm{", cleaned).replace("&", "")
    return [line.strip() for line in _LINE_BREAK_RE.split(cleaned) if line.strip()]


class BoardRenderer:
    """Renders formulas to PNG files under *boards_dir*."""

    def __init__(self, config: BoardConfig, boards_dir: Path) -> None:
        self._config = config
        self._boards_dir = boards_dir

    @property
    def boards_dir(self) -> Path:
        return self._boards_dir

    def _render_line(self, line: str) -> Image.Image:
        buf = io.BytesIO()
        try:
            mathtext.math_to_image(
                f"${line}$",
                buf,
                prop=FontProperties(size=self._config.font_size),
                dpi=self._config.dpi,
                format="png",
                color=self._config.foreground,
            )
        except ValueError as exc:
            msg = f"mathtext could not parse {line!r}: {exc}"
            raise BoardRenderError(msg) from exc
        buf.seek(0)
        with Image.open(buf) as img:
            return img.convert("RGBA")

    def render(self, latex: str, out_path: Path) -> Path:
        """Render *latex* onto a board image written to *out_path*."""
        lines = split_formula_lines(latex)
        if not lines:
            msg = "formula is empty"
            raise BoardRenderError(msg)

        cfg = self._config
        parts = [self._render_line(line) for line in lines]
        formula_w = max(p.width for p in parts)
        formula_h = sum(p.height for p in parts) + cfg.line_spacing * (len(parts) - 1)

        width = max(cfg.min_width, formula_w + 2 * cfg.margin)
        height = max(cfg.min_height, formula_h + 2 * cfg.margin)
        board = Image.new("RGB", (width, height), cfg.background)

        top = cfg.margin
        for part in parts:
            board.paste(part, (cfg.margin, top), mask=part)
            top += part.height + cfg.line_spacing

        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
            board.save(out_path, format="PNG")
        except OSError as exc:
            msg = f"could not write board {out_path}: {exc}"
            raise BoardRenderError(msg) from exc
        logger.debug("Rendered board %s (%dx%d, %d line(s))", out_path.name, width, height, len(parts))
        return out_path

    async def render_board(self, latex: str) -> str:
        """Render *latex* to a new board file and return its id.

        The file is ``<boards_dir>/<id>.png``.  Rendering runs in a worker
        thread so the event loop keeps serving webhooks.
        """
        board_id = uuid.uuid4().hex
        out_path = self._boards_dir / f"{board_id}{BOARD_SUFFIX}"
        await asyncio.to_thread(self.render, latex, out_path)
        logger.info("Board rendered id=%s", board_id)
        return board_id
