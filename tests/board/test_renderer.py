"""Tests for chalkboard formula rendering."""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from kumao_bot.board.renderer import BoardRenderer, split_formula_lines
from kumao_bot.config import BoardConfig
from kumao_bot.errors import BoardRenderError


@pytest.fixture
def renderer(tmp_path: Path) -> BoardRenderer:
    return BoardRenderer(BoardConfig(), tmp_path / "boards")


class TestSplitFormulaLines:
    def test_single_line(self) -> None:
        assert split_formula_lines("x^2 + 1") == ["x^2 + 1"]

    def test_splits_on_double_backslash_and_newline(self) -> None:
        assert split_formula_lines("a = 1 \\\\ b = 2\nc = 3") == ["a = 1", "b = 2", "c = 3"]

    def test_drops_environments_and_ampersands(self) -> None:
        latex = "\\begin{aligned} x &= 1 \\\\ y &= 2 \\end{aligned}"
        assert split_formula_lines(latex) == ["x = 1", "y = 2"]

    def test_text_becomes_mathrm(self) -> None:
        assert split_formula_lines("v = 3\\text{m/s}") == ["v = 3\\mathrm{m/s}"]

    def test_display_delimiters_removed(self) -> None:
        assert split_formula_lines("\\[ x \\]") == ["x"]
        assert split_formula_lines("$x$") == ["x"]

    def test_blank_input(self) -> None:
        assert split_formula_lines("  \n ") == []


class TestRender:
    def test_writes_png_with_board_background(self, renderer: BoardRenderer, tmp_path: Path) -> None:
        out = renderer.render("x = \\frac{-b \\pm \\sqrt{b^2 - 4ac}}{2a}", tmp_path / "b" / "one.png")
        assert out.exists()
        with Image.open(out) as img:
            assert img.format == "PNG"
            assert img.width >= 900
            assert img.height >= 360
            assert img.convert("RGB").getpixel((0, 0)) == (18, 48, 40)

    def test_formula_pixels_are_light(self, renderer: BoardRenderer, tmp_path: Path) -> None:
        out = renderer.render("E = mc^2", tmp_path / "e.png")
        with Image.open(out) as img:
            lightest = max(sum(px) for px in img.convert("RGB").getdata())
        assert lightest > 600

    def test_multi_line_is_taller(self, renderer: BoardRenderer, tmp_path: Path) -> None:
        many = " \\\\ ".join(f"x_{i} = {i}" for i in range(12))
        out = renderer.render(many, tmp_path / "tall.png")
        with Image.open(out) as img:
            assert img.height > 360

    def test_parse_error_raises(self, renderer: BoardRenderer, tmp_path: Path) -> None:
        with pytest.raises(BoardRenderError):
            renderer.render("\\notarealcommand{x}", tmp_path / "bad.png")

    def test_empty_formula_raises(self, renderer: BoardRenderer, tmp_path: Path) -> None:
        with pytest.raises(BoardRenderError, match="empty"):
            renderer.render("\\begin{aligned}\\end{aligned}", tmp_path / "empty.png")

    def test_unwritable_directory_raises(self, renderer: BoardRenderer, tmp_path: Path) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file")
        with pytest.raises(BoardRenderError, match="could not write"):
            renderer.render("x^2", blocker / "boards" / "b.png")


async def test_render_board_returns_id(renderer: BoardRenderer) -> None:
    board_id = await renderer.render_board("a^2 + b^2 = c^2")
    assert len(board_id) == 32
    assert (renderer.boards_dir / f"{board_id}.png").is_file()


async def test_render_board_ids_unique(renderer: BoardRenderer) -> None:
    first = await renderer.render_board("x")
    second = await renderer.render_board("x")
    assert first != second
