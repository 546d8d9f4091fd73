"""Chalkboard images for formulas."""

from kumao_bot.board.cleanup import BoardCleanupObserver, delete_expired_boards
from kumao_bot.board.renderer import BoardRenderer, split_formula_lines

__all__ = ["BoardCleanupObserver", "BoardRenderer", "delete_expired_boards", "split_formula_lines"]
