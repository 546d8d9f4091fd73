"""Periodic removal of expired board images."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING

from kumao_bot.board.renderer import BOARD_SUFFIX
from kumao_bot.log_context import set_log_context

if TYPE_CHECKING:
    from kumao_bot.config import BoardConfig

logger = logging.getLogger(__name__)


def delete_expired_boards(directory: Path, max_age_hours: float) -> int:
    """Delete board images older than *max_age_hours* from *directory*.

    Returns the number of deleted files.  Only top-level ``.png`` files are
    considered.
    """
    if not directory.is_dir():
        return 0

    cutoff = time.time() - max_age_hours * 3600
    deleted = 0
    for entry in directory.iterdir():
        if not entry.is_file() or entry.suffix != BOARD_SUFFIX:
            continue
        try:
            if entry.stat().st_mtime < cutoff:
                entry.unlink()
                deleted += 1
        except OSError:
            logger.warning("Failed to delete %s", entry)
    return deleted


class BoardCleanupObserver:
    """Background task that prunes old boards on a fixed interval.

    ``start()`` / ``stop()`` manage an asyncio task; each tick deletes in a
    worker thread.
    """

    def __init__(self, config: BoardConfig, boards_dir: Path) -> None:
        self._config = config
        self._boards_dir = boards_dir
        self._task: asyncio.Task[None] | None = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        if not self._config.enabled:
            logger.info("Board cleanup disabled (boards disabled)")
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        self._task.add_done_callback(_log_task_crash)
        logger.info(
            "Board cleanup started (max_age=%dh, interval=%dm)",
            self._config.max_age_hours,
            self._config.cleanup_interval_minutes,
        )

    async def stop(self) -> None:
        self._running = False
        if self._task:
            task = self._task
            self._task = None
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        logger.info("Board cleanup stopped")

    async def _loop(self) -> None:
        set_log_context(operation="gc")
        interval = max(1, self._config.cleanup_interval_minutes) * 60
        try:
            while self._running:
                await asyncio.sleep(interval)
                try:
                    await self.run_once()
                except asyncio.CancelledError:
                    raise
                except Exception:
                    logger.exception("Board cleanup tick failed (continuing)")
        except asyncio.CancelledError:
            logger.debug("Board cleanup loop cancelled")

    async def run_once(self) -> int:
        deleted = await asyncio.to_thread(
            delete_expired_boards, self._boards_dir, self._config.max_age_hours
        )
        if deleted:
            logger.info("Board cleanup removed %d file(s)", deleted)
        else:
            logger.debug("Board cleanup: nothing to delete")
        return deleted


def _log_task_crash(task: asyncio.Task[None]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Board cleanup loop crashed: %s", exc, exc_info=exc)
