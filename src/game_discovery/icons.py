"""Background icon extraction for discovered tools."""

import asyncio
import inspect
import logging
import os
from pathlib import Path
from typing import Awaitable, Callable

from game_discovery.models import Installable

logger = logging.getLogger(__name__)

# extractor(exe_path, icon_path); may be sync or async.
IconExtractor = Callable[[str, str], "Awaitable[None] | None"]


def tool_icon_path(icon_root: Path, game_id: str, tool_id: str) -> Path:
    return icon_root / game_id / "icons" / f"{tool_id}.png"


class IconGenerator:
    """
    Fire-and-forget icon extraction. schedule() returns immediately; a failed
    extraction is logged and dropped.
    """

    def __init__(self, icon_root: Path | None, extractor: IconExtractor | None = None) -> None:
        self.icon_root = icon_root
        self.extractor = extractor
        self._tasks: set[asyncio.Task] = set()

    def schedule(self, application: Installable, exe_path: str, game_id: str) -> asyncio.Task | None:
        if application.logo != "auto" or self.icon_root is None or self.extractor is None:
            return None
        icon_path = tool_icon_path(self.icon_root, game_id, application.id)
        task = asyncio.create_task(self._generate(application, exe_path, icon_path, self.extractor))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for pending extractions."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _generate(
        self,
        application: Installable,
        exe_path: str,
        icon_path: Path,
        extractor: IconExtractor,
    ) -> None:
        try:
            await asyncio.to_thread(os.makedirs, icon_path.parent, exist_ok=True)
            if await asyncio.to_thread(icon_path.exists):
                return
            outcome = extractor(exe_path, str(icon_path))
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            logger.warning("failed to fetch exe icon for %s: %s", application.id, e)
