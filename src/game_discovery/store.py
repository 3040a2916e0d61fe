"""Discovered games and tools, persisted as JSON."""

import json
import logging
import time
from pathlib import Path
from typing import Any

from game_discovery.models import DiscoveredToolResult, DiscoveryResult

logger = logging.getLogger(__name__)


class DiscoveryStore:
    """
    Owns discovery results across passes. Discovery only reports what it
    found; this is where results are merged, and where a manually set game
    path or a custom tool is protected from being replaced.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self.games: dict[str, DiscoveryResult] = {}
        self.last_discovery: float | None = None

    @classmethod
    def load(cls, path: Path) -> "DiscoveryStore":
        """Load from path. A missing or corrupt file gives an empty store."""
        store = cls(path)
        if not path.exists():
            return store
        try:
            with open(path, encoding="utf-8") as f:
                raw = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("can't read discovery state %s: %s", path, e)
            return store
        store.last_discovery = raw.get("last_discovery")
        for game_id, data in (raw.get("games") or {}).items():
            store.games[game_id] = DiscoveryResult.from_dict(data)
        return store

    def save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "games": {game_id: result.to_dict() for game_id, result in self.games.items()},
            "last_discovery": self.last_discovery,
        }

    def snapshot(self) -> dict[str, DiscoveryResult]:
        """Read-only copy handed to a discovery pass."""
        return {game_id: DiscoveryResult.from_dict(r.to_dict()) for game_id, r in self.games.items()}

    def add_discovered_game(self, game_id: str, result: DiscoveryResult | None) -> bool:
        """Apply a game discovery. Returns False if it was refused."""
        existing = self.games.get(game_id)
        if existing is not None and existing.path_set_manually:
            logger.debug("not replacing manually set path for %s", game_id)
            return False
        if result is None:
            if existing is not None:
                existing.path = None
                existing.executable = None
            return True
        tools = existing.tools if existing is not None else {}
        self.games[game_id] = DiscoveryResult(
            path=result.path,
            executable=result.executable,
            path_set_manually=False,
            tools=tools,
        )
        return True

    def add_discovered_tool(self, game_id: str, result: DiscoveredToolResult) -> bool:
        game = self.games.setdefault(game_id, DiscoveryResult())
        existing = game.tools.get(result.tool_id)
        if existing is not None and existing.custom:
            logger.debug("not replacing custom tool %s of %s", result.tool_id, game_id)
            return False
        if existing is not None:
            result.hidden = existing.hidden
        game.tools[result.tool_id] = result
        return True

    def set_game_path(self, game_id: str, path: str, executable: str | None = None) -> None:
        """Manual override; automated discovery won't touch it afterwards."""
        game = self.games.setdefault(game_id, DiscoveryResult())
        game.path = path
        game.executable = executable
        game.path_set_manually = True

    def clear_game_path(self, game_id: str) -> None:
        game = self.games.get(game_id)
        if game is not None:
            game.path = None
            game.executable = None
            game.path_set_manually = False

    def mark_discovery(self) -> None:
        self.last_discovery = time.time()
