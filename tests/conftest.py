"""Shared fixtures: descriptor builders and on-disk install trees."""

from __future__ import annotations

from pathlib import Path

import pytest

from game_discovery.models import DiscoveredToolResult, DiscoveryResult, Game, Tool


def fixed_executable(name: str):
    return lambda root: name


def make_game(game_id: str, required: list[str], exe: str | None = None, **kwargs) -> Game:
    return Game(
        id=game_id,
        name=game_id.title(),
        required_files=tuple(required),
        executable=fixed_executable(exe or required[0]),
        **kwargs,
    )


def make_tool(tool_id: str, required: list[str], exe: str | None = None, **kwargs) -> Tool:
    return Tool(
        id=tool_id,
        name=tool_id.title(),
        required_files=tuple(required),
        executable=fixed_executable(exe or required[0]),
        **kwargs,
    )


def touch(root: Path, *relative: str) -> None:
    for rel in relative:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"")


class Recorder:
    """Collects everything discovery reports through its callbacks."""

    def __init__(self) -> None:
        self.games: list[tuple[str, DiscoveryResult | None]] = []
        self.tools: list[tuple[str, DiscoveredToolResult]] = []
        self.errors: list[tuple[str, str]] = []
        self.progress: list[tuple[int, float, str]] = []

    def on_game(self, game_id, result):
        self.games.append((game_id, result))

    def on_tool(self, game_id, result):
        self.tools.append((game_id, result))

    def on_error(self, title, message):
        self.errors.append((title, message))

    def on_progress(self, index, percent, label):
        self.progress.append((index, percent, label))

    def game_paths(self) -> dict[str, str | None]:
        return {game_id: (r.path if r else None) for game_id, r in self.games}

    def tool_results(self) -> dict[str, DiscoveredToolResult]:
        return {r.tool_id: r for _, r in self.tools}


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
