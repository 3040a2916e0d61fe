"""Which files to look for during a walk, and what a hit on one of them means."""

import posixpath
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from game_discovery.models import DiscoveredToolResult, DiscoveryResult, FileEntry, Game
from game_discovery.normalize import Normalize


def _entries(application, game_id: str, normalize: Normalize) -> list[FileEntry]:
    return [
        FileEntry(file_name=normalize(required), game_id=game_id, application=application)
        for required in application.required_files
    ]


def files_for_game(game: Game, normalize: Normalize) -> list[FileEntry]:
    return _entries(game, game.id, normalize)


def tool_files_for_game(
    game: Game,
    discovered_tools: Mapping[str, DiscoveredToolResult],
    normalize: Normalize,
) -> list[FileEntry]:
    """Required files of the game's non-relative tools that haven't been found yet."""
    result: list[FileEntry] = []
    for tool in game.supported_tools:
        if tool.relative:
            continue
        known = discovered_tools.get(tool.id)
        if known is None or known.path is None:
            result.extend(_entries(tool, game.id, normalize))
    return result


def relative_tool_files(
    game: Game,
    discovered_tools: Mapping[str, DiscoveredToolResult],
    normalize: Normalize,
) -> list[FileEntry]:
    """Required files of relative tools not yet discovered with a known executable."""
    result: list[FileEntry] = []
    for tool in game.supported_tools:
        if not tool.relative:
            continue
        known = discovered_tools.get(tool.id)
        if known is None or known.executable is None:
            result.extend(_entries(tool, game.id, normalize))
    return result


def search_files(
    known_games: Iterable[Game],
    discovered: Mapping[str, DiscoveryResult],
    normalize: Normalize,
) -> list[FileEntry]:
    """Files for a brute-force search: undiscovered games and their undiscovered tools."""
    files: list[FileEntry] = []
    for game in known_games:
        prior = discovered.get(game.id)
        if prior is None or prior.path is None:
            files.extend(files_for_game(game, normalize))
        files.extend(tool_files_for_game(game, prior.tools if prior else {}, normalize))
    return files


def _parts(path: str) -> list[str]:
    return [part for part in path.replace("\\", "/").split("/") if part and part != "."]


def _strip_components(file_path: str, count: int) -> str:
    """Remove count trailing components from file_path, keeping the rest verbatim."""
    candidate = file_path
    for _ in range(count):
        candidate = candidate.rstrip("\\/")
        cut = max(candidate.rfind("/"), candidate.rfind("\\"))
        candidate = candidate[: cut + 1] if cut >= 0 else ""
    stripped = candidate.rstrip("\\/")
    # Keep a bare root ("/" or "C:\") intact.
    if not stripped or stripped.endswith(":"):
        return candidate
    return stripped


@dataclass
class MatchIndex:
    """Normalized basenames to look for and the entries each one may satisfy."""

    normalize: Normalize
    match_list: set[str] = field(default_factory=set)
    by_basename: dict[str, list[FileEntry]] = field(default_factory=dict)

    @classmethod
    def build(cls, entries: Iterable[FileEntry], normalize: Normalize) -> "MatchIndex":
        index = cls(normalize=normalize)
        for entry in entries:
            basename = posixpath.basename(entry.file_name.replace("\\", "/"))
            index.match_list.add(basename)
            index.by_basename.setdefault(basename, []).append(entry)
        return index

    def __len__(self) -> int:
        return sum(len(entries) for entries in self.by_basename.values())

    def candidates(self, file_path: str) -> list[tuple[FileEntry, str]]:
        """
        Entries the file at file_path could satisfy, each with the inferred
        install root. A basename hit only counts if the whole required
        relative path matches the tail of file_path.
        """
        hit_parts = _parts(self.normalize(file_path))
        if not hit_parts:
            return []
        result: list[tuple[FileEntry, str]] = []
        for entry in self.by_basename.get(hit_parts[-1], []):
            required_parts = _parts(entry.file_name)
            depth = len(required_parts)
            if depth == 0 or depth > len(hit_parts):
                continue
            if hit_parts[-depth:] != required_parts:
                continue
            result.append((entry, _strip_components(file_path, depth)))
        return result
