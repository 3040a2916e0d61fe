"""Quick (self-reported) and search (brute-force) discovery of games and tools."""

import asyncio
import contextlib
import inspect
import logging
import os
from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping

from game_discovery.icons import IconGenerator
from game_discovery.match_index import MatchIndex, relative_tool_files, search_files
from game_discovery.models import (
    DiscoveredToolResult,
    DiscoveryResult,
    Game,
    Installable,
    QueryPath,
    Tool,
)
from game_discovery.normalize import Normalize, get_normalize_func
from game_discovery.progress import Progress
from game_discovery.verifier import verify_application_dir
from game_discovery.walker import walk

logger = logging.getLogger(__name__)

DiscoveredCB = Callable[[str, "DiscoveryResult | None"], None]
DiscoveredToolCB = Callable[[str, DiscoveredToolResult], None]
ErrorCB = Callable[[str, str], None]
ProgressCB = Callable[[int, float, str], None]

MISSING_SEARCH_PATH = "A search path doesn't exist or is not connected"
DEFAULT_CONCURRENCY = 8


def _nop_game(game_id: str, result: DiscoveryResult | None) -> None:
    pass


async def _resolve_query(query_path: QueryPath) -> str | None:
    """Call a self-report provider, whether it answers now or later."""
    value = query_path()
    if inspect.isawaitable(value):
        value = await value
    return value or None


def _game_result(game: Game, path: str) -> DiscoveryResult:
    exe = game.executable(path)
    return DiscoveryResult(path=path, executable=exe if exe != game.executable(None) else None)


def _tool_result(tool: Installable, path: str) -> DiscoveredToolResult:
    return DiscoveredToolResult(
        tool_id=tool.id,
        name=tool.name,
        path=path,
        executable=tool.executable(path),
        parameters=list(tool.parameters) if isinstance(tool, Tool) else [],
        hidden=False,
        custom=False,
    )


def _emit_tool(
    tool: Installable,
    path: str,
    game_id: str,
    on_discovered_tool: DiscoveredToolCB,
    icons: IconGenerator | None,
) -> None:
    result = _tool_result(tool, path)
    if icons is not None:
        icons.schedule(tool, os.path.join(path, result.executable), game_id)
    logger.info("found tool %s for %s at %s", tool.id, game_id, path)
    on_discovered_tool(game_id, result)


async def quick_discovery_tools(
    game_id: str,
    tools: Iterable[Tool],
    on_discovered_tool: DiscoveredToolCB,
    icons: IconGenerator | None = None,
) -> None:
    """Ask every tool that can report its own location where it is."""

    async def discover(tool: Tool) -> None:
        if tool.query_path is None:
            return
        try:
            tool_path = await _resolve_query(tool.query_path)
        except Exception as e:
            logger.debug("tool not found %s: %s", tool.id, e)
            return
        if not tool_path:
            logger.debug("tool not found %s", tool.id)
            return
        try:
            _emit_tool(tool, tool_path, game_id, on_discovered_tool, icons)
        except Exception:
            logger.exception("failed to determine tool setup for %s", tool.id)

    await asyncio.gather(*(discover(tool) for tool in tools))


async def _stat_existing(path: str) -> str | None:
    try:
        await asyncio.to_thread(os.stat, path)
    except FileNotFoundError:
        logger.info("rejecting game discovery, directory doesn't exist: %s", path)
        return None
    return path


async def _quick_discover_game(
    game: Game,
    discovered: Mapping[str, DiscoveryResult],
    on_discovered_game: DiscoveredCB,
    on_discovered_tool: DiscoveredToolCB,
    icons: IconGenerator | None,
) -> str | None:
    await quick_discovery_tools(game.id, game.supported_tools, on_discovered_tool, icons)
    if game.query_path is None:
        return None
    prior = discovered.get(game.id)
    if prior is not None and prior.path_set_manually:
        # don't override manually set game location
        return None
    try:
        resolved = await _resolve_query(game.query_path)
    except Exception:
        logger.exception("failed to use game support plugin for %s", game.id)
        return None
    if resolved is None:
        return None
    try:
        resolved = await _stat_existing(resolved)
    except OSError as e:
        on_discovered_game(game.id, None)
        logger.debug("game not found %s: %s", game.id, str(e).replace("\n", "; "))
        return None
    if resolved is None:
        return None
    try:
        result = _game_result(game, resolved)
    except Exception:
        logger.exception("failed to resolve executable for %s", game.id)
        return None
    logger.info("found game %s at %s", game.name, resolved)
    on_discovered_game(game.id, result)
    try:
        normalize = await get_normalize_func(resolved)
        await discover_relative_tools(
            game, resolved, discovered, on_discovered_tool, normalize, icons=icons
        )
    except OSError as e:
        logger.warning("relative tool discovery failed for %s: %s", game.id, e)
    return game.id


async def quick_discovery(
    known_games: Iterable[Game],
    discovered: Mapping[str, DiscoveryResult],
    on_discovered_game: DiscoveredCB,
    on_discovered_tool: DiscoveredToolCB,
    *,
    icons: IconGenerator | None = None,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> list[str]:
    """
    Run the "quick" discovery using the paths games and tools report for
    themselves. Returns the ids of the games found.
    """
    semaphore = asyncio.Semaphore(max(concurrency, 1))

    async def run(game: Game) -> str | None:
        async with semaphore:
            return await _quick_discover_game(
                game, discovered, on_discovered_game, on_discovered_tool, icons
            )

    found = await asyncio.gather(*(run(game) for game in known_games))
    return [game_id for game_id in found if game_id is not None]


@dataclass
class _MatchHandler:
    """Verifies walk hits and emits what they turn out to be."""

    index: MatchIndex
    normalize: Normalize
    discovered: Mapping[str, DiscoveryResult]
    on_discovered_game: DiscoveredCB
    on_discovered_tool: DiscoveredToolCB
    icons: IconGenerator | None = None
    tested: set[tuple[str, str, str]] = field(default_factory=set)

    async def __call__(self, file_path: str) -> None:
        for entry, candidate in self.index.candidates(file_path):
            key = (entry.game_id, entry.application.id, candidate)
            if key in self.tested:
                continue
            self.tested.add(key)
            try:
                await self._test_application_dir(entry.application, candidate, entry.game_id)
            except Exception:
                logger.exception(
                    "failed to handle %s at %s", entry.application.id, candidate
                )

    async def _test_application_dir(
        self, application: Installable, candidate: str, game_id: str
    ) -> None:
        try:
            await verify_application_dir(application, candidate)
        except OSError as e:
            logger.info("invalid %s at %s: %s", application.id, candidate, e)
            return
        if isinstance(application, Game):
            prior = self.discovered.get(game_id)
            if prior is not None and prior.path_set_manually:
                return
            logger.info("found game %s at %s", application.name, candidate)
            self.on_discovered_game(game_id, _game_result(application, candidate))
            await discover_relative_tools(
                application,
                candidate,
                self.discovered,
                self.on_discovered_tool,
                self.normalize,
                icons=self.icons,
            )
        else:
            _emit_tool(application, candidate, game_id, self.on_discovered_tool, self.icons)


async def discover_relative_tools(
    game: Game,
    game_path: str,
    discovered: Mapping[str, DiscoveryResult],
    on_discovered_tool: DiscoveredToolCB,
    normalize: Normalize,
    *,
    icons: IconGenerator | None = None,
) -> None:
    """Search a discovered game's own directory for its relative tools."""
    prior = discovered.get(game.id)
    files = relative_tool_files(game, prior.tools if prior else {}, normalize)
    if not files:
        return
    logger.info("discovering relative tools in %s", game_path)
    index = MatchIndex.build(files, normalize)
    handler = _MatchHandler(
        index=index,
        normalize=normalize,
        discovered=discovered,
        on_discovered_game=_nop_game,
        on_discovered_tool=on_discovered_tool,
        icons=icons,
    )
    await walk(game_path, index.match_list, handler, None, normalize)


def _fix_drive_root(search_path: str) -> str:
    # Windows keeps a working directory per drive, so "C:" isn't the drive root.
    return search_path + os.sep if search_path.endswith(":") else search_path


async def search_discovery(
    known_games: list[Game],
    discovered: Mapping[str, DiscoveryResult],
    search_paths: Iterable[str],
    on_discovered_game: DiscoveredCB,
    on_discovered_tool: DiscoveredToolCB,
    on_error: ErrorCB,
    progress_cb: ProgressCB,
    *,
    icons: IconGenerator | None = None,
    limiter: asyncio.Semaphore | None = None,
) -> int:
    """
    Run the "search" discovery: walk every search path looking for the
    required files of games and tools not found yet. Returns the number of
    directories read across all search paths.
    """

    async def search_root(index: int, search_path: str) -> int:
        read = 0
        progress = Progress(
            0, 100, lambda percent, label: progress_cb(index, percent, label)
        )
        async with limiter if limiter is not None else contextlib.nullcontext():
            logger.info("searching for games & tools in %s", search_path)
            try:
                normalize = await get_normalize_func(
                    search_path, separators=True, unicode=False, relative=False
                )
                match_index = MatchIndex.build(
                    search_files(known_games, discovered, normalize), normalize
                )
                if not match_index.match_list:
                    logger.info("nothing left to search for in %s", search_path)
                else:
                    handler = _MatchHandler(
                        index=match_index,
                        normalize=normalize,
                        discovered=discovered,
                        on_discovered_game=on_discovered_game,
                        on_discovered_tool=on_discovered_tool,
                        icons=icons,
                    )
                    read = await walk(
                        search_path, match_index.match_list, handler, progress, normalize
                    )
                logger.info("finished game search in %s", search_path)
            except FileNotFoundError as e:
                logger.error("game search failed in %s: %s", search_path, e)
                on_error(MISSING_SEARCH_PATH, search_path)
            except Exception as e:
                logger.error("game search failed in %s: %s", search_path, e)
                on_error(str(e), search_path)
            progress.finish(search_path)
        return read

    counts = await asyncio.gather(
        *(search_root(index, _fix_drive_root(path)) for index, path in enumerate(search_paths))
    )
    return sum(counts)
