"""Full discovery flow: load catalog and state, run quick/search discovery, save, notify Discord."""

import logging
import time
from pathlib import Path
from typing import Any

from game_discovery.catalog import load_catalog
from game_discovery.config import (
    get_catalog_path,
    get_concurrency,
    get_discord_webhook_url,
    get_icon_path,
    get_search_paths,
    get_state_path,
)
from game_discovery.discord_notify import (
    notify_discovery_finished,
    notify_discovery_started,
    notify_new_games,
    notify_search_errors,
)
from game_discovery.discovery import quick_discovery, search_discovery
from game_discovery.icons import IconExtractor, IconGenerator
from game_discovery.models import DiscoveredToolResult, DiscoveryResult
from game_discovery.store import DiscoveryStore

logger = logging.getLogger(__name__)

MODES = ("quick", "search", "full")

# Live per-search-path progress of the running discovery, read by the API.
_progress: dict[int, dict[str, Any]] = {}


def get_progress() -> list[dict[str, Any]]:
    return [dict(_progress[index]) for index in sorted(_progress)]


def _on_progress(search_paths: list[str], index: int, percent: float, label: str) -> None:
    _progress[index] = {
        "search_path": search_paths[index],
        "percent": round(percent, 1),
        "label": label,
        "updated": time.time(),
    }


async def run_discovery(
    *,
    mode: str = "full",
    catalog_path: Path | None = None,
    state_path: Path | None = None,
    search_paths: list[str] | None = None,
    discord_url: str | None = None,
    icon_extractor: IconExtractor | None = None,
) -> dict:
    """
    Run quick and/or search discovery and merge the results into the stored state.
    Returns summary: discovered, new, directories, errors.
    """
    if mode not in MODES:
        raise ValueError(f"unknown discovery mode {mode!r}")
    catalog_path = catalog_path or get_catalog_path()
    state_path = state_path or get_state_path()
    search_paths = get_search_paths() if search_paths is None else search_paths
    discord_url = get_discord_webhook_url() if discord_url is None else discord_url

    notify_discovery_started(discord_url, mode)

    games = load_catalog(catalog_path)
    names = {game.id: game.name for game in games}
    store = DiscoveryStore.load(state_path)
    previously_found = {game_id for game_id, r in store.games.items() if r.path is not None}
    icons = IconGenerator(get_icon_path(), icon_extractor)
    errors: list[tuple[str, str]] = []

    def on_game(game_id: str, result: DiscoveryResult | None) -> None:
        store.add_discovered_game(game_id, result)

    def on_tool(game_id: str, result: DiscoveredToolResult) -> None:
        store.add_discovered_tool(game_id, result)

    def on_error(title: str, message: str) -> None:
        errors.append((title, message))

    directories = 0
    if mode in ("quick", "full"):
        found = await quick_discovery(
            games,
            store.snapshot(),
            on_game,
            on_tool,
            icons=icons,
            concurrency=get_concurrency(),
        )
        logger.info("quick discovery found %d games", len(found))
    if mode in ("search", "full") and search_paths:
        _progress.clear()
        directories = await search_discovery(
            games,
            store.snapshot(),
            search_paths,
            on_game,
            on_tool,
            on_error,
            lambda index, percent, label: _on_progress(search_paths, index, percent, label),
            icons=icons,
        )
        logger.info("search discovery read %d directories", directories)
    await icons.drain()

    store.mark_discovery()
    store.save()

    found_now = {game_id for game_id, r in store.games.items() if r.path is not None}
    new_ids = sorted(found_now - previously_found)
    notify_new_games(discord_url, [names.get(game_id, game_id) for game_id in new_ids])
    notify_search_errors(discord_url, errors)
    notify_discovery_finished(
        discord_url,
        discovered=len(found_now),
        new=len(new_ids),
        directories=directories,
    )

    return {
        "discovered": len(found_now),
        "new": new_ids,
        "directories": directories,
        "errors": [{"title": title, "path": path} for title, path in errors],
    }
