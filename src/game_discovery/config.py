"""Environment-based configuration."""

import os
from pathlib import Path

DEFAULT_CONCURRENCY = 8


def get_catalog_path() -> Path:
    """JSON file describing the games (and their tools) to look for."""
    raw = os.environ.get("GAME_DISCOVERY_CATALOG", "")
    if not raw:
        raise ValueError("GAME_DISCOVERY_CATALOG must be set")
    return Path(raw).resolve()


def get_state_path() -> Path:
    """JSON file holding discovered games and tools."""
    raw = os.environ.get("GAME_DISCOVERY_STATE", "")
    if not raw:
        raise ValueError("GAME_DISCOVERY_STATE must be set")
    return Path(raw).resolve()


def get_search_paths() -> list[str]:
    """Directories to search, separated like PATH. Empty = quick discovery only."""
    raw = os.environ.get("GAME_DISCOVERY_SEARCH_PATHS", "")
    return [p.strip() for p in raw.split(os.pathsep) if p.strip()]


def get_icon_path() -> Path | None:
    """Where auto-generated tool icons go. Unset = no icon generation."""
    raw = os.environ.get("GAME_DISCOVERY_ICONS", "").strip()
    return Path(raw).resolve() if raw else None


def get_concurrency() -> int:
    """How many games quick discovery queries at once."""
    raw = os.environ.get("GAME_DISCOVERY_CONCURRENCY", "").strip()
    try:
        return max(int(raw), 1) if raw else DEFAULT_CONCURRENCY
    except ValueError:
        return DEFAULT_CONCURRENCY


def get_scan_schedule() -> str:
    """Cron-like or 'daily' for automatic discovery. Empty = on-demand only."""
    return os.environ.get("GAME_DISCOVERY_SCHEDULE", "").strip()


def get_discord_webhook_url() -> str:
    """Optional Discord webhook URL for events."""
    return os.environ.get("DISCORD_WEBHOOK_URL", "").strip()
