"""Discord webhook notifications for discovery events."""

import logging

import httpx

logger = logging.getLogger(__name__)

USER_AGENT = "Game-Discovery/0.1"


def _post_sync(url: str, payload: dict) -> None:
    """Fire-and-forget POST; log on failure."""
    try:
        r = httpx.post(
            url,
            json=payload,
            headers={"User-Agent": USER_AGENT, "Content-Type": "application/json"},
            timeout=10.0,
        )
        if r.status_code >= 400:
            logger.warning("Discord webhook failed: %s %s", r.status_code, r.text[:200])
    except httpx.HTTPError as e:
        logger.warning("Discord webhook error: %s", e)


def notify_discovery_started(webhook_url: str, mode: str) -> None:
    if not webhook_url:
        return
    _post_sync(webhook_url, {"content": f"Game discovery ({mode}) started."})


def notify_discovery_finished(
    webhook_url: str,
    discovered: int = 0,
    new: int = 0,
    directories: int = 0,
) -> None:
    if not webhook_url:
        return
    desc = f"Installed: {discovered} | New: {new} | Directories searched: {directories}"
    _post_sync(
        webhook_url,
        {
            "embeds": [
                {
                    "title": "Discovery finished",
                    "description": desc,
                    "color": 0x00FF00,
                }
            ]
        },
    )


def notify_new_games(webhook_url: str, game_names: list[str], limit: int = 10) -> None:
    if not webhook_url or not game_names:
        return
    names = game_names[:limit]
    extra = f" and {len(game_names) - limit} more" if len(game_names) > limit else ""
    _post_sync(
        webhook_url,
        {
            "embeds": [
                {
                    "title": "New games found",
                    "description": "\n".join(f"• {n}" for n in names) + extra,
                    "color": 0x3498DB,
                }
            ]
        },
    )


def notify_search_errors(webhook_url: str, errors: list[tuple[str, str]], limit: int = 5) -> None:
    """errors: (title, search path) pairs as reported by search discovery."""
    if not webhook_url or not errors:
        return
    lines = [f"{title}: {path}" for title, path in errors[:limit]]
    _post_sync(
        webhook_url,
        {
            "embeds": [
                {
                    "title": "Game discovery errors",
                    "description": "\n".join(lines),
                    "color": 0xFF0000,
                }
            ]
        },
    )
