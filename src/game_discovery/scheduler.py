"""APScheduler: run full discovery on schedule (cron or 'daily')."""

import asyncio
import logging
from typing import Any

from apscheduler.schedulers.background import BackgroundScheduler

from game_discovery.config import get_scan_schedule
from game_discovery.scan_flow import run_discovery

logger = logging.getLogger(__name__)

_scheduler: BackgroundScheduler | None = None


def _run_discovery_sync() -> None:
    """Called by scheduler in background thread; run async run_discovery."""
    try:
        asyncio.run(run_discovery(mode="full"))
    except Exception as e:
        logger.exception("Scheduled discovery failed: %s", e)


def _parse_schedule(schedule: str) -> dict[str, Any] | None:
    """
    Parse GAME_DISCOVERY_SCHEDULE. Supports:
    - "daily" or "day" -> 3am every day
    - Cron string "minute hour day month weekday" e.g. "0 3 * * *"
    Returns kwargs for add_job(trigger='cron', ...) or None if invalid/empty.
    """
    schedule = (schedule or "").strip().lower()
    if not schedule:
        return None
    if schedule in ("daily", "day"):
        return {"hour": 3, "minute": 0}
    parts = schedule.split()
    if len(parts) == 5:
        return {
            "minute": parts[0],
            "hour": parts[1],
            "day": parts[2],
            "month": parts[3],
            "day_of_week": parts[4],
        }
    return None


def start_scheduler() -> None:
    """Start background scheduler if GAME_DISCOVERY_SCHEDULE is set."""
    global _scheduler
    schedule = get_scan_schedule()
    cron_kw = _parse_schedule(schedule)
    if cron_kw is None:
        logger.info("No discovery schedule set; only on-demand discovery available.")
        return
    _scheduler = BackgroundScheduler()
    # A long search must not overlap the next run.
    _scheduler.add_job(_run_discovery_sync, "cron", **cron_kw, id="game_discovery", max_instances=1)
    _scheduler.start()
    logger.info("Discovery scheduler started: %s", schedule)


def stop_scheduler() -> None:
    """Stop the background scheduler."""
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        _scheduler = None
        logger.info("Discovery scheduler stopped.")
