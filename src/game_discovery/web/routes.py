"""API routes for discovered games, manual path overrides and running discovery."""

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from game_discovery.catalog import load_catalog
from game_discovery.config import get_catalog_path, get_state_path
from game_discovery.models import DiscoveryResult, Game
from game_discovery.scan_flow import MODES, get_progress, run_discovery
from game_discovery.store import DiscoveryStore
from game_discovery.verifier import MissingRequiredFile, assert_application_dir

api_router = APIRouter()


def _game_dict(game: Game, result: DiscoveryResult | None) -> dict:
    result = result or DiscoveryResult()
    return {
        "id": game.id,
        "name": game.name,
        "path": result.path,
        "executable": result.executable or game.executable(result.path),
        "path_set_manually": result.path_set_manually,
        "tools": [tool.to_dict() for tool in result.tools.values()],
    }


def _find_game(game_id: str) -> Game:
    for game in load_catalog(get_catalog_path()):
        if game.id == game_id:
            return game
    raise HTTPException(status_code=404, detail="Game not found")


@api_router.get("/games")
async def list_games():
    """All catalog games with what has been discovered about them."""
    store = DiscoveryStore.load(get_state_path())
    out = [_game_dict(game, store.games.get(game.id)) for game in load_catalog(get_catalog_path())]
    return {"games": out, "total": len(out)}


@api_router.get("/games/{game_id}")
async def get_game(game_id: str):
    game = _find_game(game_id)
    store = DiscoveryStore.load(get_state_path())
    return _game_dict(game, store.games.get(game_id))


class PathBody(BaseModel):
    path: str


@api_router.put("/games/{game_id}/path")
async def set_game_path(game_id: str, body: PathBody):
    """Set the install path by hand. Discovery never replaces it afterwards."""
    game = _find_game(game_id)
    try:
        path = await assert_application_dir(game, body.path.strip())
    except MissingRequiredFile as e:
        raise HTTPException(status_code=400, detail=f"Missing required file: {e.path}")
    except OSError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if path is None:
        raise HTTPException(status_code=400, detail="Path must not be empty")
    store = DiscoveryStore.load(get_state_path())
    exe = game.executable(path)
    store.set_game_path(game_id, path, exe if exe != game.executable(None) else None)
    store.save()
    return {"ok": True, "game": _game_dict(game, store.games[game_id])}


@api_router.delete("/games/{game_id}/path")
async def clear_game_path(game_id: str):
    """Forget the install path so discovery may find the game again."""
    game = _find_game(game_id)
    store = DiscoveryStore.load(get_state_path())
    store.clear_game_path(game_id)
    store.save()
    return {"ok": True, "game": _game_dict(game, store.games.get(game_id))}


@api_router.post("/discovery")
async def trigger_discovery(mode: str = Query("full")):
    """Run discovery (waits for it to finish). Returns summary."""
    if mode not in MODES:
        raise HTTPException(status_code=400, detail=f"mode must be one of {', '.join(MODES)}")
    return await run_discovery(mode=mode)


@api_router.get("/discovery/progress")
async def discovery_progress():
    """Per search path progress of the current (or last) search."""
    return {"search_paths": get_progress()}
