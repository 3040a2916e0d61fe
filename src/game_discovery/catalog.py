"""Load game and tool descriptors from a JSON catalog.

Example:

    {
      "games": [
        {
          "id": "foo",
          "name": "Foo",
          "required_files": ["foo.exe"],
          "executable": "foo.exe",
          "known_paths": ["%PROGRAMFILES%/Foo", "~/Games/Foo"],
          "tools": [
            {"id": "bar", "name": "Bar", "required_files": ["tools/bar.exe"],
             "executable": "tools/bar.exe", "relative": true, "logo": "auto"}
          ]
        }
      ]
    }
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from game_discovery.models import ExecutableResolver, Game, QueryPath, Tool

logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """The catalog file is unreadable or an entry is malformed."""


def _executable_resolver(spec: str | list[str]) -> ExecutableResolver:
    """First candidate present under the root; the first candidate is the default."""
    candidates = [spec] if isinstance(spec, str) else list(spec)
    if not candidates:
        raise CatalogError("executable needs at least one candidate")

    def executable(root: str | None) -> str:
        if root:
            for candidate in candidates:
                if os.path.isfile(os.path.join(root, candidate)):
                    return candidate
        return candidates[0]

    return executable


def _known_paths_query(known_paths: list[str]) -> QueryPath:
    def query_path() -> str | None:
        for raw in known_paths:
            path = os.path.expanduser(os.path.expandvars(raw))
            if os.path.isdir(path):
                return path
        return None

    return query_path


def _common_fields(data: dict[str, Any]) -> dict[str, Any]:
    try:
        app_id = data["id"]
        executable = data["executable"]
    except KeyError as e:
        raise CatalogError(f"catalog entry missing {e.args[0]!r}: {data!r}") from None
    known_paths = data.get("known_paths") or []
    return {
        "id": app_id,
        "name": data.get("name") or app_id,
        "required_files": tuple(data.get("required_files") or ()),
        "executable": _executable_resolver(executable),
        "query_path": _known_paths_query(known_paths) if known_paths else None,
        "logo": data.get("logo"),
    }


def tool_from_dict(data: dict[str, Any]) -> Tool:
    return Tool(
        **_common_fields(data),
        relative=bool(data.get("relative", False)),
        parameters=tuple(data.get("parameters") or ()),
    )


def game_from_dict(data: dict[str, Any]) -> Game:
    tools = tuple(tool_from_dict(tool) for tool in data.get("tools") or [])
    game = Game(**_common_fields(data), supported_tools=tools)
    if not game.required_files and game.query_path is None:
        logger.warning("game %s can't be discovered: no required files or known paths", game.id)
    return game


def load_catalog(path: Path) -> list[Game]:
    """Read all games from path. A broken entry is logged and skipped."""
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        raise CatalogError(f"can't read catalog {path}: {e}") from e
    games: list[Game] = []
    for entry in raw.get("games") or []:
        try:
            games.append(game_from_dict(entry))
        except (CatalogError, TypeError, AttributeError) as e:
            logger.error("skipping catalog entry: %s", e)
    return games
