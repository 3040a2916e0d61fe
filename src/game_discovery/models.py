"""Application descriptors and discovery results."""

import os
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

# A self-report provider returns the install path directly or a deferred one.
QueryPath = Callable[[], "str | None | Awaitable[str | None]"]
ExecutableResolver = Callable[["str | None"], str]


@dataclass(frozen=True)
class Installable:
    """Anything that can be located by its required files."""

    id: str
    name: str
    required_files: tuple[str, ...]
    executable: ExecutableResolver
    query_path: QueryPath | None = None
    logo: str | None = None


@dataclass(frozen=True)
class Tool(Installable):
    """Auxiliary application belonging to a game."""

    relative: bool = False  # only searched for inside the game's own root
    parameters: tuple[str, ...] = ()


@dataclass(frozen=True)
class Game(Installable):
    supported_tools: tuple[Tool, ...] = ()


@dataclass
class InstallResult:
    """Fields shared by game and tool results."""

    path: str | None = None
    executable: str | None = None
    path_set_manually: bool = False


@dataclass
class DiscoveryResult(InstallResult):
    """Where a game was found. executable is only set when it differs from the default."""

    tools: dict[str, "DiscoveredToolResult"] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "executable": self.executable,
            "path_set_manually": self.path_set_manually,
            "tools": {key: tool.to_dict() for key, tool in self.tools.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DiscoveryResult":
        tools = data.get("tools") or {}
        return cls(
            path=data.get("path"),
            executable=data.get("executable"),
            path_set_manually=bool(data.get("path_set_manually", False)),
            tools={key: DiscoveredToolResult.from_dict(value) for key, value in tools.items()},
        )


@dataclass
class DiscoveredToolResult(InstallResult):
    """Where a tool was found. path is the directory, executable the file in it."""

    tool_id: str = ""
    name: str = ""
    parameters: list[str] = field(default_factory=list)
    hidden: bool = False
    custom: bool = False

    @property
    def executable_path(self) -> str | None:
        if self.path is None or self.executable is None:
            return None
        return os.path.join(self.path, self.executable)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool_id": self.tool_id,
            "name": self.name,
            "path": self.path,
            "executable": self.executable,
            "path_set_manually": self.path_set_manually,
            "parameters": list(self.parameters),
            "hidden": self.hidden,
            "custom": self.custom,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DiscoveredToolResult":
        return cls(
            tool_id=data.get("tool_id", ""),
            name=data.get("name", ""),
            path=data.get("path"),
            executable=data.get("executable"),
            path_set_manually=bool(data.get("path_set_manually", False)),
            parameters=list(data.get("parameters") or []),
            hidden=bool(data.get("hidden", False)),
            custom=bool(data.get("custom", False)),
        )


@dataclass(frozen=True)
class FileEntry:
    """A normalized required file and the application it belongs to."""

    file_name: str
    game_id: str
    application: Installable
