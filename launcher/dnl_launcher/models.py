from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator
from .game import DARK_AND_LIGHT, GameDefinition


class ServerSettings(BaseModel):
    """Read-only record describing one server instance, supplied by the host."""

    model_config = ConfigDict(frozen=True)

    server_id: str
    name: str = ""
    ip: str = ""
    port: Optional[int] = Field(default=None, ge=1, le=65535)
    query_port: Optional[int] = Field(default=None, ge=1, le=65535)
    map_name: str = ""
    max_players: Optional[int] = Field(default=None, ge=0)
    params: str = ""
    storage_root: Path

    @field_validator("server_id", mode="before")
    @classmethod
    def _id_as_str(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("port", "query_port", "max_players", mode="before")
    @classmethod
    def _blank_is_unset(cls, v: Any) -> Any:
        # hosts store numbers as strings; "" means "not configured"
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("name", "ip", "map_name", "params", mode="before")
    @classmethod
    def _none_is_blank(cls, v: Any) -> Any:
        return "" if v is None else v


def default_server_settings(server_id: str, storage_root: Path,
                            game: GameDefinition = DARK_AND_LIGHT, *, ip: str = "") -> ServerSettings:
    """Settings for a freshly created instance, using the game's default values."""
    return ServerSettings(
        server_id=server_id,
        name=game.full_name,
        ip=ip,
        port=game.default_port,
        query_port=game.default_query_port,
        map_name=game.default_map,
        max_players=game.default_max_players,
        params=game.default_additional,
        storage_root=storage_root,
    )


@dataclass(frozen=True)
class LaunchSpec:
    server_id: str
    working_dir: Path
    executable: Path
    arguments: Tuple[str, ...]
    capture_output: bool = False

    @property
    def command_line(self) -> str:
        return " ".join(self.arguments)

    def argv(self) -> list:
        return [str(self.executable), *self.arguments]
