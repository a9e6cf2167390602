"""Database models for Textland."""

import datetime as dt

from sqlmodel import Field, SQLModel, UniqueConstraint


def _now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


class Player(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    fingerprint: str = Field(unique=True, index=True)
    created_at: dt.datetime = Field(default_factory=_now)
    last_seen: dt.datetime = Field(default_factory=_now)


class SavedGame(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    player_id: int = Field(foreign_key="player.id", unique=True, index=True)
    game_id: str
    level_id: str | None = None
    zone_id: str
    zone_index: int = 0
    state_blob: bytes  # zlib-compressed pickle of the game state
    moves: int = 0
    is_finished: bool = False
    started_at: dt.datetime = Field(default_factory=_now)
    last_played: dt.datetime = Field(default_factory=_now)


class ShownCutscene(SQLModel, table=True):
    """A cutscene story a player has already watched."""

    __table_args__ = (UniqueConstraint("player_id", "identifier"),)

    id: int | None = Field(default=None, primary_key=True)
    player_id: int = Field(foreign_key="player.id", index=True)
    identifier: str
    shown_at: dt.datetime = Field(default_factory=_now)
