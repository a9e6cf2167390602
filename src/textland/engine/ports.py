"""Interfaces the engine talks to. Implementations live outside the engine."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Renderer(Protocol):
    """Receives frames and key pickups.

    ``show_message(text, **options)`` and ``show_npc_dialogue(npc, lines,
    **options)`` are optional channels; use cases check for them and fall
    back when a renderer does not offer them.
    """

    def render(self, snapshot: Any) -> None: ...

    def show_key_info(self, key: Any) -> None: ...


@runtime_checkable
class Navigator(Protocol):
    """Moves the player's game to another level."""

    def transition_to_level(self, level_id: str) -> None: ...


class ZoneProvider(Protocol):
    def create_zone(self, zone_id: str) -> Any: ...

    def get_zone_config(self, zone_id: str) -> Any: ...

    def has_zone(self, zone_id: str) -> bool: ...

    def get_available_zone_ids(self) -> list[str]: ...

    def get_all_zone_info(self) -> list[dict]: ...


class CutsceneRenderer(Protocol):
    async def show_cutscene(self, story: Any) -> None: ...
