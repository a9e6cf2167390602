"""Load the game content YAML files into a World.

Layout of the data directory::

    games.yaml        games and their ordered levels
    cutscenes.yaml    explicit cutscene stories (optional)
    zones/*.yaml      one zone per file

Zone coordinates are zone-relative ``[x, y]`` pairs. Anything malformed
raises ConfigurationError at load time so a broken content file never
reaches a player.
"""

from dataclasses import dataclass
from pathlib import Path

import yaml

from .cutscenes import CutsceneProvider, CutsceneStory
from .errors import ConfigurationError
from .registry import Game, GameRegistry, GameType, Level, ZoneRegistry
from .state import create_level_game_state, create_textland_game_state
from .world import Position
from .zone import ZoneConfig

GAME_STATE_FACTORIES = {
    GameType.LEVEL_BASED: create_level_game_state,
    GameType.TEXTLAND: create_textland_game_state,
}


@dataclass
class World:
    """Everything loaded from content, shared by all players."""

    games: GameRegistry
    zones: ZoneRegistry
    cutscenes: CutsceneProvider


def _read_yaml(path):
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path.name}: {exc}") from exc


def _require(data: dict, key: str, where: str):
    if not isinstance(data, dict) or data.get(key) in (None, ""):
        raise ConfigurationError(f"{where}: missing required key '{key}'")
    return data[key]


def _pair(value, where: str) -> tuple[int, int]:
    try:
        position = Position.from_pair(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{where}: invalid position {value!r}") from exc
    return position.x, position.y


def _positioned(items, where: str) -> tuple[dict, ...]:
    result = []
    for item in items or ():
        entry = dict(item)
        entry["position"] = _pair(_require(item, "position", where), where)
        result.append(entry)
    return tuple(result)


def _gate(data, where: str) -> dict | None:
    if data is None:
        return None
    gate = dict(data)
    if gate.get("position") is not None:
        gate["position"] = _pair(gate["position"], where)
    return gate


def parse_zone(data: dict) -> ZoneConfig:
    zone_id = _require(data, "id", "zone")
    where = f"zone '{zone_id}'"

    layout = tuple(data.get("layout") or ())
    if not all(isinstance(row, str) for row in layout):
        raise ConfigurationError(f"{where}: layout rows must be strings")

    for key in data.get("vim_keys") or ():
        _require(key, "value", where)
    for key in data.get("collectible_keys") or ():
        _require(key, "key_id", where)
    for label in data.get("text_labels") or ():
        _require(label, "text", where)

    secondary_gates = []
    for gate in data.get("secondary_gates") or ():
        _require(gate, "position", where)
        secondary_gates.append(_gate(gate, where))

    cursor_start = data.get("cursor_start")
    return ZoneConfig(
        zone_id=zone_id,
        name=_require(data, "name", where),
        layout=layout,
        legend={str(char): name for char, name in (data.get("legend") or {}).items()},
        biome=data.get("biome", ""),
        skill_focus=tuple(data.get("skill_focus") or ()),
        puzzle_theme=data.get("puzzle_theme", ""),
        narration=tuple(data.get("narration") or ()),
        vim_keys=_positioned(data.get("vim_keys"), where),
        collectible_keys=_positioned(data.get("collectible_keys"), where),
        text_labels=_positioned(data.get("text_labels"), where),
        gate=_gate(data.get("gate"), where),
        secondary_gates=tuple(secondary_gates),
        npcs=_positioned(data.get("npcs"), where),
        cursor_start=_pair(cursor_start, where) if cursor_start is not None else None,
        requires_explicit_confirmation=bool(data.get("requires_explicit_confirmation", False)),
    )


def parse_game(data: dict) -> Game:
    game_id = _require(data, "id", "game")
    where = f"game '{game_id}'"
    try:
        game_type = GameType(_require(data, "type", where))
    except ValueError as exc:
        raise ConfigurationError(f"{where}: invalid game type {data['type']!r}") from exc

    levels = [Level.from_config(level) for level in data.get("levels") or ()]
    return Game(
        id=game_id,
        name=_require(data, "name", where),
        description=_require(data, "description", where),
        game_type=game_type,
        default_level=data.get("default_level"),
        supported_levels=[level.id for level in levels],
        levels={level.id: level for level in levels},
        features={str(k): bool(v) for k, v in (data.get("features") or {}).items()},
        zone_id=data.get("zone"),
        factory=GAME_STATE_FACTORIES[game_type],
    )


def parse_cutscene(data: dict) -> CutsceneStory:
    return CutsceneStory(
        game_id=_require(data, "game", "cutscene"),
        kind=_require(data, "kind", "cutscene"),
        script=tuple(_require(data, "script", "cutscene")),
        level_id=data.get("level"),
        zone_id=data.get("zone"),
    )


def _check_references(games: GameRegistry, zones: ZoneRegistry) -> None:
    for game in games.get_all_games():
        for level in game.levels.values():
            for zone_id in level.zones:
                if not zones.has_zone(zone_id):
                    raise ConfigurationError(
                        f"Level '{level.id}' of game '{game.id}' uses unknown zone '{zone_id}'"
                    )
        if game.default_level and game.default_level not in game.levels:
            raise ConfigurationError(
                f"Game '{game.id}' default level '{game.default_level}' not found"
            )
        if not game.supports_levels and game.zone_id and not zones.has_zone(game.zone_id):
            raise ConfigurationError(f"Game '{game.id}' uses unknown zone '{game.zone_id}'")


def load_world(data_dir: Path) -> World:
    """Read every content file under ``data_dir`` and return a populated World."""
    zones = ZoneRegistry()
    zone_dir = data_dir.joinpath("zones")
    for entry in sorted(zone_dir.iterdir(), key=lambda p: p.name):
        if entry.name.endswith(".yaml"):
            zones.register(parse_zone(_read_yaml(entry)))

    games_data = _read_yaml(data_dir.joinpath("games.yaml")) or {}
    games = GameRegistry(
        [parse_game(game) for game in _require(games_data, "games", "games.yaml")],
        default_game_id=games_data.get("default_game"),
    )
    _check_references(games, zones)

    stories = []
    cutscene_file = data_dir.joinpath("cutscenes.yaml")
    if cutscene_file.is_file():
        stories = [parse_cutscene(story) for story in (_read_yaml(cutscene_file) or [])]

    cutscenes = CutsceneProvider.from_games(games.get_all_games(), zones, stories)
    return World(games=games, zones=zones, cutscenes=cutscenes)
