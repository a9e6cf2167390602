"""Tests for loading the bundled content."""

from pathlib import Path

import pytest

from textland.engine.errors import ConfigurationError
from textland.engine.loader import World, load_world, parse_game, parse_zone
from textland.engine.npcs import CaretSpirit, CaretStone, MazeScribe, PracticeBuddy
from textland.engine.registry import GameType
from textland.engine.state import LevelGameState, TextlandGameState
from textland.engine.world import WATER


def test_world_has_both_games(world: World):
    assert world.games.get_default_game().id == "cursor-before-clickers"
    adventure = world.games.get_game("cursor-before-clickers")
    assert adventure.game_type is GameType.LEVEL_BASED
    assert adventure.supported_levels == ["level_1", "level_2", "level_3", "level_4", "level_5"]
    assert adventure.get_level_zones("level_5") == ["zone_9", "zone_10"]
    assert world.games.get_game("cursor-textland").game_type is GameType.TEXTLAND


def test_every_zone_loads(world: World):
    ids = set(world.zones.get_available_zone_ids())
    assert ids == {f"zone_{n}" for n in range(1, 11)} | {"textland_exploration"}
    for zone_id in ids:
        zone = world.zones.create_zone(zone_id)
        start = zone.get_cursor_start_position()
        assert zone.game_map.is_walkable(start), zone_id


def test_content_positions_are_reachable_tiles(world: World):
    for zone_id in world.zones.get_available_zone_ids():
        zone = world.zones.create_zone(zone_id)
        game_map = zone.game_map
        for key in zone.vim_keys + zone.collectible_keys:
            assert game_map.is_walkable(key.position), (zone_id, key.identity)
        for npc in zone.npcs:
            assert game_map.is_walkable(npc.position), (zone_id, npc.id)
        gates = ([zone.gate] if zone.gate else []) + zone.secondary_gates
        for gate in gates:
            assert game_map.get_tile_at(gate.position) != WATER, zone_id


def test_npc_variants_come_from_content(world: World):
    assert isinstance(world.zones.create_zone("zone_1").npcs[0], CaretStone)
    assert isinstance(world.zones.create_zone("zone_2").npcs[0], MazeScribe)
    assert isinstance(world.zones.create_zone("zone_3").npcs[0], PracticeBuddy)
    spirit = world.zones.create_zone("zone_10").npcs[0]
    assert isinstance(spirit, CaretSpirit)
    assert spirit.knowledge.startswith("Transform text with purpose")


def test_swamp_asks_for_confirmation(world: World):
    assert world.zones.create_zone("zone_3").requires_explicit_confirmation
    assert not world.zones.create_zone("zone_2").requires_explicit_confirmation


def test_final_zone_gate_waits_for_its_keys(world: World):
    zone = world.zones.create_zone("zone_10")
    assert not zone.gate.is_open
    for key in zone.vim_keys:
        zone.collect_key(key)
    assert zone.gate.is_open


def test_game_states_from_content(world: World):
    adventure = world.games.get_game("cursor-before-clickers")
    state = adventure.create_game_state(world.zones)
    assert isinstance(state, LevelGameState)
    assert state.level_id == "level_1"
    assert state.current_zone_id == "zone_1"

    textland = world.games.get_game("cursor-textland").create_game_state(world.zones)
    assert isinstance(textland, TextlandGameState)
    assert len(textland.available_keys) == 4
    assert len(textland.text_labels) == 8


def test_cutscenes_are_loaded_and_derived(world: World):
    stories = world.cutscenes
    origin = stories.get_cutscene_story("cursor-before-clickers", "game")
    assert "*Hello, Cursor.*" in origin.script
    explicit = stories.get_cutscene_story("cursor-before-clickers", "level", "level_2")
    assert explicit.script[-1] == "Master these transitions, young Cursor."
    assert stories.has_cutscene_story("cursor-before-clickers", "level", "level_3")
    assert stories.has_cutscene_story("cursor-before-clickers", "zone", "level_1", "zone_1")


def test_parse_zone_requires_id_and_name():
    with pytest.raises(ConfigurationError):
        parse_zone({"name": "No id"})
    with pytest.raises(ConfigurationError):
        parse_zone({"id": "nameless"})


def test_parse_zone_rejects_bad_positions():
    with pytest.raises(ConfigurationError, match="invalid position"):
        parse_zone({"id": "z", "name": "Z", "vim_keys": [{"value": "h", "position": [1]}]})


def test_parse_game_rejects_unknown_type():
    with pytest.raises(ConfigurationError, match="invalid game type"):
        parse_game({"id": "g", "name": "G", "description": "d", "type": "arcade"})


def _write_content(root: Path, games_yaml: str, zone_yaml: str) -> Path:
    (root / "zones").mkdir()
    (root / "zones" / "only.yaml").write_text(zone_yaml)
    (root / "games.yaml").write_text(games_yaml)
    return root


ONLY_ZONE = """
id: only
name: Only Zone
layout: ["...."]
"""


def test_unknown_zone_reference_fails(tmp_path: Path):
    games = """
games:
  - id: g
    name: G
    description: d
    type: level_based
    levels:
      - {id: l1, name: L1, description: d, zones: [missing]}
"""
    with pytest.raises(ConfigurationError, match="unknown zone 'missing'"):
        load_world(_write_content(tmp_path, games, ONLY_ZONE))


def test_malformed_yaml_fails(tmp_path: Path):
    with pytest.raises(ConfigurationError, match="Invalid YAML"):
        load_world(_write_content(tmp_path, "games: [", ONLY_ZONE))


def test_minimal_content_loads_without_cutscene_file(tmp_path: Path):
    games = """
games:
  - id: g
    name: G
    description: d
    type: textland
    zone: only
"""
    world = load_world(_write_content(tmp_path, games, ONLY_ZONE))
    assert world.games.get_default_game().id == "g"
    assert world.cutscenes.get_all_cutscene_stories() == []
