"""Tests for positions, tiles and the zone map."""

import pytest

from textland.engine.world import (
    GRASS,
    PATH,
    STONE,
    TREE,
    WALL,
    WATER,
    Position,
    TileType,
    ZoneMap,
    tile_type_for,
)


def test_position_rejects_non_integers():
    with pytest.raises(ValueError):
        Position(1.5, 2)
    with pytest.raises(ValueError):
        Position(True, 2)


def test_position_is_a_value():
    assert Position(3, 4) == Position(3, 4)
    assert Position(3, 4).move(1, -1) == Position(4, 3)
    assert len({Position(1, 1), Position(1, 1)}) == 1


def test_tile_equality_is_by_name():
    assert TileType("grass", False) == GRASS
    assert WATER != GRASS


def test_legend_aliases_resolve_to_known_tiles():
    assert tile_type_for("temple_floor") == STONE
    assert tile_type_for("gate") == PATH
    assert tile_type_for("tree") == TREE
    assert tile_type_for("something_new") == GRASS


def test_zone_area_is_centred_in_water():
    zone_map = ZoneMap(12, 8)
    assert (zone_map.width, zone_map.height) == (24, 16)
    origin = zone_map.zone_to_absolute(0, 0)
    assert origin == Position(6, 4)
    assert zone_map.get_tile_at(origin) == GRASS
    assert zone_map.get_tile_at(Position(0, 0)) == WATER
    assert zone_map.is_in_zone_area(origin)
    assert not zone_map.is_in_zone_area(origin.move(-1, 0))


def test_out_of_bounds_reads_as_water():
    zone_map = ZoneMap(4, 4)
    for position in (Position(-1, 0), Position(0, -5), Position(500, 500)):
        assert zone_map.get_tile_at(position) == WATER
        assert not zone_map.is_walkable(position)


def test_set_tile_ignores_out_of_bounds():
    zone_map = ZoneMap(4, 4)
    zone_map.set_tile_at(Position(-1, -1), WALL)
    inside = zone_map.zone_to_absolute(1, 1)
    zone_map.set_tile_at(inside, WALL)
    assert zone_map.get_tile_at(inside) == WALL
    assert not zone_map.is_walkable(inside)


def test_expand_dimensions_only_grows():
    zone_map = ZoneMap(4, 4)
    origin = zone_map.zone_to_absolute(0, 0)
    zone_map.expand_dimensions(40, 2)
    assert zone_map.width == 40
    assert zone_map.height == 12
    assert zone_map.zone_to_absolute(0, 0) == origin
    assert zone_map.get_tile_at(Position(39, 0)) == WATER


def test_cleanup_releases_grid():
    zone_map = ZoneMap(4, 4)
    zone_map.cleanup()
    assert zone_map.rows() == []
    assert zone_map.get_tile_at(Position(8, 6)) == WATER
