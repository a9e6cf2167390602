"""Immutable spatial primitives and the tile grid a zone is played on.

Positions and tile types are created once and never mutated. A ZoneMap owns
its grid; the zone that built it is the only writer.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Position:
    """An integer grid coordinate."""

    x: int
    y: int

    def __post_init__(self) -> None:
        for value in (self.x, self.y):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError("Position coordinates must be integers")

    @classmethod
    def from_pair(cls, pair) -> "Position":
        """Build a Position from raw ``[x, y]`` content data."""
        x, y = pair
        return cls(x, y)

    def move(self, dx: int, dy: int) -> "Position":
        return Position(self.x + dx, self.y + dy)

    def __str__(self) -> str:
        return f"Position({self.x}, {self.y})"


@dataclass(frozen=True)
class TileType:
    """A named kind of terrain. Equality is by name."""

    name: str
    walkable: bool

    def __eq__(self, other: object) -> bool:
        return isinstance(other, TileType) and self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __str__(self) -> str:
        return self.name


GRASS = TileType("grass", True)
WATER = TileType("water", False)
DIRT = TileType("dirt", True)
TREE = TileType("tree", False)
STONE = TileType("stone", True)
PATH = TileType("path", True)
WALL = TileType("wall", False)
BRIDGE = TileType("bridge", True)
SAND = TileType("sand", True)
RUINS = TileType("ruins", True)
FIELD = TileType("field", True)
TEST_GROUND = TileType("test_ground", True)
BOSS_AREA = TileType("boss_area", True)
RAMP_RIGHT = TileType("ramp_right", True)
RAMP_LEFT = TileType("ramp_left", True)

TILE_TYPES: dict[str, TileType] = {
    tile.name: tile
    for tile in (
        GRASS,
        WATER,
        DIRT,
        TREE,
        STONE,
        PATH,
        WALL,
        BRIDGE,
        SAND,
        RUINS,
        FIELD,
        TEST_GROUND,
        BOSS_AREA,
        RAMP_RIGHT,
        RAMP_LEFT,
    )
}

# Legend names used by zone content that render as an existing tile.
TILE_ALIASES: dict[str, TileType] = {
    "vim_key_spot": PATH,
    "gate": PATH,
    "npc_spot": PATH,
    "forest_ground": GRASS,
    "canyon_floor": SAND,
    "cave_floor": STONE,
    "temple_floor": STONE,
    "swamp_ground": GRASS,
    "spring_ground": GRASS,
    "stone_garden": STONE,
    "grass_field": FIELD,
    "practice_ground": TEST_GROUND,
    "stone_floor": STONE,
}


def tile_type_for(name: str) -> TileType:
    """Resolve a legend name to its tile, defaulting to grass."""
    if name in TILE_TYPES:
        return TILE_TYPES[name]
    return TILE_ALIASES.get(name, GRASS)


# Water padding around the playable area.
PADDING_COLUMNS = 12
PADDING_ROWS = 8


class ZoneMap:
    """A water-filled grid with the playable zone area centred in it.

    Lookups outside the grid never raise: they read as WATER and are not
    walkable.
    """

    def __init__(self, zone_width: int = 12, zone_height: int = 8):
        self._zone_width = zone_width
        self._zone_height = zone_height
        self._width = zone_width + PADDING_COLUMNS
        self._height = zone_height + PADDING_ROWS
        self._zone_start_x = (self._width - zone_width) // 2
        self._zone_start_y = (self._height - zone_height) // 2
        self._tiles: list[list[TileType]] = [
            [WATER] * self._width for _ in range(self._height)
        ]
        for y in range(self.zone_start_y, self.zone_end_y):
            for x in range(self.zone_start_x, self.zone_end_x):
                self._tiles[y][x] = GRASS

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def zone_start_x(self) -> int:
        return self._zone_start_x

    @property
    def zone_start_y(self) -> int:
        return self._zone_start_y

    @property
    def zone_end_x(self) -> int:
        return self._zone_start_x + self._zone_width

    @property
    def zone_end_y(self) -> int:
        return self._zone_start_y + self._zone_height

    def is_valid_position(self, position: Position) -> bool:
        return 0 <= position.x < self._width and 0 <= position.y < self._height

    def get_tile_at(self, position: Position) -> TileType:
        if not self.is_valid_position(position):
            return WATER
        return self._tiles[position.y][position.x]

    def set_tile_at(self, position: Position, tile: TileType) -> None:
        if self.is_valid_position(position):
            self._tiles[position.y][position.x] = tile

    def is_walkable(self, position: Position) -> bool:
        return self.get_tile_at(position).walkable

    def zone_to_absolute(self, zone_x: int, zone_y: int) -> Position:
        """Convert zone-relative coordinates to grid coordinates."""
        return Position(self.zone_start_x + zone_x, self.zone_start_y + zone_y)

    def is_in_zone_area(self, position: Position) -> bool:
        return (
            self.zone_start_x <= position.x < self.zone_end_x
            and self.zone_start_y <= position.y < self.zone_end_y
        )

    def expand_dimensions(self, required_width: int, required_height: int) -> None:
        """Grow the grid (never shrink it), filling new tiles with water.

        The zone origin stays where it was so existing content keeps its
        coordinates.
        """
        new_width = max(self._width, required_width)
        new_height = max(self._height, required_height)
        if new_width == self._width and new_height == self._height:
            return
        for row in self._tiles:
            row.extend([WATER] * (new_width - self._width))
        for _ in range(new_height - self._height):
            self._tiles.append([WATER] * new_width)
        self._width = new_width
        self._height = new_height

    def rows(self) -> list[list[TileType]]:
        """Copy of the grid, row by row, for renderers."""
        return [list(row) for row in self._tiles]

    def cleanup(self) -> None:
        """Release the grid. A released map reads as open water."""
        self._tiles = []
        self._width = 0
        self._height = 0
