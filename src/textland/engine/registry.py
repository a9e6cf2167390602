"""Static game, level and zone definitions.

Registries are plain instances built once by the loader and handed to
whoever needs them. Tests build their own.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum

from .errors import ConfigurationError
from .zone import Zone, ZoneConfig


class GameType(Enum):
    LEVEL_BASED = "level_based"
    TEXTLAND = "textland"

    @property
    def is_level_based(self) -> bool:
        return self is GameType.LEVEL_BASED


@dataclass(frozen=True)
class Level:
    id: str
    name: str
    zones: tuple[str, ...]
    description: str
    cutscene: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for attr in ("id", "name", "description"):
            value = getattr(self, attr)
            if not isinstance(value, str) or not value:
                raise ConfigurationError(f"Level requires a valid {attr}")
        if not self.zones:
            raise ConfigurationError(f"Level '{self.id}' must list at least one zone")

    @classmethod
    def from_config(cls, data: dict) -> "Level":
        if not isinstance(data, dict):
            raise ConfigurationError(f"Malformed level definition: {data!r}")
        zones = data.get("zones") or ()
        if isinstance(zones, str):
            raise ConfigurationError(f"Level '{data.get('id')}' zones must be a list")
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            zones=tuple(zones),
            description=data.get("description", ""),
            cutscene=tuple(data.get("cutscene") or ()),
        )


@dataclass
class Game:
    """A playable game: its type, its ordered levels and the state factory."""

    id: str
    name: str
    description: str
    game_type: GameType
    default_level: str | None = None
    supported_levels: list[str] = field(default_factory=list)
    levels: dict[str, Level] = field(default_factory=dict)
    features: dict[str, bool] = field(default_factory=dict)
    zone_id: str | None = None  # the single zone of non level-based games
    factory: Callable | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        for attr in ("id", "name", "description"):
            value = getattr(self, attr)
            if not isinstance(value, str) or not value:
                raise ConfigurationError(f"Game requires a valid {attr}")
        if not isinstance(self.game_type, GameType):
            raise ConfigurationError(f"Game '{self.id}' requires a valid game type")

    @property
    def supports_levels(self) -> bool:
        return self.game_type.is_level_based

    def supports_level(self, level_id: str) -> bool:
        return self.supports_levels and level_id in self.supported_levels

    def has_feature(self, feature: str) -> bool:
        return self.features.get(feature) is True

    def get_level_configuration(self, level_id: str) -> Level:
        level = self.levels.get(level_id)
        if level is None:
            raise ConfigurationError(
                f"Level '{level_id}' not found in game '{self.id}'"
            )
        return level

    def get_first_level(self) -> str | None:
        if self.default_level:
            return self.default_level
        return self.supported_levels[0] if self.supported_levels else None

    def get_next_level(self, level_id: str) -> str | None:
        """The level after ``level_id``, or None when it is the last one."""
        if level_id not in self.supported_levels:
            return None
        index = self.supported_levels.index(level_id)
        if index + 1 < len(self.supported_levels):
            return self.supported_levels[index + 1]
        return None

    def get_level_zones(self, level_id: str) -> list[str]:
        return list(self.get_level_configuration(level_id).zones)

    def level_has_zone(self, level_id: str, zone_id: str) -> bool:
        level = self.levels.get(level_id)
        return level is not None and zone_id in level.zones

    def create_game_state(self, zone_provider: "ZoneRegistry", level_id: str | None = None):
        if self.factory is None:
            raise ConfigurationError(
                f"Game '{self.id}' has no factory configured for game creation"
            )
        return self.factory(self, zone_provider, level_id)

    def __str__(self) -> str:
        return f"Game({self.id}, {self.name})"


class GameRegistry:
    def __init__(self, games: Iterable[Game] = (), default_game_id: str | None = None):
        self._games: dict[str, Game] = {}
        for game in games:
            self.register(game)
        self._default_game_id = default_game_id

    def register(self, game: Game) -> None:
        if not isinstance(game, Game):
            raise ConfigurationError("Must provide a Game instance")
        self._games[game.id] = game

    def get_game(self, game_id: str) -> Game:
        game = self._games.get(game_id)
        if game is None:
            raise ConfigurationError(f"Game '{game_id}' not found")
        return game

    def has_game(self, game_id: str) -> bool:
        return game_id in self._games

    def get_all_games(self) -> list[Game]:
        return list(self._games.values())

    def get_game_ids(self) -> list[str]:
        return list(self._games)

    def get_default_game(self) -> Game:
        if self._default_game_id:
            return self.get_game(self._default_game_id)
        if not self._games:
            raise ConfigurationError("No games registered")
        return next(iter(self._games.values()))

    def get_games_by_type(self, game_type: GameType) -> list[Game]:
        return [game for game in self._games.values() if game.game_type is game_type]

    def get_games_with_feature(self, feature: str) -> list[Game]:
        return [game for game in self._games.values() if game.has_feature(feature)]

    def __len__(self) -> int:
        return len(self._games)


class ZoneRegistry:
    """Zone configs by id. Every ``create_zone`` call builds a fresh Zone."""

    def __init__(self, configs: Iterable[ZoneConfig] = ()):
        self._configs: dict[str, ZoneConfig] = {}
        for config in configs:
            self.register(config)

    def register(self, config: ZoneConfig) -> None:
        self._configs[config.zone_id] = config

    def get_zone_config(self, zone_id: str) -> ZoneConfig:
        config = self._configs.get(zone_id)
        if config is None:
            raise ConfigurationError(f"Zone '{zone_id}' not found")
        return config

    def create_zone(self, zone_id: str) -> Zone:
        return Zone(self.get_zone_config(zone_id))

    def has_zone(self, zone_id: str) -> bool:
        return zone_id in self._configs

    def get_available_zone_ids(self) -> list[str]:
        return list(self._configs)

    def get_all_zone_info(self) -> list[dict]:
        return [
            {
                "id": config.zone_id,
                "name": config.name,
                "biome": config.biome,
                "skill_focus": list(config.skill_focus),
            }
            for config in self._configs.values()
        ]
