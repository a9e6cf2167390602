"""Read-only level lookups and game selection."""

from collections.abc import Callable
from dataclasses import dataclass

from .errors import ConfigurationError
from .registry import Game, GameRegistry, Level


class LevelService:
    def __init__(self, game_registry: GameRegistry):
        if game_registry is None:
            raise ConfigurationError("LevelService requires a game registry")
        self._games = game_registry

    def get_level_configuration(self, game_id: str, level_id: str) -> Level:
        return self._games.get_game(game_id).get_level_configuration(level_id)

    def get_all_level_configurations(self, game_id: str) -> list[Level]:
        game = self._games.get_game(game_id)
        return [game.levels[level_id] for level_id in game.supported_levels if level_id in game.levels]

    def get_first_level(self, game_id: str) -> Level | None:
        level_id = self.get_first_level_id(game_id)
        if level_id is None:
            return None
        return self.get_level_configuration(game_id, level_id)

    def get_first_level_id(self, game_id: str) -> str | None:
        return self._games.get_game(game_id).get_first_level()

    def get_default_level(self, game_id: str) -> str | None:
        return self._games.get_game(game_id).default_level

    def get_next_level(self, game_id: str, level_id: str) -> Level | None:
        game = self._games.get_game(game_id)
        next_id = game.get_next_level(level_id)
        return game.levels.get(next_id) if next_id else None

    def has_level(self, game_id: str, level_id: str) -> bool:
        if not self._games.has_game(game_id):
            return False
        return self._games.get_game(game_id).supports_level(level_id)

    def get_total_level_count(self, game_id: str) -> int:
        return len(self._games.get_game(game_id).supported_levels)

    def get_available_level_ids(self, game_id: str) -> list[str]:
        return list(self._games.get_game(game_id).supported_levels)

    def get_level_zones(self, game_id: str, level_id: str) -> list[str]:
        return self._games.get_game(game_id).get_level_zones(level_id)

    def level_has_zone(self, game_id: str, level_id: str, zone_id: str) -> bool:
        return self._games.get_game(game_id).level_has_zone(level_id, zone_id)

    @staticmethod
    def validate_level_configuration(data: dict) -> Level:
        """Build a Level from raw content, raising ConfigurationError if invalid."""
        return Level.from_config(data)


@dataclass(frozen=True)
class GameSelection:
    game: Game
    create_game_state: Callable


class SelectGameUseCase:
    def __init__(self, game_registry: GameRegistry, zone_provider):
        if game_registry is None:
            raise ConfigurationError("SelectGameUseCase requires a game registry")
        self._games = game_registry
        self._zones = zone_provider

    def get_available_games(self) -> list[Game]:
        return self._games.get_all_games()

    def get_default_game(self) -> Game:
        return self._games.get_default_game()

    def is_valid_game_selection(self, game_id: str) -> bool:
        return self._games.has_game(game_id)

    def select_game(self, game_id: str) -> GameSelection:
        game = self._games.get_game(game_id)

        def create_game_state(level_id: str | None = None):
            return game.create_game_state(self._zones, level_id)

        return GameSelection(game, create_game_state)
