"""Mutable per-player game state.

Each player owns one game state. It knows which zone (and, for level-based
games, which level) is active and where the cursor is. Key bookkeeping is
read from the current zone rather than duplicated here.

Game states are pickled between requests, so anything tied to the running
process (the zone provider, a pending level transition) is dropped on
pickle and re-attached with ``bind_zone_provider`` after loading.
"""

from dataclasses import dataclass
from enum import Enum

from ..logging import get_logger
from .entities import CollectibleKey, Cursor, Gate, TextLabel, VimKey
from .errors import ConfigurationError, ProgressionError
from .npcs import NPC
from .ports import ZoneProvider
from .world import Position, ZoneMap

logger = get_logger(__name__)

TEXTLAND_ZONE_ID = "textland_exploration"


class ProgressionType(Enum):
    NONE = "none"
    ZONE = "zone"
    LEVEL = "level"


@dataclass(frozen=True)
class ProgressionResult:
    type: ProgressionType = ProgressionType.NONE
    new_zone_id: str | None = None
    next_level_id: str | None = None

    @classmethod
    def none(cls) -> "ProgressionResult":
        return cls()

    @classmethod
    def zone(cls, zone_id: str) -> "ProgressionResult":
        return cls(ProgressionType.ZONE, new_zone_id=zone_id)

    @classmethod
    def level(cls, level_id: str) -> "ProgressionResult":
        return cls(ProgressionType.LEVEL, next_level_id=level_id)


@dataclass(frozen=True)
class LevelProgress:
    level_id: str
    level_name: str
    current_zone_index: int
    total_zones: int
    completed_zones: tuple[str, ...]
    is_level_complete: bool


@dataclass(frozen=True)
class StateSnapshot:
    """Everything a renderer needs to draw one frame."""

    zone_id: str
    zone_name: str
    map: ZoneMap
    cursor: Cursor
    available_keys: tuple[VimKey, ...]
    available_collectible_keys: tuple[CollectibleKey, ...]
    collected_keys: frozenset[str]
    collected_collectible_keys: frozenset[str]
    text_labels: tuple[TextLabel, ...]
    gate: Gate | None
    secondary_gates: tuple[Gate, ...]
    npcs: tuple[NPC, ...]
    level_progress: LevelProgress | None = None


class GameState:
    """Behaviour shared by every game mode: one loaded zone and a cursor."""

    game_id: str | None = None
    level_id: str | None = None

    def __init__(self, zone_provider: ZoneProvider):
        if zone_provider is None:
            raise ConfigurationError(f"{type(self).__name__} requires a zone provider")
        self._zone_provider = zone_provider
        self._pending_transition = None
        self.released = False
        self.zone = None
        self.cursor: Cursor | None = None

    def _load_zone(self, zone_id: str) -> None:
        previous = self.zone
        self.zone = self._zone_provider.create_zone(zone_id)
        self.cursor = Cursor(self.zone.get_cursor_start_position())
        if previous is not None:
            previous.cleanup()
        logger.debug("zone_loaded", zone_id=zone_id, game_id=self.game_id)

    def bind_zone_provider(self, zone_provider: ZoneProvider) -> None:
        self._zone_provider = zone_provider

    def __getstate__(self) -> dict:
        state = self.__dict__.copy()
        state["_zone_provider"] = None
        state["_pending_transition"] = None
        return state

    # Zone queries

    @property
    def current_zone_id(self) -> str:
        return self.zone.zone_id

    @property
    def map(self) -> ZoneMap:
        return self.zone.game_map

    @property
    def available_keys(self) -> list[VimKey]:
        return self.zone.vim_keys

    @property
    def available_collectible_keys(self) -> list[CollectibleKey]:
        return self.zone.collectible_keys

    @property
    def collected_keys(self) -> frozenset[str]:
        return self.zone.collected_keys

    @property
    def collected_collectible_keys(self) -> frozenset[str]:
        return self.zone.collected_collectible_keys

    @property
    def text_labels(self) -> list[TextLabel]:
        return self.zone.text_labels

    @property
    def gate(self) -> Gate | None:
        return self.zone.gate

    @property
    def secondary_gates(self) -> list[Gate]:
        return self.zone.secondary_gates

    def get_npcs(self) -> list[NPC]:
        return self.zone.get_active_npcs()

    def gate_at(self, position: Position) -> Gate | None:
        gate = self.gate
        if gate is not None and gate.position == position:
            return gate
        for gate in self.secondary_gates:
            if gate.position == position:
                return gate
        return None

    def key_at(self, position: Position) -> VimKey | CollectibleKey | None:
        for key in self.available_keys:
            if key.position == position:
                return key
        for key in self.available_collectible_keys:
            if key.position == position:
                return key
        return None

    def is_cursor_at_gate(self) -> bool:
        gate = self.gate
        return gate is not None and self.cursor.position == gate.position

    # Mutations

    def move_cursor(self, cursor: Cursor) -> None:
        self.cursor = cursor

    def collect_key(self, key: VimKey) -> bool:
        """Collect an available vim key. Foreign or spent keys are ignored."""
        if not isinstance(key, VimKey):
            return False
        return self.zone.collect_key(key)

    def collect_collectible_key(self, key: CollectibleKey) -> bool:
        if not isinstance(key, CollectibleKey):
            return False
        return self.zone.collect_key(key)

    def try_unlock_secondary_gate(self, position: Position) -> bool:
        return self.zone.try_unlock_secondary_gate(position)

    # Progression; the base game never progresses

    def is_current_zone_complete(self) -> bool:
        return self.zone.is_complete()

    def is_level_complete(self) -> bool:
        return False

    def should_progress_to_next_zone(self) -> bool:
        return False

    def should_progress_to_next_level(self) -> bool:
        return False

    def execute_progression(self) -> ProgressionResult:
        return ProgressionResult.none()

    def is_game_complete(self) -> bool:
        return False

    def get_completion_message(self) -> str:
        return ""

    def get_level_progress(self) -> LevelProgress | None:
        return None

    def get_current_state(self) -> StateSnapshot:
        return StateSnapshot(
            zone_id=self.zone.zone_id,
            zone_name=self.zone.name,
            map=self.map,
            cursor=self.cursor,
            available_keys=tuple(self.available_keys),
            available_collectible_keys=tuple(self.available_collectible_keys),
            collected_keys=self.collected_keys,
            collected_collectible_keys=self.collected_collectible_keys,
            text_labels=tuple(self.text_labels),
            gate=self.gate,
            secondary_gates=tuple(self.secondary_gates),
            npcs=tuple(self.get_npcs()),
            level_progress=self.get_level_progress(),
        )

    # Lifetime

    @property
    def pending_transition(self):
        return self._pending_transition

    def attach_transition(self, transition) -> None:
        """Tie a scheduled level transition to this state's lifetime."""
        if self._pending_transition is not None:
            self._pending_transition.cancel()
        self._pending_transition = transition

    def cleanup(self) -> None:
        if self._pending_transition is not None:
            self._pending_transition.cancel()
            self._pending_transition = None
        if self.zone is not None:
            self.zone.cleanup()
        self.released = True


class LevelGameState(GameState):
    """A level made of an ordered list of zones, played one after another."""

    def __init__(self, zone_provider, level, game=None):
        super().__init__(zone_provider)
        if level is None or not level.zones:
            raise ConfigurationError("Level must contain at least one zone")
        self._level = level
        self.level_id = level.id
        self.game_id = game.id if game is not None else None
        self._next_level_id = game.get_next_level(level.id) if game is not None else None
        self._current_zone_index = 0
        self._completed_zones: set[str] = set()
        self._esc_progression_pressed: set[str] = set()
        self._load_zone(self._zone_ids[0])

    @property
    def _zone_ids(self) -> tuple[str, ...]:
        return self._level.zones

    @property
    def level(self):
        return self._level

    @property
    def level_name(self) -> str:
        return self._level.name

    @property
    def next_level_id(self) -> str | None:
        return self._next_level_id

    @property
    def current_zone_index(self) -> int:
        return self._current_zone_index

    @property
    def total_zones(self) -> int:
        return len(self._zone_ids)

    @property
    def completed_zones(self) -> list[str]:
        return [zone_id for zone_id in self._zone_ids if zone_id in self._completed_zones]

    @property
    def remaining_zones(self) -> int:
        return self.total_zones - len(self._completed_zones)

    def has_next_zone(self) -> bool:
        return self._current_zone_index < len(self._zone_ids) - 1

    def progress_to_next_zone(self) -> None:
        if not self.is_current_zone_complete():
            raise ProgressionError("Cannot progress: current zone not complete")
        if not self.has_next_zone():
            raise ProgressionError("Cannot progress: already at last zone")
        if self._zone_provider is None:
            raise ProgressionError("Cannot progress: no zone provider bound")

        self._completed_zones.add(self.current_zone_id)
        self._current_zone_index += 1
        self._load_zone(self._zone_ids[self._current_zone_index])

    def is_level_complete(self) -> bool:
        return (
            self._current_zone_index == len(self._zone_ids) - 1
            and self.is_current_zone_complete()
            and len(self._completed_zones) == self._current_zone_index
        )

    def should_progress_to_next_zone(self) -> bool:
        return (
            self.is_current_zone_complete()
            and self.has_next_zone()
            and self.is_cursor_at_gate()
        )

    def mark_esc_progression_pressed(self) -> None:
        """Record the explicit confirmation some zones need before leaving."""
        self._esc_progression_pressed.add(self.current_zone_id)

    def _confirmation_given(self) -> bool:
        if not self.zone.requires_explicit_confirmation:
            return True
        return self.current_zone_id in self._esc_progression_pressed

    def should_progress_to_next_level(self) -> bool:
        return (
            self.is_level_complete()
            and self.is_cursor_at_gate()
            and self._next_level_id is not None
            and self._confirmation_given()
        )

    def execute_progression(self) -> ProgressionResult:
        if self.should_progress_to_next_zone():
            self.progress_to_next_zone()
            return ProgressionResult.zone(self.current_zone_id)
        if self.should_progress_to_next_level():
            return ProgressionResult.level(self._next_level_id)
        return ProgressionResult.none()

    def is_game_complete(self) -> bool:
        return self.is_level_complete() and self._next_level_id is None

    def get_completion_message(self) -> str:
        if self.is_level_complete():
            return f"{self._level.name} completed! {self._level.description}"
        return ""

    def get_level_progress(self) -> LevelProgress:
        return LevelProgress(
            level_id=self._level.id,
            level_name=self._level.name,
            current_zone_index=self._current_zone_index,
            total_zones=self.total_zones,
            completed_zones=tuple(self.completed_zones),
            is_level_complete=self.is_level_complete(),
        )


class SingleZoneGameState(GameState):
    """One zone with its gate and NPCs; finishing the zone finishes the game."""

    def __init__(self, zone_provider, zone_id: str, game=None):
        super().__init__(zone_provider)
        self.game_id = game.id if game is not None else None
        self._load_zone(zone_id)

    def is_level_complete(self) -> bool:
        return self.is_current_zone_complete()

    def is_game_complete(self) -> bool:
        return self.is_level_complete()


class TextlandGameState(GameState):
    """Free exploration: keys to pick up, nothing to unlock, nobody to meet."""

    def __init__(self, zone_provider, zone_id: str = TEXTLAND_ZONE_ID, game=None):
        super().__init__(zone_provider)
        self.game_id = game.id if game is not None else None
        self._load_zone(zone_id)

    @property
    def gate(self) -> Gate | None:
        return None

    @property
    def secondary_gates(self) -> list[Gate]:
        return []

    def get_npcs(self) -> list[NPC]:
        return []

    def try_unlock_secondary_gate(self, position: Position) -> bool:
        return False


def create_level_game_state(game, zone_provider, level_id: str | None = None) -> LevelGameState:
    level_id = level_id or game.get_first_level()
    if level_id is None or not game.supports_level(level_id):
        raise ConfigurationError(f"Level '{level_id}' not found in game '{game.id}'")
    return LevelGameState(zone_provider, game.get_level_configuration(level_id), game)


def create_textland_game_state(game, zone_provider, level_id: str | None = None) -> TextlandGameState:
    return TextlandGameState(zone_provider, game.zone_id or TEXTLAND_ZONE_ID, game)
