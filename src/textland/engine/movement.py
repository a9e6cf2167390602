"""Resolving one directional key press into a cursor move and its effects."""

from dataclasses import dataclass, field, replace

from ..logging import get_logger
from .entities import CollectibleKey, VimKey
from .errors import InvalidDirectionError
from .interaction import InteractionResult, NPCInteractionUseCase
from .state import ProgressionResult
from .world import Position

logger = get_logger(__name__)

DIRECTIONS: dict[str, tuple[int, int]] = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}
VIM_DIRECTIONS = {"k": "up", "j": "down", "h": "left", "l": "right"}
VERTICAL = frozenset({"up", "down"})


def resolve_direction(direction: str) -> str:
    """Normalise a direction name or its vim alias, or raise."""
    if not isinstance(direction, str):
        raise InvalidDirectionError(direction)
    name = VIM_DIRECTIONS.get(direction, direction)
    if name not in DIRECTIONS:
        raise InvalidDirectionError(direction)
    return name


@dataclass(frozen=True)
class MoveResult:
    success: bool
    new_position: Position | None = None
    key_collected: VimKey | CollectibleKey | None = None
    npc_interaction: InteractionResult = field(default_factory=InteractionResult)
    progression_result: ProgressionResult = field(default_factory=ProgressionResult)
    gate_unlocked: bool = False
    reason: str | None = None


REJECTED = MoveResult(success=False, reason="invalid_position")


class SyncMovePlayerUseCase:
    """Moves the cursor without ever running progression.

    Used where progression has to wait, such as batch replays and tests.
    """

    def __init__(self, game_state, renderer, npc_interaction: NPCInteractionUseCase | None = None):
        self._game_state = game_state
        self._renderer = renderer
        self._npc_interaction = npc_interaction or NPCInteractionUseCase(renderer)

    def execute(self, direction: str) -> MoveResult:
        result = self._move(direction)
        if result.success:
            self._render()
        return result

    def _candidate(self, direction: str) -> Position:
        dx, dy = DIRECTIONS[direction]
        return self._game_state.cursor.position.move(dx, dy)

    def _can_enter(self, position: Position) -> tuple[bool, bool]:
        """Return (walkable, unlocked_a_gate) for ``position``."""
        state = self._game_state
        gate = state.gate_at(position)
        if gate is None:
            return state.map.is_walkable(position), False
        if gate.is_open:
            return True, False
        # Closed secondary gates open when the player carries their keys.
        if gate in state.secondary_gates and state.try_unlock_secondary_gate(position):
            logger.info("secondary_gate_unlocked", zone_id=state.current_zone_id, position=str(position))
            return True, True
        return False, False

    def _move(self, direction: str) -> MoveResult:
        name = resolve_direction(direction)
        state = self._game_state
        target = self._candidate(name)

        walkable, gate_unlocked = self._can_enter(target)
        if not walkable:
            logger.debug("move_rejected", direction=name, position=str(target))
            return REJECTED

        if name in VERTICAL:
            state.move_cursor(state.cursor.move_to_with_column_memory(target))
        else:
            state.move_cursor(state.cursor.move_to(target))

        key = self._collect_key_at(target)
        interaction = self._npc_interaction.execute(target, state)
        return MoveResult(
            success=True,
            new_position=target,
            key_collected=key,
            npc_interaction=interaction,
            gate_unlocked=gate_unlocked,
        )

    def _collect_key_at(self, position: Position):
        state = self._game_state
        key = state.key_at(position)
        if key is None:
            return None
        if isinstance(key, CollectibleKey):
            collected = state.collect_collectible_key(key)
        else:
            collected = state.collect_key(key)
        if not collected:
            return None
        logger.info("key_collected", key=key.identity, zone_id=state.current_zone_id)
        self._renderer.show_key_info(key)
        return key

    def _render(self) -> None:
        self._renderer.render(self._game_state.get_current_state())


class MovePlayerUseCase(SyncMovePlayerUseCase):
    """The full move pipeline, progression included."""

    def __init__(
        self,
        game_state,
        renderer,
        npc_interaction: NPCInteractionUseCase | None = None,
        progression=None,
    ):
        super().__init__(game_state, renderer, npc_interaction)
        self._progression = progression

    async def execute(self, direction: str) -> MoveResult:
        result = self._move(direction)
        if not result.success:
            return result

        progression_result = ProgressionResult.none()
        if self._progression is not None and self._progression.should_execute_progression():
            progression_result = await self._progression.execute()

        self._render()
        return replace(result, progression_result=progression_result)
