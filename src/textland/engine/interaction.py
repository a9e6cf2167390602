"""Talking to whoever stands on the cursor's tile."""

from dataclasses import dataclass, field

from ..logging import get_logger
from .npcs import NPC
from .world import Position

logger = get_logger(__name__)

# Seconds a dialogue stays on screen.
DIALOGUE_DURATION = 6.0


@dataclass(frozen=True)
class InteractionResult:
    interaction_occurred: bool = False
    npc: NPC | None = None
    dialogue: tuple[str, ...] = field(default_factory=tuple)


class NPCInteractionUseCase:
    def __init__(self, renderer, dialogue_service=None):
        self._renderer = renderer
        self._dialogue_service = dialogue_service

    def execute(self, position: Position, game_state) -> InteractionResult:
        npc = self._find_npc_at(position, game_state.get_npcs())
        if npc is None:
            return InteractionResult()

        dialogue = self._get_dialogue(npc, game_state)
        self._display(npc, dialogue)
        logger.info("npc_interaction", npc_id=npc.id, zone_id=game_state.current_zone_id)
        return InteractionResult(True, npc, tuple(dialogue))

    @staticmethod
    def _find_npc_at(position: Position, npcs: list[NPC]) -> NPC | None:
        # First match wins; overlapping NPCs are a content error.
        return next((npc for npc in npcs if npc.position == position), None)

    def _get_dialogue(self, npc: NPC, game_state) -> list[str]:
        if self._dialogue_service is not None:
            return self._dialogue_service.get_npc_dialogue(npc, game_state)
        return npc.get_dialogue(game_state)

    def _display(self, npc: NPC, dialogue: list[str]) -> None:
        show_dialogue = getattr(self._renderer, "show_npc_dialogue", None)
        if show_dialogue is not None:
            show_dialogue(npc, dialogue, duration=DIALOGUE_DURATION)
            return
        show_message = getattr(self._renderer, "show_message", None)
        if show_message is not None:
            show_message(
                "\n\n".join(dialogue),
                type="dialogue",
                speaker=npc.name or npc.id,
                duration=DIALOGUE_DURATION,
            )

    def handle_teaching_moment(self, npc: NPC, skill: str) -> str | None:
        if self._dialogue_service is None:
            return None
        return self._dialogue_service.get_teaching_moment(npc, skill)

    def handle_milestone_celebration(self, milestone: str, npcs: list[NPC]):
        if self._dialogue_service is None:
            return None
        return self._dialogue_service.celebrate_milestone(milestone, npcs)
