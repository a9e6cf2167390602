"""NPC conversations, teaching moments and celebrations."""

import random
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field

from .npcs import NPC

TEACHING_COOLDOWN = 30.0
RECENT_CONVERSATION_WINDOW = 300.0
HISTORY_PER_NPC = 5

GENERIC_TEACHINGS = {
    "h": "h moves left - practice until it feels natural.",
    "j": "j moves down - let your finger find the rhythm.",
    "k": "k moves up - reach for efficiency.",
    "l": "l moves right - flow like reading text.",
    "i": "i enters insert mode - creation begins.",
    "ESC": "ESC returns to normal mode - your safe harbor.",
    "x": "x deletes character - precision is key.",
    "dd": "dd deletes line - powerful but careful.",
    "/": "/ searches forward - find what you seek.",
    "?": "? searches backward - explore the past.",
}

GENERIC_ENCOURAGEMENTS = (
    "Keep practicing! You're making great progress.",
    "Every keystroke builds your expertise.",
    "VIM mastery comes with persistence.",
    "You're developing excellent muscle memory!",
)

# Which NPC types celebrate which milestone when no practice buddy is around.
MILESTONE_NPC_TYPES = {
    "basic_movement": ("caret_spirit", "caret_stone"),
    "mode_switching": ("maze_scribe",),
}

GENERIC_CELEBRATION = "Excellent work! Your skills continue to grow."


@dataclass(frozen=True)
class Celebration:
    npc: NPC
    dialogue: str
    type: str = "celebration"


@dataclass
class Conversation:
    npc: NPC
    dialogue: list[str]
    started_at: float
    current_line: int = 0
    is_active: bool = True
    ended_at: float | None = None


@dataclass(frozen=True)
class ConversationLine:
    text: str
    line: int
    total: int


@dataclass(frozen=True)
class ConversationProgress:
    npc: NPC
    current_text: str
    progress: int
    total: int
    is_finished: bool


@dataclass
class DialogueService:
    clock: Callable[[], float] = time.monotonic
    rng: random.Random = field(default_factory=random.Random)

    def __post_init__(self) -> None:
        self.current_conversation: Conversation | None = None
        self._history: dict[str, deque[Conversation]] = {}
        self._teaching_moments: dict[tuple[str, str], float] = {}

    def get_npc_dialogue(self, npc: NPC | None, game_state=None) -> list[str]:
        if npc is None:
            return []
        return npc.get_dialogue(game_state)

    def get_teaching_moment(self, npc: NPC, skill: str) -> str | None:
        """Teaching line for ``skill``, at most once per cool-down per NPC."""
        key = (npc.id, skill)
        now = self.clock()
        last = self._teaching_moments.get(key)
        if last is not None and now - last < TEACHING_COOLDOWN:
            return None
        self._teaching_moments[key] = now

        teaching = npc.get_teaching(skill)
        if teaching:
            return teaching
        return GENERIC_TEACHINGS.get(skill, f"Well done with {skill}! Keep practicing.")

    def get_encouragement(self, npc: NPC | None, context: str = "general") -> str:
        if npc is None:
            return ""
        return npc.get_encouragement(self.rng) or self.rng.choice(GENERIC_ENCOURAGEMENTS)

    def celebrate_milestone(self, milestone: str, npcs: list[NPC]) -> Celebration | None:
        buddy = next((npc for npc in npcs if npc.npc_type == "practice_buddy"), None)
        if buddy is not None:
            return Celebration(buddy, buddy.get_milestone_celebration(milestone))

        types = MILESTONE_NPC_TYPES.get(milestone, ())
        npc = next((n for n in npcs if n.id in types or n.npc_type in types), None)
        if npc is None:
            return None
        return Celebration(npc, npc.get_milestone_celebration(milestone) or GENERIC_CELEBRATION)

    # Conversations

    def start_conversation(self, npc: NPC, game_state=None) -> Conversation:
        conversation = Conversation(npc, self.get_npc_dialogue(npc, game_state), self.clock())
        self.current_conversation = conversation
        history = self._history.setdefault(npc.id, deque(maxlen=HISTORY_PER_NPC))
        history.append(conversation)
        return conversation

    def advance_conversation(self) -> ConversationLine | None:
        conversation = self.current_conversation
        if conversation is None or not conversation.is_active:
            return None
        conversation.current_line += 1
        if conversation.current_line >= len(conversation.dialogue):
            self.end_conversation()
            return None
        return ConversationLine(
            conversation.dialogue[conversation.current_line],
            conversation.current_line,
            len(conversation.dialogue),
        )

    def end_conversation(self) -> None:
        if self.current_conversation is not None:
            self.current_conversation.is_active = False
            self.current_conversation.ended_at = self.clock()
        self.current_conversation = None

    def get_conversation_progress(self) -> ConversationProgress | None:
        conversation = self.current_conversation
        if conversation is None or not conversation.is_active or not conversation.dialogue:
            return None
        total = len(conversation.dialogue)
        return ConversationProgress(
            npc=conversation.npc,
            current_text=conversation.dialogue[conversation.current_line],
            progress=conversation.current_line + 1,
            total=total,
            is_finished=conversation.current_line >= total - 1,
        )

    def conversation_count(self, npc_id: str) -> int:
        return len(self._history.get(npc_id, ()))

    def has_recent_conversation(
        self, npc_id: str, window: float = RECENT_CONVERSATION_WINDOW
    ) -> bool:
        history = self._history.get(npc_id)
        if not history:
            return False
        return self.clock() - history[-1].started_at < window
