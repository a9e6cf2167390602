"""Non-player characters.

Every NPC answers ``get_dialogue(game_state)``. The base class speaks its
configured lines, or a plain greeting when it has none; the variants below
react to what the player has collected.
"""

import random
from dataclasses import dataclass, field

from .errors import ConfigurationError
from .world import Position

FALLBACK_DIALOGUE = ["Hello, traveler!", "Welcome to this realm."]

BASIC_MOTIONS = ("h", "j", "k", "l")


def _collected(game_state) -> set[str]:
    if game_state is None:
        return set()
    return set(getattr(game_state, "collected_keys", set()))


@dataclass
class NPC:
    id: str
    position: Position
    name: str = ""
    npc_type: str = "npc"
    dialogue: list[str] = field(default_factory=list)
    appears_when: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not isinstance(self.position, Position):
            raise ValueError("NPC position must be a Position instance")
        if not self.name:
            self.name = self.id.replace("_", " ").title()

    def is_visible(self, collected_vim_keys: set[str]) -> bool:
        return self.appears_when <= collected_vim_keys

    def get_dialogue(self, game_state=None) -> list[str]:
        if self.dialogue:
            return list(self.dialogue)
        return list(FALLBACK_DIALOGUE)

    def get_teaching(self, skill: str) -> str | None:
        return None

    def get_encouragement(self, rng: random.Random | None = None) -> str | None:
        return None

    def get_milestone_celebration(self, milestone: str) -> str | None:
        return None


@dataclass
class CaretStone(NPC):
    """Ancient rune stone guarding the four basic motions."""

    npc_type: str = "caret_stone"
    discovered: bool = False

    TEACHINGS = {
        "h": "h moves left... like the setting sun.",
        "j": "j moves down... into the earth's embrace.",
        "k": "k moves up... toward the endless sky.",
        "l": "l moves right... like the rising dawn.",
    }
    ENCOURAGEMENTS = (
        "The stone remembers your progress.",
        "Ancient paths open before you.",
        "Your cursor grows stronger.",
        "Motion becomes natural.",
    )

    def get_dialogue(self, game_state=None) -> list[str]:
        if not self.discovered:
            self.discovered = True
            return [
                "...",
                "Who... disturbs the stone?",
                "Show me... the ancient ways.",
                "Move with hjkl... prove your worth.",
            ]
        if not set(BASIC_MOTIONS) <= _collected(game_state):
            return [
                "Good... you have awakened me.",
                "But your foundation... incomplete.",
                "Find all four directions.",
            ]
        if self.dialogue:
            return list(self.dialogue)
        return [
            "Yes... the foundation is strong.",
            "h left, j down, k up, l right.",
            "The paths ahead... await your steps.",
        ]

    def get_teaching(self, skill: str) -> str | None:
        return self.TEACHINGS.get(skill, "Practice the four directions...")

    def get_encouragement(self, rng: random.Random | None = None) -> str | None:
        return (rng or random).choice(self.ENCOURAGEMENTS)

    def get_milestone_celebration(self, milestone: str) -> str | None:
        return "Ancient paths... acknowledge your growth."


@dataclass
class CaretSpirit(NPC):
    """Guardian flame that shares one piece of knowledge once found."""

    npc_type: str = "caret_spirit"
    knowledge: str = (
        "Master the sacred movement keys: h moves left, j moves down, "
        "k moves up, l moves right. These are the foundation of all VIM wisdom."
    )
    discovered: bool = False

    def get_dialogue(self, game_state=None) -> list[str]:
        if not self.discovered:
            self.discovered = True
            return [
                "Welcome, young cursor.",
                "The four directions await your mastery.",
                "Practice hjkl until they become instinct.",
            ]
        lines = list(self.dialogue)
        lines.append(self.knowledge)
        return lines

    def get_teaching(self, skill: str) -> str | None:
        if skill in BASIC_MOTIONS:
            return self.knowledge
        return None

    def get_milestone_celebration(self, milestone: str) -> str | None:
        if milestone == "basic_movement":
            return "The flame burns brighter... the four directions are yours."
        return None


@dataclass
class MazeScribe(NPC):
    """Keeper of the modes in the stone labyrinth."""

    npc_type: str = "maze_scribe"

    TEACHINGS = {
        "i": "i opens Insert mode. Write, and the world listens.",
        "ESC": "ESC returns you to Normal mode. Always your safe harbor.",
        ":": ": opens Command mode. Speak, and the text obeys.",
    }

    def get_dialogue(self, game_state=None) -> list[str]:
        lines = super().get_dialogue(game_state)
        missing = [key for key in ("i", "ESC", ":") if key not in _collected(game_state)]
        if missing:
            lines.append(f"Still the maze hides: {', '.join(missing)}")
        return lines

    def get_teaching(self, skill: str) -> str | None:
        return self.TEACHINGS.get(skill)

    def get_milestone_celebration(self, milestone: str) -> str | None:
        return "*Unfurls celebratory scroll* Your mastery is recorded in the annals!"


@dataclass
class PracticeBuddy(NPC):
    """Cheerful companion counting the skills the player has picked up."""

    npc_type: str = "practice_buddy"

    ENCOURAGEMENTS = (
        "Remember, every expert was once a beginner!",
        "The more you practice, the stronger you become!",
        "Every keystroke builds your muscle memory!",
        "Practice is the path to mastery!",
    )
    CELEBRATIONS = {
        "h": "Left movement mastered! Smooth as silk!",
        "j": "Down motion perfected! You're diving deep!",
        "k": "Up movement conquered! Reaching for the stars!",
        "l": "Right movement nailed! Moving forward with power!",
        "i": "Insert mode magic! Text creation wizard!",
        "/": "Search forward genius! Pattern finder!",
    }

    def get_dialogue(self, game_state=None) -> list[str]:
        count = len(_collected(game_state))
        if count == 0:
            return [
                "Hi there! Ready to practice?",
                "Grab a key and I'll cheer you on!",
            ]
        return [
            f"You've mastered {count} skill{'s' if count != 1 else ''} already!",
            "Keep exploring - there's so much more to discover!",
        ]

    def get_teaching(self, skill: str) -> str | None:
        return self.CELEBRATIONS.get(skill, "Awesome skill demonstration!")

    def get_encouragement(self, rng: random.Random | None = None) -> str | None:
        return (rng or random).choice(self.ENCOURAGEMENTS)

    def get_milestone_celebration(self, milestone: str) -> str | None:
        label = milestone.replace("_", " ")
        return f"*Throws confetti* You reached {label}! I'm so proud!"


NPC_TYPES: dict[str, type[NPC]] = {
    "npc": NPC,
    "caret_stone": CaretStone,
    "caret_spirit": CaretSpirit,
    "maze_scribe": MazeScribe,
    "practice_buddy": PracticeBuddy,
}


def npc_from_config(data: dict, origin: Position) -> NPC:
    """Build an NPC from zone content; ``position`` is zone-relative."""
    try:
        npc_id = data["id"]
        x, y = data["position"]
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigurationError(f"Malformed NPC definition: {data!r}") from exc

    npc_type = data.get("type", "npc")
    cls = NPC_TYPES.get(npc_type)
    if cls is None:
        raise ConfigurationError(f"Unknown NPC type '{npc_type}' for NPC '{npc_id}'")

    extra = {}
    if cls is CaretSpirit and data.get("knowledge"):
        extra["knowledge"] = data["knowledge"]

    return cls(
        id=npc_id,
        position=origin.move(x, y),
        name=data.get("name", ""),
        dialogue=list(data.get("dialogue", [])),
        appears_when=frozenset(data.get("appears_when", [])),
        **extra,
    )
