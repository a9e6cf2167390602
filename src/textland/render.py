"""Drawing game snapshots as Gemtext.

A GeminiRenderer lives for one request. It keeps the last snapshot it was
given and every message raised while the request ran; the play template
turns both into a page.
"""

from dataclasses import dataclass

from .engine.entities import CollectibleKey
from .engine.state import StateSnapshot
from .engine.world import Position, TileType

TILE_SYMBOLS = {
    "grass": ".",
    "water": "~",
    "dirt": ",",
    "tree": "T",
    "stone": ":",
    "path": ".",
    "wall": "#",
    "bridge": "=",
    "sand": "_",
    "ruins": "%",
    "field": '"',
    "test_ground": ".",
    "boss_area": "!",
    "ramp_right": "/",
    "ramp_left": "\\",
}

CURSOR = "@"
NPC = "&"
VIM_KEY = "*"
COLLECTIBLE_KEY = "$"
GATE_CLOSED = "+"
GATE_OPEN = "O"

VIEW_RADIUS_X = 14
VIEW_RADIUS_Y = 6


def tile_symbol(tile: TileType) -> str:
    return TILE_SYMBOLS.get(tile.name, "?")


def render_map(
    snapshot: StateSnapshot,
    radius_x: int = VIEW_RADIUS_X,
    radius_y: int = VIEW_RADIUS_Y,
) -> list[str]:
    """Draw the part of the map around the cursor, one string per row.

    Anything drawn on top of the terrain wins in this order: cursor, NPCs,
    keys, gates, text labels.
    """
    overlay: dict[Position, str] = {}
    for label in snapshot.text_labels:
        for offset, char in enumerate(label.text):
            overlay[label.position.move(offset, 0)] = char
    for gate in (snapshot.gate, *snapshot.secondary_gates):
        if gate is not None:
            overlay[gate.position] = GATE_OPEN if gate.is_open else GATE_CLOSED
    for key in snapshot.available_collectible_keys:
        overlay[key.position] = COLLECTIBLE_KEY
    for key in snapshot.available_keys:
        overlay[key.position] = VIM_KEY
    for npc in snapshot.npcs:
        overlay[npc.position] = NPC
    overlay[snapshot.cursor.position] = CURSOR

    center = snapshot.cursor.position
    lines = []
    for y in range(center.y - radius_y, center.y + radius_y + 1):
        row = []
        for x in range(center.x - radius_x, center.x + radius_x + 1):
            position = Position(x, y)
            symbol = overlay.get(position)
            row.append(symbol if symbol is not None else tile_symbol(snapshot.map.get_tile_at(position)))
        lines.append("".join(row))
    return lines


@dataclass(frozen=True)
class Message:
    text: str
    speaker: str | None = None
    kind: str = "info"


class GeminiRenderer:
    def __init__(self):
        self.snapshot: StateSnapshot | None = None
        self.messages: list[Message] = []

    def render(self, snapshot: StateSnapshot) -> None:
        self.snapshot = snapshot

    def show_key_info(self, key) -> None:
        if isinstance(key, CollectibleKey):
            text = f"You picked up the {key.name}."
        else:
            text = f"You found the '{key.key}' key! {key.description}"
        self.messages.append(Message(text, kind="key"))

    def show_message(self, text: str, **options) -> None:
        self.messages.append(
            Message(text, speaker=options.get("speaker"), kind=options.get("type", "info"))
        )

    def show_npc_dialogue(self, npc, lines: list[str], **options) -> None:
        self.messages.append(Message("\n".join(lines), speaker=npc.name or npc.id, kind="dialogue"))

    async def show_cutscene(self, story) -> None:
        self.messages.append(Message("\n".join(story.script), kind="cutscene"))

    def map_lines(self) -> list[str]:
        if self.snapshot is None:
            return []
        return render_map(self.snapshot)
