"""Zones: one playable area with its map, keys, gates and NPCs.

A Zone is the only owner of which keys are still lying around and which
have been picked up. Game states read that through the zone instead of
keeping a copy of their own.
"""

from dataclasses import dataclass, field

from .entities import CollectibleKey, Gate, TextLabel, VimKey
from .errors import ConfigurationError
from .npcs import NPC, npc_from_config
from .world import Position, ZoneMap, tile_type_for

DEFAULT_CURSOR_START = (2, 2)
# Where the gate of a final zone sits.
FINAL_GATE_POSITION = (6, 6)

KEY_DESCRIPTIONS = {
    "h": "Move left - The westward wind key",
    "j": "Move down - The earthward root key",
    "k": "Move up - The skyward branch key",
    "l": "Move right - The eastward sun key",
    "i": "Insert mode - the key to creation",
    "ESC": "Escape to Normal mode - the key to control",
    ":": "Command mode - the key to power",
    "w": "word - forward to start of next word",
    "W": "WORD - forward to start of next WORD",
    "e": "end - forward to end of word",
    "b": "back - backward to start of word",
    "x": "x - delete character under cursor",
    "dd": "dd - delete entire line",
    "dw": "dw - delete word",
    "a": "a - append after cursor",
    "o": "o - open line below",
    "yy": "yy - yank (copy) line",
    "p": "p - put (paste) after cursor",
    "/": "/ - search forward",
    "?": "? - search backward",
    "n": "n - next search result",
    ":w": ":w - write (save) file",
    ":q": ":q - quit vim",
}


def describe_key(key: str) -> str:
    return KEY_DESCRIPTIONS.get(key, f"VIM key: {key}")


@dataclass(frozen=True)
class ZoneConfig:
    """Read-only zone definition. Coordinates are zone-relative."""

    zone_id: str
    name: str
    layout: tuple[str, ...] = ()
    legend: dict[str, str] = field(default_factory=dict)
    biome: str = ""
    skill_focus: tuple[str, ...] = ()
    puzzle_theme: str = ""
    narration: tuple[str, ...] = ()
    vim_keys: tuple[dict, ...] = ()
    collectible_keys: tuple[dict, ...] = ()
    text_labels: tuple[dict, ...] = ()
    gate: dict | None = None
    secondary_gates: tuple[dict, ...] = ()
    npcs: tuple[dict, ...] = ()
    cursor_start: tuple[int, int] | None = None
    requires_explicit_confirmation: bool = False


class Zone:
    def __init__(self, config: ZoneConfig):
        self._config = config
        width = max((len(row) for row in config.layout), default=12)
        height = len(config.layout) or 8
        self._game_map = ZoneMap(width, height)
        # Zone-relative (0, 0); every content coordinate is offset from here.
        self._origin = self._game_map.zone_to_absolute(0, 0)

        self._build_tiles()
        self._vim_keys: list[VimKey] = self._build_vim_keys()
        self._collectible_keys: list[CollectibleKey] = self._build_collectible_keys()
        self._total_vim_keys = len(self._vim_keys)
        self._collected_keys: set[str] = set()
        self._collected_collectible_keys: set[str] = set()
        self._text_labels = [
            TextLabel(self._absolute(label["position"]), label["text"])
            for label in config.text_labels
        ]
        self._gate = self._build_gate()
        self._secondary_gates = [
            self._build_gate_from(gate_config) for gate_config in config.secondary_gates
        ]
        self._npcs: list[NPC] = [npc_from_config(data, self._origin) for data in config.npcs]
        self._check_gate_unlock()

    def _absolute(self, pair) -> Position:
        x, y = pair
        return self._origin.move(x, y)

    def _build_tiles(self) -> None:
        for row_index, row in enumerate(self._config.layout):
            for col_index, char in enumerate(row):
                name = self._config.legend.get(char)
                if name:
                    position = self._game_map.zone_to_absolute(col_index, row_index)
                    self._game_map.set_tile_at(position, tile_type_for(name))

    def _build_vim_keys(self) -> list[VimKey]:
        keys: list[VimKey] = []
        for tile in self._config.vim_keys:
            key = tile["value"]
            if any(existing.key == key for existing in keys):
                raise ConfigurationError(
                    f"Duplicate key '{key}' in zone '{self._config.zone_id}'"
                )
            description = tile.get("description") or describe_key(key)
            keys.append(VimKey(self._absolute(tile["position"]), key, description))
        return keys

    def _build_collectible_keys(self) -> list[CollectibleKey]:
        keys: list[CollectibleKey] = []
        for tile in self._config.collectible_keys:
            key_id = tile["key_id"]
            if any(existing.key_id == key_id for existing in keys):
                raise ConfigurationError(
                    f"Duplicate collectible key '{key_id}' in zone '{self._config.zone_id}'"
                )
            keys.append(
                CollectibleKey(
                    self._absolute(tile["position"]),
                    key_id,
                    tile.get("name", "Key"),
                    tile.get("color", "#FFD700"),
                )
            )
        return keys

    def _build_gate_from(self, gate_config: dict, default_vim_keys=frozenset()) -> Gate:
        unlocks_when = gate_config.get("unlocks_when") or {}
        vim_keys = unlocks_when.get("collected_vim_keys")
        return Gate(
            self._absolute(gate_config["position"]),
            required_vim_keys=frozenset(vim_keys) if vim_keys else default_vim_keys,
            required_collectible_keys=frozenset(
                unlocks_when.get("collected_collectible_keys", [])
            ),
            leads_to=gate_config.get("leads_to"),
        )

    def _build_gate(self) -> Gate | None:
        gate_config = self._config.gate
        if gate_config is None:
            return None
        all_keys = frozenset(key.key for key in self._vim_keys)
        if gate_config.get("position") is None:
            # Final zone: nowhere left to go, so the gate opens with the last key.
            return Gate(self._absolute(FINAL_GATE_POSITION), required_vim_keys=all_keys)
        return self._build_gate_from(gate_config, default_vim_keys=all_keys)

    def _check_gate_unlock(self) -> bool:
        gate = self._gate
        if gate is None or gate.is_open:
            return False
        if gate.can_unlock(self._collected_keys, self._collected_collectible_keys):
            gate.open()
            return True
        return False

    # Read side

    @property
    def zone_id(self) -> str:
        return self._config.zone_id

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def biome(self) -> str:
        return self._config.biome

    @property
    def skill_focus(self) -> list[str]:
        return list(self._config.skill_focus)

    @property
    def narration(self) -> list[str]:
        return list(self._config.narration)

    @property
    def requires_explicit_confirmation(self) -> bool:
        return self._config.requires_explicit_confirmation

    @property
    def game_map(self) -> ZoneMap:
        return self._game_map

    @property
    def vim_keys(self) -> list[VimKey]:
        return list(self._vim_keys)

    @property
    def collectible_keys(self) -> list[CollectibleKey]:
        return list(self._collectible_keys)

    @property
    def collected_keys(self) -> frozenset[str]:
        return frozenset(self._collected_keys)

    @property
    def collected_collectible_keys(self) -> frozenset[str]:
        return frozenset(self._collected_collectible_keys)

    @property
    def total_vim_keys(self) -> int:
        return self._total_vim_keys

    @property
    def text_labels(self) -> list[TextLabel]:
        return list(self._text_labels)

    @property
    def gate(self) -> Gate | None:
        return self._gate

    @property
    def secondary_gates(self) -> list[Gate]:
        return list(self._secondary_gates)

    @property
    def npcs(self) -> list[NPC]:
        return list(self._npcs)

    def get_cursor_start_position(self) -> Position:
        return self._absolute(self._config.cursor_start or DEFAULT_CURSOR_START)

    def get_active_npcs(self) -> list[NPC]:
        """NPCs whose appearance conditions are met."""
        return [npc for npc in self._npcs if npc.is_visible(self._collected_keys)]

    def gate_at(self, position: Position) -> Gate | None:
        if self._gate is not None and self._gate.position == position:
            return self._gate
        for gate in self._secondary_gates:
            if gate.position == position:
                return gate
        return None

    def is_complete(self) -> bool:
        if self._gate is None:
            return not self._vim_keys
        return self._gate.is_open

    # Write side

    def collect_key(self, key: VimKey | CollectibleKey) -> bool:
        """Pick up ``key`` if it is one of this zone's available keys.

        Keys are matched by object identity; anything else (a key already
        picked up, a key from another zone) is ignored and returns False.
        """
        if isinstance(key, CollectibleKey):
            pool, collected = self._collectible_keys, self._collected_collectible_keys
        else:
            pool, collected = self._vim_keys, self._collected_keys

        for index, candidate in enumerate(pool):
            if candidate is key:
                del pool[index]
                collected.add(key.identity)
                self._check_gate_unlock()
                return True
        return False

    def try_unlock_secondary_gate(self, position: Position) -> bool:
        """Open the secondary gate at ``position``, spending its collectible keys."""
        gate = next((g for g in self._secondary_gates if g.position == position), None)
        if gate is None or gate.is_open:
            return False
        if not gate.can_unlock(self._collected_keys, self._collected_collectible_keys):
            return False
        self._collected_collectible_keys -= gate.required_collectible_keys
        gate.open()
        return True

    def cleanup(self) -> None:
        self._game_map.cleanup()
