"""Things that sit on the grid: the cursor, keys, gates and text labels."""

from dataclasses import dataclass, field, replace

from .world import Position


@dataclass(frozen=True)
class Cursor:
    """The player. Every move produces a new Cursor.

    ``remembered_column`` is the column vertical moves try to return to.
    It follows horizontal moves and survives vertical ones.
    """

    position: Position
    is_blinking: bool = True
    remembered_column: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.position, Position):
            raise ValueError("Cursor position must be a Position instance")
        if not isinstance(self.is_blinking, bool):
            raise ValueError("is_blinking must be a boolean")
        if self.remembered_column is None:
            object.__setattr__(self, "remembered_column", self.position.x)

    def move_to(
        self, position: Position, update_remembered_column: bool = True
    ) -> "Cursor":
        column = position.x if update_remembered_column else self.remembered_column
        return Cursor(position, self.is_blinking, column)

    def move_to_with_column_memory(self, position: Position) -> "Cursor":
        return self.move_to(position, update_remembered_column=False)

    def toggle_blinking(self) -> "Cursor":
        return replace(self, is_blinking=not self.is_blinking)


@dataclass(frozen=True, eq=False)
class VimKey:
    """An educational command key. Identity is ``key`` (e.g. ``"h"``, ``"ESC"``)."""

    position: Position
    key: str
    description: str

    def __post_init__(self) -> None:
        if not isinstance(self.position, Position):
            raise ValueError("VimKey position must be a Position instance")
        if not isinstance(self.key, str) or not self.key:
            raise ValueError("VimKey key must be a non-empty string")

    @property
    def identity(self) -> str:
        return self.key

    def same_as(self, other: object) -> bool:
        """Structural comparison; collection itself uses object identity."""
        return (
            isinstance(other, VimKey)
            and self.position == other.position
            and self.key == other.key
        )


@dataclass(frozen=True, eq=False)
class CollectibleKey:
    """A generic key spent on secondary gates."""

    position: Position
    key_id: str
    name: str = "Key"
    color: str = "#FFD700"

    def __post_init__(self) -> None:
        if not isinstance(self.position, Position):
            raise ValueError("CollectibleKey position must be a Position instance")
        if not isinstance(self.key_id, str) or not self.key_id:
            raise ValueError("CollectibleKey key_id must be a non-empty string")

    @property
    def identity(self) -> str:
        return self.key_id

    @property
    def description(self) -> str:
        return self.name

    def __str__(self) -> str:
        return f"CollectibleKey({self.key_id}) at ({self.position.x}, {self.position.y})"


@dataclass(eq=False)
class Gate:
    """A barrier on one tile. Closed gates are never walkable.

    Gates only ever go from closed to open.
    """

    position: Position
    required_vim_keys: frozenset[str] = field(default_factory=frozenset)
    required_collectible_keys: frozenset[str] = field(default_factory=frozenset)
    leads_to: str | None = None
    _is_open: bool = field(default=False, init=False, repr=False)

    @property
    def is_open(self) -> bool:
        return self._is_open

    def open(self) -> None:
        self._is_open = True

    def is_walkable(self) -> bool:
        return self._is_open

    def can_unlock(
        self, collected_vim_keys: set[str], collected_collectible_keys: set[str]
    ) -> bool:
        return self.required_vim_keys <= collected_vim_keys and (
            self.required_collectible_keys <= collected_collectible_keys
        )

    def __str__(self) -> str:
        state = "Open" if self._is_open else "Closed"
        return f"Gate at ({self.position.x}, {self.position.y}) - {state}"


@dataclass(frozen=True)
class TextLabel:
    position: Position
    text: str

    def __post_init__(self) -> None:
        if not isinstance(self.text, str) or not self.text:
            raise ValueError("Text must be a non-empty string")
