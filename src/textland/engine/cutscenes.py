"""Story scripts shown when a game starts, a level begins or a zone opens.

Which stories a player has already seen is kept in a ShownStore. The
default one lives in memory; the capsule stores it per player in the
database.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from .errors import ConfigurationError

CUTSCENE_KINDS = ("game", "level", "zone")
SECONDS_PER_LINE = 2


def story_identifier(
    game_id: str, kind: str, level_id: str | None = None, zone_id: str | None = None
) -> str:
    return ":".join(part for part in (game_id, kind, level_id, zone_id) if part)


@dataclass(frozen=True)
class CutsceneStory:
    game_id: str
    kind: str
    script: tuple[str, ...]
    level_id: str | None = None
    zone_id: str | None = None

    def __post_init__(self) -> None:
        if not self.game_id:
            raise ConfigurationError("Cutscene game id is required")
        if self.kind not in CUTSCENE_KINDS:
            raise ConfigurationError(
                f"Cutscene kind must be one of: {', '.join(CUTSCENE_KINDS)}"
            )
        if self.kind in ("level", "zone") and not self.level_id:
            raise ConfigurationError(f"Level id is required for {self.kind} cutscenes")
        if self.kind == "zone" and not self.zone_id:
            raise ConfigurationError("Zone id is required for zone cutscenes")
        if not self.script:
            raise ConfigurationError("Cutscene script must contain at least one line")

    @property
    def identifier(self) -> str:
        return story_identifier(self.game_id, self.kind, self.level_id, self.zone_id)

    @property
    def duration(self) -> int:
        """Reading time in seconds."""
        return SECONDS_PER_LINE * sum(1 for line in self.script if line.strip())


class CutsceneProvider:
    """In-memory stories, looked up by identifier."""

    def __init__(self, stories: Iterable[CutsceneStory] = ()):
        self._stories: dict[str, CutsceneStory] = {}
        for story in stories:
            self.add(story)

    @classmethod
    def from_games(
        cls, games, zones=None, stories: Iterable[CutsceneStory] = ()
    ) -> "CutsceneProvider":
        """Explicit stories, plus stories derived from the game content.

        Every level with a ``cutscene`` gets a level story and, when a zone
        registry is given, every zone with narration gets a zone story in
        each level that lists it. Explicit stories win over derived ones.
        """
        provider = cls(stories)
        for game in games:
            for level in game.levels.values():
                if level.cutscene:
                    provider._add_missing(
                        CutsceneStory(game.id, "level", level.cutscene, level.id)
                    )
                if zones is None:
                    continue
                for zone_id in level.zones:
                    if not zones.has_zone(zone_id):
                        continue
                    narration = zones.get_zone_config(zone_id).narration
                    if narration:
                        provider._add_missing(
                            CutsceneStory(game.id, "zone", narration, level.id, zone_id)
                        )
        return provider

    def _add_missing(self, story: CutsceneStory) -> None:
        if story.identifier not in self._stories:
            self.add(story)

    def add(self, story: CutsceneStory) -> None:
        self._stories[story.identifier] = story

    def get_cutscene_story(
        self, game_id: str, kind: str, level_id: str | None = None, zone_id: str | None = None
    ) -> CutsceneStory | None:
        return self._stories.get(story_identifier(game_id, kind, level_id, zone_id))

    def has_cutscene_story(self, *args, **kwargs) -> bool:
        return self.get_cutscene_story(*args, **kwargs) is not None

    def get_all_cutscene_stories(self) -> list[CutsceneStory]:
        return list(self._stories.values())

    def get_cutscene_stories_for_game(self, game_id: str) -> list[CutsceneStory]:
        return [story for story in self._stories.values() if story.game_id == game_id]


class ShownStore(Protocol):
    def is_shown(self, identifier: str) -> bool: ...

    def mark_shown(self, identifier: str) -> None: ...

    def reset(self, identifier: str) -> None: ...


class MemoryShownStore:
    def __init__(self):
        self._shown: set[str] = set()

    def is_shown(self, identifier: str) -> bool:
        return identifier in self._shown

    def mark_shown(self, identifier: str) -> None:
        self._shown.add(identifier)

    def reset(self, identifier: str) -> None:
        self._shown.discard(identifier)


class CutsceneService:
    def __init__(
        self,
        provider: CutsceneProvider,
        shown_store: ShownStore | None = None,
        enabled: bool = True,
    ):
        if provider is None:
            raise ConfigurationError("CutsceneProvider is required")
        self._provider = provider
        self._shown = shown_store if shown_store is not None else MemoryShownStore()
        self._enabled = enabled

    def is_cutscene_feature_enabled(self) -> bool:
        return self._enabled

    def should_show_cutscene_story(
        self, game_id: str, kind: str, level_id: str | None = None, zone_id: str | None = None
    ) -> bool:
        if not self._enabled:
            return False
        story = self._provider.get_cutscene_story(game_id, kind, level_id, zone_id)
        return story is not None and not self._shown.is_shown(story.identifier)

    def get_cutscene_story(
        self, game_id: str, kind: str, level_id: str | None = None, zone_id: str | None = None
    ) -> CutsceneStory | None:
        return self._provider.get_cutscene_story(game_id, kind, level_id, zone_id)

    def mark_cutscene_story_as_shown(
        self, game_id: str, kind: str, level_id: str | None = None, zone_id: str | None = None
    ) -> None:
        self._shown.mark_shown(story_identifier(game_id, kind, level_id, zone_id))

    def reset_cutscene_story(
        self, game_id: str, kind: str, level_id: str | None = None, zone_id: str | None = None
    ) -> None:
        self._shown.reset(story_identifier(game_id, kind, level_id, zone_id))
