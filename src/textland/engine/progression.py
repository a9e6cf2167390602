"""Turning a completed zone or level into the next one.

Zone progression happens in place: the game state has already loaded the
next zone by the time the player is told about it. Level progression is
handed to a Navigator after a short pause so the player can read the
"Level Complete" message first.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from ..logging import get_logger
from .ports import CutsceneRenderer, Navigator, Renderer
from .state import ProgressionResult, ProgressionType

logger = get_logger(__name__)

DEFAULT_TRANSITION_DELAY = 2.0


class UrlNavigator:
    """Reloads the current address with its ``level`` parameter replaced."""

    def __init__(self, current_url: Callable[[], str], reload: Callable[[str], None], param: str = "level"):
        self._current_url = current_url
        self._reload = reload
        self._param = param

    def url_for_level(self, level_id: str) -> str:
        parts = urlsplit(self._current_url())
        query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != self._param]
        query.append((self._param, level_id))
        return urlunsplit(parts._replace(query=urlencode(query)))

    def transition_to_level(self, level_id: str) -> None:
        self._reload(self.url_for_level(level_id))


class FallbackNavigator:
    """Tries each navigator in turn until one succeeds."""

    def __init__(self, *navigators: Navigator):
        if not navigators:
            raise ValueError("FallbackNavigator needs at least one navigator")
        self._navigators = navigators

    def transition_to_level(self, level_id: str) -> None:
        error: Exception | None = None
        for navigator in self._navigators:
            try:
                navigator.transition_to_level(level_id)
                return
            except Exception as exc:
                logger.error(
                    "level_transition_failed",
                    navigator=type(navigator).__name__,
                    level_id=level_id,
                    error=str(exc),
                )
                error = exc
        raise error


class ScheduledTransition:
    """A delayed hand-off to the navigator that can be called off.

    The transition does nothing if, by the time it fires, its game state has
    been released or has moved to another level.
    """

    def __init__(self, game_state, navigator: Navigator, level_id: str, delay: float = DEFAULT_TRANSITION_DELAY):
        self._game_state = game_state
        self._navigator = navigator
        self.level_id = level_id
        self.delay = delay
        self._from_level = game_state.level_id
        self._firing = False
        self._task: asyncio.Task | None = None

    def start(self) -> "ScheduledTransition":
        self._task = asyncio.get_running_loop().create_task(self._run())
        return self

    async def _run(self) -> bool:
        await asyncio.sleep(self.delay)
        state = self._game_state
        if state.released or state.level_id != self._from_level:
            logger.info("level_transition_skipped", level_id=self.level_id, from_level=self._from_level)
            return False
        self._firing = True
        try:
            self._navigator.transition_to_level(self.level_id)
        except Exception:
            logger.exception("level_transition_failed", level_id=self.level_id)
            return False
        logger.info("level_transition", from_level=self._from_level, level_id=self.level_id)
        return True

    def cancel(self) -> None:
        # Cancelling from inside the navigator call would abort the transition itself.
        if self._task is not None and not self._task.done() and not self._firing:
            self._task.cancel()

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    @property
    def cancelled(self) -> bool:
        return self._task is not None and self._task.cancelled()

    async def wait(self) -> bool:
        """Wait for the transition; True if the navigator was called successfully."""
        if self._task is None:
            return False
        try:
            return await self._task
        except asyncio.CancelledError:
            return False


@dataclass(frozen=True)
class ProgressionStatus:
    type: ProgressionType
    can_progress_to_zone: bool
    can_progress_to_level: bool
    is_game_complete: bool
    current_zone: str | None = None
    current_level: str | None = None


class HandleProgressionUseCase:
    def __init__(
        self,
        game_state,
        renderer: Renderer,
        navigator: Navigator | None = None,
        cutscene_service=None,
        cutscene_renderer: CutsceneRenderer | None = None,
        transition_delay: float = DEFAULT_TRANSITION_DELAY,
    ):
        self._game_state = game_state
        self._renderer = renderer
        self._navigator = navigator
        self._cutscene_service = cutscene_service
        self._cutscene_renderer = cutscene_renderer
        self._transition_delay = transition_delay
        self.pending_transition: ScheduledTransition | None = None

    def should_execute_progression(self) -> bool:
        state = self._game_state
        return state.should_progress_to_next_zone() or state.should_progress_to_next_level()

    async def execute(self) -> ProgressionResult:
        result = self._game_state.execute_progression()

        if result.type is ProgressionType.ZONE:
            await self._handle_zone_progression(result.new_zone_id)
        elif result.type is ProgressionType.LEVEL:
            await self._handle_level_progression(result.next_level_id)
        elif result.type is not ProgressionType.NONE:
            logger.warning("unknown_progression_type", type=str(result.type))

        return result

    def is_game_complete(self) -> bool:
        return self._game_state.is_game_complete()

    def get_progression_status(self) -> ProgressionStatus:
        state = self._game_state
        can_zone = state.should_progress_to_next_zone()
        can_level = state.should_progress_to_next_level()
        if can_level:
            kind = ProgressionType.LEVEL
        elif can_zone:
            kind = ProgressionType.ZONE
        else:
            kind = ProgressionType.NONE
        return ProgressionStatus(
            type=kind,
            can_progress_to_zone=can_zone,
            can_progress_to_level=can_level,
            is_game_complete=self.is_game_complete(),
            current_zone=state.current_zone_id,
            current_level=state.level_id,
        )

    async def _handle_zone_progression(self, zone_id: str) -> None:
        state = self._game_state
        logger.info("zone_progressed", game_id=state.game_id, level_id=state.level_id, zone_id=zone_id)
        await self.play_cutscene("zone", state.level_id, zone_id)
        self._show_message(f"Progressing to {zone_id}...")
        self._renderer.render(state.get_current_state())

    async def _handle_level_progression(self, level_id: str) -> None:
        state = self._game_state
        logger.info("level_completed", game_id=state.game_id, level_id=state.level_id, next_level_id=level_id)
        await self.play_cutscene("level", level_id)

        message = f"Level Complete! Progressing to {level_id}..."
        if not self._show_message(message):
            logger.warning("level_complete", message=message)

        if self._navigator is None:
            logger.warning("level_transition_unavailable", level_id=level_id)
            return
        transition = ScheduledTransition(state, self._navigator, level_id, self._transition_delay)
        state.attach_transition(transition)
        self.pending_transition = transition.start()

    def _show_message(self, text: str) -> bool:
        show_message = getattr(self._renderer, "show_message", None)
        if show_message is None:
            return False
        show_message(text)
        return True

    async def play_cutscene(
        self, kind: str, level_id: str | None = None, zone_id: str | None = None
    ) -> None:
        """Show a not-yet-seen cutscene. Failures are logged and skipped."""
        service = self._cutscene_service
        if service is None:
            return
        game_id = self._game_state.game_id
        try:
            if not service.should_show_cutscene_story(game_id, kind, level_id, zone_id):
                return
            story = service.get_cutscene_story(game_id, kind, level_id, zone_id)
            if story is None or self._cutscene_renderer is None:
                return
            await self._cutscene_renderer.show_cutscene(story)
            service.mark_cutscene_story_as_shown(game_id, kind, level_id, zone_id)
        except Exception:
            logger.warning(
                "cutscene_failed",
                game_id=game_id,
                kind=kind,
                level_id=level_id,
                zone_id=zone_id,
                exc_info=True,
            )
