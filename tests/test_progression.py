"""Tests for zone and level progression."""

import pytest

from textland.engine.cutscenes import CutsceneProvider, CutsceneService, CutsceneStory
from textland.engine.progression import (
    FallbackNavigator,
    HandleProgressionUseCase,
    ScheduledTransition,
    UrlNavigator,
)
from textland.engine.registry import Game, GameType, Level
from textland.engine.state import ProgressionType, create_level_game_state


def _game():
    levels = [
        Level("level_x", "Two Rooms", ("zone_a", "zone_b"), "Two small rooms"),
        Level("level_y", "Last", ("zone_b",), "The end"),
    ]
    return Game(
        id="test_game",
        name="Test Game",
        description="Levels for tests",
        game_type=GameType.LEVEL_BASED,
        supported_levels=[level.id for level in levels],
        levels={level.id: level for level in levels},
        factory=create_level_game_state,
    )


def _ready_for_zone(state):
    for key in state.available_keys:
        state.collect_key(key)
    state.move_cursor(state.cursor.move_to(state.gate.position))


def _ready_for_level(state):
    _ready_for_zone(state)
    state.execute_progression()
    _ready_for_zone(state)


class FailingCutscenes:
    def should_show_cutscene_story(self, *args):
        raise RuntimeError("cutscene storage offline")


class BrokenNavigator:
    def transition_to_level(self, level_id):
        raise RuntimeError("no route")


@pytest.fixture
def state(zone_registry):
    return _game().create_game_state(zone_registry)


@pytest.mark.asyncio
async def test_nothing_to_do(state, renderer):
    progression = HandleProgressionUseCase(state, renderer)
    assert not progression.should_execute_progression()
    result = await progression.execute()
    assert result.type is ProgressionType.NONE
    assert renderer.messages == []


@pytest.mark.asyncio
async def test_zone_progression_plays_zone_cutscene(state, renderer):
    stories = CutsceneProvider(
        [CutsceneStory("test_game", "zone", ("The second room.",), "level_x", "zone_b")]
    )
    service = CutsceneService(stories)
    progression = HandleProgressionUseCase(
        state, renderer, cutscene_service=service, cutscene_renderer=renderer
    )
    _ready_for_zone(state)

    result = await progression.execute()

    assert result.type is ProgressionType.ZONE
    assert [story.script for story in renderer.cutscenes] == [("The second room.",)]
    assert renderer.messages == ["Progressing to zone_b..."]
    assert not service.should_show_cutscene_story("test_game", "zone", "level_x", "zone_b")


@pytest.mark.asyncio
async def test_cutscene_failure_does_not_stop_progression(state, renderer):
    progression = HandleProgressionUseCase(
        state, renderer, cutscene_service=FailingCutscenes(), cutscene_renderer=renderer
    )
    _ready_for_zone(state)
    result = await progression.execute()
    assert result.type is ProgressionType.ZONE
    assert state.current_zone_id == "zone_b"


@pytest.mark.asyncio
async def test_level_progression_schedules_navigator(state, renderer, navigator):
    progression = HandleProgressionUseCase(
        state, renderer, navigator=navigator, transition_delay=0
    )
    _ready_for_level(state)

    status = progression.get_progression_status()
    assert status.type is ProgressionType.LEVEL
    assert status.can_progress_to_level

    result = await progression.execute()
    assert result.type is ProgressionType.LEVEL
    assert "Level Complete! Progressing to level_y..." in renderer.messages
    assert state.pending_transition is progression.pending_transition

    assert await progression.pending_transition.wait()
    assert navigator.levels == ["level_y"]


@pytest.mark.asyncio
async def test_level_message_without_message_channel(state, bare_renderer, navigator):
    progression = HandleProgressionUseCase(
        state, bare_renderer, navigator=navigator, transition_delay=0
    )
    _ready_for_level(state)
    await progression.execute()
    assert await progression.pending_transition.wait()
    assert navigator.levels == ["level_y"]


@pytest.mark.asyncio
async def test_level_progression_without_navigator(state, renderer):
    progression = HandleProgressionUseCase(state, renderer, transition_delay=0)
    _ready_for_level(state)
    result = await progression.execute()
    assert result.type is ProgressionType.LEVEL
    assert progression.pending_transition is None


@pytest.mark.asyncio
async def test_cleanup_cancels_pending_transition(state, renderer, navigator):
    progression = HandleProgressionUseCase(
        state, renderer, navigator=navigator, transition_delay=60
    )
    _ready_for_level(state)
    await progression.execute()
    transition = progression.pending_transition

    state.cleanup()

    assert not await transition.wait()
    assert transition.cancelled
    assert navigator.levels == []


@pytest.mark.asyncio
async def test_transition_skipped_after_level_changed(state, navigator):
    transition = ScheduledTransition(state, navigator, "level_y", delay=0).start()
    state.level_id = "somewhere_else"
    assert not await transition.wait()
    assert navigator.levels == []


@pytest.mark.asyncio
async def test_navigator_may_release_the_state_it_was_called_for(state):
    class ReplacingNavigator:
        def __init__(self):
            self.levels = []

        def transition_to_level(self, level_id):
            state.cleanup()
            self.levels.append(level_id)

    navigator = ReplacingNavigator()
    transition = ScheduledTransition(state, navigator, "level_y", delay=0)
    state.attach_transition(transition)
    transition.start()
    assert await transition.wait()
    assert navigator.levels == ["level_y"]


@pytest.mark.asyncio
async def test_failing_navigator_is_logged_not_raised(state):
    transition = ScheduledTransition(state, BrokenNavigator(), "level_y", delay=0).start()
    assert not await transition.wait()


def test_game_complete_status(zone_registry, renderer):
    state = _game().create_game_state(zone_registry, "level_y")
    progression = HandleProgressionUseCase(state, renderer)
    _ready_for_zone(state)
    assert progression.is_game_complete()
    assert progression.get_progression_status().is_game_complete


def test_url_navigator_replaces_level_parameter():
    reloads = []
    navigator = UrlNavigator(lambda: "gemini://example.org/play?level=level_1&x=1", reloads.append)
    navigator.transition_to_level("level_2")
    assert reloads == ["gemini://example.org/play?x=1&level=level_2"]


def test_fallback_navigator_tries_the_next_one(navigator):
    FallbackNavigator(BrokenNavigator(), navigator).transition_to_level("level_3")
    assert navigator.levels == ["level_3"]


def test_fallback_navigator_reraises_when_all_fail():
    with pytest.raises(RuntimeError):
        FallbackNavigator(BrokenNavigator()).transition_to_level("level_3")
