"""Tests for the session layer: saving, loading and playing through zones."""

import pytest
from sqlmodel import select

from textland.engine.errors import ConfigurationError, InvalidDirectionError
from textland.engine.state import LevelGameState, ProgressionType, TextlandGameState
from textland.models import SavedGame, ShownCutscene
from textland.session import DatabaseShownStore, TextlandSession, dump_state, load_state

# Blinking Grove from the start tile: pick up h, j, k and l, then walk
# past the Caret Stone onto the gate.
GROVE_TO_KEYS = "jj" + "ll" + "llll" * 3
GROVE_TO_GATE = "jj" + "lll"


@pytest.fixture
def session(db_session, test_player, world, test_config) -> TextlandSession:
    return TextlandSession.load_or_create(db_session, test_player, world, test_config)


async def _walk(session, keys):
    for key in keys:
        result = await session.move(key)
        assert result.success, (key, session.state.cursor.position)
    return result


def _message_texts(session):
    return [message.text for message in session.renderer.messages]


def test_new_player_starts_default_game(session):
    assert isinstance(session.state, LevelGameState)
    assert session.state.game_id == "cursor-before-clickers"
    assert session.state.level_id == "level_1"
    assert session.state.current_zone_id == "zone_1"
    assert session.saved_game is None
    assert session.moves == 0
    assert not session.is_finished


def test_configured_default_game(db_session, test_player, world, test_config):
    test_config.default_game = "cursor-textland"
    session = TextlandSession.load_or_create(db_session, test_player, world, test_config)
    assert isinstance(session.state, TextlandGameState)


def test_unknown_configured_game_falls_back(db_session, test_player, world, test_config):
    test_config.default_game = "no-such-game"
    session = TextlandSession.load_or_create(db_session, test_player, world, test_config)
    assert session.state.game_id == "cursor-before-clickers"


@pytest.mark.asyncio
async def test_save_and_load_round_trip(session, db_session, test_player, world, test_config):
    await _walk(session, "jjll")
    session.save()

    saved = db_session.exec(select(SavedGame)).one()
    assert saved.game_id == "cursor-before-clickers"
    assert saved.zone_id == "zone_1"
    assert saved.moves == 4
    assert not saved.is_finished

    loaded = TextlandSession.load_or_create(db_session, test_player, world, test_config)
    assert loaded.saved_game.id == saved.id
    assert loaded.moves == 4
    assert loaded.state.cursor.position == session.state.cursor.position
    assert loaded.state.collected_keys == frozenset({"h"})

    # The reloaded state can still build zones.
    loaded.reset()
    assert loaded.state.collected_keys == frozenset()
    assert loaded.moves == 0


def test_dump_and_load_state(session, world):
    restored = load_state(dump_state(session.state), world)
    assert restored.current_zone_id == "zone_1"
    assert restored.pending_transition is None
    assert restored.level.zones == ("zone_1",)


def test_saving_twice_updates_the_same_row(session, db_session):
    session.save()
    session.save()
    assert len(db_session.exec(select(SavedGame)).all()) == 1


@pytest.mark.asyncio
async def test_blocked_move_does_not_count(session):
    result = await session.move("k")
    assert not result.success
    assert session.moves == 0


@pytest.mark.asyncio
async def test_unknown_direction_raises(session):
    with pytest.raises(InvalidDirectionError):
        await session.move("diagonal")


@pytest.mark.asyncio
async def test_intro_cutscenes_play_once(session, db_session, test_player, world, test_config):
    await session.play_intro()
    kinds = [message.kind for message in session.renderer.messages]
    assert kinds == ["cutscene", "cutscene"]
    assert "*Hello, Cursor.*" in session.renderer.messages[0].text
    assert session.renderer.snapshot is not None

    shown = {row.identifier for row in db_session.exec(select(ShownCutscene)).all()}
    assert shown == {
        "cursor-before-clickers:game",
        "cursor-before-clickers:zone:level_1:zone_1",
    }

    again = TextlandSession.load_or_create(db_session, test_player, world, test_config)
    await again.play_intro()
    assert again.renderer.messages == []


@pytest.mark.asyncio
async def test_cutscenes_can_be_disabled(db_session, test_player, world, test_config):
    test_config.cutscenes_enabled = False
    session = TextlandSession.load_or_create(db_session, test_player, world, test_config)
    await session.play_intro()
    assert session.renderer.messages == []


@pytest.mark.asyncio
async def test_grove_walkthrough_reaches_level_two(session):
    await _walk(session, GROVE_TO_KEYS)
    assert session.state.collected_keys == frozenset({"h", "j", "k", "l"})
    assert session.state.gate.is_open

    await _walk(session, GROVE_TO_GATE[:-1])
    assert any("Who... disturbs the stone?" in text for text in _message_texts(session))

    result = await session.move(GROVE_TO_GATE[-1])
    assert result.progression_result.type is ProgressionType.LEVEL
    assert result.progression_result.next_level_id == "level_2"

    texts = _message_texts(session)
    assert "Level Complete! Progressing to level_2..." in texts
    assert any("Master these transitions, young Cursor." in text for text in texts)
    assert session.state.level_id == "level_2"
    assert session.state.current_zone_id == "zone_2"
    assert session.renderer.snapshot.zone_id == "zone_2"
    assert session.moves == len(GROVE_TO_KEYS) + len(GROVE_TO_GATE)


@pytest.mark.asyncio
async def test_escape_without_anything_to_confirm(session):
    await session.escape()
    assert _message_texts(session) == ["You are in Normal mode."]
    assert session.state.current_zone_id == "zone_1"


def test_go_to_level(session):
    session.go_to_level("level_3")
    assert session.state.level_id == "level_3"
    assert session.state.current_zone_id == "zone_4"
    assert session.renderer.snapshot.zone_id == "zone_4"


def test_go_to_unknown_level(session):
    with pytest.raises(ConfigurationError):
        session.go_to_level("level_99")
    assert session.state.level_id == "level_1"


def test_select_game(session):
    game = session.select_game("cursor-textland")
    assert game.id == "cursor-textland"
    assert isinstance(session.state, TextlandGameState)
    assert session.state.current_zone_id == "textland_exploration"


def test_select_unknown_game_keeps_state(session):
    with pytest.raises(ConfigurationError):
        session.select_game("nope")
    assert session.state.game_id == "cursor-before-clickers"


def test_finished_game_row_is_reused(session, db_session, test_player, world, test_config):
    session.save()
    saved = db_session.exec(select(SavedGame)).one()
    saved.is_finished = True
    db_session.commit()

    fresh = TextlandSession.load_or_create(db_session, test_player, world, test_config)
    assert fresh.saved_game.id == saved.id
    fresh.save()
    assert len(db_session.exec(select(SavedGame)).all()) == 1
    assert not db_session.exec(select(SavedGame)).one().is_finished


def test_shown_store(db_session, test_player):
    store = DatabaseShownStore(db_session, test_player.id)
    assert not store.is_shown("g:game")
    store.mark_shown("g:game")
    store.mark_shown("g:game")
    assert store.is_shown("g:game")
    assert len(db_session.exec(select(ShownCutscene)).all()) == 1
    store.reset("g:game")
    assert not store.is_shown("g:game")


# Playground of Practice: the silver key, h, through the side gate, w, l, yy
# and onto the gate into the Syntax Temple.
PLAYGROUND_TO_TEMPLE = "jljlkklll" + "jllkll" + "ll" + "jj" + "ll"
# Syntax Temple: u, then around the pillars to the repeat key.
TEMPLE_KEYS = "ll" + "ll" + "jjjj" + "lllllll"


@pytest.mark.asyncio
async def test_final_zone_is_played_not_skipped(
    session, db_session, test_player, world, test_config
):
    session.go_to_level("level_5")
    await _walk(session, PLAYGROUND_TO_TEMPLE)
    assert session.state.current_zone_id == "zone_10"
    assert not session.is_finished
    session.save()
    assert not db_session.exec(select(SavedGame)).one().is_finished

    loaded = TextlandSession.load_or_create(db_session, test_player, world, test_config)
    assert loaded.state.level_id == "level_5"
    assert loaded.state.current_zone_id == "zone_10"
    assert [key.key for key in loaded.state.available_keys] == ["u", "."]

    await _walk(loaded, TEMPLE_KEYS)
    assert loaded.state.available_keys == []
    assert loaded.is_finished
    loaded.save()
    assert db_session.exec(select(SavedGame)).one().is_finished
