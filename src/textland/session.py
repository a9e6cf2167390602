"""Session layer bridging the game engine and database."""

import datetime as dt
import pickle
import zlib

from sqlmodel import Session, select

from .config import Config
from .engine.cutscenes import CutsceneService
from .engine.dialogue import DialogueService
from .engine.interaction import NPCInteractionUseCase
from .engine.levels import SelectGameUseCase
from .engine.loader import World
from .engine.movement import MoveResult, MovePlayerUseCase
from .engine.progression import HandleProgressionUseCase
from .engine.registry import Game
from .engine.state import GameState, LevelGameState
from .logging import get_logger
from .models import Player, SavedGame, ShownCutscene
from .render import GeminiRenderer

logger = get_logger(__name__)


class DatabaseShownStore:
    """Cutscenes a player has watched, kept across sessions."""

    def __init__(self, db_session: Session, player_id: int):
        self._db = db_session
        self._player_id = player_id

    def _find(self, identifier: str) -> ShownCutscene | None:
        statement = select(ShownCutscene).where(
            ShownCutscene.player_id == self._player_id,
            ShownCutscene.identifier == identifier,
        )
        return self._db.exec(statement).first()

    def is_shown(self, identifier: str) -> bool:
        return self._find(identifier) is not None

    def mark_shown(self, identifier: str) -> None:
        if self._find(identifier) is None:
            self._db.add(ShownCutscene(player_id=self._player_id, identifier=identifier))
            self._db.commit()

    def reset(self, identifier: str) -> None:
        shown = self._find(identifier)
        if shown is not None:
            self._db.delete(shown)
            self._db.commit()


def dump_state(state: GameState) -> bytes:
    return zlib.compress(pickle.dumps(state))


def load_state(blob: bytes, world: World) -> GameState:
    state = pickle.loads(zlib.decompress(blob))
    state.bind_zone_provider(world.zones)
    return state


class TextlandSession:
    """Wraps a Player + SavedGame + in-memory game state.

    The session is also the Navigator handed to level progression: moving
    to another level swaps in a fresh game state for that level.
    """

    def __init__(
        self,
        db_session: Session,
        player: Player,
        saved_game: SavedGame | None,
        game_state: GameState,
        world: World,
        config: Config,
    ):
        self.db_session = db_session
        self.player = player
        self.saved_game = saved_game
        self.state = game_state
        self.world = world
        self.config = config
        self.renderer = GeminiRenderer()
        self.moves = saved_game.moves if saved_game is not None else 0
        self.dialogue = DialogueService()
        self.cutscenes = CutsceneService(
            world.cutscenes,
            DatabaseShownStore(db_session, player.id),
            enabled=config.cutscenes_enabled,
        )

    @classmethod
    def load_or_create(
        cls,
        db_session: Session,
        player: Player,
        world: World,
        config: Config,
    ) -> "TextlandSession":
        """Load the player's unfinished game or start the default one."""
        statement = select(SavedGame).where(SavedGame.player_id == player.id)
        saved_game = db_session.exec(statement).first()

        if saved_game and not saved_game.is_finished:
            game_state = load_state(saved_game.state_blob, world)
            logger.debug(
                "game_loaded",
                fingerprint=player.fingerprint,
                game_id=saved_game.game_id,
                level_id=saved_game.level_id,
            )
            return cls(db_session, player, saved_game, game_state, world, config)

        game = _default_game(world, config)
        game_state = game.create_game_state(world.zones)
        logger.info("new_game_started", fingerprint=player.fingerprint, game_id=game.id)
        session = cls(db_session, player, saved_game, game_state, world, config)
        session.moves = 0
        return session

    @property
    def game(self) -> Game:
        return self.world.games.get_game(self.state.game_id)

    @property
    def is_finished(self) -> bool:
        return self.state.is_game_complete()

    def _progression(self) -> HandleProgressionUseCase:
        return HandleProgressionUseCase(
            self.state,
            self.renderer,
            navigator=self,
            cutscene_service=self.cutscenes if self.game.has_feature("cutscenes") else None,
            cutscene_renderer=self.renderer,
            transition_delay=self.config.level_transition_delay,
        )

    async def play_intro(self) -> None:
        """Show the game, level and zone stories the player has not seen yet."""
        progression = self._progression()
        await progression.play_cutscene("game")
        if self.state.level_id is not None:
            await progression.play_cutscene("level", self.state.level_id)
            await progression.play_cutscene("zone", self.state.level_id, self.state.current_zone_id)
        self.render()

    async def move(self, direction: str) -> MoveResult:
        """Move the cursor one tile. Raises InvalidDirectionError for unknown keys."""
        progression = self._progression()
        use_case = MovePlayerUseCase(
            self.state,
            self.renderer,
            NPCInteractionUseCase(self.renderer, self.dialogue),
            progression,
        )
        result = await use_case.execute(direction)
        if result.success:
            self.moves += 1
        await self._finish_transition(progression)
        return result

    async def escape(self) -> None:
        """ESC: confirm leaving a zone that asks for it."""
        state = self.state
        if isinstance(state, LevelGameState):
            state.mark_esc_progression_pressed()
        progression = self._progression()
        if progression.should_execute_progression():
            await progression.execute()
            await self._finish_transition(progression)
        else:
            self.renderer.show_message("You are in Normal mode.")
        self.render()

    async def _finish_transition(self, progression: HandleProgressionUseCase) -> None:
        transition = progression.pending_transition
        if transition is not None:
            if await transition.wait() and self.state.level_id is not None:
                await self._progression().play_cutscene(
                    "zone", self.state.level_id, self.state.current_zone_id
                )
            self.render()

    def render(self) -> None:
        self.renderer.render(self.state.get_current_state())

    # Navigator

    def transition_to_level(self, level_id: str) -> None:
        self.go_to_level(level_id)

    def go_to_level(self, level_id: str) -> None:
        """Restart the current game at ``level_id``."""
        game = self.game
        self._replace_state(game.create_game_state(self.world.zones, level_id))
        logger.info(
            "level_started",
            fingerprint=self.player.fingerprint,
            game_id=game.id,
            level_id=level_id,
        )

    def select_game(self, game_id: str) -> Game:
        """Switch to ``game_id`` from its first level. Raises ConfigurationError."""
        selection = SelectGameUseCase(self.world.games, self.world.zones).select_game(game_id)
        self._replace_state(selection.create_game_state())
        logger.info("game_selected", fingerprint=self.player.fingerprint, game_id=game_id)
        return selection.game

    def reset(self) -> None:
        """Start the current game over."""
        game = self.game
        self._replace_state(game.create_game_state(self.world.zones))
        self.moves = 0
        logger.info("game_reset", fingerprint=self.player.fingerprint, game_id=game.id)

    def _replace_state(self, new_state: GameState) -> None:
        old_state, self.state = self.state, new_state
        old_state.cleanup()
        self.render()

    def save(self) -> None:
        """Serialize state back to the database."""
        now = dt.datetime.now(dt.UTC)
        state = self.state
        fields = dict(
            game_id=state.game_id,
            level_id=state.level_id,
            zone_id=state.current_zone_id,
            zone_index=getattr(state, "current_zone_index", 0),
            state_blob=dump_state(state),
            moves=self.moves,
            is_finished=self.is_finished,
            last_played=now,
        )

        if self.saved_game is None:
            self.saved_game = SavedGame(player_id=self.player.id, started_at=now, **fields)
            self.db_session.add(self.saved_game)
        else:
            for name, value in fields.items():
                setattr(self.saved_game, name, value)

        self.db_session.commit()
        logger.debug(
            "game_saved",
            fingerprint=self.player.fingerprint,
            game_id=state.game_id,
            level_id=state.level_id,
            zone_id=state.current_zone_id,
        )


def _default_game(world: World, config: Config) -> Game:
    if config.default_game and world.games.has_game(config.default_game):
        return world.games.get_game(config.default_game)
    return world.games.get_default_game()
