"""Gameplay routes."""

from contextlib import contextmanager
from functools import wraps

from sqlmodel import Session
from xitzin import CertificateRequired, Redirect, Request, Xitzin
from xitzin.auth import get_identity, require_certificate

from ..engine.errors import ConfigurationError, InvalidDirectionError
from ..session import TextlandSession
from ..users import get_or_create_player


def _require_certificate(handler):
    """``require_certificate`` for coroutine handlers.

    Xitzin awaits a route only when the registered function is itself a
    coroutine function, so the wrapper has to be one too.
    """

    @wraps(handler)
    async def wrapper(request: Request, *args, **kwargs):
        if not request.client_cert_fingerprint:
            raise CertificateRequired("Client certificate required")
        return await handler(request, *args, **kwargs)

    return wrapper


@contextmanager
def _game_session(request: Request):
    """Load the player's game session with auto-close."""
    identity = get_identity(request)
    db_session = Session(request.app.state.engine)
    try:
        player = get_or_create_player(db_session, identity.fingerprint)
        yield TextlandSession.load_or_create(
            db_session,
            player,
            request.app.state.world,
            request.app.state.config,
        )
    finally:
        db_session.close()


def _render_play(app: Xitzin, game: TextlandSession, message: str = ""):
    """Render the main play view."""
    if game.renderer.snapshot is None:
        game.render()
    snapshot = game.renderer.snapshot
    state = game.state
    return app.template(
        "play.gmi",
        game_name=game.game.name,
        zone_name=snapshot.zone_name,
        level=snapshot.level_progress,
        map_text="\n".join(game.renderer.map_lines()),
        messages=game.renderer.messages,
        message=message,
        collected_keys=sorted(snapshot.collected_keys),
        keys_left=len(snapshot.available_keys),
        moves=game.moves,
        completion=state.get_completion_message(),
        is_finished=game.is_finished,
    )


def _register_action_routes(app: Xitzin) -> None:
    """Register movement routes."""

    @app.gemini("/play", name="play")
    @_require_certificate
    async def play(request: Request):
        """Main game view."""
        with _game_session(request) as game:
            await game.play_intro()
            game.save()
            return _render_play(app, game)

    @app.gemini("/go/{direction}", name="go")
    @_require_certificate
    async def go(request: Request, direction: str):
        """One cursor step, by direction name or vim key."""
        with _game_session(request) as game:
            if game.is_finished:
                return _render_play(app, game, message="You have already finished this game.")
            try:
                result = await game.move(direction)
            except InvalidDirectionError:
                return _render_play(app, game, message=f"'{direction}' is not a direction.")
            game.save()
            message = "" if result.success else "Something blocks your way."
            return _render_play(app, game, message=message)

    @app.gemini("/esc", name="esc")
    @_require_certificate
    async def esc(request: Request):
        """Press ESC."""
        with _game_session(request) as game:
            await game.escape()
            game.save()
            return _render_play(app, game)


def _register_game_routes(app: Xitzin) -> None:
    """Register game, level and reset routes."""

    @app.gemini("/games", name="games")
    def games(request: Request):
        """Every game this capsule offers."""
        return app.template("games.gmi", games=request.app.state.world.games.get_all_games())

    @app.gemini("/select/{game_id}", name="select_game")
    @_require_certificate
    async def select_game(request: Request, game_id: str):
        with _game_session(request) as game:
            try:
                selected = game.select_game(game_id)
            except ConfigurationError:
                return _render_play(app, game, message=f"There is no game called '{game_id}'.")
            await game.play_intro()
            game.save()
            return _render_play(app, game, message=f"Now playing {selected.name}.")

    @app.gemini("/level/{level_id}", name="level")
    @_require_certificate
    async def level(request: Request, level_id: str):
        """Jump to a level of the current game."""
        with _game_session(request) as game:
            if not game.game.supports_level(level_id):
                return _render_play(app, game, message=f"This game has no level '{level_id}'.")
            game.go_to_level(level_id)
            await game.play_intro()
            game.save()
            return _render_play(app, game)

    @app.input(
        "/new",
        prompt="Start this game over from the beginning? Type YES to confirm:",
        name="new_game",
    )
    @require_certificate
    def new_game(request: Request, query: str):
        """Reset game with confirmation."""
        with _game_session(request) as game:
            if query.strip().upper() == "YES":
                game.reset()
                game.save()
                return _render_play(app, game, message="Your cursor blinks awake once more.")
            return Redirect("/play")


def register_routes(app: Xitzin) -> None:
    """Register gameplay routes."""
    _register_action_routes(app)
    _register_game_routes(app)
