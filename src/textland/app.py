"""Xitzin application factory for Textland."""

from importlib import resources
from pathlib import Path

from sqlmodel import SQLModel, create_engine
from xitzin import Xitzin

from .config import Config
from .engine.loader import load_world
from .logging import get_logger

logger = get_logger(__name__)


def _get_data_path():
    """Locate the bundled content via importlib.resources."""
    return resources.files("textland.data")


def create_app(config: Config | None = None) -> Xitzin:
    """Create and configure the Xitzin application."""
    config = config or Config.from_env()

    app = Xitzin(
        title="Textland",
        version="0.1.0",
        templates_dir=Path(__file__).parent / "templates",
    )

    engine = create_engine(config.database_url)
    app.state.engine = engine
    app.state.config = config

    @app.on_startup
    async def startup():
        """Create tables and load the game content."""
        SQLModel.metadata.create_all(engine)
        logger.debug("database_setup_complete")

        world = load_world(_get_data_path())
        app.state.world = world
        logger.info(
            "world_loaded",
            games=len(world.games),
            zones=len(world.zones.get_available_zone_ids()),
            cutscenes=len(world.cutscenes.get_all_cutscene_stories()),
        )

    from .routes import home, play

    home.register_routes(app)
    play.register_routes(app)

    return app
