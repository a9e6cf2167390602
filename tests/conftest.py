"""Shared test fixtures for Textland."""

from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine

from textland.app import _get_data_path, create_app
from textland.config import Config
from textland.engine.loader import World, load_world
from textland.engine.registry import Level, ZoneRegistry
from textland.engine.zone import ZoneConfig
from textland.models import Player

# A 7x5 walled room:
#
#   #######
#   #.h.j.#      keys h, j, k, l sit on the path
#   #.~...#      one water tile
#   #.l.k+#      the gate is the + at (5, 3)
#   #######
TEST_LAYOUT = (
    "#######",
    "#.....#",
    "#.~...#",
    "#....G#",
    "#######",
)
TEST_LEGEND = {"#": "wall", ".": "path", "~": "water", "G": "gate"}
TEST_KEYS = (
    {"value": "h", "position": (2, 1)},
    {"value": "j", "position": (4, 1)},
    {"value": "k", "position": (4, 3)},
    {"value": "l", "position": (2, 3)},
)


def build_zone_config(zone_id: str = "test_zone", **overrides) -> ZoneConfig:
    data = dict(
        zone_id=zone_id,
        name=f"Zone {zone_id}",
        layout=TEST_LAYOUT,
        legend=TEST_LEGEND,
        vim_keys=TEST_KEYS,
        gate={"position": (5, 3)},
        cursor_start=(1, 1),
    )
    data.update(overrides)
    return ZoneConfig(**data)


class RecordingRenderer:
    """Renderer double that keeps everything it is shown."""

    def __init__(self):
        self.frames = []
        self.keys = []
        self.messages = []
        self.dialogues = []
        self.cutscenes = []

    def render(self, snapshot):
        self.frames.append(snapshot)

    def show_key_info(self, key):
        self.keys.append(key)

    def show_message(self, text, **options):
        self.messages.append(text)

    def show_npc_dialogue(self, npc, lines, **options):
        self.dialogues.append((npc, list(lines)))

    async def show_cutscene(self, story):
        self.cutscenes.append(story)


class BareRenderer:
    """Only the two required channels."""

    def __init__(self):
        self.frames = []
        self.keys = []

    def render(self, snapshot):
        self.frames.append(snapshot)

    def show_key_info(self, key):
        self.keys.append(key)


class RecordingNavigator:
    def __init__(self):
        self.levels = []

    def transition_to_level(self, level_id):
        self.levels.append(level_id)


@pytest.fixture
def make_zone_config():
    return build_zone_config


@pytest.fixture
def zone_registry() -> ZoneRegistry:
    return ZoneRegistry(
        [
            build_zone_config("zone_a", gate={"position": (5, 3), "leads_to": "zone_b"}),
            build_zone_config("zone_b"),
            build_zone_config("confirm_zone", requires_explicit_confirmation=True),
        ]
    )


@pytest.fixture
def two_zone_level() -> Level:
    return Level("level_x", "Two Rooms", ("zone_a", "zone_b"), "Two small rooms")


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def bare_renderer() -> BareRenderer:
    return BareRenderer()


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest.fixture
def world() -> World:
    return load_world(_get_data_path())


@pytest.fixture
def db_engine(tmp_path: Path):
    engine = create_engine(f"sqlite:///{tmp_path}/test.db")
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine):
    with Session(db_engine) as session:
        yield session


@pytest.fixture
def test_player(db_session: Session) -> Player:
    player = Player(fingerprint="test-fingerprint-abc123")
    db_session.add(player)
    db_session.commit()
    db_session.refresh(player)
    return player


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    return Config(database_url=f"sqlite:///{tmp_path}/test.db", level_transition_delay=0.0)


@pytest.fixture
def app(test_config: Config):
    return create_app(test_config)


@pytest.fixture
def client(app):
    from xitzin.testing import test_app

    with test_app(app) as client:
        yield client


@pytest.fixture
def auth_client(client):
    return client.with_certificate("test-fingerprint-abc123")
