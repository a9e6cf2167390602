"""Player lookup by client certificate."""

import datetime as dt

from sqlmodel import Session, select

from .logging import get_logger
from .models import Player

logger = get_logger(__name__)


def find_player(session: Session, fingerprint: str) -> Player | None:
    return session.exec(select(Player).where(Player.fingerprint == fingerprint)).first()


def get_or_create_player(session: Session, fingerprint: str) -> Player:
    """Return the player behind a certificate, registering first-time visitors."""
    player = find_player(session, fingerprint)
    if player is None:
        player = Player(fingerprint=fingerprint)
        session.add(player)
        logger.info("player_registered", fingerprint=fingerprint)
    else:
        player.last_seen = dt.datetime.now(dt.UTC)

    session.commit()
    session.refresh(player)
    return player
