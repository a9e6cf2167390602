"""Configuration for Textland."""

import os
from dataclasses import dataclass
from pathlib import Path


def _flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes")


@dataclass
class Config:
    """Application configuration."""

    database_url: str = "sqlite:///./textland.db"
    host: str = "localhost"
    port: int = 1965
    certfile: Path | None = None
    keyfile: Path | None = None
    log_level: str = "INFO"
    log_file: Path | None = None
    json_logs: bool = False
    hash_fingerprints: bool = True
    default_game: str | None = None
    # Gemini answers one request at a time, so the pause before a level
    # change is spent inside the request that finished the level.
    level_transition_delay: float = 0.0
    cutscenes_enabled: bool = True

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        certfile = os.getenv("TEXTLAND_CERTFILE")
        keyfile = os.getenv("TEXTLAND_KEYFILE")
        log_file = os.getenv("TEXTLAND_LOG_FILE")

        return cls(
            database_url=os.getenv("TEXTLAND_DATABASE_URL", cls.database_url),
            host=os.getenv("TEXTLAND_HOST", cls.host),
            port=int(os.getenv("TEXTLAND_PORT", str(cls.port))),
            certfile=Path(certfile) if certfile else None,
            keyfile=Path(keyfile) if keyfile else None,
            log_level=os.getenv("TEXTLAND_LOG_LEVEL", cls.log_level),
            log_file=Path(log_file) if log_file else None,
            json_logs=_flag("TEXTLAND_JSON_LOGS", False),
            hash_fingerprints=os.getenv("TEXTLAND_HASH_FINGERPRINTS", "true").lower()
            not in ("false", "0", "no"),
            default_game=os.getenv("TEXTLAND_DEFAULT_GAME") or None,
            level_transition_delay=float(
                os.getenv("TEXTLAND_LEVEL_TRANSITION_DELAY", str(cls.level_transition_delay))
            ),
            cutscenes_enabled=_flag("TEXTLAND_CUTSCENES_ENABLED", True),
        )
