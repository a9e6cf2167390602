"""Exception types raised by the game engine."""


class TextlandError(Exception):
    """Base class for engine errors."""


class ConfigurationError(TextlandError):
    """Static game, level or zone content is missing or malformed."""


class ProgressionError(TextlandError):
    """A zone or level transition was requested while its preconditions fail."""


class InvalidDirectionError(TextlandError, ValueError):
    """A move was requested in a direction the cursor cannot take."""

    def __init__(self, direction: str):
        super().__init__(f"Invalid direction: {direction!r}")
        self.direction = direction
