class DungeonDelveError(Exception):
    """Base exception for the Dungeon Delve project."""


class OutOfBoundsError(DungeonDelveError, IndexError):
    """Raised on any tile access outside the map. Always a defect."""


class SpawnPoolExhaustedError(DungeonDelveError):
    """Raised when a placement is requested from an empty spawn pool."""


class LevelGenerationError(DungeonDelveError):
    """Raised when no generated grid could hold the placements of a level."""


class InvalidTransitionError(DungeonDelveError):
    """Raised when the turn resolver cannot accept a request in its current state."""


class SettingsError(DungeonDelveError):
    """Raised when runtime settings cannot be loaded or fail validation."""
