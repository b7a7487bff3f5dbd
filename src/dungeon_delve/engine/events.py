from enum import Enum, auto


class GameEvent(Enum):
    """Events emitted by the turn resolver to notify presentation and other listeners."""

    GAME_STARTED = auto()
    TURN_RESOLVED = auto()
    LEVEL_DESCENDED = auto()
    PLAYER_DIED = auto()
    SECOND_PLAYER_JOINED = auto()
    GAME_OVER = auto()
    RESTARTED = auto()
    TERMINATED = auto()


class ResolverState(Enum):
    """Lifecycle of the turn resolver.

    IDLE -> RESOLVING -> {IDLE | DESCENDING -> IDLE | GAME_OVER};
    GAME_OVER -> IDLE via restart(), or -> TERMINATED via terminate().
    """

    IDLE = auto()
    RESOLVING = auto()
    DESCENDING = auto()
    GAME_OVER = auto()
    TERMINATED = auto()
