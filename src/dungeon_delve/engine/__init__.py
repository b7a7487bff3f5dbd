"""
Turn resolution: intents in, snapshots out.

    resolver = TurnResolver(seed=42)
    resolver.add_listener(lambda event, snap: ...)
    resolver.start_game()
    resolver.submit(MoveIntent(PlayerSlot.PRIMARY, Direction.LEFT))
"""
from .events import GameEvent, ResolverState
from .intents import Direction, Intent, MoveIntent, SpawnSecondPlayer, WaitIntent
from .resolver import TurnResolver
from .snapshot import EntityView, Snapshot, render_lines

__all__ = [
    "GameEvent",
    "ResolverState",
    "Direction",
    "Intent",
    "MoveIntent",
    "SpawnSecondPlayer",
    "WaitIntent",
    "TurnResolver",
    "EntityView",
    "Snapshot",
    "render_lines",
]
