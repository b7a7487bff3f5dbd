"""
Dungeon Delve package root.

The simulation core (level generation, spawn allocation, entities, monster
pathing and the turn resolver) is pure Python with no rendering backend.
Presentation and input live behind the snapshot and intent boundaries.
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "dungeon",
    "entities",
    "ai",
    "engine",
]
