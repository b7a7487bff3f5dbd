"""
Dungeon systems for Dungeon Delve.

Contains the tile grid, random-fill level generation and the spawn pool that
stairs, chests, monsters and players are allocated from.
"""
from .map import DungeonMap, Point
from .tiles import TileType

__all__ = ["DungeonMap", "Point", "TileType"]
