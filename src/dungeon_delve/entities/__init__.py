"""
Entity model: players and monsters, their combat exchanges and chest loot.
"""
from .entity import Entity, EntityType, PlayerSlot
from .monsters import MonsterSlots

__all__ = ["Entity", "EntityType", "PlayerSlot", "MonsterSlots"]
