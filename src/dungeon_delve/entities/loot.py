from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..config import RULES, ChestLoot, Rules
from ..dungeon.map import DungeonMap
from ..dungeon.tiles import TileType
from ..rng import RandomSource
from .entity import Entity

logger = logging.getLogger(__name__)


class Treasure(Enum):
    """Chest outcomes, indexed by the uniform 0/1/2 roll."""

    HEALTH = 0
    DAMAGE_BOOST = 1
    IMMORTALITY = 2


@dataclass(frozen=True)
class LootResult:
    chest: TileType
    treasure: Treasure
    amount: int


def loot_for(chest: TileType, rules: Rules = RULES) -> ChestLoot:
    if chest is TileType.WOODEN_CHEST:
        return rules.wooden_loot
    if chest is TileType.SAPPHIRE_CHEST:
        return rules.sapphire_loot
    if chest is TileType.RUBY_CHEST:
        return rules.ruby_loot
    raise ValueError(f"{chest} is not a chest tile")


def _band(low: int, high: int, rng: RandomSource) -> int:
    if high <= low:
        return low
    return low + rng.randrange(high - low)


def apply_treasure(player: Entity, chest: TileType, treasure: Treasure, rng: RandomSource, rules: Rules = RULES) -> int:
    """Grant one chest outcome to player; returns the magnitude granted."""
    loot = loot_for(chest, rules)
    if treasure is Treasure.HEALTH:
        low = player.max_health * loot.heal_low // 4
        high = player.max_health * loot.heal_high // 4
        amount = _band(low, high, rng)
        player.change_health(-amount, rules)
    elif treasure is Treasure.DAMAGE_BOOST:
        amount = _band(loot.boost_low, loot.boost_high, rng)
        player.boost_damage(amount)
    else:
        amount = loot.immortality_turns
        player.grant_immortality(amount)
    return amount


def open_chest(player: Entity, dmap: DungeonMap, rng: RandomSource, rules: Rules = RULES) -> Optional[LootResult]:
    """Open the chest under player, if any.

    The chest tile turns back into floor before the reward is applied, so a
    chest can only ever be opened once.
    """
    tile = dmap.get(player.x, player.y)
    if not tile.is_chest:
        return None
    dmap.set(player.x, player.y, TileType.FLOOR)
    treasure = Treasure(rng.randrange(len(Treasure)))
    amount = apply_treasure(player, tile, treasure, rng, rules)
    logger.info("%r opened %s: %s (%d)", player, tile.name.lower(), treasure.name.lower(), amount)
    return LootResult(chest=tile, treasure=treasure, amount=amount)


__all__ = ["Treasure", "LootResult", "loot_for", "apply_treasure", "open_chest"]
