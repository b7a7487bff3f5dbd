from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class PlayerProfile:
    """Starting stats for one player slot."""

    max_health: int
    damage: int


@dataclass(frozen=True)
class ChestLoot:
    """Loot bands for one chest tier.

    Heal amounts are drawn from [max_health * heal_low / 4, max_health * heal_high / 4).
    Damage boosts are drawn from [boost_low, boost_high), or fixed when both match.
    """

    heal_low: int
    heal_high: int
    boost_low: int
    boost_high: int
    immortality_turns: int


@dataclass(frozen=True)
class Rules:
    # Grid (tiles)
    width: int = 25
    height: int = 18

    # Level fill
    wall_chance: float = 0.05

    # Cumulative upper limits of the chest bands; the outermost limit is exclusive
    ruby_chest_chance: float = 0.01
    sapphire_chest_chance: float = 0.015
    wooden_chest_chance: float = 0.02
    chest_trials_per_depth: int = 8

    # Monsters
    max_monsters: int = 40
    monster_base_health: int = 50
    monster_base_damage: int = 20
    monster_growth: float = 1.03

    # Players
    primary: PlayerProfile = field(default_factory=lambda: PlayerProfile(max_health=400, damage=50))
    secondary: PlayerProfile = field(default_factory=lambda: PlayerProfile(max_health=250, damage=80))
    max_players: int = 2

    # Health above max is converted into shield at 1/shield_divisor
    shield_divisor: int = 2
    # Boosted damage decays by this much per turn
    damage_decay: int = 2

    wooden_loot: ChestLoot = field(default_factory=lambda: ChestLoot(0, 1, 0, 20, 3))
    sapphire_loot: ChestLoot = field(default_factory=lambda: ChestLoot(1, 2, 20, 20, 6))
    ruby_loot: ChestLoot = field(default_factory=lambda: ChestLoot(2, 4, 30, 30, 9))

    # Regeneration attempts before a level is declared impossible
    max_generation_attempts: int = 100

    def monster_count(self, depth: int) -> int:
        return min(max(depth, 0), self.max_monsters)

    def monster_stats(self, depth: int) -> Tuple[int, int]:
        """Return (health, damage) shared by every monster spawned at this depth."""
        scale = self.monster_growth ** (depth - 1)
        return round(self.monster_base_health * scale), round(self.monster_base_damage * scale)

    def level_capacity(self, depth: int) -> int:
        """Spawn points a level must offer: stairs, one chest, monsters and every player."""
        return 1 + 1 + self.monster_count(depth) + self.max_players


RULES = Rules()
