from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional

from ..config import RULES, Rules
from ..dungeon.map import Point

logger = logging.getLogger(__name__)


class EntityType(Enum):
    PLAYER = auto()
    MONSTER = auto()


class PlayerSlot(Enum):
    """Which player an entity (or an intent) belongs to."""

    PRIMARY = auto()
    SECONDARY = auto()


@dataclass(eq=False)
class Entity:
    """Mutable state of a player or a monster.

    Entities compare by identity: two monsters with the same stats on the same
    cell are still different monsters.

    - health may exceed max_health only inside change_health; the excess is
      converted into shield before the call returns
    - shield and immortality never go below 0
    - current_damage never drops below base_damage through decay
    """

    type: EntityType
    x: int
    y: int
    max_health: int
    base_damage: int
    slot: Optional[PlayerSlot] = None
    shield: int = 0
    immortality: int = 0
    health: int = field(init=False)
    current_damage: int = field(init=False)
    previous: Optional[Point] = field(default=None, init=False)

    def __post_init__(self) -> None:
        if self.max_health <= 0:
            raise ValueError("max_health must be positive")
        self.health = self.max_health
        self.current_damage = self.base_damage

    # ---- Factories -------------------------------------------------------
    @classmethod
    def player(cls, slot: PlayerSlot, x: int, y: int, rules: Rules = RULES) -> "Entity":
        profile = rules.primary if slot is PlayerSlot.PRIMARY else rules.secondary
        return cls(EntityType.PLAYER, x, y, profile.max_health, profile.damage, slot=slot)

    @classmethod
    def monster(cls, x: int, y: int, health: int, damage: int) -> "Entity":
        return cls(EntityType.MONSTER, x, y, health, damage)

    # ---- Position --------------------------------------------------------
    @property
    def pos(self) -> Point:
        return Point(self.x, self.y)

    def move_to(self, x: int, y: int) -> None:
        self.x = x
        self.y = y

    def record_previous_position(self) -> None:
        self.previous = Point(self.x, self.y)

    def revert(self) -> None:
        """Return to the position recorded at the start of this turn."""
        if self.previous is not None:
            self.move_to(self.previous.x, self.previous.y)

    # ---- Health ----------------------------------------------------------
    @property
    def is_alive(self) -> bool:
        return self.health >= 1

    @property
    def is_player(self) -> bool:
        return self.type is EntityType.PLAYER

    def change_health(self, change: int, rules: Rules = RULES) -> None:
        """Subtract change from health (negative change heals).

        Healing past max_health turns the excess into shield at
        1/rules.shield_divisor and clamps health back to max_health.
        """
        raw = self.health - change
        if raw > self.max_health:
            self.shield += (raw - self.max_health) // rules.shield_divisor
            raw = self.max_health
        self.health = max(0, raw)

    def remove_shield(self, damage: int) -> None:
        # Damage beyond the remaining shield is dropped, not carried into health.
        self.shield = max(0, self.shield - damage)

    # ---- Status ----------------------------------------------------------
    def boost_damage(self, boost: int) -> None:
        self.current_damage += boost

    def grant_immortality(self, turns: int) -> None:
        self.immortality += turns

    def update_stats(self, rules: Rules = RULES) -> None:
        """Per-turn decay of temporary boosts."""
        if self.current_damage > self.base_damage:
            self.current_damage = max(self.base_damage, self.current_damage - rules.damage_decay)
        if self.immortality > 0:
            self.immortality -= 1

    def __repr__(self) -> str:
        who = self.slot.name.lower() if self.slot else self.type.name.lower()
        return (
            f"Entity({who}@{self.x},{self.y} hp={self.health}/{self.max_health} "
            f"shield={self.shield} dmg={self.current_damage})"
        )
