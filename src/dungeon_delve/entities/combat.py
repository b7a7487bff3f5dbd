from __future__ import annotations

import logging

from ..config import RULES, Rules
from ..rng import RandomSource
from .entity import Entity

logger = logging.getLogger(__name__)


def roll_damage(attacker: Entity, rng: RandomSource) -> int:
    """Uniform integer in [0, attacker.current_damage)."""
    return rng.randrange(attacker.current_damage)


def hit_monster(monster: Entity, attacker: Entity, rng: RandomSource, rules: Rules = RULES) -> int:
    """Attacker strikes a monster; returns the damage dealt."""
    dmg = roll_damage(attacker, rng)
    monster.change_health(dmg, rules)
    logger.debug("%r hits %r for %d", attacker, monster, dmg)
    return dmg


def hit_player(player: Entity, attacker: Entity, rng: RandomSource, rules: Rules = RULES) -> int:
    """Attacker strikes a player; returns the damage rolled (0 when immortal).

    An immortal player takes nothing and no roll is made. Otherwise a shield
    absorbs the whole blow: it is floored at 0 and any excess is dropped.
    Only a player without shield loses health.
    """
    if player.immortality > 0:
        logger.debug("%r is immortal; %r's blow has no effect", player, attacker)
        return 0
    dmg = roll_damage(attacker, rng)
    if player.shield > 0:
        player.remove_shield(dmg)
        logger.debug("%r's shield absorbs %d from %r", player, dmg, attacker)
    else:
        player.change_health(dmg, rules)
        logger.debug("%r hits %r for %d", attacker, player, dmg)
    return dmg


def player_strikes_first(player: Entity, monster: Entity, rng: RandomSource, rules: Rules = RULES) -> None:
    """Exchange of blows started by a player walking into a monster."""
    hit_monster(monster, player, rng, rules)
    hit_player(player, monster, rng, rules)


def monster_strikes_first(monster: Entity, player: Entity, rng: RandomSource, rules: Rules = RULES) -> None:
    """Exchange of blows started by a monster stepping into its target."""
    hit_player(player, monster, rng, rules)
    hit_monster(monster, player, rng, rules)


__all__ = [
    "roll_damage",
    "hit_monster",
    "hit_player",
    "player_strikes_first",
    "monster_strikes_first",
]
