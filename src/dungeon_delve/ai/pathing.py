from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Optional, Tuple

from ..config import RULES, Rules
from ..dungeon.map import DungeonMap, Point
from ..entities.combat import monster_strikes_first
from ..entities.entity import Entity
from ..rng import RandomSource

logger = logging.getLogger(__name__)


class StepOutcome(Enum):
    MOVED = auto()      # greedy step taken
    ATTACKED = auto()   # stepped into the target, fell back and fought
    DETOURED = auto()   # greedy step hit a wall, a detour cell was taken
    BLOCKED = auto()    # greedy step and every detour hit walls; stayed put
    IDLE = auto()       # no player to chase


def axis_difference(origin: Point, target: Point) -> Tuple[int, int]:
    """(dx, dy) from origin to target."""
    return target.x - origin.x, target.y - origin.y


def manhattan(a: Point, b: Point) -> int:
    dx, dy = axis_difference(a, b)
    return abs(dx) + abs(dy)


def _sign(v: int) -> int:
    return (v > 0) - (v < 0)


def select_target(monster: Entity, primary: Optional[Entity], secondary: Optional[Entity]) -> Optional[Entity]:
    """Closest player by Manhattan distance; ties go to the primary player."""
    if primary is None or secondary is None:
        return primary if primary is not None else secondary
    if manhattan(monster.pos, primary.pos) <= manhattan(monster.pos, secondary.pos):
        return primary
    return secondary


def greedy_step(origin: Point, target: Point) -> Point:
    """One cell toward target along the axis with the larger gap (x wins ties)."""
    dx, dy = axis_difference(origin, target)
    if abs(dx) >= abs(dy):
        return origin.offset(_sign(dx), 0)
    return origin.offset(0, _sign(dy))


def _try_cell(dmap: DungeonMap, monster: Entity, cell: Point) -> bool:
    monster.move_to(cell.x, cell.y)
    if dmap.tile_at(cell).is_walkable:
        return True
    monster.revert()
    return False


def detour(dmap: DungeonMap, monster: Entity, target: Entity) -> bool:
    """Sidestep after the greedy step hit a wall. Returns True if the monster moved.

    Stage 1 runs when a wall flanks the monster left or right and tries the
    vertical cell toward the target (down when level). Stage 2 runs when a wall
    sits above or below and tries the horizontal cell toward the target (right
    when level). A stage that lands on a wall reverts the monster.
    """
    here = monster.pos
    dx, dy = axis_difference(here, target.pos)

    if dmap.is_wall(here.x + 1, here.y) or dmap.is_wall(here.x - 1, here.y):
        cell = here.offset(0, 1 if dy >= 0 else -1)
        if _try_cell(dmap, monster, cell):
            return True

    if dmap.is_wall(here.x, here.y - 1) or dmap.is_wall(here.x, here.y + 1):
        cell = here.offset(1 if dx >= 0 else -1, 0)
        if _try_cell(dmap, monster, cell):
            return True
    return False


def step_monster(
    monster: Entity,
    primary: Optional[Entity],
    secondary: Optional[Entity],
    dmap: DungeonMap,
    rng: RandomSource,
    rules: Rules = RULES,
) -> StepOutcome:
    """Advance one monster by one turn of greedy pursuit.

    The caller is responsible for resolving collisions with other monsters and
    with the non-target player afterwards.
    """
    monster.record_previous_position()
    target = select_target(monster, primary, secondary)
    if target is None:
        return StepOutcome.IDLE

    nxt = greedy_step(monster.pos, target.pos)
    monster.move_to(nxt.x, nxt.y)

    if monster.pos == target.pos:
        monster.revert()
        monster_strikes_first(monster, target, rng, rules)
        return StepOutcome.ATTACKED

    if dmap.tile_at(monster.pos).is_walkable:
        return StepOutcome.MOVED

    monster.revert()
    if detour(dmap, monster, target):
        logger.debug("%r detoured around a wall toward %r", monster, target)
        return StepOutcome.DETOURED
    return StepOutcome.BLOCKED


__all__ = [
    "StepOutcome",
    "axis_difference",
    "manhattan",
    "select_target",
    "greedy_step",
    "detour",
    "step_monster",
]
