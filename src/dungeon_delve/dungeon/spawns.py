from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Optional, Set

from ..config import RULES, Rules
from ..entities.entity import Entity, PlayerSlot
from ..entities.monsters import MonsterSlots
from ..exceptions import SpawnPoolExhaustedError
from ..rng import RandomSource
from .map import DungeonMap, Point
from .tiles import TileType

logger = logging.getLogger(__name__)


class SpawnPool:
    """The mutable set of coordinates that may still receive a placement.

    Keeps insertion order so that uniform draws are reproducible for a given
    seed. A coordinate leaves the pool exactly once and is never re-added.
    """

    def __init__(self, points: Iterable[Point] = ()) -> None:
        self._points: List[Point] = []
        self._members: Set[Point] = set()
        for p in points:
            if p not in self._members:
                self._points.append(p)
                self._members.add(p)
        self._taken: Set[Point] = set()

    def __len__(self) -> int:
        return len(self._points)

    def __contains__(self, p: object) -> bool:
        return p in self._members

    def __iter__(self) -> Iterator[Point]:
        return iter(list(self._points))

    @property
    def taken(self) -> Set[Point]:
        """Coordinates already consumed in this level."""
        return set(self._taken)

    def sample(self, rng: RandomSource) -> Point:
        """Uniformly pick a coordinate without removing it."""
        if not self._points:
            raise SpawnPoolExhaustedError("Cannot sample from an empty spawn pool")
        return rng.choice(self._points)

    def available(self, exclude: Iterable[Point] = ()) -> List[Point]:
        """Pool coordinates not currently held by anything in exclude, in pool order."""
        blocked = set(exclude)
        return [p for p in self._points if p not in blocked]

    def take_random(self, rng: RandomSource, exclude: Iterable[Point] = ()) -> Point:
        """Uniformly pick a coordinate and remove it from the pool.

        Coordinates in exclude (cells an entity already stands on) are skipped;
        they stay in the pool.
        """
        blocked = set(exclude)
        if not blocked:
            if not self._points:
                raise SpawnPoolExhaustedError("Spawn pool exhausted; no free coordinate left")
            p = rng.pop_random(self._points)
        else:
            candidates = self.available(blocked)
            if not candidates:
                raise SpawnPoolExhaustedError("Every remaining spawn point is occupied")
            p = rng.choice(candidates)
            self._points.remove(p)
        self._members.discard(p)
        self._taken.add(p)
        return p

    def remove(self, p: Point) -> None:
        if p not in self._members:
            raise KeyError(f"{p} is not in the spawn pool")
        self._points.remove(p)
        self._members.discard(p)
        self._taken.add(p)


def is_spawn_point(dmap: DungeonMap, x: int, y: int) -> bool:
    """A Floor cell whose four orthogonal neighbours all exist and are not Wall."""
    if dmap.get(x, y) is not TileType.FLOOR:
        return False
    neighbours = list(dmap.neighbors_4(x, y))
    if len(neighbours) < 4:
        return False
    return all(dmap.tile_at(n) is not TileType.WALL for n in neighbours)


def compute_spawns(dmap: DungeonMap) -> SpawnPool:
    pool = SpawnPool(p for p, _ in dmap.cells() if is_spawn_point(dmap, p.x, p.y))
    logger.debug("Computed %d spawn points", len(pool))
    return pool


def place_stairs(dmap: DungeonMap, pool: SpawnPool, rng: RandomSource) -> Point:
    p = pool.take_random(rng)
    dmap.set(p.x, p.y, TileType.STAIRS)
    logger.debug("Stairs placed at %s", p)
    return p


def chest_tier_for(chance: float, rules: Rules = RULES) -> Optional[TileType]:
    """Map a [0, 1) roll onto a chest tier, or None when the roll misses every band.

    Ruby owns [0, ruby], sapphire (ruby, sapphire], wooden (sapphire, wooden).
    """
    if chance <= rules.ruby_chest_chance:
        return TileType.RUBY_CHEST
    if chance <= rules.sapphire_chest_chance:
        return TileType.SAPPHIRE_CHEST
    if chance < rules.wooden_chest_chance:
        return TileType.WOODEN_CHEST
    return None


def place_chest(dmap: DungeonMap, pool: SpawnPool, depth: int, rng: RandomSource, rules: Rules = RULES) -> Optional[Point]:
    """Try depth * chest_trials_per_depth times to land a roll in a chest band.

    Missing every trial leaves the level without a chest; that rarity is part
    of the rules, not a failure.
    """
    for _ in range(depth * rules.chest_trials_per_depth):
        candidate = pool.sample(rng)
        tier = chest_tier_for(rng.random(), rules)
        if tier is None:
            continue
        pool.remove(candidate)
        dmap.set(candidate.x, candidate.y, tier)
        logger.debug("%s placed at %s", tier.name.lower(), candidate)
        return candidate
    logger.debug("No chest this level (depth %d)", depth)
    return None


def place_monsters(pool: SpawnPool, depth: int, rng: RandomSource, rules: Rules = RULES) -> MonsterSlots:
    count = rules.monster_count(depth)
    health, damage = rules.monster_stats(depth)
    slots = MonsterSlots(count)
    for i in range(count):
        p = pool.take_random(rng)
        slots.place(i, Entity.monster(p.x, p.y, health, damage))
    logger.debug("Spawned %d monsters (hp=%d dmg=%d)", count, health, damage)
    return slots


def place_player(
    pool: SpawnPool,
    slot: PlayerSlot,
    rng: RandomSource,
    rules: Rules = RULES,
    occupied: Iterable[Point] = (),
) -> Entity:
    """Spawn a player on a pool point; points in occupied are never chosen."""
    p = pool.take_random(rng, exclude=occupied)
    player = Entity.player(slot, p.x, p.y, rules)
    logger.debug("Spawned %s player at %s", slot.name.lower(), p)
    return player


def reposition_player(pool: SpawnPool, player: Entity, rng: RandomSource) -> None:
    """Move an existing player to a fresh spawn point (used on descent)."""
    p = pool.take_random(rng)
    player.move_to(p.x, p.y)
    player.previous = None


__all__ = [
    "SpawnPool",
    "is_spawn_point",
    "compute_spawns",
    "place_stairs",
    "chest_tier_for",
    "place_chest",
    "place_monsters",
    "place_player",
    "reposition_player",
]
