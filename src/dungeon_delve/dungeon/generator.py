from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..config import RULES, Rules
from ..exceptions import LevelGenerationError
from ..rng import RandomSource
from .map import DungeonMap, Point
from .spawns import SpawnPool, compute_spawns, place_chest, place_stairs
from .tiles import TileType

logger = logging.getLogger(__name__)


@dataclass
class Level:
    """One generated level: the grid, its remaining spawn pool and placed features."""

    depth: int
    map: DungeonMap
    pool: SpawnPool
    stairs: Optional[Point] = None
    chest: Optional[Point] = None


class LevelGenerator:
    """Random-fill level generator.

    - Every cell is Wall with probability rules.wall_chance, Floor otherwise
    - The border ring is then forced to Wall, overwriting the random fill
    - No connectivity guarantee; isolated floor pockets are legal

    All randomness comes from the RandomSource passed in, so a seeded source
    reproduces the same sequence of levels.
    """

    def __init__(self, rng: RandomSource, rules: Rules = RULES) -> None:
        self.rng = rng
        self.rules = rules

    def generate(self, depth: int) -> DungeonMap:
        logger.debug("Generating level %d (%dx%d)", depth, self.rules.width, self.rules.height)
        m = DungeonMap(self.rules.width, self.rules.height, default=TileType.FLOOR)

        # Random fill, column by column
        for x in range(m.width):
            for y in range(m.height):
                if self.rng.random() <= self.rules.wall_chance:
                    m.set(x, y, TileType.WALL)

        # Border pass
        for x in range(m.width):
            m.set(x, 0, TileType.WALL)
            m.set(x, m.height - 1, TileType.WALL)
        for y in range(m.height):
            m.set(0, y, TileType.WALL)
            m.set(m.width - 1, y, TileType.WALL)
        return m

    def build(self, depth: int) -> Level:
        """Generate a level whose spawn pool can hold every placement, then place stairs and chest.

        Grids with too few spawn points are discarded and regenerated from the
        same random stream.
        """
        needed = self.rules.level_capacity(depth)
        for attempt in range(1, self.rules.max_generation_attempts + 1):
            dmap = self.generate(depth)
            pool = compute_spawns(dmap)
            if len(pool) >= needed:
                break
            logger.warning(
                "Level %d attempt %d has %d spawn points, %d needed; regenerating",
                depth, attempt, len(pool), needed,
            )
        else:
            raise LevelGenerationError(
                f"No grid with {needed} spawn points after {self.rules.max_generation_attempts} attempts"
            )

        stairs = place_stairs(dmap, pool, self.rng)
        chest = place_chest(dmap, pool, depth, self.rng, self.rules)
        logger.debug("Generated level %d:\n%s", depth, dmap)
        return Level(depth=depth, map=dmap, pool=pool, stairs=stairs, chest=chest)


__all__ = ["Level", "LevelGenerator"]
