import sys
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from dungeon_delve.dungeon.generator import Level  # noqa: E402
from dungeon_delve.dungeon.map import DungeonMap  # noqa: E402
from dungeon_delve.dungeon.spawns import compute_spawns  # noqa: E402
from dungeon_delve.dungeon.tiles import TileType  # noqa: E402
from dungeon_delve.engine.resolver import TurnResolver  # noqa: E402
from dungeon_delve.entities.entity import Entity  # noqa: E402
from dungeon_delve.entities.monsters import MonsterSlots  # noqa: E402
from dungeon_delve.rng import RandomSource  # noqa: E402


class ScriptedRandom(RandomSource):
    """RandomSource that replays queued values before falling back to a seeded stream.

    randrange values are checked against the requested stop so a scripted roll
    can never fall outside what the real source could produce.
    """

    def __init__(self, randoms: Iterable[float] = (), ranges: Iterable[int] = ()) -> None:
        super().__init__(seed=0)
        self.randoms: List[float] = list(randoms)
        self.ranges: List[int] = list(ranges)
        self.range_calls: List[int] = []

    def random(self) -> float:
        if self.randoms:
            return self.randoms.pop(0)
        return super().random()

    def randrange(self, stop: int) -> int:
        self.range_calls.append(stop)
        if self.ranges:
            value = self.ranges.pop(0)
            assert 0 <= value < max(stop, 1), f"scripted roll {value} outside [0, {stop})"
            return value
        return super().randrange(stop)


@pytest.fixture
def scripted_rng() -> Callable[..., ScriptedRandom]:
    return ScriptedRandom


@pytest.fixture
def make_resolver() -> Callable[..., TurnResolver]:
    """Build a started resolver on a hand-drawn map with no players and no monsters."""

    def _make(lines: Sequence[str], rng: Optional[RandomSource] = None, depth: int = 1) -> TurnResolver:
        resolver = TurnResolver(rng=rng or RandomSource(0))
        dmap = DungeonMap.from_lines(lines)
        stairs = next(iter(dmap.positions_of([TileType.STAIRS])), None)
        resolver.level = Level(depth=depth, map=dmap, pool=compute_spawns(dmap), stairs=stairs)
        resolver.depth = depth
        resolver.monsters = MonsterSlots(4)
        return resolver

    return _make


@pytest.fixture
def add_monster() -> Callable[..., Entity]:
    def _add(resolver: TurnResolver, index: int, x: int, y: int, health: int = 50, damage: int = 20) -> Entity:
        monster = Entity.monster(x, y, health, damage)
        resolver.monsters.place(index, monster)
        return monster

    return _add
