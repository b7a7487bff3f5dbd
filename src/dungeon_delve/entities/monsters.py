from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional, Tuple

from .entity import Entity

logger = logging.getLogger(__name__)


class MonsterSlots:
    """Fixed-capacity monster slots for one level.

    Records live in a sparse index -> Entity map. Clearing a slot leaves a gap;
    slots are never compacted, so a monster keeps its index for the whole level
    and the collision pass can rely on a stable processing order.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must be non-negative")
        self.capacity = capacity
        self._records: Dict[int, Entity] = {}

    def place(self, index: int, monster: Entity) -> None:
        if not 0 <= index < self.capacity:
            raise IndexError(f"Monster slot {index} outside capacity {self.capacity}")
        self._records[index] = monster

    def get(self, index: int) -> Optional[Entity]:
        return self._records.get(index)

    def clear(self, index: int) -> None:
        self._records.pop(index, None)

    def live(self) -> Iterator[Tuple[int, Entity]]:
        """Yield (index, monster) for occupied slots in ascending slot order."""
        for index in sorted(self._records):
            yield index, self._records[index]

    def others(self, index: int) -> Iterator[Entity]:
        for other_index, monster in self.live():
            if other_index != index:
                yield monster

    def at(self, x: int, y: int) -> List[Entity]:
        return [m for _, m in self.live() if m.x == x and m.y == y]

    def sweep_dead(self) -> List[int]:
        """Empty every slot whose monster has health below 1; return the cleared indices."""
        dead = [i for i, m in self.live() if not m.is_alive]
        for i in dead:
            self.clear(i)
        if dead:
            logger.debug("Cleared dead monsters from slots %s", dead)
        return dead

    def as_list(self) -> List[Optional[Entity]]:
        """Slot view with None for empty slots."""
        return [self._records.get(i) for i in range(self.capacity)]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Entity]:
        for _, monster in self.live():
            yield monster
