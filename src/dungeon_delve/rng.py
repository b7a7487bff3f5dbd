from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import MutableSequence, Sequence, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RandomSource:
    """
    A thin wrapper around random.Random to:
    - keep a single, explicitly threaded random stream for the whole run
    - support optional deterministic seeding for tests
    - provide the few draws the simulation needs

    The order in which callers consume the stream is part of the determinism
    contract: wall fill, stairs, chest bands, monsters, players, then per-turn
    combat/loot rolls.
    """

    seed: Union[int, str, None] = None

    def __post_init__(self) -> None:
        if self.seed is not None:
            self._rng = random.Random(self.seed)
            logger.debug("Initialized RandomSource with deterministic seed=%r", self.seed)
        else:
            self._rng = random.Random()
            logger.debug("Initialized RandomSource with non-deterministic seed")

    def random(self) -> float:
        """Uniform float in [0, 1)."""
        return self._rng.random()

    def randrange(self, stop: int) -> int:
        """Uniform int in [0, stop). A non-positive stop yields 0."""
        if stop <= 0:
            return 0
        return self._rng.randrange(stop)

    def choice(self, seq: Sequence[T]) -> T:
        if not seq:
            raise ValueError("RandomSource.choice() received an empty sequence")
        return seq[self.randrange(len(seq))]

    def pop_random(self, items: MutableSequence[T]) -> T:
        """Remove and return a uniformly chosen element."""
        if not items:
            raise ValueError("RandomSource.pop_random() received an empty sequence")
        return items.pop(self.randrange(len(items)))


__all__ = ["RandomSource"]
