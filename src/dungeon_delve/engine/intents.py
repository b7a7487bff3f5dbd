from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

from ..entities.entity import PlayerSlot


class Direction(Enum):
    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def delta(self) -> Tuple[int, int]:
        return self.value


@dataclass(frozen=True)
class MoveIntent:
    """Move one player a single cell; resolves exactly one turn."""

    slot: PlayerSlot
    direction: Direction


@dataclass(frozen=True)
class WaitIntent:
    """Resolve a turn without moving any player."""


@dataclass(frozen=True)
class SpawnSecondPlayer:
    """Bring the secondary player into the current level; does not resolve a turn."""


Intent = Union[MoveIntent, WaitIntent, SpawnSecondPlayer]

__all__ = ["Direction", "MoveIntent", "WaitIntent", "SpawnSecondPlayer", "Intent"]
