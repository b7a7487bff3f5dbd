from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..dungeon.map import Point
from ..dungeon.tiles import TileType
from ..entities.entity import Entity, EntityType, PlayerSlot
from .events import ResolverState


@dataclass(frozen=True)
class EntityView:
    """Read-only copy of an entity's state at snapshot time."""

    type: EntityType
    slot: Optional[PlayerSlot]
    x: int
    y: int
    health: int
    max_health: int
    shield: int
    current_damage: int
    immortality: int

    @property
    def pos(self) -> Point:
        return Point(self.x, self.y)

    @classmethod
    def of(cls, entity: Optional[Entity]) -> Optional["EntityView"]:
        if entity is None:
            return None
        return cls(
            type=entity.type,
            slot=entity.slot,
            x=entity.x,
            y=entity.y,
            health=entity.health,
            max_health=entity.max_health,
            shield=entity.shield,
            current_damage=entity.current_damage,
            immortality=entity.immortality,
        )


@dataclass(frozen=True)
class Snapshot:
    """What the presentation layer receives after every resolved step.

    tiles is indexed [y][x]; monsters keeps one entry per slot, None for an
    empty slot.
    """

    depth: int
    state: ResolverState
    tiles: Tuple[Tuple[TileType, ...], ...]
    primary: Optional[EntityView]
    secondary: Optional[EntityView]
    monsters: Tuple[Optional[EntityView], ...]

    @property
    def width(self) -> int:
        return len(self.tiles[0]) if self.tiles else 0

    @property
    def height(self) -> int:
        return len(self.tiles)

    def tile(self, x: int, y: int) -> TileType:
        return self.tiles[y][x]

    def live_monsters(self) -> List[EntityView]:
        return [m for m in self.monsters if m is not None]


def render_lines(snapshot: Snapshot) -> List[str]:
    """ASCII picture of a snapshot: tile glyphs overlaid with '@' (primary), '&' (secondary), 'M'."""
    rows = [[t.glyph for t in row] for row in snapshot.tiles]
    for m in snapshot.live_monsters():
        rows[m.y][m.x] = 'M'
    if snapshot.secondary is not None:
        rows[snapshot.secondary.y][snapshot.secondary.x] = '&'
    if snapshot.primary is not None:
        rows[snapshot.primary.y][snapshot.primary.x] = '@'
    return [''.join(r) for r in rows]


__all__ = ["EntityView", "Snapshot", "render_lines"]
