from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Sequence, Tuple

from ..exceptions import OutOfBoundsError
from .tiles import TileType

logger = logging.getLogger(__name__)

# Orthogonal offsets, ordered for deterministic traversal
ORTHOGONAL: Tuple[Tuple[int, int], ...] = ((0, -1), (1, 0), (0, 1), (-1, 0))


@dataclass(frozen=True)
class Point:
    x: int
    y: int

    def offset(self, dx: int, dy: int) -> "Point":
        return Point(self.x + dx, self.y + dy)


class DungeonMap:
    """
    The tile grid of one level. Dimensions never change after construction.
    All tile access is bounds-checked; touching a cell outside the grid is a
    defect and raises OutOfBoundsError rather than being silently ignored.
    """

    def __init__(self, width: int, height: int, default: TileType = TileType.WALL) -> None:
        if width < 3 or height < 3:
            raise ValueError("Map must be at least 3x3 to maintain wall borders")
        self.width = width
        self.height = height
        # tiles[y][x]
        self._tiles: List[List[TileType]] = [
            [default for _ in range(width)] for _ in range(height)
        ]

    # ---- Safety / Bounds -------------------------------------------------
    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_border(self, x: int, y: int) -> bool:
        return x in (0, self.width - 1) or y in (0, self.height - 1)

    def get(self, x: int, y: int) -> TileType:
        if not self.in_bounds(x, y):
            raise OutOfBoundsError(f"Tile out of bounds: ({x},{y}) not in [0,{self.width})x[0,{self.height})")
        return self._tiles[y][x]

    def set(self, x: int, y: int, t: TileType) -> None:
        if not self.in_bounds(x, y):
            logger.error("Attempt to write out-of-bounds tile at (%d,%d)", x, y)
            raise OutOfBoundsError(f"Tile out of bounds: ({x},{y}) not in [0,{self.width})x[0,{self.height})")
        self._tiles[y][x] = t

    def tile_at(self, p: Point) -> TileType:
        return self.get(p.x, p.y)

    # ---- Query -----------------------------------------------------------
    def is_wall(self, x: int, y: int) -> bool:
        return self.get(x, y) is TileType.WALL

    def neighbors_4(self, x: int, y: int) -> Iterator[Point]:
        for dx, dy in ORTHOGONAL:
            nx, ny = x + dx, y + dy
            if self.in_bounds(nx, ny):
                yield Point(nx, ny)

    def cells(self) -> Iterator[Tuple[Point, TileType]]:
        """Yield every cell, column by column (x-major, then y)."""
        for x in range(self.width):
            for y in range(self.height):
                yield Point(x, y), self._tiles[y][x]

    def count(self, tile: TileType) -> int:
        return sum(row.count(tile) for row in self._tiles)

    def positions_of(self, tiles: Iterable[TileType]) -> List[Point]:
        wanted = set(tiles)
        return [p for p, t in self.cells() if t in wanted]

    # ---- Export / Compare -----------------------------------------------
    @classmethod
    def from_lines(cls, lines: Sequence[str]) -> "DungeonMap":
        """Build a map from rows of tile glyphs ('#', '.', '>', 'w', 's', 'r')."""
        if not lines:
            raise ValueError("lines must not be empty")
        width = len(lines[0])
        for i, row in enumerate(lines):
            if len(row) != width:
                raise ValueError(f"All rows must have equal width; row 0 has {width}, row {i} has {len(row)}")
        dmap = cls(width, len(lines))
        for y, row in enumerate(lines):
            for x, ch in enumerate(row):
                dmap.set(x, y, TileType.from_glyph(ch))
        return dmap

    def to_str_lines(self) -> List[str]:
        return [''.join(t.glyph for t in row) for row in self._tiles]

    def snapshot(self) -> Tuple[Tuple[TileType, ...], ...]:
        """
        Immutable copy of the tiles, rows indexed by y, for snapshots and equality tests.
        """
        return tuple(tuple(row) for row in self._tiles)

    def __str__(self) -> str:
        return "\n".join(self.to_str_lines())
