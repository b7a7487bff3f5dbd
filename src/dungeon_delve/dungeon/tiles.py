from enum import Enum, auto


class TileType(Enum):
    """Dungeon tile types.

    - WALL: Non-walkable obstacle
    - FLOOR: Walkable open tile
    - STAIRS: Walkable tile that triggers level descent
    - WOODEN_CHEST / SAPPHIRE_CHEST / RUBY_CHEST: Walkable loot tiles, weakest to strongest
    """

    WALL = auto()
    FLOOR = auto()
    STAIRS = auto()
    WOODEN_CHEST = auto()
    SAPPHIRE_CHEST = auto()
    RUBY_CHEST = auto()

    @property
    def is_walkable(self) -> bool:
        return self is not TileType.WALL

    @property
    def is_stairs(self) -> bool:
        return self is TileType.STAIRS

    @property
    def is_chest(self) -> bool:
        return self in {TileType.WOODEN_CHEST, TileType.SAPPHIRE_CHEST, TileType.RUBY_CHEST}

    @property
    def glyph(self) -> str:
        """A single-character visualization used by logs and the headless runner."""
        return {
            TileType.WALL: '#',
            TileType.FLOOR: '.',
            TileType.STAIRS: '>',
            TileType.WOODEN_CHEST: 'w',
            TileType.SAPPHIRE_CHEST: 's',
            TileType.RUBY_CHEST: 'r',
        }[self]

    @classmethod
    def from_glyph(cls, ch: str) -> "TileType":
        for t in cls:
            if t.glyph == ch:
                return t
        raise ValueError(f"Unknown tile glyph: {ch!r}")
