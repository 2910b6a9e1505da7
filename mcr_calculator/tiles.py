"""
MCR Tile Model

Defines the tile vocabulary used by the Chinese Official scoring engine:
- 9 Characters (万), 9 Bamboos (条), 9 Dots (筒)
- 4 Winds (东南西北)
- 3 Dragons (中发白)
- Flowers (花), untyped and fungible; bonus points only

Tiles of the same kind are interchangeable, so a hand is a multiset of kinds.
"""

from enum import IntEnum
from dataclasses import dataclass
from typing import Iterable, List, Optional
import numpy as np


class TileSuit(IntEnum):
    """Tile suits"""
    CHARACTERS = 0  # 万 (Wan) - Numbers 1-9
    BAMBOOS = 1     # 条 (Tiao) - Numbers 1-9
    DOTS = 2        # 筒 (Tong) - Numbers 1-9
    WINDS = 3       # 风 (Feng) - East, South, West, North
    DRAGONS = 4     # 箭 (Jian) - Red, Green, White
    FLOWERS = 5     # 花 (Hua) - bonus tiles, never part of a set


class WindType(IntEnum):
    """Wind tile types"""
    EAST = 0   # 东
    SOUTH = 1  # 南
    WEST = 2   # 西
    NORTH = 3  # 北


class DragonType(IntEnum):
    """Dragon tile types"""
    RED = 0    # 中 (Zhong)
    GREEN = 1  # 发 (Fa)
    WHITE = 2  # 白 (Bai)


NUMBERED_SUITS = (TileSuit.CHARACTERS, TileSuit.BAMBOOS, TileSuit.DOTS)

# Number of distinct non-flower kinds
NUM_TILE_TYPES = 34

_SUIT_LETTERS = {TileSuit.CHARACTERS: 'm', TileSuit.DOTS: 'p', TileSuit.BAMBOOS: 's'}
_SUIT_CJK = {TileSuit.CHARACTERS: '万', TileSuit.BAMBOOS: '条', TileSuit.DOTS: '筒'}
_WIND_LETTERS = ['E', 'S', 'W', 'N']
_DRAGON_LETTERS = ['RD', 'GD', 'WD']
_WIND_CJK = ['东', '南', '西', '北']
_DRAGON_CJK = ['中', '发', '白']


class TileParseError(ValueError):
    """Raised when a tile token cannot be parsed"""


@dataclass(frozen=True, order=True)
class Tile:
    """
    A single tile kind.

    Attributes:
        suit: The suit of the tile
        value: 1-9 for numbered suits, WindType/DragonType for honors, 0 for flowers
    """
    suit: TileSuit
    value: int = 0

    def __post_init__(self):
        """Validate tile values"""
        if self.suit in NUMBERED_SUITS:
            if not 1 <= self.value <= 9:
                raise ValueError(f"Numbered suits must have value 1-9, got {self.value}")
        elif self.suit == TileSuit.WINDS:
            if not 0 <= self.value <= 3:
                raise ValueError(f"Wind tiles must have value 0-3, got {self.value}")
        elif self.suit == TileSuit.DRAGONS:
            if not 0 <= self.value <= 2:
                raise ValueError(f"Dragon tiles must have value 0-2, got {self.value}")
        elif self.suit == TileSuit.FLOWERS:
            # Flowers are fungible; every flower is the same kind
            object.__setattr__(self, 'value', 0)

    @property
    def is_flower(self) -> bool:
        return self.suit == TileSuit.FLOWERS

    @property
    def is_numbered(self) -> bool:
        return self.suit in NUMBERED_SUITS

    @property
    def is_honor(self) -> bool:
        """Check if tile is an honor tile (Wind or Dragon)"""
        return self.suit in (TileSuit.WINDS, TileSuit.DRAGONS)

    @property
    def is_wind(self) -> bool:
        return self.suit == TileSuit.WINDS

    @property
    def is_dragon(self) -> bool:
        return self.suit == TileSuit.DRAGONS

    @property
    def is_terminal(self) -> bool:
        """Check if tile is a terminal (1 or 9 of numbered suits)"""
        return self.is_numbered and self.value in (1, 9)

    @property
    def is_terminal_or_honor(self) -> bool:
        return self.is_terminal or self.is_honor

    @property
    def is_simple(self) -> bool:
        """Check if tile is a simple (2-8 of numbered suits)"""
        return self.is_numbered and 2 <= self.value <= 8

    @property
    def is_green(self) -> bool:
        """Check if tile is a green tile (for All Green pattern)"""
        if self.suit == TileSuit.BAMBOOS:
            return self.value in (2, 3, 4, 6, 8)
        if self.suit == TileSuit.DRAGONS:
            return self.value == DragonType.GREEN
        return False

    @property
    def is_reversible(self) -> bool:
        """Tiles with a vertically symmetric face (for Reversible Tiles)"""
        if self.suit == TileSuit.DOTS:
            return self.value in (1, 2, 3, 4, 5, 8, 9)
        if self.suit == TileSuit.BAMBOOS:
            return self.value in (2, 4, 5, 6, 8, 9)
        return self.suit == TileSuit.DRAGONS and self.value == DragonType.WHITE

    @property
    def tile_index(self) -> int:
        """
        Index of this tile kind (0-33).

        Characters 0-8, Bamboos 9-17, Dots 18-26, Winds 27-30, Dragons 31-33.
        Flowers have no index because they never take part in a set.
        """
        if self.is_numbered:
            return self.suit * 9 + self.value - 1
        if self.suit == TileSuit.WINDS:
            return 27 + self.value
        if self.suit == TileSuit.DRAGONS:
            return 31 + self.value
        raise ValueError("Flower tiles have no tile index")

    @property
    def code(self) -> str:
        """Compact token, e.g. '1m', '9p', 'E', 'RD', 'F'"""
        if self.is_numbered:
            return f"{self.value}{_SUIT_LETTERS[self.suit]}"
        if self.suit == TileSuit.WINDS:
            return _WIND_LETTERS[self.value]
        if self.suit == TileSuit.DRAGONS:
            return _DRAGON_LETTERS[self.value]
        return 'F'

    def __repr__(self) -> str:
        return f"Tile({self.code})"

    def __str__(self) -> str:
        """Human-readable string representation"""
        if self.is_numbered:
            return f"{self.value}{_SUIT_CJK[self.suit]}"
        if self.suit == TileSuit.WINDS:
            return _WIND_CJK[self.value]
        if self.suit == TileSuit.DRAGONS:
            return _DRAGON_CJK[self.value]
        return '花'

    @classmethod
    def from_index(cls, tile_index: int) -> 'Tile':
        """Create a tile from its kind index (0-33)"""
        if not 0 <= tile_index < NUM_TILE_TYPES:
            raise ValueError(f"Tile index must be 0-33, got {tile_index}")
        if tile_index < 27:
            return cls(TileSuit(tile_index // 9), tile_index % 9 + 1)
        if tile_index < 31:
            return cls(TileSuit.WINDS, tile_index - 27)
        return cls(TileSuit.DRAGONS, tile_index - 31)

    @classmethod
    def from_string(cls, s: str) -> 'Tile':
        """
        Create tile from a token.

        Accepts compact tokens ("1m", "9p", "3s", "E", "RD", "F", "F3")
        and CJK forms ("1万", "9条", "东", "中", "花").
        """
        t = s.strip()
        if not t:
            raise TileParseError(f"Invalid token: {s!r}")

        if t in _WIND_LETTERS:
            return cls(TileSuit.WINDS, _WIND_LETTERS.index(t))
        if t in _DRAGON_LETTERS:
            return cls(TileSuit.DRAGONS, _DRAGON_LETTERS.index(t))
        if t in _WIND_CJK:
            return cls(TileSuit.WINDS, _WIND_CJK.index(t))
        if t in _DRAGON_CJK:
            return cls(TileSuit.DRAGONS, _DRAGON_CJK.index(t))
        if t == '花':
            return FLOWER

        # Flowers F1..F8 all map to the same kind
        if t[0] == 'F':
            if t == 'F' or (t[1:].isdigit() and 1 <= int(t[1:]) <= 8):
                return FLOWER
            raise TileParseError(f"Invalid flower token: {s!r}")

        if len(t) == 2 and t[0].isdigit() and t[0] != '0':
            value = int(t[0])
            for suit, letter in _SUIT_LETTERS.items():
                if t[1] == letter:
                    return cls(suit, value)
            for suit, glyph in _SUIT_CJK.items():
                if t[1] == glyph:
                    return cls(suit, value)

        raise TileParseError(f"Invalid token: {s!r}")


def parse_tiles(text: str) -> List[Tile]:
    """Parse a whitespace-separated list of tile tokens"""
    return [Tile.from_string(token) for token in text.split()]


def all_tile_kinds() -> List[Tile]:
    """The 34 non-flower tile kinds in index order"""
    return [Tile.from_index(i) for i in range(NUM_TILE_TYPES)]


def count_array(tiles: Iterable[Tile]) -> np.ndarray:
    """34-element count array; flowers are ignored"""
    counts = np.zeros(NUM_TILE_TYPES, dtype=np.int8)
    for tile in tiles:
        if not tile.is_flower:
            counts[tile.tile_index] += 1
    return counts


class TileSet:
    """
    A collection of tiles with utility methods.
    Used for the tile buffer of the input engine.
    """

    # Copies of each tile kind in a full set
    COPIES_PER_TYPE = 4

    def __init__(self, tiles: Optional[Iterable[Tile]] = None):
        self.tiles: List[Tile] = list(tiles) if tiles else []

    def add(self, tile: Tile) -> None:
        self.tiles.append(tile)

    def remove(self, tile: Tile) -> bool:
        """
        Remove the first tile of this kind.
        Returns True if removed, False if not found.
        """
        for i, t in enumerate(self.tiles):
            if t == tile:
                self.tiles.pop(i)
                return True
        return False

    def pop(self, index: int) -> Tile:
        return self.tiles.pop(index)

    def count(self, tile: Tile) -> int:
        """Count occurrences of a tile kind"""
        return sum(1 for t in self.tiles if t == tile)

    def sort(self) -> None:
        self.tiles.sort()

    def to_count_array(self) -> np.ndarray:
        """34-element array counting each non-flower kind"""
        return count_array(self.tiles)

    @property
    def flower_count(self) -> int:
        return sum(1 for t in self.tiles if t.is_flower)

    def non_flowers(self) -> List[Tile]:
        return [t for t in self.tiles if not t.is_flower]

    def copy(self) -> 'TileSet':
        return TileSet(self.tiles)

    def __len__(self) -> int:
        return len(self.tiles)

    def __iter__(self):
        return iter(self.tiles)

    def __getitem__(self, index):
        return self.tiles[index]

    def __repr__(self) -> str:
        return f"TileSet({len(self.tiles)} tiles)"

    def __str__(self) -> str:
        return " ".join(str(t) for t in sorted(self.tiles))


# Convenience functions for creating specific tiles
def char(value: int) -> Tile:
    """Create a Characters tile (1-9万)"""
    return Tile(TileSuit.CHARACTERS, value)

def bam(value: int) -> Tile:
    """Create a Bamboos tile (1-9条)"""
    return Tile(TileSuit.BAMBOOS, value)

def dot(value: int) -> Tile:
    """Create a Dots tile (1-9筒)"""
    return Tile(TileSuit.DOTS, value)

def wind(wind_type: WindType) -> Tile:
    """Create a Wind tile (东南西北)"""
    return Tile(TileSuit.WINDS, wind_type)

def dragon(dragon_type: DragonType) -> Tile:
    """Create a Dragon tile (中发白)"""
    return Tile(TileSuit.DRAGONS, dragon_type)


# Named wind tiles
EAST = Tile(TileSuit.WINDS, WindType.EAST)
SOUTH = Tile(TileSuit.WINDS, WindType.SOUTH)
WEST = Tile(TileSuit.WINDS, WindType.WEST)
NORTH = Tile(TileSuit.WINDS, WindType.NORTH)

# Named dragon tiles
RED_DRAGON = Tile(TileSuit.DRAGONS, DragonType.RED)
GREEN_DRAGON = Tile(TileSuit.DRAGONS, DragonType.GREEN)
WHITE_DRAGON = Tile(TileSuit.DRAGONS, DragonType.WHITE)

FLOWER = Tile(TileSuit.FLOWERS)

# 1/9 of each suit plus all honors
TERMINALS_AND_HONORS = tuple(
    Tile(suit, v) for suit in NUMBERED_SUITS for v in (1, 9)
) + (EAST, SOUTH, WEST, NORTH, RED_DRAGON, GREEN_DRAGON, WHITE_DRAGON)
