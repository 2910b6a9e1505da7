"""
MCR Melds and Decompositions

A decomposition partitions a winning hand into the sets a player would
claim: four melds and a pair for the standard shape, or one of the special
shapes (seven pairs, thirteen orphans, knitted hands).
"""

from enum import Enum, IntEnum
from dataclasses import dataclass
from typing import List, Optional, Tuple
import numpy as np

from .tiles import Tile, TileSuit, NUM_TILE_TYPES


class MeldType(IntEnum):
    """Types of sets a hand decomposes into"""
    CHOW = 0      # 顺子 - Sequence of 3 consecutive tiles in same suit
    PUNG = 1      # 刻子 - 3 identical tiles
    KONG = 2      # 杠 - 4 identical tiles
    PAIR = 3      # 将 - 2 identical tiles


class HandShape(str, Enum):
    """Winning hand shape families"""
    STANDARD = "standard"
    SEVEN_PAIRS = "sevenPairs"
    THIRTEEN_ORPHANS = "thirteenOrphans"
    HONORS_AND_KNITTED = "honorsAndKnitted"
    KNITTED_STRAIGHT = "knittedStraight"


_MELD_SIZES = {
    MeldType.CHOW: 3,
    MeldType.PUNG: 3,
    MeldType.KONG: 4,
    MeldType.PAIR: 2,
}


@dataclass(frozen=True)
class Meld:
    """
    A set of tiles within a decomposition.

    Attributes:
        meld_type: Chow, Pung, Kong or Pair
        tile: Lowest tile of a chow, or the repeated tile
        concealed: Whether the set is concealed (only tracked for kongs;
            other sets follow the hand's concealment)
    """
    meld_type: MeldType
    tile: Tile
    concealed: bool = True

    def __post_init__(self):
        """Validate meld"""
        if self.tile.is_flower:
            raise ValueError("Flowers cannot form a meld")
        if self.meld_type == MeldType.CHOW:
            if not self.tile.is_numbered:
                raise ValueError("Chow must be in a numbered suit")
            if self.tile.value > 7:
                raise ValueError(f"Chow cannot start at {self.tile.value}")

    @property
    def tiles(self) -> List[Tile]:
        """All tiles in the meld"""
        if self.meld_type == MeldType.CHOW:
            return [Tile(self.tile.suit, self.tile.value + i) for i in range(3)]
        return [self.tile] * _MELD_SIZES[self.meld_type]

    @property
    def is_chow(self) -> bool:
        return self.meld_type == MeldType.CHOW

    @property
    def is_pung_or_kong(self) -> bool:
        return self.meld_type in (MeldType.PUNG, MeldType.KONG)

    @property
    def is_kong(self) -> bool:
        return self.meld_type == MeldType.KONG

    @property
    def suit(self) -> TileSuit:
        return self.tile.suit

    @property
    def value(self) -> int:
        return self.tile.value

    def contains_terminal_or_honor(self) -> bool:
        return any(t.is_terminal_or_honor for t in self.tiles)

    def __str__(self) -> str:
        tiles_str = " ".join(str(t) for t in self.tiles)
        if self.meld_type == MeldType.KONG:
            concealed = "暗" if self.concealed else "明"
            return f"[{concealed}{self.meld_type.name}: {tiles_str}]"
        return f"[{self.meld_type.name}: {tiles_str}]"


@dataclass(frozen=True)
class DeclaredKong:
    """A kong the player declared; its fourth tile is not in the hand count"""
    tile: Tile
    concealed: bool = False

    def __post_init__(self):
        if self.tile.is_flower:
            raise ValueError("Flowers cannot form a kong")

    def to_meld(self) -> Meld:
        return Meld(MeldType.KONG, self.tile, self.concealed)


# Tiles of the three knitted sequences: 147, 258, 369
KNITTED_SEQUENCES = ((1, 4, 7), (2, 5, 8), (3, 6, 9))


@dataclass(frozen=True)
class Decomposition:
    """
    One interpretation of a winning hand.

    Attributes:
        shape: The hand shape family
        melds: Sets other than the pair (4 for standard, 1 for knitted straight,
            7 PAIR melds for seven pairs, none otherwise)
        pair: The pair tile for standard and knitted straight shapes
        knitted: Suit order of the 147/258/369 sequences for knitted shapes
    """
    shape: HandShape
    melds: Tuple[Meld, ...] = ()
    pair: Optional[Tile] = None
    knitted: Optional[Tuple[TileSuit, TileSuit, TileSuit]] = None

    @property
    def is_special(self) -> bool:
        return self.shape != HandShape.STANDARD

    @property
    def chow_count(self) -> int:
        return sum(1 for m in self.melds if m.is_chow)

    @property
    def chows(self) -> List[Meld]:
        return [m for m in self.melds if m.is_chow]

    @property
    def pungs(self) -> List[Meld]:
        """Pungs and kongs"""
        return [m for m in self.melds if m.is_pung_or_kong]

    @property
    def kongs(self) -> List[Meld]:
        return [m for m in self.melds if m.is_kong]

    def knitted_tiles(self) -> List[Tile]:
        """The nine knitted tiles implied by a knitted straight"""
        if self.knitted is None:
            return []
        return [
            Tile(suit, value)
            for suit, values in zip(self.knitted, KNITTED_SEQUENCES)
            for value in values
        ]

    def key(self) -> tuple:
        """Canonical, order independent identity of this interpretation"""
        melds = tuple(sorted((m.meld_type, m.tile, m.concealed) for m in self.melds))
        return (self.shape.value, melds, self.pair, self.knitted)

    def covered_counts(self) -> np.ndarray:
        """
        Count array of the hand tiles this decomposition accounts for.

        Kongs count three tiles, matching how a declared kong is held in the
        hand. Thirteen orphans and honors-and-knitted cover nothing explicitly.
        """
        counts = np.zeros(NUM_TILE_TYPES, dtype=np.int8)
        for meld in self.melds:
            tiles = meld.tiles[:3] if meld.is_kong else meld.tiles
            for t in tiles:
                counts[t.tile_index] += 1
        if self.pair is not None:
            counts[self.pair.tile_index] += 2
        for t in self.knitted_tiles():
            counts[t.tile_index] += 1
        return counts

    def __str__(self) -> str:
        parts = [str(m) for m in self.melds]
        if self.pair is not None:
            parts.append(f"[PAIR: {self.pair} {self.pair}]")
        if self.knitted is not None:
            parts.append("[KNITTED: " + " ".join(str(t) for t in self.knitted_tiles()) + "]")
        return f"{self.shape.value}: " + " ".join(parts)
