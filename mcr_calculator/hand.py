"""
MCR Hand and Tile Input Engine

The input engine accumulates a candidate hand one tile at a time and
enforces the physical limits of a tile set. Once the buffer holds 13 or
14 non-flower tiles it can be frozen into a Hand for validation and scoring.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple
import numpy as np

from .tiles import Tile, TileSet, count_array, parse_tiles
from .melds import DeclaredKong
from .rules import RuleSet, DEFAULT_RULES

logger = logging.getLogger(__name__)


class InvalidHandError(ValueError):
    """Raised when a Hand is requested from a buffer that does not validate"""


@dataclass(frozen=True)
class Hand:
    """
    A finalized hand.

    Attributes:
        tiles: Non-flower tiles, sorted. A declared kong contributes three.
        flower_count: Number of flowers (0-8)
        kongs: Declared kongs
    """
    tiles: Tuple[Tile, ...]
    flower_count: int = 0
    kongs: Tuple[DeclaredKong, ...] = ()

    def __post_init__(self):
        tiles = tuple(sorted(self.tiles))
        if any(t.is_flower for t in tiles):
            raise ValueError("Flowers are counted separately, not as hand tiles")
        object.__setattr__(self, 'tiles', tiles)
        object.__setattr__(self, 'kongs', tuple(sorted(self.kongs, key=lambda k: k.tile)))

    @classmethod
    def from_string(cls, text: str, kongs: Iterable[DeclaredKong] = ()) -> 'Hand':
        """Build a hand from tokens like "1m 1m 1m E E F"; flowers are counted"""
        parsed = parse_tiles(text)
        return cls(
            tiles=tuple(t for t in parsed if not t.is_flower),
            flower_count=sum(1 for t in parsed if t.is_flower),
            kongs=tuple(kongs),
        )

    @property
    def tile_count(self) -> int:
        return len(self.tiles)

    @property
    def is_complete(self) -> bool:
        return self.tile_count == 14

    def counts(self) -> np.ndarray:
        """34-element count array of the hand tiles"""
        return count_array(self.tiles)

    def physical_counts(self) -> np.ndarray:
        """Counts including the implicit fourth tile of each declared kong"""
        counts = self.counts()
        for kong in self.kongs:
            counts[kong.tile.tile_index] += 1
        return counts

    def without(self, tile: Tile) -> 'Hand':
        """A copy with one tile of this kind removed"""
        tiles = list(self.tiles)
        tiles.remove(tile)
        return Hand(tuple(tiles), self.flower_count, self.kongs)

    def with_tile(self, tile: Tile) -> 'Hand':
        return Hand(self.tiles + (tile,), self.flower_count, self.kongs)

    def __str__(self) -> str:
        text = " ".join(str(t) for t in self.tiles)
        if self.flower_count:
            text += f" +{self.flower_count}花"
        return text


@dataclass
class TileInputState:
    """Snapshot of the input engine for rendering"""
    tiles: List[Tile]
    error_message: Optional[str]
    is_valid: bool
    kongs: List[DeclaredKong] = field(default_factory=list)


@dataclass
class AddTileResult:
    success: bool
    error: Optional[str] = None


class TileInputEngine:
    """
    Accumulates tiles for one hand-entry session.

    Mutators never raise for constraint violations: they return a failed
    result and keep the message in error_message for the caller to read.
    """

    def __init__(self, rules: RuleSet = DEFAULT_RULES):
        self.rules = rules
        self._tiles = TileSet()
        self._kongs: List[DeclaredKong] = []
        self.error_message: Optional[str] = None

    def get_state(self) -> TileInputState:
        # Computed without touching the retained error message
        return TileInputState(
            tiles=list(self._tiles),
            error_message=self.error_message,
            is_valid=self._check_hand() is None,
            kongs=list(self._kongs),
        )

    def get_tiles(self) -> List[Tile]:
        return list(self._tiles)

    def get_non_flower_tiles(self) -> List[Tile]:
        return self._tiles.non_flowers()

    def get_flower_count(self) -> int:
        return self._tiles.flower_count

    def get_tile_count(self, tile: Tile) -> int:
        """Copies of this kind in use, including the fourth tile of a declared kong"""
        count = self._tiles.count(tile)
        if self._kong_for(tile) is not None:
            count += 1
        return count

    def get_error_message(self) -> Optional[str]:
        return self.error_message

    def _kong_for(self, tile: Tile) -> Optional[DeclaredKong]:
        for kong in self._kongs:
            if kong.tile == tile:
                return kong
        return None

    def _reject(self, message: str) -> AddTileResult:
        logger.debug(f"Rejected input: {message}")
        self.error_message = message
        return AddTileResult(False, message)

    def add_tile(self, tile: Tile) -> AddTileResult:
        """Add a tile to the buffer"""
        if tile.is_flower:
            if self.get_flower_count() >= self.rules.max_flowers:
                return self._reject(
                    f"Cannot have more than {self.rules.max_flowers} flowers."
                )
        else:
            if self.get_tile_count(tile) >= self.rules.max_tile_copies:
                return self._reject(
                    f"Cannot have more than {self.rules.max_tile_copies} of the same tile."
                )
            if len(self.get_non_flower_tiles()) >= self.rules.max_hand_tiles:
                return self._reject(
                    f"Hand cannot exceed {self.rules.max_hand_tiles} tiles (excluding flowers)."
                )

        self._tiles.add(tile)
        self.error_message = None
        return AddTileResult(True)

    def declare_kong(self, tile: Tile, concealed: bool = False) -> AddTileResult:
        """
        Mark three copies already in the buffer as a kong.

        The fourth tile is implicit so the hand still counts 14 tiles.
        """
        if not self.rules.allow_kongs:
            return self._reject("Kongs are not allowed by this rule set.")
        if tile.is_flower:
            return self._reject("Flowers cannot form a kong.")
        if self._kong_for(tile) is not None:
            return self._reject(f"Kong of {tile} already declared.")
        if self._tiles.count(tile) != 3:
            return self._reject(f"A kong needs exactly three {tile} in the hand.")

        self._kongs.append(DeclaredKong(tile, concealed))
        self.error_message = None
        return AddTileResult(True)

    def remove_tile_by_index(self, index: int) -> bool:
        if 0 <= index < len(self._tiles):
            tile = self._tiles.pop(index)
            self._drop_kong(tile)
            self.error_message = None
            return True
        return False

    def remove_tile(self, tile: Tile) -> bool:
        """Remove the first tile of this kind"""
        if self._tiles.remove(tile):
            self._drop_kong(tile)
            self.error_message = None
            return True
        return False

    def _drop_kong(self, tile: Tile) -> None:
        kong = self._kong_for(tile)
        if kong is not None:
            self._kongs.remove(kong)

    def reset_hand(self) -> None:
        self._tiles = TileSet()
        self._kongs = []
        self.error_message = None

    def _check_hand(self) -> Optional[str]:
        """Return the reason the buffer is not a hand, or None"""
        non_flowers = self.get_non_flower_tiles()
        if len(non_flowers) not in (13, 14):
            return (
                f"Hand must contain 13 or 14 tiles (excluding flowers). "
                f"Currently: {len(non_flowers)}"
            )
        for tile in set(non_flowers):
            if self.get_tile_count(tile) > self.rules.max_tile_copies:
                return f"Tile {tile} appears too many times (max {self.rules.max_tile_copies})."
        return None

    def validate_hand(self) -> bool:
        error = self._check_hand()
        self.error_message = error
        return error is None

    def create_hand(self) -> Hand:
        """Freeze the buffer into a Hand"""
        if not self.validate_hand():
            raise InvalidHandError(self.error_message)
        return Hand(
            tiles=tuple(self.get_non_flower_tiles()),
            flower_count=self.get_flower_count(),
            kongs=tuple(self._kongs),
        )
