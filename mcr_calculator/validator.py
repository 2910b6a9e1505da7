"""
MCR Hand Validator and Decomposer

Determines whether a hand is a legal winning shape and enumerates every way
to read it:
- Thirteen orphans: one of each terminal and honor plus one duplicate
- Seven pairs
- Honors and knitted tiles (lesser / greater)
- Standard: four sets (chow / pung / kong) plus a pair
- Knitted straight: 147/258/369 over three suits plus one set and a pair

Standard decompositions are found by backtracking on the lowest remaining
tile kind, trying it as the start of a chow, then a pung, then the pair.
"""

import logging
from dataclasses import dataclass, field
from itertools import permutations
from typing import Iterator, List, Optional, Tuple
import numpy as np

from .tiles import Tile, TileSuit, NUMBERED_SUITS, TERMINALS_AND_HONORS, NUM_TILE_TYPES
from .melds import Meld, MeldType, HandShape, Decomposition, KNITTED_SEQUENCES
from .hand import Hand
from .rules import RuleSet, DEFAULT_RULES

logger = logging.getLogger(__name__)


THIRTEEN_ORPHANS_INDICES = tuple(t.tile_index for t in TERMINALS_AND_HONORS)
HONOR_INDICES = tuple(range(27, 34))


class SearchLimitExceeded(RuntimeError):
    """Raised when decomposition search runs past the configured step limit"""


@dataclass
class ValidationResult:
    """
    Outcome of validating a hand.

    Attributes:
        is_valid: Whether the hand is a complete winning shape
        error: Human-readable reason when invalid
        melds: Sets and pair of the first standard decomposition found
        decomposition: The first decomposition found (any shape)
        is_special_hand: True for shapes other than four sets and a pair
        special_hand_type: "sevenPairs", "thirteenOrphans", ...
        waits: For a 13-tile hand, the tile kinds that would complete it
    """
    is_valid: bool
    error: Optional[str] = None
    melds: Optional[List[Meld]] = None
    decomposition: Optional[Decomposition] = None
    is_special_hand: bool = False
    special_hand_type: Optional[str] = None
    waits: List[Tile] = field(default_factory=list)


class _StepBudget:
    """Counts search steps and aborts past the limit"""

    def __init__(self, limit: int):
        self.limit = limit
        self.steps = 0

    def tick(self) -> None:
        self.steps += 1
        if self.steps > self.limit:
            raise SearchLimitExceeded(f"Decomposition search exceeded {self.limit} steps")


# ========== Special shapes ==========

def detect_thirteen_orphans(counts: np.ndarray) -> bool:
    """One of each terminal/honor kind, exactly one of them doubled"""
    if int(counts.sum()) != 14:
        return False
    pairs = 0
    for idx in THIRTEEN_ORPHANS_INDICES:
        if counts[idx] == 0 or counts[idx] > 2:
            return False
        if counts[idx] == 2:
            pairs += 1
    # Anything else in the hand is outside the reference set
    outside = int(counts.sum()) - int(counts[list(THIRTEEN_ORPHANS_INDICES)].sum())
    return pairs == 1 and outside == 0


def detect_seven_pairs(counts: np.ndarray, allow_four_of_a_kind: bool = True) -> bool:
    """Every present kind has an even count summing to seven pairs"""
    if int(counts.sum()) != 14:
        return False
    pairs = 0
    for c in counts:
        c = int(c)
        if c == 0:
            continue
        if c == 2:
            pairs += 1
        elif c == 4 and allow_four_of_a_kind:
            pairs += 2
        else:
            return False
    return pairs == 7


def _knitted_orders() -> List[Tuple[TileSuit, TileSuit, TileSuit]]:
    """Suit assignments for the 147 / 258 / 369 sequences"""
    return [tuple(p) for p in permutations(NUMBERED_SUITS)]


def _knitted_indices(order: Tuple[TileSuit, TileSuit, TileSuit]) -> List[int]:
    return [
        Tile(suit, value).tile_index
        for suit, values in zip(order, KNITTED_SEQUENCES)
        for value in values
    ]


def detect_honors_and_knitted(counts: np.ndarray) -> Optional[Tuple[TileSuit, TileSuit, TileSuit]]:
    """
    Fourteen single tiles: honors plus knitted suit tiles.

    Returns the knitted suit order, or None.
    """
    if int(counts.sum()) != 14 or int(counts.max()) != 1:
        return None
    suited = set(int(i) for i in np.flatnonzero(counts[:27]))
    for order in _knitted_orders():
        if suited <= set(_knitted_indices(order)):
            return order
    return None


# ========== Standard shape ==========

def _standard(
    counts: np.ndarray,
    sets_needed: int,
    pair: Optional[Tile],
    current: List[Meld],
    budget: _StepBudget,
) -> Iterator[Tuple[Tuple[Meld, ...], Tile]]:
    """Backtracking over the lowest remaining kind; mutates and restores counts"""
    budget.tick()

    nonzero = np.flatnonzero(counts)
    if nonzero.size == 0:
        if sets_needed == 0 and pair is not None:
            yield tuple(current), pair
        return

    i = int(nonzero[0])
    tile = Tile.from_index(i)

    # Try chow
    if sets_needed > 0 and i < 27 and i % 9 <= 6 and counts[i + 1] > 0 and counts[i + 2] > 0:
        counts[i:i + 3] -= 1
        current.append(Meld(MeldType.CHOW, tile))
        yield from _standard(counts, sets_needed - 1, pair, current, budget)
        current.pop()
        counts[i:i + 3] += 1

    # Try pung
    if sets_needed > 0 and counts[i] >= 3:
        counts[i] -= 3
        current.append(Meld(MeldType.PUNG, tile))
        yield from _standard(counts, sets_needed - 1, pair, current, budget)
        current.pop()
        counts[i] += 3

    # Try pair
    if pair is None and counts[i] >= 2:
        counts[i] -= 2
        yield from _standard(counts, sets_needed, tile, current, budget)
        counts[i] += 2


def standard_decompositions(
    counts: np.ndarray,
    sets_needed: int = 4,
    max_steps: int = DEFAULT_RULES.max_search_steps,
) -> Iterator[Tuple[Tuple[Meld, ...], Tile]]:
    """
    Every (sets, pair) partition of a count array.

    The array is copied; the caller's counts are left untouched.
    """
    if int(counts.sum()) != sets_needed * 3 + 2:
        return iter(())
    work = np.array(counts, dtype=np.int8, copy=True)
    return _standard(work, sets_needed, None, [], _StepBudget(max_steps))


# ========== Enumeration ==========

def _free_counts(hand: Hand) -> Optional[np.ndarray]:
    """Hand counts with three tiles of every declared kong removed"""
    counts = hand.counts()
    for kong in hand.kongs:
        idx = kong.tile.tile_index
        if counts[idx] < 3:
            return None
        counts[idx] -= 3
    return counts


def _enumerate(hand: Hand, rules: RuleSet) -> Iterator[Decomposition]:
    counts = hand.counts()
    fixed = tuple(k.to_meld() for k in hand.kongs)

    if not hand.kongs:
        if detect_thirteen_orphans(counts):
            yield Decomposition(HandShape.THIRTEEN_ORPHANS)

        if detect_seven_pairs(counts, rules.seven_pairs_allow_four_of_a_kind):
            pairs = []
            for idx in np.flatnonzero(counts):
                pairs.extend([Meld(MeldType.PAIR, Tile.from_index(int(idx)))] * (int(counts[idx]) // 2))
            yield Decomposition(HandShape.SEVEN_PAIRS, melds=tuple(pairs))
            if rules.seven_pairs_exclusive:
                return

        order = detect_honors_and_knitted(counts)
        if order is not None:
            yield Decomposition(HandShape.HONORS_AND_KNITTED, knitted=order)

    free = _free_counts(hand)
    if free is None:
        return
    sets_needed = 4 - len(fixed)
    budget = _StepBudget(rules.max_search_steps)

    if int(free.sum()) == sets_needed * 3 + 2:
        for melds, pair in _standard(np.array(free, copy=True), sets_needed, None, [], budget):
            yield Decomposition(HandShape.STANDARD, melds=fixed + melds, pair=pair)

    # Knitted straight leaves room for exactly one more set
    if len(fixed) <= 1:
        for order in _knitted_orders():
            indices = _knitted_indices(order)
            if all(free[i] > 0 for i in indices):
                rest = np.array(free, copy=True)
                rest[indices] -= 1
                if int(rest.sum()) != (1 - len(fixed)) * 3 + 2:
                    continue
                for melds, pair in _standard(rest, 1 - len(fixed), None, [], budget):
                    yield Decomposition(
                        HandShape.KNITTED_STRAIGHT, melds=fixed + melds, pair=pair, knitted=order,
                    )


def enumerate_decompositions(hand: Hand, rules: RuleSet = DEFAULT_RULES) -> Iterator[Decomposition]:
    """
    Lazily yield every decomposition of a 14-tile hand, without repeats.

    Raises SearchLimitExceeded if the search runs past rules.max_search_steps.
    """
    if not isinstance(hand, Hand):
        raise TypeError(f"Expected Hand, got {type(hand).__name__}")
    if hand.tile_count != 14:
        return
    seen = set()
    for dec in _enumerate(hand, rules):
        key = dec.key()
        if key in seen:
            continue
        seen.add(key)
        logger.debug(f"Decomposition: {dec}")
        yield dec


def is_complete(hand: Hand, rules: RuleSet = DEFAULT_RULES) -> bool:
    """Whether a 14-tile hand has at least one winning decomposition"""
    return next(enumerate_decompositions(hand, rules), None) is not None


def find_waits(hand: Hand, rules: RuleSet = DEFAULT_RULES) -> List[Tile]:
    """Tile kinds that would complete a 13-tile hand"""
    if not isinstance(hand, Hand):
        raise TypeError(f"Expected Hand, got {type(hand).__name__}")
    if hand.tile_count != 13:
        return []
    physical = hand.physical_counts()
    waits = []
    for idx in range(NUM_TILE_TYPES):
        if physical[idx] >= rules.max_tile_copies:
            continue
        tile = Tile.from_index(idx)
        if is_complete(hand.with_tile(tile), rules):
            waits.append(tile)
    return waits


def _count_error(hand: Hand, rules: RuleSet) -> Optional[str]:
    if hand.tile_count not in (13, 14):
        return (
            f"tile count invalid: hand must have 13 or 14 tiles (excluding flowers), "
            f"found {hand.tile_count}"
        )
    physical = hand.physical_counts()
    if int(physical.max()) > rules.max_tile_copies:
        tile = Tile.from_index(int(np.argmax(physical)))
        return f"tile count invalid: {tile} appears more than {rules.max_tile_copies} times"
    if hand.flower_count > rules.max_flowers:
        return f"tile count invalid: more than {rules.max_flowers} flowers"
    if hand.kongs and not rules.allow_kongs:
        return "kongs are not allowed by this rule set"
    for kong in hand.kongs:
        if hand.tiles.count(kong.tile) < 3:
            return f"declared kong of {kong.tile} is not in the hand"
    return None


def is_valid_hand(hand: Hand, rules: RuleSet = DEFAULT_RULES) -> ValidationResult:
    """
    Validate a hand and return its first decomposition.

    Never raises for a well-formed Hand; passing anything else is a
    programming error and raises TypeError.
    """
    if not isinstance(hand, Hand):
        raise TypeError(f"Expected Hand, got {type(hand).__name__}")

    error = _count_error(hand, rules)
    if error is not None:
        return ValidationResult(is_valid=False, error=error)

    if hand.tile_count == 13:
        try:
            waits = find_waits(hand, rules)
        except SearchLimitExceeded:
            return ValidationResult(is_valid=False, error="hand too complex to decompose")
        if waits:
            names = " ".join(t.code for t in waits)
            error = f"hand is waiting: needs one of {names}"
        else:
            error = "hand is not waiting on any tile"
        return ValidationResult(is_valid=False, error=error, waits=waits)

    try:
        dec = next(enumerate_decompositions(hand, rules), None)
    except SearchLimitExceeded as e:
        logger.warning(f"Validation aborted: {e}")
        return ValidationResult(is_valid=False, error="hand too complex to decompose")

    if dec is None:
        return ValidationResult(is_valid=False, error="no valid meld decomposition found")

    if dec.is_special:
        return ValidationResult(
            is_valid=True,
            decomposition=dec,
            is_special_hand=True,
            special_hand_type=dec.shape.value,
        )

    return ValidationResult(
        is_valid=True,
        melds=list(dec.melds) + [Meld(MeldType.PAIR, dec.pair)],
        decomposition=dec,
        is_special_hand=False,
    )
