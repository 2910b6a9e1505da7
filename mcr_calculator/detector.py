"""
MCR Fan Detector

Evaluates every fan in the catalog against one decomposition of a hand and
resolves the hits with the exclusion principle:
- Fans are visited in catalog priority order (descending points)
- A fan implied by an accepted fan is dropped
- A fan incompatible with an accepted fan is dropped
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple
import numpy as np

from .tiles import Tile, TileSuit, WindType, NUMBERED_SUITS
from .melds import Meld, HandShape, Decomposition
from .hand import Hand
from .fans import Fan, FanCatalog, CatalogError, DEFAULT_CATALOG
from .rules import RuleSet, DEFAULT_RULES
from .validator import find_waits, SearchLimitExceeded

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Situational:
    """
    How the hand was won.

    The wind pung flags say a prevalent / seat wind pung is present; when
    prevalent_wind / seat_wind are also given, only a pung of that wind counts.
    """
    is_concealed: bool = True
    is_self_draw: bool = False
    prevalent_wind_pung_present: bool = False
    seat_wind_pung_present: bool = False
    prevalent_wind: Optional[WindType] = None
    seat_wind: Optional[WindType] = None
    winning_tile: Optional[Tile] = None
    is_last_tile: bool = False           # Last tile of the wall
    is_last_of_kind: bool = False        # Fourth tile of its kind, three already visible
    is_kong_replacement: bool = False
    is_robbing_kong: bool = False
    is_fully_melded: bool = False        # Every set claimed, won on a discard


@dataclass
class FanContext:
    """Derived facts about one decomposition, shared by all predicates"""
    hand: Hand
    decomposition: Decomposition
    situational: Situational
    rules: RuleSet = DEFAULT_RULES

    # Computed fields (set during analysis)
    counts: np.ndarray = field(default_factory=lambda: np.zeros(34, dtype=np.int8))
    tiles: List[Tile] = field(default_factory=list)
    chows: List[Meld] = field(default_factory=list)
    pungs: List[Meld] = field(default_factory=list)
    kongs: List[Meld] = field(default_factory=list)
    pair: Optional[Tile] = None
    suits: Set[TileSuit] = field(default_factory=set)
    has_honors: bool = False
    concealed_pungs: int = 0
    claimed_winds: List[Tile] = field(default_factory=list)

    def __post_init__(self):
        self._analyze()

    def _analyze(self):
        """Analyze the hand structure"""
        dec = self.decomposition
        self.counts = self.hand.physical_counts()
        self.tiles = [
            Tile.from_index(int(i))
            for i in np.flatnonzero(self.counts)
            for _ in range(int(self.counts[i]))
        ]
        self.chows = dec.chows
        self.pungs = dec.pungs
        self.kongs = dec.kongs
        self.pair = dec.pair
        self.suits = {t.suit for t in self.tiles if t.is_numbered}
        self.has_honors = any(t.is_honor for t in self.tiles)
        self.concealed_pungs = self._count_concealed_pungs()
        self.claimed_winds = self._claim_wind_pungs()

    def _count_concealed_pungs(self) -> int:
        sit = self.situational
        count = 0
        discard_pung = self._pung_completed_by_discard()
        for meld in self.pungs:
            if meld.is_kong:
                if meld.concealed:
                    count += 1
            elif sit.is_concealed and meld is not discard_pung:
                count += 1
        return count

    def _pung_completed_by_discard(self) -> Optional[Meld]:
        """A discarded winning tile that can only go into a pung makes it exposed"""
        sit = self.situational
        tile = sit.winning_tile
        if sit.is_self_draw or tile is None:
            return None
        if self.pair == tile or any(tile in c.tiles for c in self.chows):
            return None
        for meld in self.pungs:
            if not meld.is_kong and meld.tile == tile:
                return meld
        return None

    def _claim_wind_pungs(self) -> List[Tile]:
        """Wind pungs scored by the prevalent / seat wind fans"""
        sit = self.situational
        wind_pungs = [m.tile for m in self.pungs if m.tile.is_wind]
        claimed = []
        for flag, named in ((sit.prevalent_wind_pung_present, sit.prevalent_wind),
                            (sit.seat_wind_pung_present, sit.seat_wind)):
            tile = self._wind_pung_for(wind_pungs, flag, named, claimed)
            claimed.append(tile)
        return claimed

    @staticmethod
    def _wind_pung_for(wind_pungs: List[Tile], flag: bool, named: Optional[WindType],
                       claimed: List[Tile]) -> Optional[Tile]:
        if named is not None:
            tile = Tile(TileSuit.WINDS, named)
            return tile if tile in wind_pungs else None
        if not flag:
            return None
        for tile in wind_pungs:
            if tile not in claimed:
                return tile
        # Prevalent and seat wind may be the same wind
        return wind_pungs[0] if wind_pungs else None

    # ========== Helpers used by predicates ==========

    @property
    def is_standard(self) -> bool:
        return self.decomposition.shape == HandShape.STANDARD

    @property
    def shape(self) -> HandShape:
        return self.decomposition.shape

    def all_tiles(self, predicate: Callable[[Tile], bool]) -> bool:
        return all(predicate(t) for t in self.tiles)

    def chow_keys(self) -> List[Tuple[TileSuit, int]]:
        return [(m.suit, m.value) for m in self.chows]

    def numbered_pungs(self) -> List[Tuple[TileSuit, int]]:
        return [(m.suit, m.value) for m in self.pungs if m.tile.is_numbered]

    def wind_pung_count(self) -> int:
        return sum(1 for m in self.pungs if m.tile.is_wind)

    def dragon_pung_count(self) -> int:
        return sum(1 for m in self.pungs if m.tile.is_dragon)

    def concealed_kongs(self) -> int:
        return sum(1 for m in self.kongs if m.concealed)

    def melded_kongs(self) -> int:
        return sum(1 for m in self.kongs if not m.concealed)


def _same_suit_runs(keys: Sequence[Tuple[TileSuit, int]], length: int, steps: Sequence[int]) -> bool:
    """length sets of one suit whose values step evenly by one of steps"""
    by_suit: Dict[TileSuit, Set[int]] = {}
    for suit, value in keys:
        by_suit.setdefault(suit, set()).add(value)
    for values in by_suit.values():
        for start in values:
            for step in steps:
                if all(start + step * k in values for k in range(length)):
                    return True
    return False


def _mixed_runs(keys: Sequence[Tuple[TileSuit, int]], offsets: Sequence[int]) -> bool:
    """Three sets in three different suits with values start + offsets"""
    present = set(keys)
    for start in range(1, 10):
        for s0, s1, s2 in _suit_orders():
            wanted = ((s0, start + offsets[0]), (s1, start + offsets[1]), (s2, start + offsets[2]))
            if all(w in present for w in wanted):
                return True
    return False


def _suit_orders():
    a, b, c = NUMBERED_SUITS
    return ((a, b, c), (a, c, b), (b, a, c), (b, c, a), (c, a, b), (c, b, a))


class FanDetector:
    """
    Detects and resolves the fans of one decomposition.

    Every fan in the catalog must have a predicate; detection order is the
    catalog's priority order, so results are deterministic.
    """

    def __init__(self, catalog: FanCatalog = DEFAULT_CATALOG, rules: RuleSet = DEFAULT_RULES):
        self.catalog = catalog
        self.rules = rules
        self._predicates = self._create_predicates()
        missing = [f.id for f in catalog if f.id not in self._predicates]
        if missing:
            raise CatalogError(f"No predicate for fans: {missing}")
        self._wait_cache: Dict[Tuple[Hand, Tile], int] = {}

    def detect_fans(self, hand: Hand, decomposition: Decomposition, situational: Situational) -> List[str]:
        """Resolved fan ids in catalog priority order"""
        candidates = self.candidate_fans(hand, decomposition, situational)
        if self.rules.fan_resolution == "exhaustive":
            accepted = self.best_subset(candidates)
        else:
            accepted = self.resolve(candidates)

        if not accepted and "chickenHand" in self.catalog:
            accepted = ["chickenHand"]

        logger.debug(f"{decomposition}: candidates={candidates} accepted={accepted}")
        return accepted

    def candidate_fans(self, hand: Hand, decomposition: Decomposition, situational: Situational) -> List[str]:
        """Raw predicate hits, before exclusion"""
        ctx = FanContext(hand, decomposition, situational, self.rules)
        hits = []
        for fan in self.catalog:
            if fan.requires_concealed and not situational.is_concealed:
                continue
            if self._predicates[fan.id](ctx):
                hits.append(fan.id)
        return hits

    def _conflicts(self, fan: Fan, accepted: Sequence[str]) -> bool:
        for other_id in accepted:
            if other_id in fan.implied_by or other_id in fan.incompatible_with:
                return True
            if fan.id in self.catalog.get(other_id).incompatible_with:
                return True
        return False

    def resolve(self, candidates: Sequence[str]) -> List[str]:
        """Greedy single pass in priority order"""
        accepted: List[str] = []
        for fan_id in sorted(candidates, key=self.catalog.rank):
            fan = self.catalog.get(fan_id)
            if self._conflicts(fan, accepted):
                continue
            accepted.append(fan_id)
        return accepted

    def best_subset(self, candidates: Sequence[str]) -> List[str]:
        """
        Highest-scoring consistent subset of candidates.

        Backtracks over the candidates in priority order, taking each fan
        before trying without it. Only a strictly better total replaces the
        best found, so ties keep the greedy choice.
        """
        fans = [self.catalog.get(f) for f in sorted(candidates, key=self.catalog.rank)]
        suffix = [0] * (len(fans) + 1)
        for i in range(len(fans) - 1, -1, -1):
            suffix[i] = suffix[i + 1] + fans[i].points

        best_ids: List[str] = []
        best_points = -1

        def search(i: int, chosen: List[str], points: int):
            nonlocal best_ids, best_points
            if points + suffix[i] <= best_points:
                return
            if i == len(fans):
                best_ids, best_points = list(chosen), points
                return
            fan = fans[i]
            if not self._conflicts(fan, chosen):
                chosen.append(fan.id)
                search(i + 1, chosen, points + fan.points)
                chosen.pop()
            search(i + 1, chosen, points)

        search(0, [], 0)
        return best_ids

    def _create_predicates(self) -> Dict[str, Callable[[FanContext], bool]]:
        return {
            # 88
            "bigFourWinds": self._check_big_four_winds,
            "bigThreeDragons": self._check_big_three_dragons,
            "allGreen": self._check_all_green,
            "nineGates": self._check_nine_gates,
            "fourKongs": self._check_four_kongs,
            "sevenShiftedPairs": self._check_seven_shifted_pairs,
            "thirteenOrphans": self._check_thirteen_orphans,
            # 64
            "allTerminals": self._check_all_terminals,
            "littleFourWinds": self._check_little_four_winds,
            "littleThreeDragons": self._check_little_three_dragons,
            "allHonors": self._check_all_honors,
            "fourConcealedPungs": self._check_four_concealed_pungs,
            "pureTerminalChows": self._check_pure_terminal_chows,
            # 48
            "quadrupleChow": self._check_quadruple_chow,
            "fourPureShiftedPungs": self._check_four_pure_shifted_pungs,
            # 32
            "fourShiftedChows": self._check_four_shifted_chows,
            "threeKongs": self._check_three_kongs,
            "allTerminalsAndHonors": self._check_all_terminals_and_honors,
            # 24
            "sevenPairs": self._check_seven_pairs,
            "greaterHonorsKnitted": self._check_greater_honors_knitted,
            "allEvenPungs": self._check_all_even_pungs,
            "fullFlush": self._check_full_flush,
            "pureTripleChow": self._check_pure_triple_chow,
            "pureShiftedPungs": self._check_pure_shifted_pungs,
            "upperTiles": self._check_upper_tiles,
            "middleTiles": self._check_middle_tiles,
            "lowerTiles": self._check_lower_tiles,
            # 16
            "pureStraight": self._check_pure_straight,
            "threeSuitedTerminalChows": self._check_three_suited_terminal_chows,
            "pureShiftedChows": self._check_pure_shifted_chows,
            "allFives": self._check_all_fives,
            "triplePung": self._check_triple_pung,
            "threeConcealedPungs": self._check_three_concealed_pungs,
            # 12
            "lesserHonorsKnitted": self._check_lesser_honors_knitted,
            "knittedStraight": self._check_knitted_straight,
            "upperFour": self._check_upper_four,
            "lowerFour": self._check_lower_four,
            "bigThreeWinds": self._check_big_three_winds,
            # 8
            "mixedStraight": self._check_mixed_straight,
            "reversibleTiles": self._check_reversible_tiles,
            "mixedTripleChow": self._check_mixed_triple_chow,
            "mixedShiftedPungs": self._check_mixed_shifted_pungs,
            "chickenHand": self._check_chicken_hand,
            "lastTileDraw": self._check_last_tile_draw,
            "lastTileClaim": self._check_last_tile_claim,
            "outWithReplacementTile": self._check_out_with_replacement_tile,
            "robbingTheKong": self._check_robbing_the_kong,
            "twoConcealedKongs": self._check_two_concealed_kongs,
            # 6
            "allPungs": self._check_all_pungs,
            "halfFlush": self._check_half_flush,
            "mixedShiftedChows": self._check_mixed_shifted_chows,
            "allTypes": self._check_all_types,
            "meldedHand": self._check_melded_hand,
            "twoDragonPungs": self._check_two_dragon_pungs,
            # 4
            "outsideHand": self._check_outside_hand,
            "fullyConcealedHand": self._check_fully_concealed_hand,
            "twoKongs": self._check_two_kongs,
            "lastTile": self._check_last_tile,
            # 2
            "dragonPung": self._check_dragon_pung,
            "prevalentWindPung": self._check_prevalent_wind_pung,
            "seatWindPung": self._check_seat_wind_pung,
            "concealedHand": self._check_concealed_hand,
            "allChows": self._check_all_chows,
            "tileHog": self._check_tile_hog,
            "doublePung": self._check_double_pung,
            "twoConcealedPungs": self._check_two_concealed_pungs,
            "concealedKong": self._check_concealed_kong,
            "allSimples": self._check_all_simples,
            # 1
            "pureDoubleChow": self._check_pure_double_chow,
            "mixedDoubleChow": self._check_mixed_double_chow,
            "shortStraight": self._check_short_straight,
            "twoTerminalChows": self._check_two_terminal_chows,
            "pungOfTerminalsOrHonors": self._check_pung_of_terminals_or_honors,
            "meldedKong": self._check_melded_kong,
            "oneVoidedSuit": self._check_one_voided_suit,
            "noHonors": self._check_no_honors,
            "edgeWait": self._check_edge_wait,
            "closedWait": self._check_closed_wait,
            "singleWait": self._check_single_wait,
            "selfDrawn": self._check_self_drawn,
        }

    # ========== 88 Point Checks ==========

    def _check_big_four_winds(self, ctx: FanContext) -> bool:
        return ctx.wind_pung_count() == 4

    def _check_big_three_dragons(self, ctx: FanContext) -> bool:
        return ctx.dragon_pung_count() == 3

    def _check_all_green(self, ctx: FanContext) -> bool:
        return ctx.all_tiles(lambda t: t.is_green)

    def _check_nine_gates(self, ctx: FanContext) -> bool:
        """1112345678999 in one suit plus any tile of that suit"""
        if ctx.kongs or ctx.has_honors or len(ctx.suits) != 1:
            return False
        suit = next(iter(ctx.suits))
        start = Tile(suit, 1).tile_index
        extra = ctx.counts[start:start + 9] - np.array([3, 1, 1, 1, 1, 1, 1, 1, 3])
        return bool((extra >= 0).all()) and int(extra.sum()) == 1

    def _check_four_kongs(self, ctx: FanContext) -> bool:
        return len(ctx.kongs) == 4

    def _check_seven_shifted_pairs(self, ctx: FanContext) -> bool:
        if ctx.shape != HandShape.SEVEN_PAIRS:
            return False
        kinds = sorted({m.tile for m in ctx.decomposition.melds})
        if len(kinds) != 7 or not all(t.is_numbered for t in kinds):
            return False
        if len({t.suit for t in kinds}) != 1:
            return False
        return kinds[-1].value - kinds[0].value == 6

    def _check_thirteen_orphans(self, ctx: FanContext) -> bool:
        return ctx.shape == HandShape.THIRTEEN_ORPHANS

    # ========== 64 Point Checks ==========

    def _check_all_terminals(self, ctx: FanContext) -> bool:
        return ctx.all_tiles(lambda t: t.is_terminal)

    def _check_little_four_winds(self, ctx: FanContext) -> bool:
        return ctx.wind_pung_count() == 3 and ctx.pair is not None and ctx.pair.is_wind

    def _check_little_three_dragons(self, ctx: FanContext) -> bool:
        return ctx.dragon_pung_count() == 2 and ctx.pair is not None and ctx.pair.is_dragon

    def _check_all_honors(self, ctx: FanContext) -> bool:
        return ctx.all_tiles(lambda t: t.is_honor)

    def _check_four_concealed_pungs(self, ctx: FanContext) -> bool:
        return ctx.concealed_pungs == 4

    def _check_pure_terminal_chows(self, ctx: FanContext) -> bool:
        """Two 123 and two 789 chows in one suit with a pair of 5"""
        if not ctx.is_standard or len(ctx.chows) != 4 or ctx.pair is None:
            return False
        suit = ctx.pair.suit
        if ctx.pair.value != 5 or not ctx.pair.is_numbered:
            return False
        return sorted(ctx.chow_keys()) == [(suit, 1), (suit, 1), (suit, 7), (suit, 7)]

    # ========== 48 Point Checks ==========

    def _check_quadruple_chow(self, ctx: FanContext) -> bool:
        keys = ctx.chow_keys()
        return len(keys) == 4 and len(set(keys)) == 1

    def _check_four_pure_shifted_pungs(self, ctx: FanContext) -> bool:
        return _same_suit_runs(ctx.numbered_pungs(), 4, (1,))

    # ========== 32 Point Checks ==========

    def _check_four_shifted_chows(self, ctx: FanContext) -> bool:
        return _same_suit_runs(ctx.chow_keys(), 4, (1, 2))

    def _check_three_kongs(self, ctx: FanContext) -> bool:
        return len(ctx.kongs) == 3

    def _check_all_terminals_and_honors(self, ctx: FanContext) -> bool:
        return ctx.all_tiles(lambda t: t.is_terminal_or_honor)

    # ========== 24 Point Checks ==========

    def _check_seven_pairs(self, ctx: FanContext) -> bool:
        return ctx.shape == HandShape.SEVEN_PAIRS

    def _check_greater_honors_knitted(self, ctx: FanContext) -> bool:
        if ctx.shape != HandShape.HONORS_AND_KNITTED:
            return False
        return sum(1 for t in ctx.tiles if t.is_honor) == 7

    def _check_all_even_pungs(self, ctx: FanContext) -> bool:
        if not self._check_all_pungs(ctx):
            return False
        return ctx.all_tiles(lambda t: t.is_numbered and t.value % 2 == 0)

    def _check_full_flush(self, ctx: FanContext) -> bool:
        return len(ctx.suits) == 1 and not ctx.has_honors

    def _check_pure_triple_chow(self, ctx: FanContext) -> bool:
        counts = Counter(ctx.chow_keys())
        return any(n >= 3 for n in counts.values())

    def _check_pure_shifted_pungs(self, ctx: FanContext) -> bool:
        return _same_suit_runs(ctx.numbered_pungs(), 3, (1,))

    def _check_upper_tiles(self, ctx: FanContext) -> bool:
        return ctx.all_tiles(lambda t: t.is_numbered and t.value >= 7)

    def _check_middle_tiles(self, ctx: FanContext) -> bool:
        return ctx.all_tiles(lambda t: t.is_numbered and 4 <= t.value <= 6)

    def _check_lower_tiles(self, ctx: FanContext) -> bool:
        return ctx.all_tiles(lambda t: t.is_numbered and t.value <= 3)

    # ========== 16 Point Checks ==========

    def _check_pure_straight(self, ctx: FanContext) -> bool:
        keys = set(ctx.chow_keys())
        return any({(s, 1), (s, 4), (s, 7)} <= keys for s in NUMBERED_SUITS)

    def _check_three_suited_terminal_chows(self, ctx: FanContext) -> bool:
        """123 and 789 in two suits, pair of 5 in the third"""
        if not ctx.is_standard or len(ctx.chows) != 4 or ctx.pair is None:
            return False
        if not ctx.pair.is_numbered or ctx.pair.value != 5:
            return False
        others = [s for s in NUMBERED_SUITS if s != ctx.pair.suit]
        wanted = sorted((s, v) for s in others for v in (1, 7))
        return sorted(ctx.chow_keys()) == wanted

    def _check_pure_shifted_chows(self, ctx: FanContext) -> bool:
        return _same_suit_runs(ctx.chow_keys(), 3, (1, 2))

    def _check_all_fives(self, ctx: FanContext) -> bool:
        if not ctx.is_standard:
            return False
        if ctx.pair is None or ctx.pair.value != 5 or not ctx.pair.is_numbered:
            return False
        return all(any(t.is_numbered and t.value == 5 for t in m.tiles) for m in ctx.decomposition.melds)

    def _check_triple_pung(self, ctx: FanContext) -> bool:
        values = Counter(v for _, v in ctx.numbered_pungs())
        return any(n >= 3 for n in values.values())

    def _check_three_concealed_pungs(self, ctx: FanContext) -> bool:
        return ctx.concealed_pungs >= 3

    # ========== 12 Point Checks ==========

    def _check_lesser_honors_knitted(self, ctx: FanContext) -> bool:
        return ctx.shape == HandShape.HONORS_AND_KNITTED

    def _check_knitted_straight(self, ctx: FanContext) -> bool:
        if ctx.shape == HandShape.KNITTED_STRAIGHT:
            return True
        # Honors and knitted tiles holding all nine knitted tiles
        if ctx.shape == HandShape.HONORS_AND_KNITTED:
            return sum(1 for t in ctx.tiles if t.is_numbered) == 9
        return False

    def _check_upper_four(self, ctx: FanContext) -> bool:
        return ctx.all_tiles(lambda t: t.is_numbered and t.value >= 6)

    def _check_lower_four(self, ctx: FanContext) -> bool:
        return ctx.all_tiles(lambda t: t.is_numbered and t.value <= 4)

    def _check_big_three_winds(self, ctx: FanContext) -> bool:
        return ctx.wind_pung_count() == 3

    # ========== 8 Point Checks ==========

    def _check_mixed_straight(self, ctx: FanContext) -> bool:
        return _mixed_runs(ctx.chow_keys(), (0, 3, 6))

    def _check_reversible_tiles(self, ctx: FanContext) -> bool:
        return ctx.all_tiles(lambda t: t.is_reversible)

    def _check_mixed_triple_chow(self, ctx: FanContext) -> bool:
        return _mixed_runs(ctx.chow_keys(), (0, 0, 0))

    def _check_mixed_shifted_pungs(self, ctx: FanContext) -> bool:
        return _mixed_runs(ctx.numbered_pungs(), (0, 1, 2))

    def _check_chicken_hand(self, ctx: FanContext) -> bool:
        """Awarded by detect_fans when nothing else scores"""
        return False

    def _check_last_tile_draw(self, ctx: FanContext) -> bool:
        return ctx.situational.is_last_tile and ctx.situational.is_self_draw

    def _check_last_tile_claim(self, ctx: FanContext) -> bool:
        return ctx.situational.is_last_tile and not ctx.situational.is_self_draw

    def _check_out_with_replacement_tile(self, ctx: FanContext) -> bool:
        return ctx.situational.is_kong_replacement and ctx.situational.is_self_draw

    def _check_robbing_the_kong(self, ctx: FanContext) -> bool:
        return ctx.situational.is_robbing_kong and not ctx.situational.is_self_draw

    def _check_two_concealed_kongs(self, ctx: FanContext) -> bool:
        return ctx.concealed_kongs() >= 2

    # ========== 6 Point Checks ==========

    def _check_all_pungs(self, ctx: FanContext) -> bool:
        return ctx.is_standard and len(ctx.pungs) == 4

    def _check_half_flush(self, ctx: FanContext) -> bool:
        return len(ctx.suits) == 1 and ctx.has_honors

    def _check_mixed_shifted_chows(self, ctx: FanContext) -> bool:
        return _mixed_runs(ctx.chow_keys(), (0, 1, 2))

    def _check_all_types(self, ctx: FanContext) -> bool:
        has_wind = any(t.is_wind for t in ctx.tiles)
        has_dragon = any(t.is_dragon for t in ctx.tiles)
        return len(ctx.suits) == 3 and has_wind and has_dragon

    def _check_melded_hand(self, ctx: FanContext) -> bool:
        sit = ctx.situational
        return sit.is_fully_melded and not sit.is_self_draw and not sit.is_concealed

    def _check_two_dragon_pungs(self, ctx: FanContext) -> bool:
        return ctx.dragon_pung_count() == 2

    # ========== 4 Point Checks ==========

    def _check_outside_hand(self, ctx: FanContext) -> bool:
        if not ctx.is_standard or ctx.pair is None:
            return False
        if not ctx.pair.is_terminal_or_honor:
            return False
        return all(m.contains_terminal_or_honor() for m in ctx.decomposition.melds)

    def _check_fully_concealed_hand(self, ctx: FanContext) -> bool:
        return ctx.situational.is_concealed and ctx.situational.is_self_draw

    def _check_two_kongs(self, ctx: FanContext) -> bool:
        return len(ctx.kongs) >= 2

    def _check_last_tile(self, ctx: FanContext) -> bool:
        return ctx.situational.is_last_of_kind

    # ========== 2 Point Checks ==========

    def _check_dragon_pung(self, ctx: FanContext) -> bool:
        return ctx.dragon_pung_count() >= 1

    def _check_prevalent_wind_pung(self, ctx: FanContext) -> bool:
        return ctx.claimed_winds[0] is not None

    def _check_seat_wind_pung(self, ctx: FanContext) -> bool:
        return ctx.claimed_winds[1] is not None

    def _check_concealed_hand(self, ctx: FanContext) -> bool:
        return ctx.situational.is_concealed and not ctx.situational.is_self_draw

    def _check_all_chows(self, ctx: FanContext) -> bool:
        if not ctx.is_standard or len(ctx.chows) != 4:
            return False
        return ctx.pair is not None and ctx.pair.is_numbered

    def _check_tile_hog(self, ctx: FanContext) -> bool:
        """Four of a kind used without declaring a kong"""
        kong_tiles = {m.tile for m in ctx.kongs}
        return any(
            int(ctx.counts[i]) == 4 and Tile.from_index(int(i)) not in kong_tiles
            for i in np.flatnonzero(ctx.counts)
        )

    def _check_double_pung(self, ctx: FanContext) -> bool:
        values = Counter(v for _, v in ctx.numbered_pungs())
        return any(n >= 2 for n in values.values())

    def _check_two_concealed_pungs(self, ctx: FanContext) -> bool:
        return ctx.concealed_pungs >= 2

    def _check_concealed_kong(self, ctx: FanContext) -> bool:
        return ctx.concealed_kongs() >= 1

    def _check_all_simples(self, ctx: FanContext) -> bool:
        return ctx.all_tiles(lambda t: t.is_simple)

    # ========== 1 Point Checks ==========

    def _check_pure_double_chow(self, ctx: FanContext) -> bool:
        counts = Counter(ctx.chow_keys())
        return any(n >= 2 for n in counts.values())

    def _check_mixed_double_chow(self, ctx: FanContext) -> bool:
        keys = set(ctx.chow_keys())
        return any(
            (a, v) in keys and (b, v) in keys
            for v in range(1, 8)
            for a, b in ((NUMBERED_SUITS[0], NUMBERED_SUITS[1]),
                         (NUMBERED_SUITS[0], NUMBERED_SUITS[2]),
                         (NUMBERED_SUITS[1], NUMBERED_SUITS[2]))
        )

    def _check_short_straight(self, ctx: FanContext) -> bool:
        keys = set(ctx.chow_keys())
        return any((s, v + 3) in keys for s, v in keys)

    def _check_two_terminal_chows(self, ctx: FanContext) -> bool:
        keys = set(ctx.chow_keys())
        return any((s, 1) in keys and (s, 7) in keys for s in NUMBERED_SUITS)

    def _check_pung_of_terminals_or_honors(self, ctx: FanContext) -> bool:
        """Terminal pung, or a wind pung not scored as prevalent / seat wind"""
        unclaimed = list(m.tile for m in ctx.pungs if m.tile.is_wind)
        for tile in ctx.claimed_winds:
            if tile in unclaimed:
                unclaimed.remove(tile)
        return bool(unclaimed) or any(m.tile.is_terminal for m in ctx.pungs)

    def _check_melded_kong(self, ctx: FanContext) -> bool:
        return ctx.melded_kongs() >= 1

    def _check_one_voided_suit(self, ctx: FanContext) -> bool:
        return len(ctx.suits) == 2

    def _check_no_honors(self, ctx: FanContext) -> bool:
        return not ctx.has_honors

    def _check_edge_wait(self, ctx: FanContext) -> bool:
        tile = self._sole_wait(ctx)
        if tile is None:
            return False
        return any(
            (c.value == 1 and tile.value == 3) or (c.value == 7 and tile.value == 7)
            for c in ctx.chows if c.suit == tile.suit
        )

    def _check_closed_wait(self, ctx: FanContext) -> bool:
        tile = self._sole_wait(ctx)
        if tile is None:
            return False
        return any(c.suit == tile.suit and c.value + 1 == tile.value for c in ctx.chows)

    def _check_single_wait(self, ctx: FanContext) -> bool:
        tile = self._sole_wait(ctx)
        return tile is not None and ctx.pair == tile

    def _check_self_drawn(self, ctx: FanContext) -> bool:
        return ctx.situational.is_self_draw

    # ========== Wait analysis ==========

    def _sole_wait(self, ctx: FanContext) -> Optional[Tile]:
        """The winning tile, if the hand was waiting on that kind alone"""
        tile = ctx.situational.winning_tile
        if tile is None or tile not in ctx.hand.tiles:
            return None
        key = (ctx.hand, tile)
        if key not in self._wait_cache:
            try:
                waits = find_waits(ctx.hand.without(tile), self.rules)
            except SearchLimitExceeded:
                logger.warning(f"Wait analysis aborted for {ctx.hand}")
                waits = []
            self._wait_cache[key] = len(waits)
        return tile if self._wait_cache[key] == 1 else None
