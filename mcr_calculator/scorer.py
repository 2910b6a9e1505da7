"""
MCR Optimal Scorer

A hand can often be read in more than one way (111222333 is three pungs or
three identical chows). The scorer runs fan detection on every
decomposition, keeps the highest total and works out who pays whom.

Total points = fan points + flower points + base points.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .hand import Hand
from .melds import Decomposition
from .fans import Fan, FanCatalog, DEFAULT_CATALOG
from .detector import FanDetector, Situational
from .rules import RuleSet, DEFAULT_RULES
from .validator import enumerate_decompositions, is_valid_hand, SearchLimitExceeded

logger = logging.getLogger(__name__)


# Going-out fans that need a self-drawn winning tile
SELF_DRAW_FANS = frozenset({"selfDrawn", "lastTileDraw", "outWithReplacementTile", "fullyConcealedHand"})

# Going-out fans that need a claimed discard
DISCARD_FANS = frozenset({"lastTileClaim", "robbingTheKong", "meldedHand", "concealedHand"})


@dataclass
class ScoringOutcome:
    """
    Result of scoring a hand.

    Attributes:
        chosen_fans: Fans scored, in catalog priority order
        fan_points: Sum of fan points
        flower_points: Bonus points for flowers
        base_points: Base score every loser pays
        total_points: fan_points + flower_points + base_points
        payouts: Per seat; positive = pays, the winner's entry is minus what they receive
        decomposition: The interpretation that produced the score
        is_valid: False when the hand could not be scored
        error: Why the hand could not be scored
    """
    chosen_fans: List[Fan] = field(default_factory=list)
    fan_points: int = 0
    flower_points: int = 0
    base_points: int = 0
    total_points: int = 0
    payouts: List[int] = field(default_factory=list)
    decomposition: Optional[Decomposition] = None
    is_valid: bool = True
    error: Optional[str] = None

    @property
    def fan_ids(self) -> List[str]:
        return [f.id for f in self.chosen_fans]

    @property
    def winner_gain(self) -> int:
        return -min(self.payouts) if self.payouts else 0


def calculate_payouts(
    total_points: int,
    base_points: int,
    is_self_draw: bool,
    winner: int = 0,
    discarder: Optional[int] = None,
    num_players: int = 4,
) -> List[int]:
    """
    Per-seat payments for a win.

    Self-draw: every other seat pays total_points.
    Discard: the discarder pays total_points, every other loser pays base_points.
    The winner's entry is the negative of the amount received.
    """
    if not 0 <= winner < num_players:
        raise ValueError(f"Winner seat {winner} out of range for {num_players} players")

    payouts = [0] * num_players
    if is_self_draw:
        for seat in range(num_players):
            if seat != winner:
                payouts[seat] = total_points
    else:
        if discarder is None:
            discarder = (winner + 1) % num_players
        if not 0 <= discarder < num_players:
            raise ValueError(f"Discarder seat {discarder} out of range for {num_players} players")
        if discarder == winner:
            raise ValueError("Winner cannot be the discarder")
        for seat in range(num_players):
            if seat == discarder:
                payouts[seat] = total_points
            elif seat != winner:
                payouts[seat] = base_points

    payouts[winner] = -sum(payouts)
    return payouts


class OptimalScorer:
    """
    Picks the highest scoring interpretation of a hand.

    Ties on total are broken by fewest chows, then by enumeration order.
    Results are cached per (hand, situational, winner, discarder).
    """

    def __init__(
        self,
        rules: RuleSet = DEFAULT_RULES,
        catalog: FanCatalog = DEFAULT_CATALOG,
        num_players: Optional[int] = None,
    ):
        self.rules = rules
        self.catalog = catalog
        self.num_players = num_players if num_players is not None else rules.num_players
        self.detector = FanDetector(catalog, rules)
        self._cache: Dict[Tuple, ScoringOutcome] = {}

    def score(
        self,
        hand: Hand,
        situational: Situational = Situational(),
        winner: int = 0,
        discarder: Optional[int] = None,
    ) -> ScoringOutcome:
        """Score a hand; never raises for a well-formed Hand"""
        if not isinstance(hand, Hand):
            raise TypeError(f"Expected Hand, got {type(hand).__name__}")

        key = (hand, situational, winner, discarder)
        if key not in self._cache:
            self._cache[key] = self._score(hand, situational, winner, discarder)
        return self._cache[key]

    def clear_cache(self) -> None:
        self._cache.clear()

    def _score(self, hand: Hand, situational: Situational, winner: int,
               discarder: Optional[int]) -> ScoringOutcome:
        validation = is_valid_hand(hand, self.rules)
        if not validation.is_valid:
            logger.warning(f"Cannot score hand {hand}: {validation.error}")
            return self._no_score(validation.error)

        best: Optional[Tuple[int, int, List[Fan], Decomposition]] = None
        try:
            for dec in enumerate_decompositions(hand, self.rules):
                fans = [self.catalog.get(f) for f in self.detector.detect_fans(hand, dec, situational)]
                points = sum(f.points for f in fans)
                if best is None or points > best[0] or (points == best[0] and dec.chow_count < best[1]):
                    best = (points, dec.chow_count, fans, dec)
        except SearchLimitExceeded as e:
            logger.warning(f"Scoring aborted: {e}")
            return self._no_score("hand too complex to decompose")

        if best is None:
            return self._no_score("no valid meld decomposition found")

        fan_points, _, fans, dec = best
        logger.debug(f"Best reading: {dec} -> {[f.id for f in fans]} ({fan_points})")
        return self._outcome(fans, hand.flower_count, situational.is_self_draw, winner, discarder, dec)

    def _outcome(self, fans: List[Fan], flower_count: int, is_self_draw: bool, winner: int,
                 discarder: Optional[int], dec: Optional[Decomposition] = None) -> ScoringOutcome:
        fan_points = sum(f.points for f in fans)
        flower_points = flower_count * self.rules.flower_points
        total = fan_points + flower_points + self.rules.base_points
        return ScoringOutcome(
            chosen_fans=fans,
            fan_points=fan_points,
            flower_points=flower_points,
            base_points=self.rules.base_points,
            total_points=total,
            payouts=calculate_payouts(
                total, self.rules.base_points, is_self_draw, winner, discarder, self.num_players,
            ),
            decomposition=dec,
        )

    def _no_score(self, error: Optional[str]) -> ScoringOutcome:
        return ScoringOutcome(payouts=[0] * self.num_players, is_valid=False, error=error)

    def score_selected_fans(
        self,
        fan_ids: Iterable[str],
        situational: Situational = Situational(),
        flower_count: int = 0,
        winner: int = 0,
        discarder: Optional[int] = None,
    ) -> ScoringOutcome:
        """
        Score fans the player picked by hand instead of from tiles.

        Going-out fans that contradict the win method are dropped, then the
        selection is resolved like detected fans.
        """
        selected = [self.catalog.get(f) for f in fan_ids]
        candidates = []
        for fan in selected:
            if fan.id in SELF_DRAW_FANS and not situational.is_self_draw:
                continue
            if fan.id in DISCARD_FANS and situational.is_self_draw:
                continue
            if fan.requires_concealed and not situational.is_concealed:
                continue
            if fan.id not in candidates:
                candidates.append(fan.id)

        if self.rules.fan_resolution == "exhaustive":
            accepted = self.detector.best_subset(candidates)
        else:
            accepted = self.detector.resolve(candidates)

        dropped = set(candidates) - set(accepted)
        if dropped:
            logger.debug(f"Dropped selected fans: {sorted(dropped)}")

        fans = [self.catalog.get(f) for f in accepted]
        return self._outcome(fans, flower_count, situational.is_self_draw, winner, discarder)

    def minimum_points_met(self, outcome: ScoringOutcome) -> bool:
        """Whether the hand reaches the fan minimum needed to declare a win (flowers excluded)"""
        return outcome.is_valid and outcome.fan_points >= self.rules.minimum_fan_points
