"""
Tests for fan detection and exclusion resolution
"""

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from mcr_calculator.tiles import char, dot, EAST, WindType
from mcr_calculator.melds import HandShape, DeclaredKong
from mcr_calculator.hand import Hand
from mcr_calculator.fans import Fan, FanSpec, FanCatalog, CatalogError, DEFAULT_CATALOG
from mcr_calculator.detector import FanDetector, Situational
from mcr_calculator.validator import enumerate_decompositions


SHIFTED_PUNGS = "1p 1p 1p 2p 2p 2p 3p 3p 3p 4p 4p 4p 5p 5p"
AMBIGUOUS = "1m 1m 1m 2m 2m 2m 3m 3m 3m 7p 8p 9p 5s 5s"
STRAIGHT = "1m 2m 3m 4m 5m 6m 7m 8m 9m 1p 1p 1p E E"
WIND_PUNGS = "E E E S S S 1m 2m 3m 4m 5m 6m 9p 9p"
PLAIN = "2m 3m 4m 5s 6s 7s 3p 4p 5p 8p 8p 8p RD RD"

SELF_DRAW = Situational(is_concealed=True, is_self_draw=True)
DISCARD = Situational(is_concealed=True, is_self_draw=False)
MELDED_DISCARD = Situational(is_concealed=False, is_self_draw=False)


@pytest.fixture
def detector():
    return FanDetector()


def decompositions(text: str):
    hand = Hand.from_string(text)
    return hand, list(enumerate_decompositions(hand))


def reading(text: str, chow_count: int):
    hand, decs = decompositions(text)
    return hand, next(d for d in decs if d.chow_count == chow_count)


class TestDetection:
    """Test fan predicates on concrete hands"""

    def test_four_pure_shifted_pungs(self, detector):
        """Four shifted pungs of dots, self-drawn"""
        hand, dec = reading(SHIFTED_PUNGS, 0)
        fans = detector.detect_fans(hand, dec, SELF_DRAW)
        assert fans == [
            "fourConcealedPungs",
            "fourPureShiftedPungs",
            "fullFlush",
            "reversibleTiles",
            "fullyConcealedHand",
            "pungOfTerminalsOrHonors",
        ]
        assert not any(f in fans for f in ("allChows", "pureDoubleChow", "pureTripleChow"))

    def test_pung_reading(self, detector):
        hand, dec = reading(AMBIGUOUS, 1)
        fans = detector.detect_fans(hand, dec, DISCARD)
        assert fans == [
            "pureShiftedPungs",
            "threeConcealedPungs",
            "concealedHand",
            "pungOfTerminalsOrHonors",
            "noHonors",
        ]

    def test_chow_reading(self, detector):
        hand, dec = reading(AMBIGUOUS, 4)
        fans = detector.detect_fans(hand, dec, DISCARD)
        assert fans == ["pureTripleChow", "concealedHand", "allChows"]

    def test_seven_pairs(self, detector):
        hand, decs = decompositions("1m 1m 3m 3m 5s 5s 7s 7s 2p 2p E E RD RD")
        fans = detector.detect_fans(hand, decs[0], DISCARD)
        assert "sevenPairs" in fans
        assert "concealedHand" not in fans

    def test_seven_shifted_pairs(self, detector):
        hand, decs = decompositions("2s 2s 3s 3s 4s 4s 5s 5s 6s 6s 7s 7s 8s 8s")
        pairs = next(d for d in decs if d.shape == HandShape.SEVEN_PAIRS)
        fans = detector.detect_fans(hand, pairs, DISCARD)
        assert fans[0] == "sevenShiftedPairs"
        assert "sevenPairs" not in fans
        assert "fullFlush" not in fans

    def test_thirteen_orphans(self, detector):
        hand, decs = decompositions("1m 9m 1s 9s 1p 9p E S W N RD GD WD WD")
        fans = detector.detect_fans(hand, decs[0], SELF_DRAW)
        assert fans[0] == "thirteenOrphans"
        assert "allTypes" not in fans
        assert "allTerminalsAndHonors" not in fans

    def test_nine_gates(self, detector):
        hand, decs = decompositions("1m 1m 1m 2m 3m 4m 5m 6m 7m 8m 9m 9m 9m 5m")
        for dec in decs:
            fans = detector.detect_fans(hand, dec, DISCARD)
            assert fans[0] == "nineGates"
            assert "fullFlush" not in fans
            assert "concealedHand" not in fans

    def test_nine_gates_needs_concealed(self, detector):
        hand, decs = decompositions("1m 1m 1m 2m 3m 4m 5m 6m 7m 8m 9m 9m 9m 5m")
        assert "nineGates" not in detector.detect_fans(hand, decs[0], MELDED_DISCARD)

    def test_pure_straight(self, detector):
        hand, decs = decompositions(STRAIGHT)
        fans = detector.detect_fans(hand, decs[0], DISCARD)
        assert "pureStraight" in fans
        assert "shortStraight" not in fans
        assert "twoTerminalChows" not in fans

    def test_chicken_hand(self, detector):
        hand, decs = decompositions(PLAIN)
        assert detector.detect_fans(hand, decs[0], MELDED_DISCARD) == ["chickenHand"]

    def test_knitted_straight(self, detector):
        hand, decs = decompositions("1m 4m 7m 2s 5s 8s 3p 6p 9p E E E RD RD")
        fans = detector.detect_fans(hand, decs[0], DISCARD)
        assert "knittedStraight" in fans

    def test_greater_honors_and_knitted(self, detector):
        hand, decs = decompositions("1m 4m 7m 2s 5s 8s 3p E S W N RD GD WD")
        fans = detector.detect_fans(hand, decs[0], DISCARD)
        assert fans[0] == "greaterHonorsKnitted"
        assert "lesserHonorsKnitted" not in fans

    def test_concealed_kong(self, detector):
        hand = Hand.from_string(
            "5p 5p 5p 1m 2m 3m 4m 5m 6m 7m 8m 9m E E",
            kongs=[DeclaredKong(dot(5), concealed=True)],
        )
        dec = next(enumerate_decompositions(hand))
        fans = detector.detect_fans(hand, dec, SELF_DRAW)
        assert "concealedKong" in fans
        assert "meldedKong" not in fans


class TestWindPungs:
    """Prevalent and seat wind flags"""

    def test_flag_claims_wind_pung(self, detector):
        hand, decs = decompositions(WIND_PUNGS)
        sit = Situational(prevalent_wind_pung_present=True, prevalent_wind=WindType.EAST)
        fans = detector.detect_fans(hand, decs[0], sit)
        assert "prevalentWindPung" in fans
        # The south pung is still an honor pung
        assert "pungOfTerminalsOrHonors" in fans

    def test_both_winds_claimed(self, detector):
        hand, decs = decompositions(WIND_PUNGS)
        sit = Situational(
            prevalent_wind_pung_present=True, seat_wind_pung_present=True,
            prevalent_wind=WindType.EAST, seat_wind=WindType.SOUTH,
        )
        fans = detector.detect_fans(hand, decs[0], sit)
        assert "prevalentWindPung" in fans
        assert "seatWindPung" in fans
        assert "pungOfTerminalsOrHonors" not in fans

    def test_unnamed_flag(self, detector):
        hand, decs = decompositions(WIND_PUNGS)
        fans = detector.detect_fans(hand, decs[0], Situational(seat_wind_pung_present=True))
        assert "seatWindPung" in fans
        assert "prevalentWindPung" not in fans

    def test_flag_without_wind_pung(self, detector):
        hand, decs = decompositions(STRAIGHT)
        sit = Situational(prevalent_wind_pung_present=True)
        assert "prevalentWindPung" not in detector.detect_fans(hand, decs[0], sit)

    def test_named_wind_missing(self, detector):
        hand, decs = decompositions(WIND_PUNGS)
        sit = Situational(prevalent_wind=WindType.NORTH)
        assert "prevalentWindPung" not in detector.detect_fans(hand, decs[0], sit)


class TestWaitFans:
    """Edge, closed and single waits"""

    def test_single_wait(self, detector):
        hand, decs = decompositions(STRAIGHT)
        sit = Situational(winning_tile=EAST)
        assert "singleWait" in detector.detect_fans(hand, decs[0], sit)

    def test_edge_wait(self, detector):
        hand, decs = decompositions(STRAIGHT)
        sit = Situational(winning_tile=char(7))
        fans = detector.detect_fans(hand, decs[0], sit)
        assert "edgeWait" in fans
        assert "closedWait" not in fans

    def test_closed_wait(self, detector):
        hand, decs = decompositions(STRAIGHT)
        sit = Situational(winning_tile=char(5))
        assert "closedWait" in detector.detect_fans(hand, decs[0], sit)

    def test_no_wait_fan_without_winning_tile(self, detector):
        hand, decs = decompositions(STRAIGHT)
        fans = detector.detect_fans(hand, decs[0], DISCARD)
        assert not {"edgeWait", "closedWait", "singleWait"} & set(fans)

    def test_multi_wait_scores_nothing(self, detector):
        """Winning on 4m with a 4m-7m wait is not a single wait"""
        hand, decs = decompositions(STRAIGHT)
        sit = Situational(winning_tile=char(4))
        fans = detector.detect_fans(hand, decs[0], sit)
        assert not {"edgeWait", "closedWait", "singleWait"} & set(fans)


class TestResolution:
    """Greedy and exhaustive exclusion"""

    def test_implied_fan_dropped(self, detector):
        assert detector.resolve(["allPungs", "bigFourWinds"]) == ["bigFourWinds"]

    def test_incompatible_fan_dropped(self, detector):
        assert detector.resolve(["selfDrawn", "concealedHand"]) == ["concealedHand"]

    def test_resolve_orders_by_priority(self, detector):
        assert detector.resolve(["noHonors", "halfFlush", "dragonPung"]) == [
            "halfFlush", "dragonPung", "noHonors",
        ]

    def test_best_subset_beats_greedy(self):
        catalog = FanCatalog.from_specs([
            FanSpec("allPungs", "All Pungs", "碰碰和", 10, "x", ["dragonPung", "seatWindPung"]),
            FanSpec("dragonPung", "Dragon Pung", "箭刻", 6, "x"),
            FanSpec("seatWindPung", "Seat Wind Pung", "门风刻", 6, "x"),
        ])
        detector = FanDetector(catalog)
        candidates = ["allPungs", "dragonPung", "seatWindPung"]
        assert detector.resolve(candidates) == ["allPungs"]
        assert detector.best_subset(candidates) == ["dragonPung", "seatWindPung"]

    def test_best_subset_prefers_greedy_on_tie(self, detector):
        assert detector.best_subset(["allPungs", "bigFourWinds"]) == ["bigFourWinds"]

    def test_missing_predicate(self):
        with pytest.raises(CatalogError):
            FanDetector(FanCatalog([Fan("mysteryFan", "Mystery", "谜", 5, "Special")]))

    def test_reduced_catalog(self):
        detector = FanDetector(DEFAULT_CATALOG.subset(["allPungs", "selfDrawn"]))
        hand, dec = reading(SHIFTED_PUNGS, 0)
        assert detector.detect_fans(hand, dec, SELF_DRAW) == ["allPungs", "selfDrawn"]


class TestInvariants:
    """Determinism and redundancy-free results"""

    HANDS = [SHIFTED_PUNGS, AMBIGUOUS, STRAIGHT, WIND_PUNGS, PLAIN,
             "1m 9m 1s 9s 1p 9p E S W N RD GD WD WD",
             "2s 2s 3s 3s 4s 4s 5s 5s 6s 6s 7s 7s 8s 8s"]
    SITUATIONS = [SELF_DRAW, DISCARD, MELDED_DISCARD,
                  Situational(prevalent_wind_pung_present=True, seat_wind_pung_present=True)]

    def test_idempotence(self, detector):
        for text in self.HANDS:
            hand, decs = decompositions(text)
            for dec in decs:
                for sit in self.SITUATIONS:
                    assert detector.detect_fans(hand, dec, sit) == detector.detect_fans(hand, dec, sit)

    def test_exclusivity(self, detector):
        for text in self.HANDS:
            hand, decs = decompositions(text)
            for dec in decs:
                for sit in self.SITUATIONS:
                    fans = detector.detect_fans(hand, dec, sit)
                    for a in fans:
                        fan = DEFAULT_CATALOG.get(a)
                        for b in fans:
                            assert b not in fan.implied_by
                            assert b not in fan.incompatible_with

    def test_going_out_consistency(self, detector):
        hand, dec = reading(SHIFTED_PUNGS, 0)
        assert "selfDrawn" not in detector.detect_fans(hand, dec, DISCARD)
        assert "concealedHand" not in detector.detect_fans(hand, dec, SELF_DRAW)
