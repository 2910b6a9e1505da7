"""
Tests for the tile input engine and Hand
"""

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from mcr_calculator.tiles import char, bam, dot, EAST, FLOWER, parse_tiles
from mcr_calculator.melds import DeclaredKong
from mcr_calculator.hand import Hand, TileInputEngine, InvalidHandError
from mcr_calculator.rules import NO_FLOWERS_RULES


def fill(engine: TileInputEngine, text: str):
    for tile in parse_tiles(text):
        assert engine.add_tile(tile).success


STANDARD_14 = "1m 2m 3m 4m 5m 6m 7m 8m 9m 1p 1p 1p E E"


class TestTileInputEngine:
    """Test tile-by-tile hand entry"""

    def test_add_tiles(self):
        engine = TileInputEngine()
        result = engine.add_tile(char(1))
        assert result.success
        assert result.error is None
        assert engine.get_tiles() == [char(1)]
        assert engine.get_tile_count(char(1)) == 1

    def test_fifth_copy_rejected(self):
        """A fifth copy is rejected and the buffer is unchanged"""
        engine = TileInputEngine()
        for _ in range(4):
            assert engine.add_tile(dot(5)).success

        before = engine.get_tiles()
        result = engine.add_tile(dot(5))

        assert not result.success
        assert "more than 4" in result.error
        assert engine.get_error_message() == result.error
        assert engine.get_tiles() == before
        assert engine.get_tile_count(dot(5)) == 4

    def test_fifteenth_tile_rejected(self):
        engine = TileInputEngine()
        fill(engine, STANDARD_14)
        result = engine.add_tile(bam(5))
        assert not result.success
        assert "14" in result.error
        assert len(engine.get_non_flower_tiles()) == 14

    def test_flowers_do_not_count(self):
        """Flowers are tracked apart from the 14-tile limit"""
        engine = TileInputEngine()
        fill(engine, STANDARD_14)
        for _ in range(8):
            assert engine.add_tile(FLOWER).success
        assert engine.get_flower_count() == 8
        assert len(engine.get_non_flower_tiles()) == 14

    def test_ninth_flower_rejected(self):
        engine = TileInputEngine()
        for _ in range(8):
            engine.add_tile(FLOWER)
        result = engine.add_tile(FLOWER)
        assert not result.success
        assert engine.get_flower_count() == 8

    def test_no_flower_rules(self):
        engine = TileInputEngine(NO_FLOWERS_RULES)
        assert not engine.add_tile(FLOWER).success

    def test_successful_add_clears_error(self):
        engine = TileInputEngine()
        for _ in range(4):
            engine.add_tile(dot(5))
        engine.add_tile(dot(5))
        assert engine.get_error_message() is not None
        engine.add_tile(dot(6))
        assert engine.get_error_message() is None

    def test_remove_tile_by_index(self):
        engine = TileInputEngine()
        fill(engine, "1m 2m 3m")
        assert engine.remove_tile_by_index(1)
        assert engine.get_tiles() == [char(1), char(3)]
        assert not engine.remove_tile_by_index(5)
        assert not engine.remove_tile_by_index(-1)

    def test_remove_tile(self):
        engine = TileInputEngine()
        fill(engine, "1m 1m E")
        assert engine.remove_tile(char(1))
        assert engine.get_tile_count(char(1)) == 1
        assert not engine.remove_tile(dot(9))

    def test_reset(self):
        engine = TileInputEngine()
        fill(engine, "1m 2m F")
        engine.reset_hand()
        assert engine.get_tiles() == []
        assert engine.get_error_message() is None

    def test_get_state(self):
        engine = TileInputEngine()
        fill(engine, STANDARD_14)
        state = engine.get_state()
        assert state.is_valid
        assert len(state.tiles) == 14
        assert state.error_message is None


class TestValidateAndCreate:
    """Test hand finalization"""

    def test_validate_requires_13_or_14(self):
        engine = TileInputEngine()
        fill(engine, "1m 2m 3m 4m 5m 6m 7m 8m 9m 1p 1p 1p")
        assert not engine.validate_hand()
        assert "13 or 14" in engine.get_error_message()

        engine.add_tile(EAST)
        assert engine.validate_hand()
        assert engine.get_error_message() is None

        engine.add_tile(EAST)
        assert engine.validate_hand()

    def test_tile_count_invariant(self):
        """create_hand succeeds only with 13 or 14 non-flower tiles"""
        tiles = parse_tiles(STANDARD_14)
        engine = TileInputEngine()
        engine.add_tile(FLOWER)
        for n, tile in enumerate(tiles, start=1):
            engine.add_tile(tile)
            if n in (13, 14):
                hand = engine.create_hand()
                assert hand.tile_count == n
            else:
                with pytest.raises(InvalidHandError):
                    engine.create_hand()

    def test_create_hand(self):
        engine = TileInputEngine()
        fill(engine, STANDARD_14 + " F F")
        hand = engine.create_hand()
        assert hand.tile_count == 14
        assert hand.flower_count == 2
        assert hand.is_complete
        assert list(hand.tiles) == sorted(hand.tiles)


class TestKongs:
    """Test declared kongs in the input engine"""

    def test_declare_kong(self):
        engine = TileInputEngine()
        fill(engine, "5p 5p 5p")
        result = engine.declare_kong(dot(5), concealed=True)
        assert result.success
        assert engine.get_tile_count(dot(5)) == 4
        assert engine.get_state().kongs == [DeclaredKong(dot(5), True)]

    def test_kong_blocks_extra_copy(self):
        engine = TileInputEngine()
        fill(engine, "5p 5p 5p")
        engine.declare_kong(dot(5))
        assert not engine.add_tile(dot(5)).success

    def test_kong_needs_three_copies(self):
        engine = TileInputEngine()
        fill(engine, "5p 5p")
        assert not engine.declare_kong(dot(5)).success

    def test_duplicate_kong_rejected(self):
        engine = TileInputEngine()
        fill(engine, "5p 5p 5p")
        engine.declare_kong(dot(5))
        assert not engine.declare_kong(dot(5)).success

    def test_removing_kong_tile_drops_declaration(self):
        engine = TileInputEngine()
        fill(engine, "5p 5p 5p")
        engine.declare_kong(dot(5))
        engine.remove_tile(dot(5))
        assert engine.get_state().kongs == []
        assert engine.get_tile_count(dot(5)) == 2

    def test_create_hand_keeps_kongs(self):
        engine = TileInputEngine()
        fill(engine, "5p 5p 5p 1m 2m 3m 4m 5m 6m 7m 8m 9m E E")
        engine.declare_kong(dot(5))
        hand = engine.create_hand()
        assert hand.kongs == (DeclaredKong(dot(5)),)
        assert hand.physical_counts()[dot(5).tile_index] == 4


class TestHand:
    """Test the frozen Hand record"""

    def test_from_string(self):
        hand = Hand.from_string("E 1m 1m F 9p F")
        assert hand.tiles == (char(1), char(1), dot(9), EAST)
        assert hand.flower_count == 2

    def test_rejects_flower_tiles(self):
        with pytest.raises(ValueError):
            Hand((char(1), FLOWER))

    def test_hand_is_hashable(self):
        a = Hand.from_string(STANDARD_14)
        b = Hand.from_string(" ".join(reversed(STANDARD_14.split())))
        assert a == b
        assert hash(a) == hash(b)

    def test_without_and_with_tile(self):
        hand = Hand.from_string(STANDARD_14)
        smaller = hand.without(EAST)
        assert smaller.tile_count == 13
        assert smaller.with_tile(EAST) == hand
