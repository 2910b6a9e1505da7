"""
Tests for the fan catalog
"""

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from mcr_calculator.fans import Fan, FanSpec, FanCatalog, CatalogError, DEFAULT_CATALOG, MCR_FAN_SPECS


class TestDefaultCatalog:
    """Test the MCR fan table"""

    def test_fan_count(self):
        assert len(DEFAULT_CATALOG) == 80
        assert len(set(DEFAULT_CATALOG.ids)) == 80

    def test_priority_order(self):
        """Iteration is by descending points"""
        points = [f.points for f in DEFAULT_CATALOG]
        assert points == sorted(points, reverse=True)
        assert DEFAULT_CATALOG.ids[0] == "bigFourWinds"
        assert DEFAULT_CATALOG.ids[-1] == "selfDrawn"

    def test_ties_keep_declaration_order(self):
        eights = [f.id for f in DEFAULT_CATALOG if f.points == 88]
        assert eights == [s.id for s in MCR_FAN_SPECS if s.points == 88]

    def test_point_values(self):
        assert DEFAULT_CATALOG.get("bigFourWinds").points == 88
        assert DEFAULT_CATALOG.get("allPungs").points == 6
        assert DEFAULT_CATALOG.get("sevenPairs").points == 24
        assert DEFAULT_CATALOG.get("selfDrawn").points == 1

    def test_excludes_become_implied_by(self):
        assert "bigFourWinds" in DEFAULT_CATALOG.get("allPungs").implied_by
        assert "fullFlush" in DEFAULT_CATALOG.get("halfFlush").implied_by
        assert DEFAULT_CATALOG.get("bigFourWinds").implied_by == frozenset()

    def test_incompatibility_is_symmetric(self):
        for fan in DEFAULT_CATALOG:
            for other in fan.incompatible_with:
                assert fan.id in DEFAULT_CATALOG.get(other).incompatible_with

    def test_implied_by_outranks(self):
        """A fan is only implied by fans worth at least as much"""
        for fan in DEFAULT_CATALOG:
            for other in fan.implied_by:
                assert DEFAULT_CATALOG.get(other).points >= fan.points

    def test_lookup(self):
        assert "allPungs" in DEFAULT_CATALOG
        assert "flowers" not in DEFAULT_CATALOG
        with pytest.raises(KeyError):
            DEFAULT_CATALOG.get("flowers")

    def test_by_name(self):
        assert DEFAULT_CATALOG.by_name("all pungs").id == "allPungs"
        assert DEFAULT_CATALOG.by_name("Thirteen Orphans").id == "thirteenOrphans"
        assert DEFAULT_CATALOG.by_name("no such fan") is None

    def test_going_out_flags(self):
        assert DEFAULT_CATALOG.get("selfDrawn").is_going_out
        assert DEFAULT_CATALOG.get("concealedHand").requires_concealed
        assert not DEFAULT_CATALOG.get("allPungs").is_going_out

    def test_every_fan_has_chinese_name(self):
        assert all(f.chinese_name for f in DEFAULT_CATALOG)


class TestCatalogValidation:
    """Malformed tables fail loudly"""

    def test_duplicate_id(self):
        with pytest.raises(CatalogError):
            FanCatalog([Fan("a", "A", "甲", 1, "x"), Fan("a", "A", "甲", 2, "x")])

    def test_zero_points(self):
        with pytest.raises(CatalogError):
            FanCatalog([Fan("a", "A", "甲", 0, "x")])

    def test_unknown_relation(self):
        with pytest.raises(CatalogError):
            FanCatalog([Fan("a", "A", "甲", 1, "x", implied_by=frozenset({"b"}))])

    def test_self_reference(self):
        with pytest.raises(CatalogError):
            FanCatalog([Fan("a", "A", "甲", 1, "x", incompatible_with=frozenset({"a"}))])

    def test_implied_and_incompatible(self):
        with pytest.raises(CatalogError):
            FanCatalog([
                Fan("a", "A", "甲", 2, "x"),
                Fan("b", "B", "乙", 1, "x", implied_by=frozenset({"a"}), incompatible_with=frozenset({"a"})),
            ])

    def test_excludes_unknown_fan(self):
        with pytest.raises(CatalogError):
            FanCatalog.from_specs([FanSpec("a", "A", "甲", 2, "x", ["missing"])])

    def test_catalog_error_is_value_error(self):
        assert issubclass(CatalogError, ValueError)


class TestSubset:
    """Reduced catalogs"""

    def test_subset_drops_relations(self):
        small = DEFAULT_CATALOG.subset(["allPungs", "halfFlush"])
        assert len(small) == 2
        assert small.get("allPungs").implied_by == frozenset()
        assert small.get("allPungs").incompatible_with == frozenset()

    def test_subset_keeps_internal_relations(self):
        small = DEFAULT_CATALOG.subset(["bigFourWinds", "allPungs"])
        assert small.get("allPungs").implied_by == frozenset({"bigFourWinds"})

    def test_subset_unknown_id(self):
        with pytest.raises(KeyError):
            DEFAULT_CATALOG.subset(["allPungs", "nope"])
