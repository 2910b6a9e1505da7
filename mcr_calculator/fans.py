"""
MCR Fan Catalog

All 80 scoring patterns (fans) of Chinese Official Mahjong, from 88 points
down to 1. Flowers are bonus points, not fans.

MCR uses an exclusion principle: a higher-scoring fan excludes the fans it
implies (e.g., Big Four Winds excludes All Pungs). Each entry below lists
the fans it excludes; the catalog inverts those lists into implied_by.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence


class CatalogError(ValueError):
    """Raised for malformed fan tables"""


@dataclass(frozen=True)
class Fan:
    """
    A named scoring pattern.

    Attributes:
        id: Stable identifier shared with the UI layer
        name: English display name
        chinese_name: Chinese display name
        points: Point value (>= 1)
        category: Display grouping
        implied_by: Fans whose presence already accounts for this one
        incompatible_with: Fans that can never be scored together with this one
        requires_concealed: Only scores for a concealed hand
        is_going_out: Depends on how the winning tile was obtained
    """
    id: str
    name: str
    chinese_name: str
    points: int
    category: str
    implied_by: FrozenSet[str] = field(default_factory=frozenset)
    incompatible_with: FrozenSet[str] = field(default_factory=frozenset)
    requires_concealed: bool = False
    is_going_out: bool = False

    def __repr__(self) -> str:
        return f"Fan({self.id}, {self.points})"


@dataclass(frozen=True)
class FanSpec:
    """Catalog source entry: a fan and the fans it excludes"""
    id: str
    name: str
    chinese_name: str
    points: int
    category: str
    excludes: Sequence[str] = ()
    incompatible: Sequence[str] = ()
    requires_concealed: bool = False
    is_going_out: bool = False


class FanCatalog:
    """
    Immutable, ordered fan table.

    Iteration order is the detection priority: descending points, ties
    broken by declaration order.
    """

    def __init__(self, fans: Iterable[Fan]):
        fans = list(fans)
        self._by_id: Dict[str, Fan] = {}
        for fan in fans:
            if fan.id in self._by_id:
                raise CatalogError(f"Duplicate fan id: {fan.id}")
            if fan.points < 1:
                raise CatalogError(f"Fan {fan.id} must be worth at least 1 point")
            self._by_id[fan.id] = fan

        self._validate_relations()

        declared = {fan.id: i for i, fan in enumerate(fans)}
        self._ordered: List[Fan] = sorted(fans, key=lambda f: (-f.points, declared[f.id]))
        self._rank = {fan.id: i for i, fan in enumerate(self._ordered)}

    def _validate_relations(self) -> None:
        for fan in self._by_id.values():
            for rel_name, related in (("implied_by", fan.implied_by),
                                      ("incompatible_with", fan.incompatible_with)):
                if fan.id in related:
                    raise CatalogError(f"Fan {fan.id} references itself in {rel_name}")
                unknown = set(related) - set(self._by_id)
                if unknown:
                    raise CatalogError(f"Fan {fan.id} {rel_name} unknown ids: {sorted(unknown)}")
            both = fan.implied_by & fan.incompatible_with
            if both:
                raise CatalogError(
                    f"Fan {fan.id} is both implied by and incompatible with {sorted(both)}"
                )

    @classmethod
    def from_specs(cls, specs: Iterable[FanSpec]) -> 'FanCatalog':
        """Build a catalog from exclusion lists"""
        specs = list(specs)
        known = {s.id for s in specs}
        implied_by: Dict[str, set] = {s.id: set() for s in specs}
        for spec in specs:
            for excluded in spec.excludes:
                if excluded not in known:
                    raise CatalogError(f"Fan {spec.id} excludes unknown fan {excluded}")
                implied_by[excluded].add(spec.id)

        # Incompatibility is declared once and applies both ways
        incompatible: Dict[str, set] = {s.id: set(s.incompatible) for s in specs}
        for spec in specs:
            for other in spec.incompatible:
                if other in incompatible:
                    incompatible[other].add(spec.id)

        return cls(
            Fan(
                id=s.id,
                name=s.name,
                chinese_name=s.chinese_name,
                points=s.points,
                category=s.category,
                implied_by=frozenset(implied_by[s.id]),
                incompatible_with=frozenset(incompatible[s.id]),
                requires_concealed=s.requires_concealed,
                is_going_out=s.is_going_out,
            )
            for s in specs
        )

    def get(self, fan_id: str) -> Fan:
        try:
            return self._by_id[fan_id]
        except KeyError:
            raise KeyError(f"Unknown fan id: {fan_id}") from None

    def by_name(self, name: str) -> Optional[Fan]:
        """Case-insensitive lookup by English name"""
        wanted = name.strip().lower()
        for fan in self._ordered:
            if fan.name.lower() == wanted:
                return fan
        return None

    def rank(self, fan_id: str) -> int:
        """Position in detection priority order"""
        return self._rank[fan_id]

    def subset(self, fan_ids: Iterable[str]) -> 'FanCatalog':
        """
        A reduced catalog; relations to dropped fans are removed.
        """
        keep = set(fan_ids)
        missing = keep - set(self._by_id)
        if missing:
            raise KeyError(f"Unknown fan ids: {sorted(missing)}")
        return FanCatalog(
            Fan(
                id=f.id,
                name=f.name,
                chinese_name=f.chinese_name,
                points=f.points,
                category=f.category,
                implied_by=f.implied_by & keep,
                incompatible_with=f.incompatible_with & keep,
                requires_concealed=f.requires_concealed,
                is_going_out=f.is_going_out,
            )
            for f in self._by_id.values() if f.id in keep
        )

    @property
    def ids(self) -> List[str]:
        return [f.id for f in self._ordered]

    def __contains__(self, fan_id: str) -> bool:
        return fan_id in self._by_id

    def __iter__(self) -> Iterator[Fan]:
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)

    def __repr__(self) -> str:
        return f"FanCatalog({len(self)} fans)"


MCR_FAN_SPECS = [
    # ========== 88 Points ==========
    FanSpec("bigFourWinds", "Big Four Winds", "大四喜", 88, "Honors",
            ["bigThreeWinds", "littleFourWinds", "allPungs", "prevalentWindPung",
             "seatWindPung", "pungOfTerminalsOrHonors"]),
    FanSpec("bigThreeDragons", "Big Three Dragons", "大三元", 88, "Honors",
            ["littleThreeDragons", "twoDragonPungs", "dragonPung"]),
    FanSpec("allGreen", "All Green", "绿一色", 88, "Suit-Based",
            ["halfFlush", "oneVoidedSuit"]),
    FanSpec("nineGates", "Nine Gates", "九莲宝灯", 88, "Suit-Based",
            ["fullFlush", "concealedHand", "pungOfTerminalsOrHonors", "noHonors",
             "oneVoidedSuit"], requires_concealed=True),
    FanSpec("fourKongs", "Four Kongs", "四杠", 88, "Kong-Based",
            ["threeKongs", "twoKongs", "meldedKong", "allPungs", "singleWait"]),
    FanSpec("sevenShiftedPairs", "Seven Shifted Pairs", "连七对", 88, "Special",
            ["sevenPairs", "fullFlush", "concealedHand", "singleWait", "noHonors",
             "oneVoidedSuit"]),
    FanSpec("thirteenOrphans", "Thirteen Orphans", "十三幺", 88, "Special",
            ["allTypes", "allTerminalsAndHonors", "concealedHand", "singleWait"]),

    # ========== 64 Points ==========
    FanSpec("allTerminals", "All Terminals", "清幺九", 64, "Terminals/Honors",
            ["allTerminalsAndHonors", "allPungs", "outsideHand",
             "pungOfTerminalsOrHonors", "noHonors"]),
    FanSpec("littleFourWinds", "Little Four Winds", "小四喜", 64, "Honors",
            ["bigThreeWinds", "pungOfTerminalsOrHonors"]),
    FanSpec("littleThreeDragons", "Little Three Dragons", "小三元", 64, "Honors",
            ["twoDragonPungs", "dragonPung"]),
    FanSpec("allHonors", "All Honors", "字一色", 64, "Honors",
            ["allTerminalsAndHonors", "allPungs", "outsideHand",
             "pungOfTerminalsOrHonors"]),
    FanSpec("fourConcealedPungs", "Four Concealed Pungs", "四暗刻", 64, "Pung-Based",
            ["threeConcealedPungs", "twoConcealedPungs", "allPungs", "concealedHand"]),
    FanSpec("pureTerminalChows", "Pure Terminal Chows", "一色双龙会", 64, "Chow-Based",
            ["fullFlush", "allChows", "pureDoubleChow", "twoTerminalChows", "noHonors",
             "oneVoidedSuit"]),

    # ========== 48 Points ==========
    FanSpec("quadrupleChow", "Quadruple Chow", "一色四同顺", 48, "Chow-Based",
            ["pureTripleChow", "pureDoubleChow", "tileHog"]),
    FanSpec("fourPureShiftedPungs", "Four Pure Shifted Pungs", "一色四节高", 48, "Pung-Based",
            ["pureShiftedPungs", "allPungs"]),

    # ========== 32 Points ==========
    FanSpec("fourShiftedChows", "Four Shifted Chows", "一色四步高", 32, "Chow-Based",
            ["pureShiftedChows", "shortStraight", "twoTerminalChows"]),
    FanSpec("threeKongs", "Three Kongs", "三杠", 32, "Kong-Based",
            ["twoKongs", "meldedKong"]),
    FanSpec("allTerminalsAndHonors", "All Terminals and Honors", "混幺九", 32, "Terminals/Honors",
            ["allPungs", "outsideHand", "pungOfTerminalsOrHonors"]),

    # ========== 24 Points ==========
    FanSpec("sevenPairs", "Seven Pairs", "七对", 24, "Special",
            ["concealedHand", "singleWait"]),
    FanSpec("greaterHonorsKnitted", "Greater Honors and Knitted Tiles", "七星不靠", 24, "Special",
            ["lesserHonorsKnitted", "allTypes", "concealedHand"]),
    FanSpec("allEvenPungs", "All Even Pungs", "全双刻", 24, "Pung-Based",
            ["allPungs", "allSimples", "noHonors"]),
    FanSpec("fullFlush", "Full Flush", "清一色", 24, "Suit-Based",
            ["halfFlush", "oneVoidedSuit", "noHonors"]),
    FanSpec("pureTripleChow", "Pure Triple Chow", "一色三同顺", 24, "Chow-Based",
            ["pureDoubleChow"]),
    FanSpec("pureShiftedPungs", "Pure Shifted Pungs", "一色三节高", 24, "Pung-Based"),
    FanSpec("upperTiles", "Upper Tiles", "全大", 24, "Number-Based",
            ["upperFour", "noHonors"]),
    FanSpec("middleTiles", "Middle Tiles", "全中", 24, "Number-Based",
            ["allSimples", "noHonors"]),
    FanSpec("lowerTiles", "Lower Tiles", "全小", 24, "Number-Based",
            ["lowerFour", "noHonors"]),

    # ========== 16 Points ==========
    FanSpec("pureStraight", "Pure Straight", "清龙", 16, "Chow-Based",
            ["shortStraight", "twoTerminalChows"]),
    FanSpec("threeSuitedTerminalChows", "Three-Suited Terminal Chows", "三色双龙会", 16, "Chow-Based",
            ["allChows", "mixedDoubleChow", "twoTerminalChows", "noHonors"]),
    FanSpec("pureShiftedChows", "Pure Shifted Chows", "一色三步高", 16, "Chow-Based"),
    FanSpec("allFives", "All Fives", "全带五", 16, "Number-Based",
            ["allSimples", "noHonors"]),
    FanSpec("triplePung", "Triple Pung", "三同刻", 16, "Pung-Based",
            ["doublePung"]),
    FanSpec("threeConcealedPungs", "Three Concealed Pungs", "三暗刻", 16, "Pung-Based",
            ["twoConcealedPungs"]),

    # ========== 12 Points ==========
    FanSpec("lesserHonorsKnitted", "Lesser Honors and Knitted Tiles", "全不靠", 12, "Special",
            ["allTypes", "concealedHand"]),
    FanSpec("knittedStraight", "Knitted Straight", "组合龙", 12, "Special"),
    FanSpec("upperFour", "Upper Four", "大于五", 12, "Number-Based",
            ["noHonors"]),
    FanSpec("lowerFour", "Lower Four", "小于五", 12, "Number-Based",
            ["noHonors"]),
    FanSpec("bigThreeWinds", "Big Three Winds", "大三风", 12, "Honors"),

    # ========== 8 Points ==========
    FanSpec("mixedStraight", "Mixed Straight", "花龙", 8, "Chow-Based"),
    FanSpec("reversibleTiles", "Reversible Tiles", "推不倒", 8, "Suit-Based",
            ["oneVoidedSuit"]),
    FanSpec("mixedTripleChow", "Mixed Triple Chow", "三色三同顺", 8, "Chow-Based",
            ["mixedDoubleChow"]),
    FanSpec("mixedShiftedPungs", "Mixed Shifted Pungs", "三色三节高", 8, "Pung-Based"),
    FanSpec("chickenHand", "Chicken Hand", "无番和", 8, "Special"),
    FanSpec("lastTileDraw", "Last Tile Draw", "妙手回春", 8, "Going Out",
            ["selfDrawn"], incompatible=["lastTileClaim", "robbingTheKong"], is_going_out=True),
    FanSpec("lastTileClaim", "Last Tile Claim", "海底捞月", 8, "Going Out",
            incompatible=["outWithReplacementTile", "selfDrawn"], is_going_out=True),
    FanSpec("outWithReplacementTile", "Out with Replacement Tile", "杠上开花", 8, "Going Out",
            ["selfDrawn"], incompatible=["robbingTheKong"], is_going_out=True),
    FanSpec("robbingTheKong", "Robbing the Kong", "抢杠和", 8, "Going Out",
            ["lastTile"], incompatible=["selfDrawn"], is_going_out=True),
    FanSpec("twoConcealedKongs", "Two Concealed Kongs", "双暗杠", 8, "Kong-Based",
            ["concealedKong", "twoKongs"]),

    # ========== 6 Points ==========
    FanSpec("allPungs", "All Pungs", "碰碰和", 6, "Pung-Based",
            incompatible=["allChows"]),
    FanSpec("halfFlush", "Half Flush", "混一色", 6, "Suit-Based",
            ["oneVoidedSuit"]),
    FanSpec("mixedShiftedChows", "Mixed Shifted Chows", "三色三步高", 6, "Chow-Based"),
    FanSpec("allTypes", "All Types", "五门齐", 6, "Suit-Based"),
    FanSpec("meldedHand", "Melded Hand", "全求人", 6, "Going Out",
            ["singleWait"], incompatible=["concealedHand", "fullyConcealedHand", "selfDrawn"],
            is_going_out=True),
    FanSpec("twoDragonPungs", "Two Dragon Pungs", "双箭刻", 6, "Honors",
            ["dragonPung"]),

    # ========== 4 Points ==========
    FanSpec("outsideHand", "Outside Hand", "全带幺", 4, "Terminals/Honors"),
    FanSpec("fullyConcealedHand", "Fully Concealed Hand", "不求人", 4, "Going Out",
            ["selfDrawn", "concealedHand"], requires_concealed=True, is_going_out=True),
    FanSpec("twoKongs", "Two Melded Kongs", "双明杠", 4, "Kong-Based",
            ["meldedKong"]),
    FanSpec("lastTile", "Last Tile", "和绝张", 4, "Going Out",
            is_going_out=True),

    # ========== 2 Points ==========
    FanSpec("dragonPung", "Dragon Pung", "箭刻", 2, "Honors"),
    FanSpec("prevalentWindPung", "Prevalent Wind Pung", "圈风刻", 2, "Honors"),
    FanSpec("seatWindPung", "Seat Wind Pung", "门风刻", 2, "Honors"),
    FanSpec("concealedHand", "Concealed Hand", "门前清", 2, "Going Out",
            incompatible=["selfDrawn"], requires_concealed=True, is_going_out=True),
    FanSpec("allChows", "All Chows", "平和", 2, "Chow-Based",
            ["noHonors"]),
    FanSpec("tileHog", "Tile Hog", "四归一", 2, "Special"),
    FanSpec("doublePung", "Double Pung", "双同刻", 2, "Pung-Based"),
    FanSpec("twoConcealedPungs", "Two Concealed Pungs", "双暗刻", 2, "Pung-Based"),
    FanSpec("concealedKong", "Concealed Kong", "暗杠", 2, "Kong-Based"),
    FanSpec("allSimples", "All Simples", "断幺九", 2, "Number-Based",
            ["noHonors"]),

    # ========== 1 Point ==========
    FanSpec("pureDoubleChow", "Pure Double Chow", "一般高", 1, "Chow-Based"),
    FanSpec("mixedDoubleChow", "Mixed Double Chow", "喜相逢", 1, "Chow-Based"),
    FanSpec("shortStraight", "Short Straight", "连六", 1, "Chow-Based"),
    FanSpec("twoTerminalChows", "Two Terminal Chows", "老少副", 1, "Chow-Based"),
    FanSpec("pungOfTerminalsOrHonors", "Pung of Terminals or Honors", "幺九刻", 1, "Terminals/Honors"),
    FanSpec("meldedKong", "Melded Kong", "明杠", 1, "Kong-Based"),
    FanSpec("oneVoidedSuit", "One Voided Suit", "缺一门", 1, "Suit-Based"),
    FanSpec("noHonors", "No Honors", "无字", 1, "Suit-Based"),
    FanSpec("edgeWait", "Edge Wait", "边张", 1, "Going Out",
            incompatible=["closedWait", "singleWait"], is_going_out=True),
    FanSpec("closedWait", "Closed Wait", "嵌张", 1, "Going Out",
            incompatible=["singleWait"], is_going_out=True),
    FanSpec("singleWait", "Single Wait", "单钓将", 1, "Going Out",
            is_going_out=True),
    FanSpec("selfDrawn", "Self-Drawn", "自摸", 1, "Going Out",
            is_going_out=True),
]


DEFAULT_CATALOG = FanCatalog.from_specs(MCR_FAN_SPECS)
