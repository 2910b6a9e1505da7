"""
MCR Scoring Calculator
Chinese Official Mahjong (Mahjong Competition Rules) hand validation and scoring
"""

from .tiles import Tile, TileSuit, TileSet, WindType, DragonType, TileParseError, parse_tiles
from .melds import Meld, MeldType, HandShape, Decomposition, DeclaredKong
from .hand import Hand, TileInputEngine, InvalidHandError
from .rules import RuleSet, DEFAULT_RULES, get_rules
from .validator import (
    ValidationResult, SearchLimitExceeded, is_valid_hand, enumerate_decompositions, find_waits,
)
from .fans import Fan, FanCatalog, CatalogError, DEFAULT_CATALOG
from .detector import FanDetector, Situational
from .scorer import OptimalScorer, ScoringOutcome, calculate_payouts

__version__ = "0.1.0"
__all__ = [
    "Tile",
    "TileSuit",
    "TileSet",
    "WindType",
    "DragonType",
    "TileParseError",
    "parse_tiles",
    "Meld",
    "MeldType",
    "HandShape",
    "Decomposition",
    "DeclaredKong",
    "Hand",
    "TileInputEngine",
    "InvalidHandError",
    "RuleSet",
    "DEFAULT_RULES",
    "get_rules",
    "ValidationResult",
    "SearchLimitExceeded",
    "is_valid_hand",
    "enumerate_decompositions",
    "find_waits",
    "Fan",
    "FanCatalog",
    "CatalogError",
    "DEFAULT_CATALOG",
    "FanDetector",
    "Situational",
    "OptimalScorer",
    "ScoringOutcome",
    "calculate_payouts",
]
