"""
MCR Rule Sets

Table and house-rule configuration for the Chinese Official scoring engine:
- MCR (official competition rules, flowers scored as bonus points)
- Strict seven pairs (no four-of-a-kind, seven pairs never read as a standard hand)
- No flowers
- Exhaustive fan resolution
"""

from dataclasses import dataclass, replace
from typing import Dict


@dataclass(frozen=True)
class RuleSet:
    """
    Rule configuration for Chinese Official scoring.

    Tables differ in base score, flower handling and a few policy
    questions the official rules leave open. This class collects them.
    """

    name: str = "MCR"

    # Payments
    base_points: int = 8        # Paid by every losing player on each win
    num_players: int = 4
    minimum_fan_points: int = 8  # Fan points (without flowers) needed to declare a win

    # Flowers
    flower_points: int = 1      # Bonus points per flower
    max_flowers: int = 8

    # Physical tile limits
    max_tile_copies: int = 4
    max_hand_tiles: int = 14    # Excluding flowers

    # Seven pairs policy
    # True: a kind held four times counts as two pairs
    seven_pairs_allow_four_of_a_kind: bool = True
    # True: a seven pairs hand is never also read as 4 sets + pair
    seven_pairs_exclusive: bool = False

    # Declared kongs
    allow_kongs: bool = True

    # Fan resolution: "greedy" (catalog priority order) or "exhaustive"
    # (search every consistent subset)
    fan_resolution: str = "greedy"

    # Upper bound on decomposition search steps before giving up
    max_search_steps: int = 20000

    def __post_init__(self):
        if self.fan_resolution not in ("greedy", "exhaustive"):
            raise ValueError(f"Unknown fan resolution: {self.fan_resolution}")
        if self.num_players < 2:
            raise ValueError(f"Need at least 2 players, got {self.num_players}")
        if self.base_points < 0 or self.flower_points < 0:
            raise ValueError("Point values must not be negative")

    def __repr__(self) -> str:
        return f"RuleSet({self.name})"


# MCR (Mahjong Competition Rules) as played at most tables
MCR_RULES = RuleSet(
    name="MCR",
    base_points=8,
    num_players=4,
    minimum_fan_points=8,
    flower_points=1,
    max_flowers=8,
    seven_pairs_allow_four_of_a_kind=True,
    seven_pairs_exclusive=False,
    fan_resolution="greedy",
)


# House rule: four identical tiles may not stand in for two pairs
STRICT_SEVEN_PAIRS_RULES = replace(
    MCR_RULES,
    name="StrictSevenPairs",
    seven_pairs_allow_four_of_a_kind=False,
    seven_pairs_exclusive=True,
)


# Official MCR tables play without flower bonus
NO_FLOWERS_RULES = replace(
    MCR_RULES,
    name="NoFlowers",
    flower_points=0,
    max_flowers=0,
)


# Search every consistent fan combination instead of the greedy pass
EXHAUSTIVE_RULES = replace(
    MCR_RULES,
    name="Exhaustive",
    fan_resolution="exhaustive",
)


DEFAULT_RULES = MCR_RULES

_RULES_BY_NAME: Dict[str, RuleSet] = {
    rules.name.lower(): rules
    for rules in (MCR_RULES, STRICT_SEVEN_PAIRS_RULES, NO_FLOWERS_RULES, EXHAUSTIVE_RULES)
}


def get_rules(name: str) -> RuleSet:
    """Look up a preset by name (case-insensitive)"""
    try:
        return _RULES_BY_NAME[name.lower()]
    except KeyError:
        raise KeyError(f"Unknown rule set: {name}") from None
