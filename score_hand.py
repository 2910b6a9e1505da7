#!/usr/bin/env python3
"""
Score a Chinese Official mahjong hand from the command line.

Usage:
    python score_hand.py "1p 1p 1p 2p 2p 2p 3p 3p 3p 4p 4p 4p 5p 5p" --self-draw
    python score_hand.py "1m 1m 1m 2m 2m 2m 3m 3m 3m 7p 8p 9p 5s 5s" --winner 0 --discarder 2
    python score_hand.py --fans pureStraight halfFlush --self-draw --flowers 2
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from mcr_calculator.tiles import Tile, WindType, TileParseError
from mcr_calculator.hand import Hand
from mcr_calculator.melds import DeclaredKong
from mcr_calculator.rules import get_rules
from mcr_calculator.detector import Situational
from mcr_calculator.scorer import OptimalScorer, ScoringOutcome
from mcr_calculator.validator import is_valid_hand

WIND_NAMES = {"E": WindType.EAST, "S": WindType.SOUTH, "W": WindType.WEST, "N": WindType.NORTH}


def print_outcome(outcome: ScoringOutcome, scorer: OptimalScorer):
    """Print a scoring breakdown."""
    print("=" * 50)
    if not outcome.is_valid:
        print(f"No valid scoring: {outcome.error}")
        return
    if outcome.decomposition is not None:
        print(f"Reading: {outcome.decomposition}")
    for fan in outcome.chosen_fans:
        print(f"  {fan.points:>3}  {fan.name} ({fan.chinese_name})")
    print("-" * 50)
    print(f"Fan points:    {outcome.fan_points}")
    print(f"Flower points: {outcome.flower_points}")
    print(f"Base points:   {outcome.base_points}")
    print(f"Total:         {outcome.total_points}")
    if not scorer.minimum_points_met(outcome):
        print(f"Warning: below the {scorer.rules.minimum_fan_points}-point minimum")
    print("Payouts:")
    for seat, amount in enumerate(outcome.payouts):
        print(f"  Seat {seat}: {amount:+d}")


def parse_kong(token: str) -> DeclaredKong:
    """"5p" for a melded kong, "5p:c" for a concealed one"""
    tile_text, _, flag = token.partition(":")
    return DeclaredKong(Tile.from_string(tile_text), concealed=(flag == "c"))


def main():
    parser = argparse.ArgumentParser(description="Score a Chinese Official mahjong hand")
    parser.add_argument("hand", nargs="?", default=None,
                        help="Tiles separated by spaces, e.g. '1m 2m 3m E E F'")
    parser.add_argument("--fans", nargs="+", default=None,
                        help="Score selected fan ids instead of a tile hand")
    parser.add_argument("--flowers", type=int, default=0,
                        help="Flower count when scoring selected fans")
    parser.add_argument("--kong", action="append", default=[],
                        help="Declared kong tile, e.g. 5p or 5p:c for concealed (repeatable)")
    parser.add_argument("--rules", type=str, default="MCR",
                        help="Rule set (MCR, StrictSevenPairs, NoFlowers, Exhaustive)")
    parser.add_argument("--self-draw", action="store_true", help="Won by self-draw")
    parser.add_argument("--melded", action="store_true", help="Hand has claimed sets")
    parser.add_argument("--winning-tile", type=str, default=None, help="The winning tile")
    parser.add_argument("--prevalent-wind", choices=sorted(WIND_NAMES), default=None)
    parser.add_argument("--seat-wind", choices=sorted(WIND_NAMES), default=None)
    parser.add_argument("--winner", type=int, default=0, help="Winner seat")
    parser.add_argument("--discarder", type=int, default=None, help="Discarder seat")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    rules = get_rules(args.rules)
    scorer = OptimalScorer(rules)

    try:
        situational = Situational(
            is_concealed=not args.melded,
            is_self_draw=args.self_draw,
            prevalent_wind=WIND_NAMES.get(args.prevalent_wind),
            seat_wind=WIND_NAMES.get(args.seat_wind),
            winning_tile=Tile.from_string(args.winning_tile) if args.winning_tile else None,
        )

        if args.fans:
            outcome = scorer.score_selected_fans(
                args.fans, situational, args.flowers, args.winner, args.discarder,
            )
        elif args.hand:
            hand = Hand.from_string(args.hand, kongs=[parse_kong(k) for k in args.kong])
            result = is_valid_hand(hand, rules)
            if result.waits:
                print(f"Waiting on: {' '.join(t.code for t in result.waits)}")
            outcome = scorer.score(hand, situational, args.winner, args.discarder)
        else:
            parser.error("give a hand or --fans")
            return
    except (TileParseError, KeyError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    print_outcome(outcome, scorer)


if __name__ == "__main__":
    main()
