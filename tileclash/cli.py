"""
TileClash CLI - Command-line interface for the engine.

Usage:
    tileclash simulate [--p1 hard] [--p2 random] [--games 10]   Play AI matches
    tileclash cards [--catalog cards.json]                      List catalog cards
    tileclash validate-catalog <catalog_file>                   Validate a catalog file
"""

import argparse
import sys

from .config import EngineConfig, configure_logging


POLICY_CHOICES = ["easy", "medium", "hard", "random", "first"]


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="TileClash - 4x4 card battle engine",
        prog="tileclash",
    )
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play AI-vs-AI matches")
    simulate_parser.add_argument("--p1", choices=POLICY_CHOICES, default="medium", help="Player 1 policy")
    simulate_parser.add_argument("--p2", choices=POLICY_CHOICES, default="medium", help="Player 2 policy")
    simulate_parser.add_argument("--games", type=int, default=1, help="Number of matches")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Base seed for reproducible matches")
    simulate_parser.add_argument("--catalog", help="Catalog JSON file (default: bundled mythic set)")
    simulate_parser.add_argument("--deck1", help="Comma-separated card ids for player 1")
    simulate_parser.add_argument("--deck2", help="Comma-separated card ids for player 2")
    simulate_parser.add_argument("--max-turns", type=int, default=200, help="Turn limit per match")

    # Cards command
    cards_parser = subparsers.add_parser("cards", help="List catalog cards")
    cards_parser.add_argument("--catalog", help="Catalog JSON file (default: bundled mythic set)")

    # Validate command
    validate_parser = subparsers.add_parser("validate-catalog", help="Validate a catalog file")
    validate_parser.add_argument("catalog_file", help="Path to catalog JSON file")

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "simulate":
        return cmd_simulate(args)
    elif args.command == "cards":
        return cmd_cards(args)
    elif args.command == "validate-catalog":
        return cmd_validate_catalog(args)
    else:
        parser.print_help()
        return 1


def _load_catalog(path):
    from .games.mythic import create_mythic_catalog
    from .catalog_schema import load_catalog

    if path is None:
        return create_mythic_catalog()
    return load_catalog(path)


def _make_policy(name, registry, seed):
    from .bots import MoveSearchBot, RandomPolicy, FirstLegalPolicy

    if name == "random":
        return RandomPolicy(seed=seed)
    if name == "first":
        return FirstLegalPolicy()
    return MoveSearchBot(difficulty=name, registry=registry, seed=seed)


def _parse_deck(value, default):
    if not value:
        return list(default)
    return [card_id.strip() for card_id in value.split(",") if card_id.strip()]


def cmd_simulate(args):
    """Play matches between two policies and print a summary."""
    from .engine_core import AbilityRegistry, CatalogError, initialize
    from .games.mythic import STARTER_DECK_A, STARTER_DECK_B
    from .session import play_match

    try:
        catalog = _load_catalog(args.catalog)
    except (OSError, CatalogError) as e:
        print(f"Error: {e}")
        return 1

    registry = AbilityRegistry.from_catalog(catalog)
    config = EngineConfig.from_env()
    deck1 = _parse_deck(args.deck1, STARTER_DECK_A)
    deck2 = _parse_deck(args.deck2, STARTER_DECK_B)

    wins = {"p1": 0, "p2": 0, "draw": 0}
    for game in range(args.games):
        seed = None if args.seed is None else args.seed + game
        try:
            state = initialize(
                deck1, deck2, "p1", "p2", catalog,
                seed=seed, config=config, game_id=f"sim-{game + 1}",
            )
        except CatalogError as e:
            print(f"Error: {e}")
            return 1

        policies = {
            "p1": _make_policy(args.p1, registry, seed),
            "p2": _make_policy(args.p2, registry, None if seed is None else seed + 1),
        }
        result = play_match(state, policies, registry=registry, config=config, max_turns=args.max_turns)
        wins[result.winner or "draw"] += 1
        print(
            f"Game {game + 1}: winner={result.winner or 'draw'} reason={result.reason} "
            f"score={result.scores['p1']}-{result.scores['p2']} turns={result.turns}"
        )

    print(f"\n{args.p1} (p1): {wins['p1']}  {args.p2} (p2): {wins['p2']}  draws: {wins['draw']}")
    return 0


def cmd_cards(args):
    """List cards with their power and ability."""
    from .engine_core import CatalogError

    try:
        catalog = _load_catalog(args.catalog)
    except (OSError, CatalogError) as e:
        print(f"Error: {e}")
        return 1

    for card in catalog.cards():
        p = card.power
        ability = card.ability_id or "-"
        print(f"{card.card_id:<20} {p.top:>2} {p.right:>2} {p.bottom:>2} {p.left:>2}  {ability}")
    print(f"\n{len(catalog.cards())} cards, {len(catalog.abilities())} abilities")
    return 0


def cmd_validate_catalog(args):
    """Validate a catalog file."""
    from .catalog_schema import read_catalog_file, validate_catalog
    from .engine_core import CatalogError

    print(f"Validating: {args.catalog_file}")
    try:
        document = read_catalog_file(args.catalog_file)
    except FileNotFoundError:
        print(f"Error: File not found: {args.catalog_file}")
        return 1
    except CatalogError as e:
        print(f"Error: {e}")
        return 1

    result = validate_catalog(document)

    if result.warnings:
        print("\nWarnings:")
        for w in result.warnings:
            print(f"  - {w}")

    if result.errors:
        print("\nErrors:")
        for e in result.errors:
            print(f"  - {e}")
        return 1

    print(f"OK: {len(document.cards)} cards, {len(document.abilities)} abilities")
    return 0


if __name__ == "__main__":
    sys.exit(main())
