"""
CLI for the cave combat simulation.

Reads a map, plays the battle at base attack power, then searches for the
smallest attack power that wins for one faction without losses.

Usage: python play_cli.py [MAP_FILE] [--faction E|G] [--show-board] [--random SEED]
"""

import argparse
import sys

from battle import StalemateError, run_battle
from board import MapParseError
from map_gen import generate_map, map_stats
from models import Faction
from search import SearchError, find_minimal_power
from state import initialize_battle, load_config


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Elves vs goblins cave combat simulator")
    parser.add_argument("map_file", nargs="?", help="Map file to read (default: stdin)")
    parser.add_argument(
        "--faction",
        choices=[f.value for f in Faction],
        default=Faction.ELF.value,
        help="Faction whose attack power is searched",
    )
    parser.add_argument("--show-board", action="store_true", help="Print the final board of each battle")
    parser.add_argument(
        "--random",
        type=int,
        metavar="SEED",
        help="Play a randomly generated cave instead of reading a map",
    )
    parser.add_argument("--width", type=int, default=12, help="Width of a random cave")
    parser.add_argument("--height", type=int, default=9, help="Height of a random cave")
    parser.add_argument("--config", help="Config file to use instead of config.json")
    return parser.parse_args(argv)


def read_map(args: argparse.Namespace) -> str:
    if args.random is not None:
        map_text = generate_map(args.width, args.height, args.random)
        stats = map_stats(map_text)
        print(f"Random cave (seed {args.random}): {stats['width']}x{stats['height']}, "
              f"{stats['elves']} elves, {stats['goblins']} goblins")
        print(map_text)
        print()
        return map_text
    if args.map_file:
        with open(args.map_file, "r") as f:
            return f.read()
    return sys.stdin.read()


def main(argv=None) -> int:
    args = parse_args(argv)
    config = load_config(args.config)
    map_text = read_map(args)
    faction = Faction(args.faction)

    try:
        state = initialize_battle(map_text, config=config, record_log=False)
        outcome = run_battle(state, max_rounds=config.get("max_rounds"))
    except (MapParseError, StalemateError) as e:
        print(f"Part 1. {e}", file=sys.stderr)
        return 1
    print(f"Part 1. {outcome.rounds} rounds * {outcome.total_hit_points} remaining hit points "
          f"= {outcome.score}.")
    if args.show_board:
        print(state.board.render())
        print()

    try:
        result = find_minimal_power(map_text, faction, config=config)
    except (SearchError, StalemateError) as e:
        print(f"Part 2. {e}", file=sys.stderr)
        return 1
    print(f"Part 2. Attack power: {result.attack_power}. {result.outcome.rounds} rounds * "
          f"{result.outcome.total_hit_points} remaining hit points = {result.score}.")
    if args.show_board:
        final = initialize_battle(map_text, config=config, record_log=False,
                                  **{f"{faction.name.lower()}_power": result.attack_power})
        run_battle(final, max_rounds=config.get("max_rounds"))
        print(final.board.render())

    return 0


if __name__ == "__main__":
    sys.exit(main())
