"""CLI for scrambling the tri-circle puzzle and solving it with BFS.

Usage::

    puzzlebox-solve --difficulty easy --seed 7

    # Explicit scramble length and a tighter state budget
    puzzlebox-solve --moves 3 --max-states 5000 --verbose
"""

from __future__ import annotations

import argparse
import logging
import sys

from puzzlebox.config import settings
from puzzlebox.games.tricircle.oracle import is_group_solved, is_identity_solved
from puzzlebox.games.tricircle.rotation import apply_moves
from puzzlebox.games.tricircle.scramble import DIFFICULTY_MOVES, Difficulty, scramble
from puzzlebox.games.tricircle.solver import SolveStatus, search
from puzzlebox.games.tricircle.types import Move


def _format_moves(moves: list[Move]) -> str:
    if not moves:
        return "(none)"
    return " ".join(f"{m.circle_id}{m.direction.value}" for m in moves)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Scramble and solve the tri-circle puzzle")
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--moves",
        type=int,
        default=None,
        help=f"Number of scramble rotations (1-{settings.max_scramble_moves})",
    )
    group.add_argument(
        "--difficulty",
        choices=[d.value for d in Difficulty],
        default=None,
        help="Scramble preset (easy=5, normal=10, hard=15, expert=50)",
    )
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--max-states",
        type=int,
        default=settings.solver_max_states,
        help="Abort the search after this many visited states",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else settings.log_level)

    if args.moves is not None:
        num_moves = args.moves
    elif args.difficulty is not None:
        num_moves = DIFFICULTY_MOVES[Difficulty(args.difficulty)]
    else:
        num_moves = settings.default_scramble_moves

    try:
        pieces, scramble_moves = scramble(num_moves, args.seed)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2

    print(f"Scramble ({len(scramble_moves)}): {_format_moves(scramble_moves)}")
    print(f"  group-solved: {is_group_solved(pieces)}")

    result = search(pieces, max_states=args.max_states)
    print(f"Search: {result.status.value}, {result.states_explored} states")

    if not result.found:
        if result.status == SolveStatus.EXHAUSTED:
            print("No solution within the state budget", file=sys.stderr)
        else:
            print("No solution found", file=sys.stderr)
        return 1

    print(f"Solution ({len(result.moves)}): {_format_moves(result.moves)}")
    replayed = apply_moves(pieces, result.moves)
    print(f"  identity after replay: {is_identity_solved(replayed)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
