"""Scrambled starting positions built from random forward moves."""

from __future__ import annotations

import random
from enum import Enum

from puzzlebox.config import settings
from puzzlebox.games.tricircle.geometry import BOARD, Board
from puzzlebox.games.tricircle.rotation import apply_move, solved_pieces
from puzzlebox.games.tricircle.types import Direction, Move, Piece


class Difficulty(str, Enum):
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"
    EXPERT = "expert"


DIFFICULTY_MOVES: dict[Difficulty, int] = {
    Difficulty.EASY: 5,
    Difficulty.NORMAL: 10,
    Difficulty.HARD: 15,
    Difficulty.EXPERT: 50,
}


def validate_scramble_moves(num_moves: object) -> str | None:
    """Return an error message, or None if *num_moves* is a usable count."""
    if not isinstance(num_moves, int) or isinstance(num_moves, bool):
        return "scramble_moves must be an integer"
    if num_moves < 1 or num_moves > settings.max_scramble_moves:
        return f"scramble_moves must be between 1 and {settings.max_scramble_moves}"
    return None


def scramble(
    num_moves: int,
    rng: random.Random | int | None = None,
    board: Board = BOARD,
) -> tuple[list[Piece], list[Move]]:
    """Apply *num_moves* random rotations to the solved puzzle.

    Returns the scrambled pieces and the moves that produced them.
    """
    err = validate_scramble_moves(num_moves)
    if err is not None:
        raise ValueError(err)
    if not isinstance(rng, random.Random):
        rng = random.Random(rng)

    circle_ids = [c.id for c in board.circles]
    pieces = solved_pieces(board)
    history: list[Move] = []
    for _ in range(num_moves):
        move = Move(
            circle_id=rng.choice(circle_ids),
            direction=Direction.CW if rng.random() < 0.5 else Direction.CCW,
        )
        pieces = apply_move(pieces, move.circle_id, move.direction, board)
        history.append(move)
    return pieces, history
