"""Solved-state predicates.

``is_group_solved`` is the win condition shown to the player: every 9-node
region is a single color. ``is_identity_solved`` is the solver's goal: every
piece is back on its own home node. The second implies the first but not the
other way round (pieces of the same color can trade places), so the two must
not be used interchangeably.
"""

from __future__ import annotations

from puzzlebox.games.tricircle.geometry import BOARD, Board
from puzzlebox.games.tricircle.types import Color, Piece


def node_colors(pieces: list[Piece]) -> dict[int, Color]:
    """Map each occupied node to the color of the piece sitting on it."""
    return {p.current_node_id: p.color for p in pieces}


def is_group_solved(pieces: list[Piece], board: Board = BOARD) -> bool:
    colors = node_colors(pieces)
    for group in board.groups.values():
        first = colors.get(group.center_node_id)
        if first is None:
            return False
        for node_id in group.surrounding_node_ids:
            if colors.get(node_id) != first:
                return False
    return True


def is_identity_solved(pieces: list[Piece]) -> bool:
    return all(p.current_node_id == p.home_node_id for p in pieces)
