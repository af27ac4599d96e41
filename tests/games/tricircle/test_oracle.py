"""Tests for the solved-state predicates.

The two predicates are intentionally different contracts; these tests pin
down the case where they disagree.
"""

from __future__ import annotations

from puzzlebox.games.tricircle.geometry import BOARD
from puzzlebox.games.tricircle.oracle import (
    is_group_solved,
    is_identity_solved,
    node_colors,
)
from puzzlebox.games.tricircle.rotation import apply_move, is_permutation
from puzzlebox.games.tricircle.types import Direction, GroupName, Piece


def _swap(pieces: list[Piece], a: int, b: int) -> list[Piece]:
    """Swap the pieces sitting on nodes *a* and *b*."""
    swapped: list[Piece] = []
    for p in pieces:
        if p.current_node_id == a:
            p = p.model_copy(update={"current_node_id": b})
        elif p.current_node_id == b:
            p = p.model_copy(update={"current_node_id": a})
        swapped.append(p)
    return swapped


class TestGroupSolved:
    def test_solved_state(self, solved) -> None:
        assert is_group_solved(solved)

    def test_after_one_move(self, solved) -> None:
        assert not is_group_solved(apply_move(solved, 1, Direction.CW))

    def test_missing_occupant(self, solved) -> None:
        assert not is_group_solved(solved[1:])

    def test_cross_group_swap(self, solved) -> None:
        top = BOARD.groups[GroupName.TOP].center_node_id
        bottom = BOARD.groups[GroupName.BOTTOM].center_node_id
        assert not is_group_solved(_swap(solved, top, bottom))


class TestIdentitySolved:
    def test_solved_state(self, solved) -> None:
        assert is_identity_solved(solved)

    def test_after_one_move(self, solved) -> None:
        assert not is_identity_solved(apply_move(solved, 7, Direction.CCW))


class TestPredicatesDiffer:
    def test_same_color_swap_is_group_solved_only(self, solved) -> None:
        group = BOARD.groups[GroupName.TOP_LEFT]
        a, b = group.surrounding_node_ids[0], group.surrounding_node_ids[1]
        pieces = _swap(solved, a, b)

        assert is_permutation(pieces)
        assert is_group_solved(pieces)
        assert not is_identity_solved(pieces)

    def test_center_swap_with_ring(self, solved) -> None:
        group = BOARD.groups[GroupName.BOTTOM_RIGHT]
        pieces = _swap(solved, group.center_node_id, group.surrounding_node_ids[-1])
        assert is_group_solved(pieces)
        assert not is_identity_solved(pieces)

    def test_linked_ring_only_permutation(self, solved) -> None:
        # A bare ring shift inside one group keeps every region monochromatic
        group = BOARD.groups[GroupName.TOP]
        ring = list(group.surrounding_node_ids)
        shifted = {ring[i]: ring[(i + 2) % len(ring)] for i in range(len(ring))}
        pieces = [
            p.model_copy(update={"current_node_id": shifted[p.current_node_id]})
            if p.current_node_id in shifted else p
            for p in solved
        ]
        assert is_group_solved(pieces)
        assert not is_identity_solved(pieces)


class TestNodeColors:
    def test_colors_follow_pieces(self, solved) -> None:
        colors = node_colors(apply_move(solved, 2, Direction.CW))
        assert len(colors) == 54
        assert sorted(colors.values()).count(BOARD.groups[GroupName.TOP].color) == 9
