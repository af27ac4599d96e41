"""Rotation engine: turns a (circle, direction) command into a node permutation.

A rotation has up to two parts:

* the primary rotation shifts every node on the chosen circle by
  ``PRIMARY_ROTATION_STEP`` positions in angular order;
* if the circle has a linkage rule, the eight surrounding nodes of the target
  group shift by ``LINKED_ROTATION_STEP`` positions around the group center,
  with or against the primary direction.

The two fragments never share a node, so their union is a permutation of the
nodes it touches. Pieces are immutable; every call returns new pieces.
"""

from __future__ import annotations

import math
from typing import Iterable

from puzzlebox.games.tricircle.geometry import BOARD, Board
from puzzlebox.games.tricircle.linkage import linked_direction
from puzzlebox.games.tricircle.types import (
    Direction,
    Move,
    Node,
    NodeTransfer,
    Piece,
    RotationResult,
    TransferKind,
)

PRIMARY_ROTATION_STEP = 3
LINKED_ROTATION_STEP = 2


def order_by_angle(nodes: Iterable[Node], cx: float, cy: float) -> list[int]:
    """Node ids sorted by ascending atan2 angle around (cx, cy)."""
    return [
        n.id for n in sorted(nodes, key=lambda n: math.atan2(n.y - cy, n.x - cx))
    ]


def cyclic_shift(node_ids: list[int], step: int, direction: Direction) -> dict[int, int]:
    """Map each node to the node *step* positions ahead (cw) or behind (ccw)."""
    n = len(node_ids)
    mapping: dict[int, int] = {}
    for i, node_id in enumerate(node_ids):
        if direction == Direction.CW:
            target = (i + step) % n
        else:
            target = (i - step + step * n) % n
        mapping[node_id] = node_ids[target]
    return mapping


def primary_rotation(board: Board, circle_id: int, direction: Direction) -> dict[int, int]:
    circle = board.circle(circle_id)
    if circle is None:
        return {}
    ordered = order_by_angle(board.nodes_on_circle(circle_id), circle.cx, circle.cy)
    return cyclic_shift(ordered, PRIMARY_ROTATION_STEP, direction)


def linked_rotation(board: Board, circle_id: int, direction: Direction) -> dict[int, int]:
    rule = board.linkage_rule(circle_id)
    if rule is None:
        return {}
    group = board.groups[rule.target_group]
    center = board.node(group.center_node_id)
    ring = [board.node(node_id) for node_id in group.surrounding_node_ids]
    ordered = order_by_angle(ring, center.x, center.y)
    return cyclic_shift(ordered, LINKED_ROTATION_STEP, linked_direction(rule, direction))


def rotation_transfers(
    board: Board, circle_id: int, direction: Direction | str,
) -> list[NodeTransfer]:
    """Every node hop produced by one rotation, primary hops first."""
    direction = Direction(direction)
    transfers = [
        NodeTransfer(from_node_id=src, to_node_id=dst, kind=TransferKind.PRIMARY)
        for src, dst in primary_rotation(board, circle_id, direction).items()
    ]
    transfers.extend(
        NodeTransfer(from_node_id=src, to_node_id=dst, kind=TransferKind.LINKED)
        for src, dst in linked_rotation(board, circle_id, direction).items()
    )
    return transfers


def rotation_map(
    board: Board, circle_id: int, direction: Direction | str,
) -> dict[int, int]:
    """Combined node -> node mapping for one rotation.

    Nodes absent from the mapping stay put. An unknown circle id yields an
    empty mapping.
    """
    direction = Direction(direction)
    mapping = primary_rotation(board, circle_id, direction)
    mapping.update(linked_rotation(board, circle_id, direction))
    return mapping


def apply_rotation_map(pieces: list[Piece], mapping: dict[int, int]) -> list[Piece]:
    return [
        p.model_copy(update={"current_node_id": mapping[p.current_node_id]})
        if p.current_node_id in mapping
        else p
        for p in pieces
    ]


def apply_move(
    pieces: list[Piece],
    circle_id: int,
    direction: Direction | str,
    board: Board = BOARD,
) -> list[Piece]:
    """Rotate *circle_id* and return the new pieces. Input is left untouched."""
    return apply_rotation_map(pieces, rotation_map(board, circle_id, direction))


def rotate(
    pieces: list[Piece],
    circle_id: int,
    direction: Direction | str,
    board: Board = BOARD,
) -> RotationResult:
    """Like ``apply_move`` but also reports which nodes moved where."""
    transfers = rotation_transfers(board, circle_id, direction)
    mapping = {t.from_node_id: t.to_node_id for t in transfers}
    return RotationResult(
        pieces=apply_rotation_map(pieces, mapping),
        transfers=transfers,
    )


def apply_moves(
    pieces: list[Piece], moves: Iterable[Move], board: Board = BOARD,
) -> list[Piece]:
    for move in moves:
        pieces = apply_move(pieces, move.circle_id, move.direction, board)
    return pieces


def solved_pieces(board: Board = BOARD) -> list[Piece]:
    """One piece per node, each sitting on its home node."""
    return [
        Piece(home_node_id=n.id, current_node_id=n.id, color=n.initial_color)
        for n in board.nodes
    ]


def all_moves(board: Board = BOARD) -> list[Move]:
    """Every legal move: each circle in both directions."""
    return [
        Move(circle_id=c.id, direction=direction)
        for c in board.circles
        for direction in (Direction.CW, Direction.CCW)
    ]


def inverse_move(move: Move) -> Move:
    return Move(circle_id=move.circle_id, direction=move.direction.inverse)


def is_permutation(pieces: list[Piece], board: Board = BOARD) -> bool:
    """True if the pieces occupy every node exactly once."""
    occupied = sorted(p.current_node_id for p in pieces)
    return occupied == [n.id for n in board.nodes]
