"""Breadth-first solver returning a shortest move sequence back to identity.

States are index-addressed tuples: position ``i`` holds the current node of
the piece whose home node is the ``i``-th smallest home id. Every legal move
is turned into a full node permutation once per search, so expanding a state
is a single tuple re-map.

The search is bounded by a visited-state ceiling. Hitting it only means the
budget ran out; every scramble built from forward moves is solvable.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from enum import Enum

from pydantic import BaseModel, Field

from puzzlebox.config import settings
from puzzlebox.games.tricircle.geometry import BOARD, Board
from puzzlebox.games.tricircle.oracle import is_identity_solved
from puzzlebox.games.tricircle.rotation import all_moves, rotation_map
from puzzlebox.games.tricircle.types import Move, Piece

logger = logging.getLogger(__name__)

StateKey = tuple[int, ...]


class SolveStatus(str, Enum):
    ALREADY_SOLVED = "already_solved"
    SOLVED = "solved"
    EXHAUSTED = "exhausted"      # state ceiling reached
    NO_SOLUTION = "no_solution"  # frontier emptied below the ceiling


class SolveResult(BaseModel):
    status: SolveStatus
    moves: list[Move] = Field(default_factory=list)
    states_explored: int = 0

    @property
    def found(self) -> bool:
        return self.status in (SolveStatus.ALREADY_SOLVED, SolveStatus.SOLVED)


def state_key(pieces: list[Piece]) -> StateKey:
    """Canonical key: current node ids ordered by home node id."""
    return tuple(
        p.current_node_id for p in sorted(pieces, key=lambda p: p.home_node_id)
    )


def move_permutation(board: Board, move: Move) -> tuple[int, ...]:
    """Full node permutation for *move* (identity on untouched nodes)."""
    mapping = rotation_map(board, move.circle_id, move.direction)
    return tuple(mapping.get(node.id, node.id) for node in board.nodes)


def search(
    pieces: list[Piece],
    board: Board = BOARD,
    max_states: int | None = None,
) -> SolveResult:
    """Find a minimum-length move list that returns *pieces* to identity."""
    if max_states is None:
        max_states = settings.solver_max_states

    if is_identity_solved(pieces):
        return SolveResult(status=SolveStatus.ALREADY_SOLVED, states_explored=1)

    started = time.monotonic()
    moves = all_moves(board)
    perms = [move_permutation(board, m) for m in moves]

    goal: StateKey = tuple(sorted(p.home_node_id for p in pieces))
    start = state_key(pieces)

    # Paths are tuples of indices into ``moves``
    queue: deque[tuple[StateKey, tuple[int, ...]]] = deque([(start, ())])
    visited: set[StateKey] = {start}

    while queue:
        if len(visited) > max_states:
            logger.warning(f"Solver exceeded limit of {max_states} states")
            return SolveResult(status=SolveStatus.EXHAUSTED, states_explored=len(visited))

        state, path = queue.popleft()

        for index, perm in enumerate(perms):
            next_state = tuple(perm[node_id] for node_id in state)
            next_path = path + (index,)

            if next_state == goal:
                solution = [moves[i] for i in next_path]
                logger.info(
                    f"Solved in {len(solution)} moves after {len(visited)} states "
                    f"({time.monotonic() - started:.2f}s)"
                )
                return SolveResult(
                    status=SolveStatus.SOLVED,
                    moves=solution,
                    states_explored=len(visited),
                )

            if next_state not in visited:
                visited.add(next_state)
                queue.append((next_state, next_path))

    logger.debug(f"Frontier exhausted after {len(visited)} states without a solution")
    return SolveResult(status=SolveStatus.NO_SOLUTION, states_explored=len(visited))


def solve(
    pieces: list[Piece],
    board: Board = BOARD,
    max_states: int | None = None,
) -> list[Move] | None:
    """Shortest move list to identity, ``[]`` if already there, ``None`` if not found."""
    result = search(pieces, board, max_states)
    if not result.found:
        return None
    return result.moves
