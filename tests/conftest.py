from __future__ import annotations

import pytest

from puzzlebox.engine.models import GameConfig, Player, PlayerId
from puzzlebox.games.tricircle.geometry import BOARD, Board
from puzzlebox.games.tricircle.plugin import TriCirclePlugin
from puzzlebox.games.tricircle.rotation import solved_pieces
from puzzlebox.games.tricircle.types import Piece


@pytest.fixture
def board() -> Board:
    return BOARD


@pytest.fixture
def solved() -> list[Piece]:
    """Fresh solved piece set (one piece per node, at home)."""
    return solved_pieces(BOARD)


@pytest.fixture
def plugin() -> TriCirclePlugin:
    return TriCirclePlugin()


@pytest.fixture
def players() -> list[Player]:
    return [Player(player_id=PlayerId("p1"), display_name="Solo", seat_index=0)]


@pytest.fixture
def one_move_config() -> GameConfig:
    """Config whose scramble is a single rotation (never group-solved)."""
    return GameConfig(options={"scramble_moves": 1}, random_seed=7)
