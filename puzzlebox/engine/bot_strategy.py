"""Bot strategy abstraction: maps bot_id strings to action-selection callables."""

from __future__ import annotations

import logging
import random as _random
from typing import Protocol

from puzzlebox.engine.models import Phase, Player, PlayerId
from puzzlebox.engine.protocol import GamePlugin

logger = logging.getLogger(__name__)


class BotStrategy(Protocol):
    """A bot strategy selects an action payload given the current game state."""

    def choose_action(
        self,
        game_data: dict,
        phase: Phase,
        player_id: PlayerId,
        plugin: GamePlugin,
        players: list[Player] | None = None,
    ) -> dict | None:
        """Return the chosen action payload (same shape as get_valid_actions items).

        ``None`` means the strategy has nothing to play.
        """
        ...


class RandomStrategy:
    """Picks a uniformly random rotation among the valid actions."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = _random.Random(seed)

    def choose_action(
        self,
        game_data: dict,
        phase: Phase,
        player_id: PlayerId,
        plugin: GamePlugin,
        players: list[Player] | None = None,
    ) -> dict:
        valid = plugin.get_valid_actions(game_data, phase, player_id)
        rotations = [a for a in valid if a.get("action_type") == "rotate"]
        return self._rng.choice(rotations or valid)


class SolverStrategy:
    """Plays the first move of a shortest solution; random when none is found.

    Returns ``None`` when the board already sits at identity.

    The solution is cached and consumed move by move as long as the board
    keeps matching the expected successor.
    """

    def __init__(self, max_states: int | None = None, seed: int | None = None) -> None:
        self._max_states = max_states
        self._fallback = RandomStrategy(seed)
        self._plan: list[dict] = []
        self._expected_pieces: list[dict] | None = None

    def choose_action(
        self,
        game_data: dict,
        phase: Phase,
        player_id: PlayerId,
        plugin: GamePlugin,
        players: list[Player] | None = None,
    ) -> dict | None:
        from puzzlebox.games.tricircle.plugin import pieces_from_data, pieces_to_data
        from puzzlebox.games.tricircle.rotation import apply_move
        from puzzlebox.games.tricircle.solver import solve

        pieces = pieces_from_data(game_data["pieces"])
        if not self._plan or game_data["pieces"] != self._expected_pieces:
            moves = solve(pieces, max_states=self._max_states)
            self._plan = []
            self._expected_pieces = None
            if moves is None:
                logger.info("No solution within budget, falling back to a random move")
                return self._fallback.choose_action(
                    game_data, phase, player_id, plugin, players,
                )
            if not moves:
                logger.debug("Board already at identity, no solver move to play")
                return None
            self._plan = [m.to_payload() for m in moves]

        payload = self._plan.pop(0)
        after = apply_move(pieces, payload["circle_id"], payload["direction"])
        self._expected_pieces = pieces_to_data(after)
        return {"action_type": "rotate", **payload}
