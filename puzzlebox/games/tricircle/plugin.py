"""TriCirclePlugin implements the GamePlugin protocol for the rotation puzzle."""

from __future__ import annotations

import logging
from typing import ClassVar

from puzzlebox.config import settings
from puzzlebox.engine.models import (
    Action,
    Event,
    ExpectedAction,
    GameConfig,
    GameResult,
    Phase,
    Player,
    PlayerId,
    TransitionResult,
)
from puzzlebox.engine.protocol import DISCONNECT_POLICY_ABANDON_ALL
from puzzlebox.games.tricircle.geometry import BOARD
from puzzlebox.games.tricircle.oracle import is_group_solved
from puzzlebox.games.tricircle.rotation import all_moves, inverse_move, is_permutation, rotate
from puzzlebox.games.tricircle.scramble import (
    DIFFICULTY_MOVES,
    Difficulty,
    scramble,
    validate_scramble_moves,
)
from puzzlebox.games.tricircle.solver import search
from puzzlebox.games.tricircle.types import COLOR_HEX, Direction, Move, Piece

logger = logging.getLogger(__name__)

ROTATE = "rotate"
UNDO = "undo"
RESTART = "restart"
AUTO_SOLVE = "auto_solve"
REPLAY_SOLUTION = "replay_solution"
GAME_OVER = "game_over"


def pieces_to_data(pieces: list[Piece]) -> list[dict]:
    return [p.model_dump(mode="json") for p in pieces]


def pieces_from_data(data: list[dict]) -> list[Piece]:
    return [Piece.model_validate(d) for d in data]


class TriCirclePlugin:
    """Tri-circle rotation puzzle: single-player, solvable by BFS."""

    game_id: ClassVar[str] = "tricircle"
    display_name: ClassVar[str] = "Tri-Circle"
    min_players: ClassVar[int] = 1
    max_players: ClassVar[int] = 1
    description: ClassVar[str] = (
        "Rotate three clusters of overlapping circles until each of the six "
        "9-node regions is a single color."
    )
    config_schema: ClassVar[dict] = {
        "type": "object",
        "properties": {
            "difficulty": {
                "type": "string",
                "enum": [d.value for d in Difficulty],
            },
            "scramble_moves": {
                "type": "integer",
                "minimum": 1,
                "maximum": settings.max_scramble_moves,
            },
        },
    }
    disconnect_policy: ClassVar[str] = DISCONNECT_POLICY_ABANDON_ALL

    # ── Lifecycle ──

    def create_initial_state(
        self,
        players: list[Player],
        config: GameConfig,
    ) -> tuple[dict, Phase, list[Event]]:
        num_moves = self._scramble_moves(config.options)
        pieces, scramble_moves = scramble(num_moves, config.random_seed)
        player = players[0]

        game_data: dict = {
            "pieces": pieces_to_data(pieces),
            "initial_pieces": pieces_to_data(pieces),
            "scramble": [m.to_payload() for m in scramble_moves],
            "history": [],
            "pending_moves": [],
            "moves": 0,
            "is_solved": is_group_solved(pieces),
        }

        events = [
            Event(event_type="game_started", player_id=player.player_id, payload={
                "scramble_moves": num_moves,
            }),
        ]
        return game_data, self._rotate_phase(player.player_id), events

    def validate_config(self, options: dict) -> list[str]:
        errors: list[str] = []
        difficulty = options.get("difficulty")
        if difficulty is not None and difficulty not in {d.value for d in Difficulty}:
            errors.append(f"Unknown difficulty: {difficulty}")
        if "scramble_moves" in options:
            err = validate_scramble_moves(options["scramble_moves"])
            if err is not None:
                errors.append(err)
        return errors

    def check_state(self, game_data: dict) -> list[str]:
        """Puzzle invariants on a stored game_data dict."""
        errors: list[str] = []
        pieces = pieces_from_data(game_data["pieces"])
        if not is_permutation(pieces):
            errors.append("pieces do not occupy every node exactly once")
        if not is_permutation(pieces_from_data(game_data["initial_pieces"])):
            errors.append("initial_pieces do not occupy every node exactly once")
        if game_data["is_solved"] != is_group_solved(pieces):
            errors.append("is_solved is out of sync with the board")
        if game_data["moves"] != len(game_data["history"]):
            errors.append("move counter does not match history length")
        return errors

    # ── Core game loop ──

    def get_valid_actions(
        self,
        game_data: dict,
        phase: Phase,
        player_id: PlayerId,
    ) -> list[dict]:
        if phase.name != ROTATE:
            return []

        actions: list[dict] = [
            {"action_type": ROTATE, **move.to_payload()} for move in all_moves(BOARD)
        ]
        if game_data["history"]:
            actions.append({"action_type": UNDO})
        actions.append({"action_type": RESTART})
        if not game_data["is_solved"]:
            actions.append({"action_type": AUTO_SOLVE})
        return actions

    def validate_action(
        self,
        game_data: dict,
        phase: Phase,
        action: Action,
    ) -> str | None:
        if phase.name != ROTATE:
            return f"No player actions accepted during {phase.name}"

        if action.action_type == ROTATE:
            return self._validate_rotate(action.payload)
        if action.action_type == UNDO:
            if not game_data["history"]:
                return "Nothing to undo"
            return None
        if action.action_type == RESTART:
            return None
        if action.action_type == AUTO_SOLVE:
            if game_data["is_solved"]:
                return "Puzzle is already solved"
            return None
        return f"Unknown action type: {action.action_type}"

    def apply_action(
        self,
        game_data: dict,
        phase: Phase,
        action: Action,
        players: list[Player],
    ) -> TransitionResult:
        if phase.name == ROTATE:
            if action.action_type == ROTATE:
                return self._apply_rotate(game_data, action, players)
            if action.action_type == UNDO:
                return self._apply_undo(game_data, action)
            if action.action_type == RESTART:
                return self._apply_restart(game_data, action)
            if action.action_type == AUTO_SOLVE:
                return self._apply_auto_solve(game_data, action)
            raise ValueError(f"Unknown action type: {action.action_type}")

        if phase.name == REPLAY_SOLUTION:
            return self._apply_replay_step(game_data, phase, players)

        raise ValueError(f"Unknown phase: {phase.name}")

    # ── View filtering ──

    def get_player_view(
        self,
        game_data: dict,
        phase: Phase,
        player_id: PlayerId | None,
        players: list[Player],
    ) -> dict:
        # No hidden info apart from the scramble sequence
        return {
            "pieces": game_data["pieces"],
            "moves": game_data["moves"],
            "is_solved": game_data["is_solved"],
            "can_undo": bool(game_data["history"]),
            "pending_moves": game_data["pending_moves"],
            "palette": {color.value: hex_code for color, hex_code in COLOR_HEX.items()},
        }

    def state_to_ai_view(
        self,
        game_data: dict,
        phase: Phase,
        player_id: PlayerId,
        players: list[Player],
    ) -> dict:
        view = self.get_player_view(game_data, phase, player_id, players)
        view["valid_actions"] = self.get_valid_actions(game_data, phase, player_id)
        return view

    def parse_ai_action(
        self,
        response: dict,
        phase: Phase,
        player_id: PlayerId,
    ) -> Action:
        payload = dict(response.get("action", {}).get("payload", response))
        action_type = payload.pop("action_type", ROTATE)
        return Action(action_type=action_type, player_id=player_id, payload=payload)

    def get_spectator_summary(
        self,
        game_data: dict,
        phase: Phase,
        players: list[Player],
    ) -> dict:
        return {
            "moves": game_data["moves"],
            "is_solved": game_data["is_solved"],
            "solving": phase.name == REPLAY_SOLUTION,
        }

    # ── Private handlers ──

    def _scramble_moves(self, options: dict) -> int:
        if "scramble_moves" in options:
            return options["scramble_moves"]
        difficulty = options.get("difficulty")
        if difficulty is not None:
            return DIFFICULTY_MOVES[Difficulty(difficulty)]
        return settings.default_scramble_moves

    def _rotate_phase(self, player_id: PlayerId) -> Phase:
        return Phase(
            name=ROTATE,
            expected_actions=[
                ExpectedAction(player_id=player_id, action_type=ROTATE),
            ],
            auto_resolve=False,
            metadata={"player_index": 0},
        )

    def _validate_rotate(self, payload: dict) -> str | None:
        circle_id = payload.get("circle_id")
        direction = payload.get("direction")

        if circle_id is None or direction is None:
            return "Missing circle_id or direction in payload"
        if not isinstance(circle_id, int) or BOARD.circle(circle_id) is None:
            return f"Invalid circle_id: {circle_id}"
        if direction not in {d.value for d in Direction}:
            return f"Invalid direction: {direction}"
        return None

    def _rotate_pieces(
        self,
        game_data: dict,
        move: Move,
        source: str,
        player_id: PlayerId | None = None,
    ) -> Event:
        result = rotate(pieces_from_data(game_data["pieces"]), move.circle_id, move.direction)
        game_data["pieces"] = pieces_to_data(result.pieces)
        game_data["is_solved"] = is_group_solved(result.pieces)
        return Event(
            event_type="pieces_rotated",
            player_id=player_id,
            payload={
                **move.to_payload(),
                "source": source,
                "transfers": [t.model_dump(mode="json") for t in result.transfers],
            },
        )

    def _apply_rotate(
        self,
        game_data: dict,
        action: Action,
        players: list[Player],
    ) -> TransitionResult:
        move = Move(
            circle_id=action.payload["circle_id"],
            direction=action.payload["direction"],
        )
        event = self._rotate_pieces(game_data, move, "player", action.player_id)
        game_data["history"].append(move.to_payload())
        game_data["moves"] += 1

        scores = {action.player_id: float(game_data["moves"])}
        if game_data["is_solved"]:
            return self._end_game(game_data, [event], players, reason="solved")

        return TransitionResult(
            game_data=game_data,
            events=[event],
            next_phase=self._rotate_phase(action.player_id),
            scores=scores,
        )

    def _apply_undo(self, game_data: dict, action: Action) -> TransitionResult:
        last = Move.model_validate(game_data["history"].pop())
        event = self._rotate_pieces(game_data, inverse_move(last), "undo", action.player_id)
        game_data["moves"] -= 1

        return TransitionResult(
            game_data=game_data,
            events=[event],
            next_phase=self._rotate_phase(action.player_id),
            scores={action.player_id: float(game_data["moves"])},
        )

    def _apply_restart(self, game_data: dict, action: Action) -> TransitionResult:
        game_data["pieces"] = list(game_data["initial_pieces"])
        game_data["history"] = []
        game_data["pending_moves"] = []
        game_data["moves"] = 0
        game_data["is_solved"] = is_group_solved(pieces_from_data(game_data["pieces"]))

        return TransitionResult(
            game_data=game_data,
            events=[Event(event_type="puzzle_restarted", player_id=action.player_id)],
            next_phase=self._rotate_phase(action.player_id),
            scores={action.player_id: 0.0},
        )

    def _apply_auto_solve(self, game_data: dict, action: Action) -> TransitionResult:
        result = search(pieces_from_data(game_data["pieces"]))

        if not result.found or not result.moves:
            logger.info(f"Auto-solve gave up: {result.status.value}")
            return TransitionResult(
                game_data=game_data,
                events=[Event(
                    event_type="solve_failed",
                    player_id=action.player_id,
                    payload={
                        "status": result.status.value,
                        "states_explored": result.states_explored,
                    },
                )],
                next_phase=self._rotate_phase(action.player_id),
                scores={action.player_id: float(game_data["moves"])},
            )

        game_data["pending_moves"] = [m.to_payload() for m in result.moves]
        return TransitionResult(
            game_data=game_data,
            events=[Event(
                event_type="solution_found",
                player_id=action.player_id,
                payload={
                    "moves": game_data["pending_moves"],
                    "states_explored": result.states_explored,
                },
            )],
            next_phase=Phase(
                name=REPLAY_SOLUTION,
                auto_resolve=True,
                metadata={"player_index": 0},
            ),
            scores={action.player_id: float(game_data["moves"])},
        )

    def _apply_replay_step(
        self,
        game_data: dict,
        phase: Phase,
        players: list[Player],
    ) -> TransitionResult:
        move = Move.model_validate(game_data["pending_moves"].pop(0))
        events = [self._rotate_pieces(game_data, move, "solver")]
        player_id = players[0].player_id
        scores = {player_id: float(game_data["moves"])}

        if game_data["pending_moves"]:
            return TransitionResult(
                game_data=game_data,
                events=events,
                next_phase=phase,
                scores=scores,
            )

        if game_data["is_solved"]:
            return self._end_game(game_data, events, players, reason="auto_solved")

        return TransitionResult(
            game_data=game_data,
            events=events,
            next_phase=self._rotate_phase(player_id),
            scores=scores,
        )

    def _end_game(
        self,
        game_data: dict,
        events: list[Event],
        players: list[Player],
        reason: str,
    ) -> TransitionResult:
        final_scores = {p.player_id: float(game_data["moves"]) for p in players}
        winners = [p.player_id for p in players] if reason == "solved" else []

        events.append(Event(
            event_type="game_ended",
            payload={
                "final_scores": final_scores,
                "winners": winners,
                "reason": reason,
            },
        ))

        return TransitionResult(
            game_data=game_data,
            events=events,
            next_phase=Phase(name=GAME_OVER, auto_resolve=False),
            scores=final_scores,
            game_over=GameResult(
                winners=winners,
                final_scores=final_scores,
                reason=reason,
            ),
        )
