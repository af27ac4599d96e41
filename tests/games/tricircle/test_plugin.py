"""Tests for the tri-circle plugin: puzzle sessions through the engine."""

from __future__ import annotations

from puzzlebox.engine.game_simulator import SimulationState, apply_action_and_resolve
from puzzlebox.engine.models import Action, GameConfig, Phase
from puzzlebox.engine.protocol import DISCONNECT_POLICY_ABANDON_ALL, GamePlugin
from puzzlebox.engine.validation import validate_plugin
from puzzlebox.games.tricircle.oracle import is_identity_solved
from puzzlebox.games.tricircle.plugin import (
    AUTO_SOLVE,
    REPLAY_SOLUTION,
    RESTART,
    ROTATE,
    UNDO,
    TriCirclePlugin,
    pieces_from_data,
    pieces_to_data,
)
from puzzlebox.games.tricircle.rotation import apply_moves, solved_pieces
from puzzlebox.games.tricircle.types import Direction, Move


def _start(plugin, players, config):
    game_data, phase, _events = plugin.create_initial_state(players, config)
    return game_data, phase


def _rotate(player_id: str, circle_id: int, direction: str) -> Action:
    return Action(
        action_type=ROTATE,
        player_id=player_id,
        payload={"circle_id": circle_id, "direction": direction},
    )


def _other_circle(game_data: dict, preferred: int) -> int:
    """*preferred*, unless the scramble used it (then the same-radius circle of the next cluster)."""
    if game_data["scramble"][-1]["circle_id"] != preferred:
        return preferred
    return (preferred + 3) % 9


def _undo_scramble_action(game_data: dict, player_id: str) -> Action:
    last = Move.model_validate(game_data["scramble"][-1])
    return _rotate(player_id, last.circle_id, last.direction.inverse.value)


class TestClassAttributes:
    def test_game_id(self, plugin) -> None:
        assert plugin.game_id == "tricircle"

    def test_single_player(self, plugin) -> None:
        assert plugin.min_players == 1
        assert plugin.max_players == 1

    def test_disconnect_policy(self, plugin) -> None:
        assert plugin.disconnect_policy == DISCONNECT_POLICY_ABANDON_ALL

    def test_satisfies_protocol(self, plugin) -> None:
        assert isinstance(plugin, GamePlugin)

    def test_passes_validation(self, plugin) -> None:
        assert validate_plugin(plugin) == []


class TestCreateInitialState:
    def test_game_data_structure(self, plugin, players, one_move_config) -> None:
        game_data, phase = _start(plugin, players, one_move_config)
        assert len(game_data["pieces"]) == 54
        assert game_data["pieces"] == game_data["initial_pieces"]
        assert game_data["history"] == []
        assert game_data["moves"] == 0
        assert game_data["is_solved"] is False
        assert phase.name == ROTATE
        assert phase.expected_actions[0].player_id == "p1"

    def test_difficulty_sets_scramble_length(self, plugin, players) -> None:
        config = GameConfig(options={"difficulty": "easy"}, random_seed=1)
        game_data, _ = _start(plugin, players, config)
        assert len(game_data["scramble"]) == 5

    def test_default_scramble_length(self, plugin, players) -> None:
        game_data, _ = _start(plugin, players, GameConfig(random_seed=1))
        assert len(game_data["scramble"]) == 10

    def test_scramble_matches_pieces(self, plugin, players) -> None:
        game_data, _ = _start(plugin, players, GameConfig(random_seed=5))
        moves = [Move.model_validate(m) for m in game_data["scramble"]]
        assert pieces_to_data(apply_moves(solved_pieces(), moves)) == game_data["pieces"]

    def test_same_seed_same_state(self, plugin, players) -> None:
        config = GameConfig(options={"scramble_moves": 20}, random_seed=3)
        assert _start(plugin, players, config) == _start(plugin, players, config)


class TestValidateConfig:
    def test_empty_ok(self, plugin) -> None:
        assert plugin.validate_config({}) == []

    def test_known_difficulty(self, plugin) -> None:
        assert plugin.validate_config({"difficulty": "expert"}) == []

    def test_unknown_difficulty(self, plugin) -> None:
        assert plugin.validate_config({"difficulty": "impossible"})

    def test_bad_scramble_moves(self, plugin) -> None:
        assert plugin.validate_config({"scramble_moves": 0})
        assert plugin.validate_config({"scramble_moves": 1000})
        assert plugin.validate_config({"scramble_moves": 30}) == []


class TestValidActions:
    def test_initial_actions(self, plugin, players, one_move_config) -> None:
        game_data, phase = _start(plugin, players, one_move_config)
        actions = plugin.get_valid_actions(game_data, phase, "p1")
        types = [a["action_type"] for a in actions]
        assert types.count(ROTATE) == 18
        assert UNDO not in types
        assert RESTART in types
        assert AUTO_SOLVE in types

    def test_none_outside_rotate_phase(self, plugin, players, one_move_config) -> None:
        game_data, _ = _start(plugin, players, one_move_config)
        phase = Phase(name=REPLAY_SOLUTION, auto_resolve=True)
        assert plugin.get_valid_actions(game_data, phase, "p1") == []


class TestValidateAction:
    def test_valid_rotation(self, plugin, players, one_move_config) -> None:
        game_data, phase = _start(plugin, players, one_move_config)
        assert plugin.validate_action(game_data, phase, _rotate("p1", 4, "cw")) is None

    def test_missing_payload(self, plugin, players, one_move_config) -> None:
        game_data, phase = _start(plugin, players, one_move_config)
        action = Action(action_type=ROTATE, player_id="p1", payload={"circle_id": 1})
        err = plugin.validate_action(game_data, phase, action)
        assert err is not None
        assert "Missing" in err

    def test_unknown_circle(self, plugin, players, one_move_config) -> None:
        game_data, phase = _start(plugin, players, one_move_config)
        assert plugin.validate_action(game_data, phase, _rotate("p1", 9, "cw")) is not None

    def test_bad_direction(self, plugin, players, one_move_config) -> None:
        game_data, phase = _start(plugin, players, one_move_config)
        assert plugin.validate_action(game_data, phase, _rotate("p1", 1, "left")) is not None

    def test_undo_without_history(self, plugin, players, one_move_config) -> None:
        game_data, phase = _start(plugin, players, one_move_config)
        action = Action(action_type=UNDO, player_id="p1")
        assert plugin.validate_action(game_data, phase, action) == "Nothing to undo"

    def test_unknown_action_type(self, plugin, players, one_move_config) -> None:
        game_data, phase = _start(plugin, players, one_move_config)
        action = Action(action_type="flip", player_id="p1")
        assert plugin.validate_action(game_data, phase, action) is not None


class TestRotateUndoRestart:
    def test_rotate_updates_state(self, plugin, players, one_move_config) -> None:
        game_data, phase = _start(plugin, players, one_move_config)
        before = game_data["pieces"]
        circle_id = _other_circle(game_data, 7)
        result = plugin.apply_action(game_data, phase, _rotate("p1", circle_id, "ccw"), players)

        assert result.game_data["pieces"] != before
        assert result.game_data["moves"] == 1
        assert result.game_data["history"] == [{"circle_id": circle_id, "direction": "ccw"}]
        assert result.events[0].event_type == "pieces_rotated"
        assert len(result.events[0].payload["transfers"]) == 12
        assert result.next_phase.name == ROTATE
        assert result.game_over is None

    def test_undo_restores(self, plugin, players, one_move_config) -> None:
        game_data, phase = _start(plugin, players, one_move_config)
        before = list(game_data["pieces"])
        circle_id = _other_circle(game_data, 2)
        result = plugin.apply_action(game_data, phase, _rotate("p1", circle_id, "cw"), players)
        result = plugin.apply_action(
            result.game_data, result.next_phase,
            Action(action_type=UNDO, player_id="p1"), players,
        )
        assert result.game_data["pieces"] == before
        assert result.game_data["moves"] == 0
        assert result.game_data["history"] == []

    def test_restart_restores_scramble(self, plugin, players, one_move_config) -> None:
        game_data, phase = _start(plugin, players, one_move_config)
        circle_id = _other_circle(game_data, 5)
        result = plugin.apply_action(game_data, phase, _rotate("p1", circle_id, "ccw"), players)
        assert result.game_data["moves"] == 1
        result = plugin.apply_action(
            result.game_data, result.next_phase,
            Action(action_type=RESTART, player_id="p1"), players,
        )
        assert result.game_data["pieces"] == result.game_data["initial_pieces"]
        assert result.game_data["moves"] == 0
        assert result.events[0].event_type == "puzzle_restarted"

    def test_solving_by_hand_ends_game(self, plugin, players, one_move_config) -> None:
        game_data, phase = _start(plugin, players, one_move_config)
        result = plugin.apply_action(
            game_data, phase, _undo_scramble_action(game_data, "p1"), players,
        )
        assert result.game_data["is_solved"] is True
        assert result.game_over is not None
        assert result.game_over.reason == "solved"
        assert result.game_over.winners == ["p1"]
        assert result.next_phase.name == "game_over"
        assert result.events[-1].event_type == "game_ended"


class TestAutoSolve:
    def test_auto_solve_replays_to_identity(self, plugin, players, one_move_config) -> None:
        game_data, phase = _start(plugin, players, one_move_config)
        state = SimulationState(game_data=game_data, phase=phase, players=players)

        apply_action_and_resolve(plugin, state, Action(action_type=AUTO_SOLVE, player_id="p1"))

        assert state.game_over is not None
        assert state.game_over.reason == "auto_solved"
        assert state.game_over.winners == []
        assert is_identity_solved(pieces_from_data(state.game_data["pieces"]))
        assert state.game_data["pending_moves"] == []
        assert state.game_data["moves"] == 0

    def test_multi_step_replay(self, plugin, players, one_move_config) -> None:
        game_data, phase = _start(plugin, players, one_move_config)
        twisted = apply_moves(
            solved_pieces(),
            [Move(circle_id=1, direction=Direction.CW)] * 2,
        )
        game_data["pieces"] = pieces_to_data(twisted)
        game_data["is_solved"] = False

        result = plugin.apply_action(
            game_data, phase, Action(action_type=AUTO_SOLVE, player_id="p1"), players,
        )
        assert result.next_phase.name == REPLAY_SOLUTION
        assert result.next_phase.auto_resolve is True
        assert len(result.game_data["pending_moves"]) == 2
        assert result.events[0].event_type == "solution_found"

        state = SimulationState(
            game_data=result.game_data, phase=result.next_phase, players=players,
        )
        apply_action_and_resolve(
            plugin, state, Action(action_type=REPLAY_SOLUTION, player_id="p1"),
            validate=False,
        )
        rotated = [e for e in state.events if e.event_type == "pieces_rotated"]
        assert len(rotated) == 2
        assert all(e.payload["source"] == "solver" for e in rotated)
        assert state.game_over is not None

    def test_rejected_when_solved(self, plugin, players, one_move_config) -> None:
        game_data, phase = _start(plugin, players, one_move_config)
        game_data["pieces"] = pieces_to_data(solved_pieces())
        game_data["is_solved"] = True
        action = Action(action_type=AUTO_SOLVE, player_id="p1")
        assert plugin.validate_action(game_data, phase, action) == "Puzzle is already solved"

    def test_budget_exhausted_reports_failure(
        self, plugin, players, one_move_config, monkeypatch,
    ) -> None:
        from puzzlebox.config import settings

        monkeypatch.setattr(settings, "solver_max_states", 0)
        game_data, phase = _start(plugin, players, one_move_config)
        result = plugin.apply_action(
            game_data, phase, Action(action_type=AUTO_SOLVE, player_id="p1"), players,
        )
        assert result.events[0].event_type == "solve_failed"
        assert result.events[0].payload["status"] == "exhausted"
        assert result.next_phase.name == ROTATE
        assert result.game_data["pending_moves"] == []


class TestViews:
    def test_player_view_hides_scramble(self, plugin, players, one_move_config) -> None:
        game_data, phase = _start(plugin, players, one_move_config)
        view = plugin.get_player_view(game_data, phase, "p1", players)
        assert "scramble" not in view
        assert view["can_undo"] is False

    def test_player_view_carries_palette(self, plugin, players, one_move_config) -> None:
        game_data, phase = _start(plugin, players, one_move_config)
        view = plugin.get_player_view(game_data, phase, "p1", players)
        assert len(view["palette"]) == 6
        assert view["palette"]["red"] == "#ef4444"
        colors = {p["color"] for p in view["pieces"]}
        assert colors <= set(view["palette"])

    def test_ai_view_lists_actions(self, plugin, players, one_move_config) -> None:
        game_data, phase = _start(plugin, players, one_move_config)
        view = plugin.state_to_ai_view(game_data, phase, "p1", players)
        assert len(view["valid_actions"]) == 20

    def test_parse_ai_action(self, plugin, players, one_move_config) -> None:
        _, phase = _start(plugin, players, one_move_config)
        action = plugin.parse_ai_action(
            {"action_type": "rotate", "circle_id": 3, "direction": "cw"}, phase, "p1",
        )
        assert action.action_type == ROTATE
        assert action.payload == {"circle_id": 3, "direction": "cw"}

    def test_spectator_summary(self, plugin, players, one_move_config) -> None:
        game_data, phase = _start(plugin, players, one_move_config)
        summary = plugin.get_spectator_summary(game_data, phase, players)
        assert summary == {"moves": 0, "is_solved": False, "solving": False}
