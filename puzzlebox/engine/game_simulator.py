"""Synchronous game simulator: advances game state through auto-resolve phases.

Used to replay a solver's move list step by step and by bots that play a
puzzle without any async or network layer.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field

from puzzlebox.engine.errors import InvalidActionError, PluginError
from puzzlebox.engine.models import Action, Event, GameResult, Phase, Player, PlayerId
from puzzlebox.engine.protocol import GamePlugin

MAX_AUTO_STEPS = 1000


@dataclass
class SimulationState:
    """Mutable game state for synchronous simulation."""

    game_data: dict
    phase: Phase
    players: list[Player]
    scores: dict[str, float] = field(default_factory=dict)
    game_over: GameResult | None = None
    events: list[Event] = field(default_factory=list)


def apply_action_and_resolve(
    plugin: GamePlugin,
    state: SimulationState,
    action: Action,
    validate: bool = True,
) -> None:
    """Apply an action and auto-resolve all subsequent auto-resolve phases.

    Mutates *state* in place.  After return, ``state.phase`` is either a
    non-auto-resolve phase (player needs to act) or ``state.game_over`` is set.
    Every emitted event is appended to ``state.events``.
    """
    if validate:
        error = plugin.validate_action(state.game_data, state.phase, action)
        if error is not None:
            raise InvalidActionError(error, action)

    _step(plugin, state, action)

    if state.game_over:
        return

    steps = 0
    while state.phase.auto_resolve and not state.game_over:
        steps += 1
        if steps > MAX_AUTO_STEPS:
            raise PluginError(
                f"Phase '{state.phase.name}' did not settle after {MAX_AUTO_STEPS} auto steps"
            )

        pid = _phase_player_id(state.phase, state.players)
        synthetic = Action(action_type=state.phase.name, player_id=pid)
        _step(plugin, state, synthetic)


def clone_state(state: SimulationState) -> SimulationState:
    """Deep-copy a simulation state.

    ``players`` is shared (immutable during a game).
    """
    return SimulationState(
        game_data=copy.deepcopy(state.game_data),
        phase=state.phase.model_copy(deep=True),
        players=state.players,  # shared, never mutated
        scores=dict(state.scores),
        game_over=state.game_over,
        events=list(state.events),
    )


def _step(plugin: GamePlugin, state: SimulationState, action: Action) -> None:
    result = plugin.apply_action(
        state.game_data, state.phase, action, state.players
    )
    state.game_data = result.game_data
    state.phase = result.next_phase
    state.scores = result.scores or state.scores
    state.game_over = result.game_over
    state.events.extend(result.events)


def _phase_player_id(phase: Phase, players: list[Player]) -> PlayerId:
    """Extract the acting player from a phase, falling back to first player."""
    if phase.expected_actions:
        pid = phase.expected_actions[0].player_id
        if pid is not None:
            return pid
    pi = phase.metadata.get("player_index")
    if pi is not None and pi < len(players):
        return players[pi].player_id
    return players[0].player_id if players else PlayerId("system")
