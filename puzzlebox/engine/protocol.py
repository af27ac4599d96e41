from __future__ import annotations

from typing import ClassVar, Protocol, runtime_checkable

from puzzlebox.engine.models import (
    Action,
    Event,
    GameConfig,
    Phase,
    Player,
    PlayerId,
    TransitionResult,
)

# Allowed values for the disconnect_policy ClassVar
DISCONNECT_POLICY_ABANDON_ALL = "abandon_all"
DISCONNECT_POLICY_FORFEIT_PLAYER = "forfeit_player"
DISCONNECT_POLICIES = frozenset({
    DISCONNECT_POLICY_ABANDON_ALL,
    DISCONNECT_POLICY_FORFEIT_PLAYER,
})


@runtime_checkable
class GamePlugin(Protocol):
    """Interface between the engine and a game or puzzle.

    Plugins own all rules. ``game_data`` is a plain JSON-friendly dict that
    the engine stores and hands back untouched; phases with
    ``auto_resolve=True`` are advanced by the engine with a synthetic action
    named after the phase.
    """

    game_id: ClassVar[str]
    display_name: ClassVar[str]
    min_players: ClassVar[int]
    max_players: ClassVar[int]
    description: ClassVar[str]
    config_schema: ClassVar[dict]
    disconnect_policy: ClassVar[str]

    def create_initial_state(
        self,
        players: list[Player],
        config: GameConfig,
    ) -> tuple[dict, Phase, list[Event]]:
        """Return (game_data, first phase, opening events).

        Must be deterministic for a given ``config.random_seed``.
        """
        ...

    def validate_config(self, options: dict) -> list[str]:
        ...

    def get_valid_actions(
        self,
        game_data: dict,
        phase: Phase,
        player_id: PlayerId,
    ) -> list[dict]:
        """Every action the player may take now, each as a payload dict."""
        ...

    def validate_action(
        self,
        game_data: dict,
        phase: Phase,
        action: Action,
    ) -> str | None:
        """Return an error message, or None if the action is legal."""
        ...

    def apply_action(
        self,
        game_data: dict,
        phase: Phase,
        action: Action,
        players: list[Player],
    ) -> TransitionResult:
        ...

    def get_player_view(
        self,
        game_data: dict,
        phase: Phase,
        player_id: PlayerId | None,
        players: list[Player],
    ) -> dict:
        ...

    def state_to_ai_view(
        self,
        game_data: dict,
        phase: Phase,
        player_id: PlayerId,
        players: list[Player],
    ) -> dict:
        ...

    def parse_ai_action(
        self,
        response: dict,
        phase: Phase,
        player_id: PlayerId,
    ) -> Action:
        ...

    def get_spectator_summary(
        self,
        game_data: dict,
        phase: Phase,
        players: list[Player],
    ) -> dict:
        ...
