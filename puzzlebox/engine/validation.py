from __future__ import annotations

from puzzlebox.engine.models import Action, GameConfig, Phase, Player, PlayerId
from puzzlebox.engine.protocol import DISCONNECT_POLICIES, GamePlugin

VALIDATION_SEED = 42


def _listed_action(entry: dict, player_id: PlayerId) -> Action:
    payload = dict(entry)
    action_type = payload.pop("action_type")
    return Action(action_type=action_type, player_id=player_id, payload=payload)


def validate_plugin(plugin: GamePlugin) -> list[str]:
    """Sanity-check a plugin before it is registered.

    Starts a game with a fixed seed and checks that the opening position is
    well formed, that every action the plugin lists passes its own
    ``validate_action``, and that the same seed reproduces the same state.
    Plugins may expose ``check_state(game_data) -> list[str]`` for their own
    invariants; its messages are reported as-is.

    Returns a list of errors, empty when the plugin looks usable.
    """
    errors: list[str] = []

    for attr in ("game_id", "display_name", "min_players", "max_players"):
        if not hasattr(plugin, attr):
            errors.append(f"Missing attribute: {attr}")
    if errors:
        return errors

    if plugin.min_players < 1 or plugin.max_players < plugin.min_players:
        errors.append(
            f"Invalid player range: {plugin.min_players}..{plugin.max_players}"
        )
        return errors

    policy = getattr(plugin, "disconnect_policy", None)
    if policy not in DISCONNECT_POLICIES:
        errors.append(f"Unknown disconnect policy: {policy}")

    players = [
        Player(player_id=PlayerId(f"test-{i}"), display_name=f"Test {i}", seat_index=i)
        for i in range(plugin.min_players)
    ]
    config = GameConfig(random_seed=VALIDATION_SEED)

    try:
        game_data, phase, _events = plugin.create_initial_state(players, config)
    except Exception as e:
        errors.append(f"create_initial_state failed: {e}")
        return errors

    if not isinstance(game_data, dict):
        errors.append("create_initial_state must return dict as game_data")
        return errors
    if not isinstance(phase, Phase):
        errors.append("create_initial_state must return Phase as second element")
        return errors
    if not phase.auto_resolve and not phase.expected_actions:
        errors.append("First phase is not auto_resolve but has no expected_actions")

    check_state = getattr(plugin, "check_state", None)
    try:
        if check_state is not None:
            errors.extend(check_state(game_data))

        for p in players:
            for entry in plugin.get_valid_actions(game_data, phase, p.player_id):
                action = _listed_action(entry, p.player_id)
                err = plugin.validate_action(game_data, phase, action)
                if err is not None:
                    errors.append(f"Listed action {entry} rejected: {err}")
            plugin.get_player_view(game_data, phase, p.player_id, players)

        game_data2, _phase2, _events2 = plugin.create_initial_state(players, config)
        if game_data != game_data2:
            errors.append("create_initial_state is not deterministic with same seed")
    except Exception as e:
        errors.append(f"Initial state could not be inspected: {e}")

    return errors
