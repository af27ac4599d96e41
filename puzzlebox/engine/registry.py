from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from puzzlebox.engine.validation import validate_plugin

if TYPE_CHECKING:
    from puzzlebox.engine.protocol import GamePlugin

logger = logging.getLogger(__name__)


class PluginRegistry:
    """Keeps the game plugins available to the engine, keyed by game_id."""

    def __init__(self) -> None:
        self._plugins: dict[str, GamePlugin] = {}

    def register(self, plugin: GamePlugin, validate: bool = False) -> None:
        game_id = plugin.game_id
        if game_id in self._plugins:
            raise ValueError(f"Game '{game_id}' already registered")
        if validate:
            errors = validate_plugin(plugin)
            if errors:
                raise ValueError(f"Plugin '{game_id}' failed validation: {'; '.join(errors)}")
        self._plugins[game_id] = plugin
        logger.info(f"Registered game plugin: {game_id}")

    def get(self, game_id: str) -> GamePlugin:
        if game_id not in self._plugins:
            raise KeyError(f"Unknown game: {game_id}")
        return self._plugins[game_id]

    def list_games(self) -> list[dict]:
        return [
            {
                "game_id": p.game_id,
                "display_name": p.display_name,
                "min_players": p.min_players,
                "max_players": p.max_players,
                "description": p.description,
            }
            for p in self._plugins.values()
        ]


def default_registry() -> PluginRegistry:
    """Registry holding every built-in game."""
    from puzzlebox.games.tricircle.plugin import TriCirclePlugin

    registry = PluginRegistry()
    registry.register(TriCirclePlugin())
    return registry
