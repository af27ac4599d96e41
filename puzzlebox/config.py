from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    debug: bool = False
    log_level: str = "INFO"

    # Solver
    solver_max_states: int = 25000

    # Scrambling
    default_scramble_moves: int = 10
    max_scramble_moves: int = 999

    model_config = SettingsConfigDict(
        env_prefix="PUZZLEBOX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


settings = Settings()
