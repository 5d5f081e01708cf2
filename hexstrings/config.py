from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Ruleset used when no mode is given ("hex" or "path")
    default_mode: str = "path"

    # Monte Carlo bot budgets
    mc_num_playouts: int = 8
    mc_playout_depth: int = 6
    mc_max_candidates: int = 12
    mc_heuristic_weight: float = 0.5
    mc_hand_weight: float = 0.25

    # Arena
    arena_max_moves: int = 5000

    model_config = SettingsConfigDict(
        env_prefix="HEXSTRINGS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


settings = Settings()
