from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import Limits


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DICE_CALC_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    log_level: str = "INFO"

    # Set to replay rolls across restarts; unset means secrets.SystemRandom.
    random_seed: int | None = None

    # Bounds the server applies before evaluating. Total dice across the expression.
    max_dice: int = 100000
    max_sides: int = 1000000
    max_depth: int = 200

    def limits(self) -> Limits:
        return Limits(max_dice=self.max_dice, max_sides=self.max_sides, max_depth=self.max_depth)


@lru_cache
def get_settings() -> Settings:
    return Settings()
