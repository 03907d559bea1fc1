from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_MAX_RESOLUTION_STEPS = 10_000
DEFAULT_MAX_DICE = 1_000


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DICE_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Draws allowed per die before a reroll/explode loop is abandoned.
    # None restores unbounded looping.
    max_resolution_steps: int | None = DEFAULT_MAX_RESOLUTION_STEPS

    # Dice a single roll may throw, summed over all terms. None disables the check.
    max_dice: int | None = DEFAULT_MAX_DICE

    # Set to get reproducible rolls from the server.
    rng_seed: int | None = None

    log_level: str = "INFO"
    server_name: str = "mcp-dice-notation"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
