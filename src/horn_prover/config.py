"""Prover configuration.

Mirrors the pydantic-settings pattern used across the project: values come
from environment variables (prefix HORN_) or a .env file.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class ProverSettings(BaseSettings):
    """Configuration for the prover and its command line front end."""

    # ----- Search -----
    max_depth: int = Field(
        default=200,
        ge=1,
        description="Deepest goal nesting before a query fails with ProofDepthError.",
    )

    # ----- Front end -----
    log_level: str = Field(
        default="WARNING",
        description="Root log level for the command line front end.",
    )
    prompt: str = Field(default="> ", description="Interactive prompt.")
    trace_unicode: bool = Field(
        default=True,
        description="Draw proof trees with box-drawing characters instead of ASCII.",
    )

    model_config = {
        "env_prefix": "HORN_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> ProverSettings:
    """Get cached settings singleton."""
    return ProverSettings()
