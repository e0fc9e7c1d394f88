"""Service-level settings read from the environment."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, Field


class ServiceConfig(BaseModel):
    """Settings for the match service and the automated opponent."""

    computer_player_id: str = "computer"
    computer_think_seconds: float = Field(default=0.0, ge=0.0)
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, **overrides: Any) -> "ServiceConfig":
        """Construct config from `SALVO_*` env vars; explicit overrides win."""

        data: Dict[str, Any] = {}
        env_fields = {
            "computer_player_id": "SALVO_COMPUTER_PLAYER_ID",
            "computer_think_seconds": "SALVO_COMPUTER_THINK_SECONDS",
            "log_level": "SALVO_LOG_LEVEL",
        }
        for name, env_name in env_fields.items():
            value = os.getenv(env_name)
            if value is not None and value.strip():
                data[name] = value.strip()
        data.update(overrides)
        return cls(**data)


@lru_cache(maxsize=1)
def load_service_config() -> ServiceConfig:
    return ServiceConfig.from_env()
