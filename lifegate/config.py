from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .declarations import LifecycleMode


class GateSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LIFEGATE_", case_sensitive=False, extra="ignore")

    # Mode for containers with no explicit declaration anywhere on their chain.
    default_lifecycle: LifecycleMode = LifecycleMode.PER_METHOD
    log_level: str = "INFO"

    @field_validator("default_lifecycle", mode="before")
    @classmethod
    def _parse_lifecycle(cls, value: Any) -> LifecycleMode:
        return LifecycleMode.parse(value)


def load_settings(path: Optional[Union[str, Path]] = None) -> GateSettings:
    """
    Build settings from the environment, overlaid with an optional YAML file.

    The file may nest its keys under a top-level ``lifegate:`` section.
    """
    if path is None:
        return GateSettings()
    data: Dict[str, Any] = yaml.safe_load(Path(path).read_text()) or {}
    if isinstance(data.get("lifegate"), dict):
        data = data["lifegate"]
    return GateSettings(**data)


@lru_cache(maxsize=1)
def get_settings() -> GateSettings:
    return GateSettings()
