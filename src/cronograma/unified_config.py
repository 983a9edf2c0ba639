"""Unified configuration loader.

A single configuration file (cronograma_config.yaml) holds the default working
calendar and the engine settings. A snapshot that carries its own
``calendar`` section takes precedence over the configured one.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from .calendar import WorkingCalendarConfig
from .scheduler import EngineConfig

DEFAULT_CONFIG_FILE = "cronograma_config.yaml"


class UnifiedConfig(BaseModel):
    """Unified configuration containing calendar and engine settings."""

    calendar: WorkingCalendarConfig = Field(default_factory=WorkingCalendarConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)


def load_unified_config(config_path: Path | str) -> UnifiedConfig:
    """Load unified configuration from YAML file.

    Args:
        config_path: Path to cronograma_config.yaml file

    Returns:
        UnifiedConfig with calendar and engine settings

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open(encoding="utf-8") as f:
        data: Any = yaml.safe_load(f)

    if not data:
        raise ValueError("Empty configuration file")
    if not isinstance(data, dict):
        raise ValueError("Config must contain a dictionary at the root level")

    unknown = set(data) - {"calendar", "engine"}  # type: ignore[arg-type]
    if unknown:
        raise ValueError(f"Unknown config section(s): {', '.join(sorted(unknown))}")

    # pydantic's ValidationError is a ValueError
    calendar_config = WorkingCalendarConfig()
    if data.get("calendar"):
        calendar_config = WorkingCalendarConfig.model_validate(data["calendar"])

    engine_config = EngineConfig()
    if data.get("engine"):
        engine_config = EngineConfig.model_validate(data["engine"])

    return UnifiedConfig(calendar=calendar_config, engine=engine_config)
