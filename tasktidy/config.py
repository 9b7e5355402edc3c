"""
Layered configuration for tasktidy.
Priority: defaults → ~/.tasktidy/config.yaml → environment variables
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from .storage.models import INTEGRATION_SOURCES, TaskSource

CONFIG_DIR = Path.home() / ".tasktidy"
CONFIG_FILE = CONFIG_DIR / "config.yaml"


class DedupConfig(BaseModel):
    similarity_threshold: float = Field(default=0.70, ge=0.0, le=1.0)
    integration_sources: list[TaskSource] = Field(
        default_factory=lambda: sorted(INTEGRATION_SOURCES, key=lambda s: s.value)
    )


class StorageConfig(BaseModel):
    data_dir: str = "~/.tasktidy/data"

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir).expanduser()

    @property
    def db_path(self) -> Path:
        return self.data_path / "tasktidy.db"


class StatsConfig(BaseModel):
    default_timeframe: str = "7 days"


class UserConfig(BaseModel):
    user_id: str = "default"


class DisplayConfig(BaseModel):
    log_level: str = "WARNING"


class Config(BaseModel):
    dedup: DedupConfig = Field(default_factory=DedupConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    stats: StatsConfig = Field(default_factory=StatsConfig)
    user: UserConfig = Field(default_factory=UserConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)

    # Convenience proxy
    @property
    def db_path(self) -> Path:
        return self.storage.db_path


def load_config(config_file: Optional[Path] = None) -> Config:
    """Load config from file with safe defaults for any missing key."""
    path = config_file or CONFIG_FILE
    raw: dict = {}

    if path.exists():
        with open(path) as f:
            loaded = yaml.safe_load(f)
            if isinstance(loaded, dict):
                raw = loaded

    # Environment variable overrides (TASKTIDY_SECTION_KEY format)
    _apply_env_overrides(raw)

    return Config(**raw)


def _apply_env_overrides(raw: dict) -> None:
    mappings = {
        "TASKTIDY_DATA_DIR": ("storage", "data_dir"),
        "TASKTIDY_USER_ID": ("user", "user_id"),
        "TASKTIDY_THRESHOLD": ("dedup", "similarity_threshold"),
        "TASKTIDY_STATS_TIMEFRAME": ("stats", "default_timeframe"),
        "TASKTIDY_LOG_LEVEL": ("display", "log_level"),
    }
    for env_key, (section, key) in mappings.items():
        val = os.getenv(env_key)
        if val:
            raw.setdefault(section, {})[key] = val
