"""Configuration for the process-wide settings store.

Settings are read from a YAML file: an explicit path, else the path in the
`STORED_CONFIG` environment variable, else `data/config/stored_config.yml`.
A missing file yields the defaults (in-memory backend).
"""
from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel

logger = logging.getLogger(__name__)

CONFIG_ENV = "STORED_CONFIG"
CONFIG_PATH = Path("data/config/stored_config.yml")


class StoreConfig(BaseModel):
    backend: Literal["memory", "file", "single_file"] = "memory"
    namespace: str = "standard"
    data_dir: str = "./data"
    file_path: Optional[str] = None
    serializer: Optional[Literal["pickle", "json", "yaml"]] = None
    log_level: str = "WARNING"


def load_yaml_file(path: Path) -> dict:
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def resolve_config_path(config_path: Optional[Path] = None) -> Path:
    if config_path is not None:
        return Path(config_path)
    env = os.getenv(CONFIG_ENV)
    return Path(env) if env else CONFIG_PATH


def load_config(config_path: Optional[Path] = None) -> StoreConfig:
    """Load `StoreConfig`, raising pydantic's ValidationError on bad content."""
    path = resolve_config_path(config_path)
    raw = load_yaml_file(path)
    cfg = StoreConfig(**raw)
    logger.debug("Loaded store config from %s: backend=%s namespace=%s", path, cfg.backend, cfg.namespace)
    return cfg
