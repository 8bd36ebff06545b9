from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional, Tuple

import yaml
from pydantic import BaseModel

Environment = Literal["production", "staging"]

# Build order.
ENVIRONMENTS: Tuple[Environment, ...] = ("production", "staging")


class JWKSetConfig(BaseModel):
    """Top-level configuration model."""

    base_dir: Path = Path(".")
    output_dir: Path = Path("dist")
    log_level: str = "WARNING"

    def environment_dir(self, env: Environment) -> Path:
        return self.base_dir / env

    @property
    def dist_dir(self) -> Path:
        if self.output_dir.is_absolute():
            return self.output_dir
        return self.base_dir / self.output_dir


def load_config(path: Optional[str] = None) -> JWKSetConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to JWKSET_CONFIG env
            variable or 'jwkset.yaml' in the current directory.
    """

    config_path = path or os.getenv("JWKSET_CONFIG", "jwkset.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = JWKSetConfig(**data)
    else:
        config = JWKSetConfig()

    env_base_dir = os.getenv("JWKSET_BASE_DIR")
    if env_base_dir:
        config.base_dir = Path(env_base_dir)
    env_log_level = os.getenv("JWKSET_LOG_LEVEL")
    if env_log_level:
        config.log_level = env_log_level
    config.log_level = config.log_level.upper()
    return config
