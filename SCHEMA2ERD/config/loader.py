"""Read config.yaml, optionally from a path named in the environment."""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_ENV_VAR = "SCHEMA2ERD_CONFIG"
PACKAGED_CONFIG = Path(__file__).parent / "config.yaml"


def config_path() -> Path:
    """Path of the active config file.

    `$SCHEMA2ERD_CONFIG` wins over the packaged `config.yaml`. Raises
    FileNotFoundError when the chosen file does not exist; callers that can
    run on built-in defaults catch it.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    path = Path(override).expanduser() if override else PACKAGED_CONFIG
    if not path.is_file():
        raise FileNotFoundError(f"SCHEMA2ERD config not found at {path}")
    return path


@lru_cache(maxsize=1)
def load_config() -> Dict[str, Any]:
    """Whole config as a dict (cached; see `reload_config`)."""
    with config_path().open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{config_path()} must hold a mapping of sections")
    return data


def reload_config() -> None:
    """Forget the cached config so the next read hits the file again."""
    load_config.cache_clear()


def get_config(section: Optional[str] = None) -> Any:
    """One section of the config (empty dict if absent), or all of it."""
    config = load_config()
    if section is None:
        return config
    return config.get(section) or {}
