"""tempguard configuration.

Config files:
  - Global:  ~/.config/tempguard/config.json
  - Project: .tempguard.json (current directory)

Merge order: defaults → global → project → environment variables (highest priority).
"""

import json
import logging
import os
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)


class Scope(str, Enum):
    GLOBAL = "global"
    PROJECT = "project"


DEFAULTS: Dict[str, Any] = {
    "temp_dir": None,
    "suffix": ".tmp",
    "debug": False,
    "log_file": str(Path.home() / ".cache" / "tempguard" / "tempguard.log"),
    "sweep_age_s": 3600,
}


def config_path(scope: Scope) -> Path:
    if scope is Scope.PROJECT:
        return Path.cwd() / ".tempguard.json"
    return Path.home() / ".config" / "tempguard" / "config.json"


def _read_json(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.warning("Ignoring unreadable config file %s", path, exc_info=True)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: top level is not an object", path)
        return {}
    return data


# config key → env var name
_ENV_OVERRIDES: list[tuple[str, str]] = [
    ("temp_dir", "TEMPGUARD_TEMP_DIR"),
    ("suffix", "TEMPGUARD_SUFFIX"),
    ("debug", "TEMPGUARD_DEBUG"),
    ("log_file", "TEMPGUARD_LOG_FILE"),
    ("sweep_age_s", "TEMPGUARD_SWEEP_AGE_S"),
]


def load_config() -> Dict[str, Any]:
    """Load merged config: defaults → global → project → env vars."""
    merged: Dict[str, Any] = {**DEFAULTS}
    merged.update(_read_json(config_path(Scope.GLOBAL)))
    merged.update(_read_json(config_path(Scope.PROJECT)))
    _check_sweep_age(merged)

    # Environment variables override everything
    _apply_env_overrides(merged)

    return merged


def _check_sweep_age(merged: Dict[str, Any]) -> None:
    val = merged.get("sweep_age_s")
    if isinstance(val, int) and not isinstance(val, bool):
        return
    logger.warning("Invalid sweep_age_s value %r in config file; using %d",
                   val, DEFAULTS["sweep_age_s"])
    merged["sweep_age_s"] = DEFAULTS["sweep_age_s"]


def _apply_env_overrides(merged: Dict[str, Any]) -> None:
    for config_key, env_var in _ENV_OVERRIDES:
        val = os.environ.get(env_var)
        if not val:
            continue
        if config_key == "sweep_age_s":
            try:
                merged[config_key] = int(val)
            except ValueError:
                logger.warning("Invalid %s value %r; ignoring", env_var, val)
        elif config_key == "debug":
            merged[config_key] = val.lower() == "true"
        else:
            merged[config_key] = val


@lru_cache(maxsize=1)
def current() -> Dict[str, Any]:
    """Merged config for this process, loaded once."""
    return load_config()


def reload() -> Dict[str, Any]:
    """Drop the cached config and load it again."""
    current.cache_clear()
    return current()
