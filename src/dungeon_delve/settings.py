from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from jsonschema import Draft202012Validator

from .exceptions import SettingsError

logger = logging.getLogger(__name__)

ENV_SEED = "DUNGEON_DELVE_SEED"
ENV_LOG_LEVEL = "DUNGEON_DELVE_LOG_LEVEL"


@lru_cache(maxsize=1)
def _load_schema() -> Dict[str, Any]:
    text = resources.files("dungeon_delve").joinpath("settings.schema.json").read_text(encoding="utf-8")
    return json.loads(text)


def _load_defaults() -> Dict[str, Any]:
    text = resources.files("dungeon_delve").joinpath("default_settings.yaml").read_text(encoding="utf-8")
    logger.debug("Loaded embedded default settings resource")
    return yaml.safe_load(text) or {}


def _deep_merge(base: dict, overlay: dict) -> dict:
    merged = dict(base)
    for k, v in (overlay or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            merged[k] = _deep_merge(base[k], v)
        else:
            merged[k] = v
    return merged


def _env_seed(raw: str) -> Union[int, str]:
    try:
        return int(raw)
    except ValueError:
        return raw


def validate_settings_dict(data: Dict[str, Any]) -> None:
    """
    Validate a merged settings mapping against the packaged JSON schema.

    Raises:
        SettingsError describing the first validation error.
    """
    validator = Draft202012Validator(_load_schema())
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
    if errors:
        for err in errors:
            logger.error("Settings validation error at %s: %s", list(err.path), err.message)
        first = errors[0]
        raise SettingsError(f"Invalid settings at {list(first.path)}: {first.message}")


@dataclass
class Settings:
    """Runtime settings for the headless runner.

    Game rules are fixed (see config.RULES); only the seed, the log level and
    the key bindings can be changed.
    """

    seed: Union[int, str, None] = None
    log_level: str = "WARNING"
    bindings: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def load(cls, user_path: Optional[Path] = None, environ: Optional[Dict[str, str]] = None) -> "Settings":
        """Load built-in defaults, overlay the optional user file, then env overrides."""
        env = os.environ if environ is None else environ
        data = _load_defaults()

        if user_path is not None:
            if not user_path.exists():
                raise SettingsError(f"Settings file not found: {user_path}")
            try:
                with user_path.open("r", encoding="utf-8") as f:
                    user_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as ex:
                raise SettingsError(f"Settings file is not valid YAML: {user_path}") from ex
            if not isinstance(user_data, dict):
                raise SettingsError(f"Settings file must contain a mapping: {user_path}")
            data = _deep_merge(data, user_data)
            logger.info("Loaded user settings from %s", user_path)

        if env.get(ENV_SEED):
            data["seed"] = _env_seed(env[ENV_SEED])
        if env.get(ENV_LOG_LEVEL):
            data["log_level"] = env[ENV_LOG_LEVEL]
        if isinstance(data.get("log_level"), str):
            data["log_level"] = data["log_level"].upper()

        validate_settings_dict(data)
        settings = cls(
            seed=data.get("seed"),
            log_level=data.get("log_level", "WARNING"),
            bindings={str(k).upper(): v for k, v in (data.get("bindings") or {}).items()},
        )
        logger.debug("Settings merged: %s", settings)
        return settings

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level, logging.WARNING)


__all__ = ["Settings", "validate_settings_dict", "ENV_SEED", "ENV_LOG_LEVEL"]
