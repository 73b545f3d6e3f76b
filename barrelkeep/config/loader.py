"""Config file discovery and parsing."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from barrelkeep.config.schema import ConfigModel, ResolvedConfig, resolve_defaults
from barrelkeep.errors import ConfigInvalid, ConfigNotFound
from barrelkeep.logger import get_logger

logger = get_logger(__name__)

CONFIG_NAMES = (
    "barrelkeep.config.yaml",
    "barrelkeep.config.yml",
    "barrelkeep.config.json",
)


def find_config(cwd: str, config_path: Optional[str] = None) -> Path:
    """Return the config file to load, raising ConfigNotFound when absent."""
    if config_path:
        path = Path(cwd, config_path).resolve()
        if not path.is_file():
            raise ConfigNotFound(cwd, [str(path)])
        return path
    for name in CONFIG_NAMES:
        path = Path(cwd, name)
        if path.is_file():
            return path.resolve()
    raise ConfigNotFound(cwd, CONFIG_NAMES)


def _parse(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def load_config(cwd: str, config_path: Optional[str] = None) -> ConfigModel:
    """Find, parse and validate the config file.

    Raises:
        ConfigNotFound: no config file exists.
        ConfigInvalid: the file cannot be parsed or fails schema validation.
    """
    path = find_config(cwd, config_path)
    try:
        raw = _parse(path)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise ConfigInvalid(str(path), str(exc)) from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigInvalid(str(path), "top-level value must be a mapping")

    try:
        config = ConfigModel.model_validate(raw)
    except ValidationError as exc:
        raise ConfigInvalid(str(path), str(exc)) from exc

    logger.debug("Loaded config", extra={"path": str(path), "rules": len(config.rules or [])})
    return config


def load_resolved_config(cwd: str, config_path: Optional[str] = None) -> ResolvedConfig:
    return resolve_defaults(load_config(cwd, config_path))


def config_file_names(cwd: str, config_path: Optional[str] = None) -> tuple[str, ...]:
    """Root-relative names the watcher treats as 'the config file'."""
    if config_path:
        full = os.path.join(os.path.abspath(cwd), config_path)
        return (os.path.relpath(full, os.path.abspath(cwd)).replace(os.sep, "/"),)
    return CONFIG_NAMES


STARTER_CONFIG = """\
# barrelkeep configuration
rules:
  - dirs: "src/**"
    modules:
      - include: "./*.ts"
        style: star
"""
