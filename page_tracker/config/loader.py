"""Settings file loading helpers."""

from __future__ import annotations

import json
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..errors import ConfigError
from .models import ClientSettings, OutputDestination

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")
CONFIG_ENV_VAR = "PAGE_TRACKER_CONFIG"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot parse configuration file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file must contain a mapping: {path}")
    return data


def load_settings(path: Path | None = None) -> ClientSettings:
    """Load client settings from ``path``; defaults apply when no file is given."""

    if path is None:
        return ClientSettings()
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")
    if path.suffix not in CONFIG_EXTENSIONS:
        raise ConfigError(f"Unsupported settings file type {path.suffix!r}: {path}")
    payload = _read_file(path)
    try:
        return ClientSettings.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings in {path}: {exc}") from exc


def build_destination(
    output: Path | None, output_dir: Path | None, output_format: str
) -> OutputDestination:
    """Validate the destination options, translating conflicts into ``ConfigError``."""

    try:
        return OutputDestination(output=output, output_dir=output_dir, output_format=output_format)
    except ValidationError as exc:
        messages = "; ".join(error["msg"].removeprefix("Value error, ") for error in exc.errors())
        raise ConfigError(messages) from exc


__all__ = [
    "CONFIG_ENV_VAR",
    "CONFIG_EXTENSIONS",
    "build_destination",
    "load_settings",
]
