"""Configuration loading for externgen (.externgen.yml)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".externgen.yml"
DEFAULT_OUTPUT_EXTENSION = ".externs"


@dataclass
class ExternGenConfig:
    """Represents the settings defined in .externgen.yml."""

    root: Path
    output_extension: str = DEFAULT_OUTPUT_EXTENSION
    echo: bool = True
    log_file: Optional[Path] = None


def load_config(config_path: Path) -> ExternGenConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ExternGenConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = ExternGenConfig(root=root)

    extension = _as_str(data.get("output_extension"))
    if extension:
        config.output_extension = extension if extension.startswith(".") else f".{extension}"

    echo = _as_bool(data.get("echo"))
    if echo is not None:
        config.echo = echo

    log_file = _as_str(data.get("log_file"))
    if log_file:
        config.log_file = root / log_file

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix not in {".yml", ".yaml"}:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


__all__ = ["CONFIG_FILENAME", "DEFAULT_OUTPUT_EXTENSION", "ExternGenConfig", "load_config"]
