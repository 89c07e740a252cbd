"""Path resolution helpers for packaged resources and per-user directories."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import importlib.resources as resources

import yaml
from platformdirs import PlatformDirs

_APP_NAME = "frankenstyle"
_PACKAGE = "frankenstyle"


def _platform_dirs() -> PlatformDirs:
    return PlatformDirs(_APP_NAME, appauthor=False)


def default_cache_dir() -> Path:
    return Path(_platform_dirs().user_cache_dir)


def default_log_dir() -> Path:
    return Path(_platform_dirs().user_log_dir)


def resource_text(rel_path: str) -> str:
    target = resources.files(_PACKAGE).joinpath(rel_path)
    if not target.is_file():
        raise FileNotFoundError(f"Missing packaged resource: {rel_path}")
    return target.read_text(encoding="utf-8")


def resource_json(rel_path: str) -> dict[str, Any]:
    return json.loads(resource_text(rel_path))


def resource_yaml(rel_path: str) -> dict[str, Any]:
    data = yaml.safe_load(resource_text(rel_path))
    return data if isinstance(data, dict) else {}


def load_data_file(path: str | Path) -> Any:
    """Load a JSON or YAML data file, chosen by suffix."""
    file_path = Path(path)
    text = file_path.read_text(encoding="utf-8")
    if file_path.suffix.lower() in {".yaml", ".yml"}:
        return yaml.safe_load(text)
    return json.loads(text)


def is_writable_dir(path: Path) -> bool:
    return path.is_dir() and os.access(path, os.W_OK)


def same_path(a: str | Path, b: str | Path) -> bool:
    return os.path.realpath(str(a)) == os.path.realpath(str(b))
