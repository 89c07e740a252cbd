"""Per-plugin manifest files: version descriptors, subplugins, class renames."""

from __future__ import annotations

import json
import math
import numbers
from pathlib import Path
from typing import Any

import yaml

from frankenstyle.kernel.logging import EventLogger
from frankenstyle.kernel.paths import load_data_file

MANIFEST_SUFFIXES = (".json", ".yaml", ".yml")

VERSION_STEM = "version"
SUBPLUGINS_STEM = "db/subplugins"
RENAMED_CLASSES_STEM = "db/renamedclasses"


def find_manifest(fulldir: str | Path, stem: str) -> Path | None:
    """Return the first existing ``<fulldir>/<stem><suffix>`` file."""
    base = Path(fulldir)
    for suffix in MANIFEST_SUFFIXES:
        candidate = base / f"{stem}{suffix}"
        if candidate.is_file():
            return candidate
    return None


def load_mapping(path: Path, logger: EventLogger | None = None) -> dict[str, Any] | None:
    """Load a manifest that must contain a mapping; None when unusable."""
    try:
        data = load_data_file(path)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as exc:
        _log_invalid(logger, path, f"{type(exc).__name__}: {exc}")
        return None
    if not isinstance(data, dict):
        _log_invalid(logger, path, f"expected a mapping, got {type(data).__name__}")
        return None
    return data


def _coerce_version(value: Any) -> int | float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        number = float(value)
    elif isinstance(value, str):
        try:
            if not any(ch in value for ch in ".eE"):
                return int(value)
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def read_version(fulldir: str | Path, logger: EventLogger | None = None) -> int | float | None:
    """Read the numeric ``version`` field of the descriptor in ``fulldir``."""
    path = find_manifest(fulldir, VERSION_STEM)
    if path is None:
        return None
    data = load_mapping(path, logger)
    if data is None:
        return None
    raw = data.get("version")
    version = _coerce_version(raw)
    if version is None and raw is not None:
        _log_invalid(logger, path, f"version must be a finite number, got {raw!r}")
    return version


def read_subplugins(ownerdir: str | Path, logger: EventLogger | None = None) -> dict[str, str]:
    path = find_manifest(ownerdir, SUBPLUGINS_STEM)
    if path is None:
        return {}
    data = load_mapping(path, logger)
    if data is None:
        return {}
    # The table may also be wrapped in a key named after the manifest.
    if isinstance(data.get("subplugins"), dict):
        data = data["subplugins"]
    subtypes: dict[str, str] = {}
    for subtype, subdir in data.items():
        if not isinstance(subdir, str):
            _log_invalid(logger, path, f"subplugin directory for {subtype!r} must be a string")
            continue
        subtypes[str(subtype)] = subdir
    return subtypes


def read_renamed_classes(fulldir: str | Path, logger: EventLogger | None = None) -> dict[str, str]:
    path = find_manifest(fulldir, RENAMED_CLASSES_STEM)
    if path is None:
        return {}
    data = load_mapping(path, logger)
    if data is None:
        return {}
    if isinstance(data.get("renamedclasses"), dict):
        data = data["renamedclasses"]
    return {str(old): str(new) for old, new in data.items()}


def _log_invalid(logger: EventLogger | None, path: Path, error: str) -> None:
    if logger is not None:
        logger.event(event="component.manifest_invalid", level="error", path=str(path), error=error)
