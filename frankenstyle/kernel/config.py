"""Configuration loading, merging, and validation."""

from __future__ import annotations

import os
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import ConfigError
from .paths import default_cache_dir, default_log_dir, resource_yaml
from .schema_registry import format_issues, schemas

CONFIG_SCHEMA = "schemas/config.schema.json"
DEFAULTS_RESOURCE = "config/default.yaml"
DEFAULT_CONFIG_PATH = Path("frankenstyle.yaml")

_ENV_PATHS = {
    "FRANKENSTYLE_DIRROOT": "dirroot",
    "FRANKENSTYLE_CACHEDIR": "cachedir",
    "FRANKENSTYLE_ALTERNATIVE_COMPONENT_CACHE": "alternative_component_cache",
}
_ENV_FLAGS = {
    "FRANKENSTYLE_DEVELOPER": "developer_mode",
    "FRANKENSTYLE_CACHE_DISABLE_ALL": "cache_disable_all",
    "FRANKENSTYLE_IGNORE_COMPONENT_CACHE": "ignore_component_cache",
}


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


def _env_flag(raw: str | None, *, default: bool) -> bool:
    if raw is None:
        return bool(default)
    text = str(raw).strip().casefold()
    if text in {"1", "true", "yes", "on"}:
        return True
    if text in {"0", "false", "no", "off"}:
        return False
    return bool(default)


def _apply_env_overrides(config: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    for env_name, key in _ENV_PATHS.items():
        value = str(environ.get(env_name) or "").strip()
        if value:
            config[key] = value
    for env_name, key in _ENV_FLAGS.items():
        if env_name in environ:
            config[key] = _env_flag(environ.get(env_name), default=bool(config.get(key)))
    return config


def _normalize_paths(config: dict[str, Any]) -> dict[str, Any]:
    # Plugin paths are compared as strings, so keep them absolute and without
    # trailing separators.
    for key in ("dirroot", "libdir", "themedir", "cachedir", "alternative_component_cache"):
        value = config.get(key)
        if isinstance(value, str) and value.strip():
            config[key] = os.path.abspath(os.path.expanduser(value.strip()))
    logging_cfg = config.get("logging")
    if isinstance(logging_cfg, dict) and isinstance(logging_cfg.get("dir"), str) and logging_cfg["dir"].strip():
        logging_cfg["dir"] = os.path.abspath(os.path.expanduser(logging_cfg["dir"].strip()))
    return config


def validate_config(data: dict[str, Any]) -> None:
    issues = schemas.validate(CONFIG_SCHEMA, data)
    if issues:
        raise ConfigError(f"Invalid configuration: {format_issues(issues)}")


@dataclass(frozen=True)
class ComponentConfig:
    raw: dict[str, Any]

    @classmethod
    def from_mapping(
        cls,
        overrides: Mapping[str, Any] | None = None,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> "ComponentConfig":
        config = _deep_merge(resource_yaml(DEFAULTS_RESOURCE), dict(overrides or {}))
        config = _apply_env_overrides(config, os.environ if environ is None else environ)
        config = _normalize_paths(config)
        validate_config(config)
        return cls(raw=config)

    @property
    def dirroot(self) -> str:
        return str(self.raw["dirroot"])

    @property
    def libdir(self) -> str:
        value = self.raw.get("libdir")
        if value:
            return str(value)
        return f"{self.dirroot}/lib"

    @property
    def admin(self) -> str:
        return str(self.raw.get("admin") or "admin")

    @property
    def themedir(self) -> str | None:
        value = self.raw.get("themedir")
        return str(value) if value else None

    @property
    def cachedir(self) -> Path:
        value = self.raw.get("cachedir")
        if value:
            return Path(str(value))
        return default_cache_dir()

    @property
    def alternative_component_cache(self) -> Path | None:
        value = self.raw.get("alternative_component_cache")
        return Path(str(value)) if value else None

    @property
    def alternative_cache_strict(self) -> bool:
        return bool(self.raw.get("alternative_cache_strict", True))

    @property
    def developer_mode(self) -> bool:
        return bool(self.raw.get("developer_mode", False))

    @property
    def cache_disable_all(self) -> bool:
        return bool(self.raw.get("cache_disable_all", False))

    @property
    def ignore_component_cache(self) -> bool:
        return bool(self.raw.get("ignore_component_cache", False))

    @property
    def directory_permissions(self) -> int:
        return int(self.raw.get("directory_permissions", 0o2777))

    @property
    def file_permissions(self) -> int:
        value = self.raw.get("file_permissions")
        if value is None:
            return self.directory_permissions & 0o666
        return int(value)

    @property
    def log_dir(self) -> Path:
        value = (self.raw.get("logging") or {}).get("dir")
        if value:
            return Path(str(value))
        return default_log_dir()

    @property
    def log_rotate_max_bytes(self) -> int:
        return int((self.raw.get("logging") or {}).get("rotate_max_bytes", 5_000_000))


def load_component_config(
    path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> ComponentConfig:
    """Load defaults, merge the user YAML file over them, then env overrides."""
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    user_config: dict[str, Any] = {}
    if config_path.exists():
        try:
            loaded = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigError(f"Unreadable config file {config_path}: {exc}") from exc
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")
        user_config = loaded or {}
    elif path is not None:
        raise ConfigError(f"Missing config file: {config_path}")
    return ComponentConfig.from_mapping(user_config, environ=environ)
