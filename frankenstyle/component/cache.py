"""Durable component cache artifact: load, validate, save atomically."""

from __future__ import annotations

import json
from pathlib import Path

from frankenstyle.kernel.atomic_write import atomic_write_text, invalidate_bytecode_cache
from frankenstyle.kernel.hashing import sha256_file, sha256_text
from frankenstyle.kernel.logging import EventLogger
from frankenstyle.kernel.schema_registry import format_issues, schemas

from .snapshot import CACHE_SCHEMA, ComponentSnapshot

CACHE_FILENAME = "core_component.json"
# Plugin type whose recorded root tells whether dirroot moved.
REFERENCE_PLUGIN_TYPE = "mod"


class ComponentCacheStore:
    """Read and write one cache artifact.

    Nothing here raises for a missing, corrupt or unwritable file: ``load``
    returns None and ``save`` returns False so the caller can fall back to
    rebuilding in memory.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        dirroot: str,
        file_mode: int | None = None,
        dir_mode: int | None = None,
        logger: EventLogger | None = None,
    ) -> None:
        self.path = Path(path)
        self.dirroot = dirroot
        self.file_mode = file_mode
        self.dir_mode = dir_mode
        self.logger = logger

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> ComponentSnapshot | None:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            self._log("component.cache_unreadable", "warning", error=f"{type(exc).__name__}: {exc}")
            return None
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            self._log("component.cache_unreadable", "warning", error=f"JSONDecodeError: {exc}")
            return None
        issues = schemas.validate(CACHE_SCHEMA, payload)
        if issues:
            self._log("component.cache_unreadable", "warning", error=format_issues(issues))
            return None
        return ComponentSnapshot.from_payload(payload)

    def version_matches(self, snapshot: ComponentSnapshot, version: int | float | None) -> bool:
        return _same_version(snapshot.version, version)

    def root_matches(self, snapshot: ComponentSnapshot) -> bool:
        return snapshot.plugintypes.get(REFERENCE_PLUGIN_TYPE) == f"{self.dirroot}/{REFERENCE_PLUGIN_TYPE}"

    def is_stale(self, snapshot: ComponentSnapshot, version: int | float | None) -> bool:
        return not (self.version_matches(snapshot, version) and self.root_matches(snapshot))

    @staticmethod
    def content(snapshot: ComponentSnapshot) -> str:
        return snapshot.canonical_text()

    @staticmethod
    def content_hash(snapshot: ComponentSnapshot) -> str:
        return sha256_text(snapshot.canonical_text())

    def file_hash(self) -> str | None:
        try:
            return sha256_file(self.path)
        except OSError:
            return None

    def matches(self, snapshot: ComponentSnapshot) -> bool:
        """True when the file on disk holds exactly this snapshot's content."""
        return self.file_hash() == self.content_hash(snapshot)

    def save(self, snapshot: ComponentSnapshot) -> bool:
        try:
            atomic_write_text(
                self.path,
                self.content(snapshot),
                mode=self.file_mode,
                dir_mode=self.dir_mode,
            )
        except OSError as exc:
            # Another process may have won the race or the dir is read-only;
            # the caller keeps the in-memory snapshot either way.
            self._log("component.cache_write_failed", "warning", error=f"{type(exc).__name__}: {exc}")
            return False
        invalidate_bytecode_cache(self.path)
        return True

    def discard(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            self._log("component.cache_write_failed", "warning", error=f"{type(exc).__name__}: {exc}")

    def _log(self, event: str, level: str, **fields) -> None:
        if self.logger is not None:
            self.logger.event(event=event, level=level, path=str(self.path), **fields)


def _same_version(stored: int | float | None, current: int | float | None) -> bool:
    if stored is None or current is None:
        return stored is None and current is None
    return float(stored) == float(current)
