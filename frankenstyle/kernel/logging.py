"""Structured JSONL event logging.

- One JSON object per line, stable key ordering.
- Archive-only rotation: a full log is moved into ``archive/``, never deleted.
- Logging failures never propagate into the registry.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from frankenstyle.kernel.config import ComponentConfig


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _build_payload(event: str, level: str, ts_utc: str | None, fields: dict[str, Any]) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "ts_utc": str(ts_utc or _utc_now_iso()),
        "level": str(level or "info"),
        "event": str(event or "event"),
    }
    for k, v in fields.items():
        if k in payload:
            continue
        payload[str(k)] = v
    return payload


class EventLogger(Protocol):
    def event(self, *, event: str, level: str = "info", ts_utc: str | None = None, **fields: Any) -> None:
        ...


@dataclass(frozen=True)
class JsonlLoggerConfig:
    path: Path
    rotate_max_bytes: int


class JsonlLogger:
    def __init__(self, cfg: JsonlLoggerConfig) -> None:
        self._cfg = cfg

    @classmethod
    def from_config(cls, config: "ComponentConfig", *, name: str = "component") -> "JsonlLogger":
        path = config.log_dir / f"{name}.jsonl"
        return cls(JsonlLoggerConfig(path=path, rotate_max_bytes=max(1024, config.log_rotate_max_bytes)))

    @property
    def path(self) -> str:
        return str(self._cfg.path)

    def _rotate_if_needed(self) -> None:
        try:
            if not self._cfg.path.exists():
                return
            size = self._cfg.path.stat().st_size
            if size < self._cfg.rotate_max_bytes:
                return
        except OSError:
            return
        try:
            archive_dir = self._cfg.path.parent / "archive"
            archive_dir.mkdir(parents=True, exist_ok=True)
            ts = _utc_now_iso().replace(":", "").replace("-", "").replace(".", "")
            archived = archive_dir / f"{self._cfg.path.stem}.{ts}{self._cfg.path.suffix}"
            if not archived.exists():
                self._cfg.path.replace(archived)
        except OSError:
            return

    def event(self, *, event: str, level: str = "info", ts_utc: str | None = None, **fields: Any) -> None:
        payload = _build_payload(event, level, ts_utc, fields)
        line = json.dumps(payload, sort_keys=True, default=str)
        try:
            self._cfg.path.parent.mkdir(parents=True, exist_ok=True)
            self._rotate_if_needed()
            with self._cfg.path.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")
        except OSError:
            return


class MemoryLogger:
    """Collects events in memory; used by tests and the quiet CLI mode."""

    def __init__(self) -> None:
        self.events: list[dict[str, Any]] = []

    def event(self, *, event: str, level: str = "info", ts_utc: str | None = None, **fields: Any) -> None:
        self.events.append(_build_payload(event, level, ts_utc, fields))

    def named(self, event: str) -> list[dict[str, Any]]:
        return [item for item in self.events if item.get("event") == event]
