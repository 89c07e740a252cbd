"""Atomic write helpers (temp + fsync + replace).

Readers of a file written here see either the previous complete content or
the new complete content. Concurrent writers race on the final replace only;
the last one wins.
"""

from __future__ import annotations

import importlib
import importlib.util
import os
import tempfile
from pathlib import Path


def _fsync_dir(path: Path) -> None:
    try:
        fd = os.open(str(path), os.O_RDONLY)
    except OSError:
        return
    try:
        os.fsync(fd)
    except OSError:
        return
    finally:
        os.close(fd)


def atomic_write_text(
    path: Path,
    text: str,
    *,
    fsync: bool = True,
    mode: int | None = None,
    dir_mode: int | None = None,
) -> None:
    """Write ``text`` to ``path`` through a sibling temp file.

    Raises ``OSError`` when the directory cannot be created or written; the
    temp file never survives a failed write.
    """
    path = Path(path)
    if dir_mode is None:
        path.parent.mkdir(parents=True, exist_ok=True)
    else:
        path.parent.mkdir(mode=int(dir_mode), parents=True, exist_ok=True)
    prefix = f".{path.name}."
    tmp_fd = None
    tmp_path = None
    try:
        tmp_fd, tmp_name = tempfile.mkstemp(prefix=prefix, suffix=".tmp", dir=str(path.parent))
        tmp_path = Path(tmp_name)
        with os.fdopen(tmp_fd, "w", encoding="utf-8") as handle:
            tmp_fd = None
            handle.write(text)
            handle.flush()
            if fsync:
                os.fsync(handle.fileno())
        if mode is not None:
            try:
                os.chmod(tmp_path, int(mode))
            except OSError:
                pass
        os.replace(str(tmp_path), str(path))
        if fsync:
            _fsync_dir(path.parent)
    finally:
        if tmp_fd is not None:
            try:
                os.close(tmp_fd)
            except OSError:
                pass
        if tmp_path is not None and tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                pass


def invalidate_bytecode_cache(path: str | Path) -> None:
    """Tell the interpreter that ``path`` changed on disk.

    Only Python sources have compiled bytecode; for anything else this is a
    no-op apart from refreshing the import system's finder caches.
    """
    target = Path(path)
    if not target.exists():
        return
    if target.suffix == ".py":
        try:
            cache_file = importlib.util.cache_from_source(str(target))
            Path(cache_file).unlink(missing_ok=True)
        except (NotImplementedError, ValueError, OSError):
            pass
    importlib.invalidate_caches()
