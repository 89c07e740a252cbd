"""Hash helpers for cache artifacts and version tables."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any

from frankenstyle.kernel.canonical_json import dumps


def sha256_file(path: str | Path) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as handle:
        for chunk in iter(lambda: handle.read(8192), b""):
            digest.update(chunk)
    return digest.hexdigest()


def sha256_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def sha256_canonical(obj: Any) -> str:
    return sha256_text(dumps(obj))
