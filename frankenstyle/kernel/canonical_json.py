"""Canonical JSON serialization for cache artifacts and digests."""

from __future__ import annotations

import json
import math
import unicodedata
from typing import Any


class CanonicalJSONError(ValueError):
    pass


def _normalize(obj: Any, normalize_unicode: bool) -> Any:
    if isinstance(obj, dict):
        return {str(k): _normalize(v, normalize_unicode) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_normalize(v, normalize_unicode) for v in obj]
    if isinstance(obj, str):
        return unicodedata.normalize("NFC", obj) if normalize_unicode else obj
    if isinstance(obj, float):
        # Version numbers are floats; only finite values have a stable encoding.
        if math.isnan(obj) or math.isinf(obj):
            raise CanonicalJSONError("NaN/Inf not allowed in canonical JSON")
        return obj
    return obj


def dumps(obj: Any, *, normalize_unicode: bool = True) -> str:
    """Return canonical JSON string with sorted keys and no whitespace.

    Pass ``normalize_unicode=False`` when strings are filesystem paths that
    must survive a round trip byte for byte.
    """
    normalized = _normalize(obj, normalize_unicode)
    return json.dumps(
        normalized,
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
        allow_nan=False,
    )
