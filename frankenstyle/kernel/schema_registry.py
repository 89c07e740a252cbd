"""JSON schema registry and deterministic validation helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from jsonschema import Draft202012Validator, validators

from .paths import resource_json


@dataclass(frozen=True)
class SchemaIssue:
    path: str
    message: str


def _path_to_str(path: Iterable[Any]) -> str:
    parts = ["$"]
    for part in path:
        if isinstance(part, int):
            parts.append(f"[{part}]")
        else:
            parts.append(f".{part}")
    return "".join(parts)


def _make_validator_class():
    type_checker = Draft202012Validator.TYPE_CHECKER
    type_checker = type_checker.redefine("array", lambda _c, inst: isinstance(inst, (list, tuple)))
    # Keep objects strictly as dicts to avoid surprising mappings.
    type_checker = type_checker.redefine("object", lambda _c, inst: isinstance(inst, dict))
    return validators.extend(Draft202012Validator, type_checker=type_checker)


_Validator = _make_validator_class()


class SchemaRegistry:
    def __init__(self) -> None:
        self._schema_cache: dict[str, dict[str, Any]] = {}
        self._validator_cache: dict[str, Any] = {}

    def load_schema(self, rel_path: str) -> dict[str, Any]:
        if rel_path not in self._schema_cache:
            self._schema_cache[rel_path] = resource_json(rel_path)
        return self._schema_cache[rel_path]

    def validate(self, rel_path: str, instance: Any) -> list[SchemaIssue]:
        validator = self._validator(rel_path)
        errors = sorted(
            validator.iter_errors(instance),
            key=lambda err: (_path_to_str(err.absolute_path), err.message),
        )
        return [SchemaIssue(path=_path_to_str(err.absolute_path), message=err.message) for err in errors]

    def _validator(self, rel_path: str):
        cached = self._validator_cache.get(rel_path)
        if cached is None:
            schema = self.load_schema(rel_path)
            _Validator.check_schema(schema)
            cached = _Validator(schema)
            self._validator_cache[rel_path] = cached
        return cached


def format_issues(issues: list[SchemaIssue]) -> str:
    return "; ".join(f"{issue.path}: {issue.message}" for issue in issues)


schemas = SchemaRegistry()
