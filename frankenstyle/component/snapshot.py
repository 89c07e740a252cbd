"""The component snapshot: everything the registry knows, as one value."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from frankenstyle.kernel.canonical_json import dumps
from frankenstyle.kernel.hashing import sha256_text

CACHE_SCHEMA = "schemas/component_cache.schema.json"


@dataclass(frozen=True)
class ComponentSnapshot:
    subsystems: dict[str, str | None]
    plugintypes: dict[str, str]
    plugins: dict[str, dict[str, str]]
    parents: dict[str, str]
    subplugins: dict[str, dict[str, list[str]]]
    classmap: dict[str, str]
    classmaprenames: dict[str, str]
    filemap: dict[str, dict[str, dict[str, str]]]
    version: int | float | None
    psrclassmap: dict[str, str] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        # Plugin type order is significant ("local" last), so it travels as a
        # list of pairs; every other mapping is order-free.
        return {
            "subsystems": dict(self.subsystems),
            "plugintypes": [[name, fulldir] for name, fulldir in self.plugintypes.items()],
            "plugins": {ptype: dict(items) for ptype, items in self.plugins.items()},
            "parents": dict(self.parents),
            "subplugins": {
                owner: {subtype: list(names) for subtype, names in subtypes.items()}
                for owner, subtypes in self.subplugins.items()
            },
            "classmap": dict(self.classmap),
            "classmaprenames": dict(self.classmaprenames),
            "filemap": {
                filename: {ptype: dict(items) for ptype, items in bytype.items()}
                for filename, bytype in self.filemap.items()
            },
            "version": self.version,
            "psrclassmap": dict(self.psrclassmap),
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ComponentSnapshot":
        """Rebuild a snapshot from a payload already checked against the schema."""
        return cls(
            subsystems=dict(payload["subsystems"]),
            plugintypes={str(name): str(fulldir) for name, fulldir in payload["plugintypes"]},
            plugins={ptype: dict(items) for ptype, items in payload["plugins"].items()},
            parents=dict(payload["parents"]),
            subplugins={
                owner: {subtype: list(names) for subtype, names in subtypes.items()}
                for owner, subtypes in payload["subplugins"].items()
            },
            classmap=dict(payload["classmap"]),
            classmaprenames=dict(payload["classmaprenames"]),
            filemap={
                filename: {ptype: dict(items) for ptype, items in bytype.items()}
                for filename, bytype in payload["filemap"].items()
            },
            version=payload["version"],
            psrclassmap=dict(payload["psrclassmap"]),
        )

    def canonical_text(self) -> str:
        # Paths are stored exactly as scanned.
        return dumps(self.to_payload(), normalize_unicode=False)

    def content_hash(self) -> str:
        return sha256_text(self.canonical_text())
