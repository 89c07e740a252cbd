"""Helpers that lay out throwaway application trees for tests."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from frankenstyle.component import ComponentRegistry
from frankenstyle.kernel.config import ComponentConfig
from frankenstyle.kernel.logging import MemoryLogger

CORE_VERSION = 2015111600.0


class SiteTree:
    def __init__(self, base: str | Path, *, version: float | None = CORE_VERSION) -> None:
        base_path = Path(os.path.abspath(str(base)))
        self.root = base_path / "site"
        self.cachedir = base_path / "cache"
        self.logdir = base_path / "logs"
        self.root.mkdir(parents=True, exist_ok=True)
        if version is not None:
            self.set_version(version)

    @property
    def dirroot(self) -> str:
        return str(self.root)

    def path(self, rel: str) -> str:
        return f"{self.dirroot}/{rel}"

    def dir(self, rel: str) -> Path:
        target = self.root / rel
        target.mkdir(parents=True, exist_ok=True)
        return target

    def file(self, rel: str, text: str = "") -> Path:
        target = self.root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
        return target

    def json(self, rel: str, data: Any) -> Path:
        return self.file(rel, json.dumps(data))

    def set_version(self, version: float) -> None:
        self.json("version.json", {"version": version, "release": "3.0"})

    def plugin(self, rel: str, *, version: int | None = 2015111600) -> Path:
        target = self.dir(rel)
        if version is not None:
            self.json(f"{rel}/version.json", {"version": version})
        return target

    def config(self, **overrides: Any) -> ComponentConfig:
        raw: dict[str, Any] = {
            "dirroot": self.dirroot,
            "cachedir": str(self.cachedir),
            "logging": {"dir": str(self.logdir)},
        }
        raw.update(overrides)
        return ComponentConfig.from_mapping(raw, environ={})

    def registry(self, **overrides: Any) -> tuple[ComponentRegistry, MemoryLogger]:
        logger = MemoryLogger()
        return ComponentRegistry(self.config(**overrides), logger=logger), logger


def standard_site(tree: SiteTree) -> SiteTree:
    """A small but representative tree: modules, blocks, tools, subplugins."""
    tree.plugin("mod/forum")
    tree.plugin("mod/quiz")
    tree.plugin("mod/assign")
    tree.file("mod/forum/lib.py", "def forum_supports(feature):\n    return None\n")
    tree.file("mod/forum/settings.py", "")
    tree.file("mod/forum/classes/post.py", "class post:\n    pass\n")
    tree.file("mod/forum/classes/event/created.py", "class created:\n    pass\n")
    tree.file("mod/forum/classes/local/exporters/post.py", "class post:\n    pass\n")
    tree.file("mod/quiz/lib.py", "")
    tree.json("mod/quiz/db/subplugins.json", {"quiz": "mod/quiz/report", "quizaccess": "mod/quiz/accessrule"})
    tree.plugin("mod/quiz/report/overview")
    tree.plugin("mod/quiz/report/grading")
    tree.plugin("mod/quiz/accessrule/password")
    tree.json("mod/assign/db/subplugins.json", {"assignsubmission": "mod/assign/submission"})
    tree.plugin("mod/assign/submission/file")
    tree.plugin("mod/assign/submission/onlinetext")
    tree.plugin("blocks/html")
    tree.plugin("blocks/course_list")
    tree.plugin("admin/tool/uploaduser")
    tree.plugin("auth/manual")
    tree.plugin("auth/db")
    tree.plugin("theme/clean")
    tree.plugin("local/reports")
    tree.file("lib/classes/task/manager.py", "class manager:\n    pass\n")
    tree.file("lib/classes/plugininfo.py", "class plugininfo:\n    pass\n")
    tree.file("user/classes/search.py", "class search:\n    pass\n")
    return tree
