"""Loading plugin source files and inspecting them without executing."""

from __future__ import annotations

import ast
import hashlib
import importlib.util
import os
import sys
from types import ModuleType

from frankenstyle.kernel.errors import FrankenstyleError


class PluginFileLoader:
    """Include-once loader for plugin files, keyed by real path."""

    def __init__(self) -> None:
        self._loaded: dict[str, ModuleType] = {}

    @staticmethod
    def module_name_for(path: str) -> str:
        digest = hashlib.sha256(path.encode("utf-8")).hexdigest()[:16]
        stem = os.path.splitext(os.path.basename(path))[0]
        return f"frankenstyle_plugin_{stem}_{digest}"

    def load(self, path: str) -> ModuleType:
        key = os.path.realpath(path)
        cached = self._loaded.get(key)
        if cached is not None:
            return cached
        name = self.module_name_for(key)
        spec = importlib.util.spec_from_file_location(name, key)
        if spec is None or spec.loader is None:
            raise FrankenstyleError(f"plugin_file_not_loadable:{path}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(name, None)
            raise
        self._loaded[key] = module
        return module

    def reset(self) -> None:
        for module in self._loaded.values():
            sys.modules.pop(module.__name__, None)
        self._loaded.clear()


def defined_class_names(path: str) -> set[str]:
    """Return top-level class names defined in a Python source file.

    Unreadable or syntactically invalid files define nothing.
    """
    try:
        with open(path, "r", encoding="utf-8") as handle:
            tree = ast.parse(handle.read(), filename=path)
    except (OSError, UnicodeDecodeError, SyntaxError, ValueError):
        return set()
    return {node.name for node in tree.body if isinstance(node, ast.ClassDef)}
