"""Frankenstyle naming rules."""

from __future__ import annotations

import re
from collections.abc import Container

from frankenstyle.kernel.errors import CodingError

MODULE_NAME_RE = re.compile(r"^[a-z][a-z0-9]*$")
PLUGIN_NAME_RE = re.compile(r"^[a-z](?:[a-z0-9_](?!__))*[a-z0-9]+$")
SUBTYPE_NAME_RE = MODULE_NAME_RE
NULL_SEGMENT_RE = re.compile(r"\\null(\\|$)")

CORE_ALIASES = frozenset({"moodle", "core", ""})


def is_valid_plugin_name(plugintype: str, pluginname: str, subsystems: Container[str]) -> bool:
    """Return True when ``pluginname`` is acceptable for ``plugintype``.

    Modules must not share a name with a core subsystem and must not contain
    underscores, otherwise component normalisation becomes ambiguous.
    """
    if not isinstance(plugintype, str) or not isinstance(pluginname, str):
        raise CodingError(
            f"plugin type and name must be strings, got {type(plugintype).__name__}/{type(pluginname).__name__}"
        )
    if plugintype == "mod":
        if pluginname in subsystems:
            return False
        return MODULE_NAME_RE.match(pluginname) is not None
    return PLUGIN_NAME_RE.match(pluginname) is not None


def is_valid_subtype_name(subtype: str) -> bool:
    return isinstance(subtype, str) and SUBTYPE_NAME_RE.match(subtype) is not None


def split_component(component: str, subsystems: Container[str]) -> tuple[str, str | None]:
    """Split a component name into (type, plugin) using frankenstyle rules.

    This does not verify that the type or plugin exists.
    """
    if component in CORE_ALIASES:
        return "core", None
    if "_" not in component:
        if component in subsystems:
            return "core", component
        # Everything else without an underscore is a module.
        return "mod", component
    plugintype, plugin = component.split("_", 1)
    if plugintype == "moodle":
        plugintype = "core"
    # Any unknown type must be a subplugin.
    return plugintype, plugin


def join_component(plugintype: str, plugin: str | None) -> str:
    if plugintype == "core" and plugin is None:
        return plugintype
    return f"{plugintype}_{plugin}"
