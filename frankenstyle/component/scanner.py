"""Filesystem scanning for plugins, subplugin types and class files.

Every function here returns an empty result for a missing directory instead
of raising; problems with individual entries are logged and skipped.
"""

from __future__ import annotations

import os
from collections.abc import Container, Iterable

from frankenstyle.kernel.logging import EventLogger
from frankenstyle.kernel.paths import same_path

from .manifest import read_renamed_classes, read_subplugins
from .naming import is_valid_plugin_name, is_valid_subtype_name
from .tables import CLASS_SUFFIX, IGNORED_DIRS


def _list_dir(fulldir: str) -> list[os.DirEntry]:
    try:
        with os.scandir(fulldir) as it:
            return sorted(it, key=lambda entry: entry.name)
    except (FileNotFoundError, NotADirectoryError, PermissionError):
        return []


def fetch_plugins(
    plugintype: str,
    fulldir: str,
    *,
    dirroot: str,
    subsystems: Container[str],
) -> dict[str, str]:
    """Return plugin name -> plugin dir for every valid plugin of a type."""
    fulldirs = [fulldir]
    if plugintype == "theme":
        standard = f"{dirroot}/theme"
        if not same_path(fulldir, standard):
            # Include themes in the standard location too.
            fulldirs.insert(0, standard)

    result: dict[str, str] = {}
    for basedir in fulldirs:
        if not os.path.isdir(basedir):
            continue
        for entry in _list_dir(basedir):
            if not entry.is_dir():
                continue
            pluginname = entry.name
            if plugintype == "auth" and pluginname == "db":
                pass
            elif pluginname in IGNORED_DIRS:
                continue
            if not is_valid_plugin_name(plugintype, pluginname, subsystems):
                continue
            result[pluginname] = f"{basedir}/{pluginname}"
    return dict(sorted(result.items()))


def fetch_subtypes(
    ownerdir: str,
    *,
    dirroot: str,
    admin: str,
    subsystems: Container[str],
    logger: EventLogger | None = None,
) -> dict[str, str]:
    """Return subtype -> absolute dir declared by the owner's subplugin manifest."""
    types: dict[str, str] = {}
    for subtype, subdir in read_subplugins(ownerdir, logger).items():
        if not is_valid_subtype_name(subtype):
            _log_error(logger, "component.subtype_invalid", subtype=subtype, owner=ownerdir, reason="invalid characters")
            continue
        if subtype in subsystems:
            _log_error(
                logger, "component.subtype_invalid", subtype=subtype, owner=ownerdir, reason="duplicates core subsystem"
            )
            continue
        if admin != "admin" and subdir.startswith("admin/"):
            subdir = f"{admin}/{subdir[len('admin/'):]}"
        fulldir = f"{dirroot}/{subdir}"
        if not os.path.isdir(fulldir):
            _log_error(logger, "component.subtype_dir_missing", subtype=subtype, owner=ownerdir, directory=subdir)
            continue
        types[subtype] = fulldir
    return types


def _is_class_file(name: str) -> bool:
    return name.endswith(CLASS_SUFFIX) and not name.startswith("__") and len(name) > len(CLASS_SUFFIX)


def load_classes(component: str, fulldir: str, namespace: str = "") -> dict[str, str]:
    """Map symbolic class names to files below a ``classes`` directory.

    Top-level files get both the flat ``component_name`` form and the
    namespaced ``component\\name`` form; each nested directory adds one
    namespace segment.
    """
    classmap: dict[str, str] = {}
    if not os.path.isdir(fulldir):
        return classmap
    for entry in _list_dir(fulldir):
        if entry.is_dir():
            if entry.name == "__pycache__":
                continue
            classmap.update(load_classes(component, f"{fulldir}/{entry.name}", f"{namespace}\\{entry.name}"))
            continue
        filename = entry.name
        if not _is_class_file(filename):
            continue
        classname = filename[: -len(CLASS_SUFFIX)]
        path = f"{fulldir}/{filename}"
        if namespace == "":
            classmap[f"{component}_{classname}"] = path
        classmap[f"{component}{namespace}\\{classname}"] = path
    return classmap


def load_psr_classes(basedir: str, subdir: str | None = None) -> dict[str, str]:
    """Walk a PSR-0 style library; nested dirs become ``_`` joined prefixes."""
    classmap: dict[str, str] = {}
    if subdir:
        fulldir = f"{basedir}/{subdir}"
        prefix = subdir.replace("/", "_")
    else:
        fulldir = basedir
        prefix = ""
    if not os.path.isdir(fulldir):
        return classmap
    for entry in _list_dir(fulldir):
        if entry.is_dir():
            if entry.name == "__pycache__":
                continue
            newsubdir = f"{subdir}/{entry.name}" if subdir else entry.name
            classmap.update(load_psr_classes(basedir, newsubdir))
            continue
        if not _is_class_file(entry.name):
            continue
        classname = entry.name[: -len(CLASS_SUFFIX)]
        if prefix:
            classname = f"{prefix}_{classname}"
        classmap[classname] = f"{fulldir}/{entry.name}"
    return classmap


def load_renames(fulldirs: Iterable[str | None], logger: EventLogger | None = None) -> dict[str, str]:
    """Merge the class-rename manifests found in ``fulldirs``, later dirs win."""
    renames: dict[str, str] = {}
    for fulldir in fulldirs:
        if not fulldir:
            continue
        renames.update(read_renamed_classes(fulldir, logger))
    return renames


def _log_error(logger: EventLogger | None, event: str, **fields) -> None:
    if logger is not None:
        logger.event(event=event, level="error", **fields)
