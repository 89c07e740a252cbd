"""Build a fresh component snapshot from the filesystem."""

from __future__ import annotations

import os

from frankenstyle.kernel.config import ComponentConfig
from frankenstyle.kernel.logging import EventLogger

from .manifest import read_version
from .scanner import fetch_plugins, fetch_subtypes, load_classes, load_psr_classes, load_renames
from .snapshot import ComponentSnapshot
from .tables import FILES_TO_MAP, PSR_SYSTEMS, SUBPLUGIN_CAPABLE_TYPES, core_subsystems, standard_plugin_types


class ComponentBuilder:
    """Scan ``dirroot`` and produce a :class:`ComponentSnapshot`.

    ``build()`` depends only on the filesystem and the version descriptor; it
    never consults an existing cache. Each call rescans from scratch.
    """

    def __init__(self, config: ComponentConfig, logger: EventLogger | None = None) -> None:
        self.config = config
        self.logger = logger

    @property
    def dirroot(self) -> str:
        return self.config.dirroot

    def build(self) -> ComponentSnapshot:
        subsystems = self.fetch_subsystems()
        plugintypes, parents, subplugins = self.fetch_plugintypes(subsystems)
        plugins = {
            plugintype: self.fetch_plugins(plugintype, fulldir, subsystems)
            for plugintype, fulldir in plugintypes.items()
        }
        return ComponentSnapshot(
            subsystems=subsystems,
            plugintypes=plugintypes,
            plugins=plugins,
            parents=parents,
            subplugins=subplugins,
            classmap=self.fill_classmap(subsystems, plugins),
            classmaprenames=self.fill_classmap_renames(subsystems, plugins),
            filemap=self.fill_filemap(plugins),
            version=self.fetch_core_version(),
            psrclassmap=self.fill_psr_classmap(),
        )

    def fetch_core_version(self) -> int | float | None:
        version = read_version(self.dirroot, self.logger)
        if version is None and self.logger is not None:
            self.logger.event(event="component.core_version_missing", level="warning", dirroot=self.dirroot)
        return version

    def fetch_subsystems(self) -> dict[str, str | None]:
        return core_subsystems(self.dirroot, self.config.admin)

    def fetch_plugins(self, plugintype: str, fulldir: str, subsystems: dict[str, str | None]) -> dict[str, str]:
        return fetch_plugins(plugintype, fulldir, dirroot=self.dirroot, subsystems=subsystems)

    def fetch_plugintypes(
        self, subsystems: dict[str, str | None]
    ) -> tuple[dict[str, str], dict[str, str], dict[str, dict[str, list[str]]]]:
        """Return (plugin types, subtype parents, subplugins per owner)."""
        types = standard_plugin_types(self.dirroot, self.config.admin)
        parents: dict[str, str] = {}
        subplugins: dict[str, dict[str, list[str]]] = {}

        themedir = self.config.themedir
        if themedir and os.path.isdir(themedir):
            types["theme"] = themedir
        else:
            types["theme"] = f"{self.dirroot}/theme"

        for plugintype in SUBPLUGIN_CAPABLE_TYPES:
            if plugintype == "local":
                # Local subplugins must be after local plugins.
                continue
            self._register_subtypes(plugintype, types, parents, subplugins, subsystems)

        types["local"] = f"{self.dirroot}/local"
        if "local" in SUBPLUGIN_CAPABLE_TYPES:
            self._register_subtypes("local", types, parents, subplugins, subsystems)

        return types, parents, subplugins

    def _register_subtypes(
        self,
        plugintype: str,
        types: dict[str, str],
        parents: dict[str, str],
        subplugins: dict[str, dict[str, list[str]]],
        subsystems: dict[str, str | None],
    ) -> None:
        plugins = self.fetch_plugins(plugintype, types[plugintype], subsystems)
        for plugin, fulldir in plugins.items():
            subtypes = fetch_subtypes(
                fulldir,
                dirroot=self.dirroot,
                admin=self.config.admin,
                subsystems=subsystems,
                logger=self.logger,
            )
            if not subtypes:
                continue
            owner = f"{plugintype}_{plugin}"
            subplugins[owner] = {}
            for subtype, subdir in subtypes.items():
                if subtype in types:
                    if self.logger is not None:
                        self.logger.event(
                            event="component.subtype_duplicate",
                            level="error",
                            subtype=subtype,
                            owner=owner,
                            existing_dir=types[subtype],
                        )
                    continue
                types[subtype] = subdir
                parents[subtype] = owner
                subplugins[owner][subtype] = list(self.fetch_plugins(subtype, subdir, subsystems))

    def fill_classmap(
        self, subsystems: dict[str, str | None], plugins: dict[str, dict[str, str]]
    ) -> dict[str, str]:
        classmap = load_classes("core", f"{self.config.libdir}/classes")
        for subsystem, fulldir in subsystems.items():
            if not fulldir:
                continue
            classmap.update(load_classes(f"core_{subsystem}", f"{fulldir}/classes"))
        for plugintype, items in plugins.items():
            for pluginname, fulldir in items.items():
                classmap.update(load_classes(f"{plugintype}_{pluginname}", f"{fulldir}/classes"))
        return dict(sorted(classmap.items()))

    def fill_classmap_renames(
        self, subsystems: dict[str, str | None], plugins: dict[str, dict[str, str]]
    ) -> dict[str, str]:
        dirs: list[str | None] = [self.config.libdir]
        dirs.extend(subsystems.values())
        for items in plugins.values():
            dirs.extend(items.values())
        return load_renames(dirs, self.logger)

    def fill_filemap(self, plugins: dict[str, dict[str, str]]) -> dict[str, dict[str, dict[str, str]]]:
        filemap: dict[str, dict[str, dict[str, str]]] = {}
        for filename in FILES_TO_MAP:
            bytype = filemap.setdefault(filename, {})
            for plugintype, items in plugins.items():
                found = bytype.setdefault(plugintype, {})
                for pluginname, fulldir in items.items():
                    path = f"{fulldir}/{filename}"
                    if os.path.isfile(path):
                        found[pluginname] = path
        return filemap

    def fill_psr_classmap(self) -> dict[str, str]:
        psrclassmap: dict[str, str] = {}
        for _system, reldir in PSR_SYSTEMS.items():
            if not reldir:
                continue
            psrclassmap.update(load_psr_classes(f"{self.config.libdir}/{reldir}"))
        return psrclassmap

