"""Component registry: lazy cache-or-rebuild initialization plus lookups.

A :class:`ComponentRegistry` is owned by the hosting application. The first
lookup initializes it (load the cache artifact, or rebuild and persist it);
after that every lookup is an in-memory read until :meth:`reset`.
"""

from __future__ import annotations

import os
import warnings
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType

from frankenstyle.kernel.config import ComponentConfig
from frankenstyle.kernel.errors import CodingError, ComponentCacheError
from frankenstyle.kernel.hashing import sha256_canonical
from frankenstyle.kernel.logging import EventLogger, JsonlLogger
from frankenstyle.kernel.paths import is_writable_dir

from .builder import ComponentBuilder
from .cache import CACHE_FILENAME, ComponentCacheStore
from .loader import PluginFileLoader, defined_class_names
from .manifest import read_version
from .naming import CORE_ALIASES, NULL_SEGMENT_RE, is_valid_plugin_name, join_component, split_component
from .scanner import fetch_plugins
from .snapshot import ComponentSnapshot
from .tables import SUBPLUGIN_CAPABLE_TYPES, SUBSYSTEM_NAMES


@dataclass(frozen=True)
class ClassLocation:
    """Where a symbolic class name lives; ``alias_of`` is set for renamed classes."""

    name: str
    path: str
    alias_of: str | None = None


class ComponentRegistry:
    def __init__(
        self,
        config: ComponentConfig,
        *,
        logger: EventLogger | None = None,
        builder: ComponentBuilder | None = None,
    ) -> None:
        self.config = config
        self.logger = logger if logger is not None else JsonlLogger.from_config(config)
        self.builder = builder if builder is not None else ComponentBuilder(config, self.logger)
        self._loader = PluginFileLoader()
        self._state: ComponentSnapshot | None = None
        self._core_version: int | float | None = None
        self._core_version_read = False

    # Lifecycle

    @property
    def is_initialized(self) -> bool:
        return self._state is not None

    @property
    def snapshot(self) -> ComponentSnapshot:
        return self._snapshot()

    def reset(self) -> None:
        """Forget everything; the next lookup initializes again."""
        self._state = None
        self._core_version = None
        self._core_version_read = False
        self._loader.reset()

    def cache_store(self) -> ComponentCacheStore:
        alternative = self.config.alternative_component_cache
        path = alternative if alternative is not None else self.config.cachedir / CACHE_FILENAME
        return self._store_for(path)

    def _store_for(self, path: Path) -> ComponentCacheStore:
        return ComponentCacheStore(
            path,
            dirroot=self.config.dirroot,
            file_mode=self.config.file_permissions,
            dir_mode=self.config.directory_permissions,
            logger=self.logger,
        )

    def core_version(self) -> int | float | None:
        """The core version, read once per registry lifetime."""
        if not self._core_version_read:
            self._core_version = self.builder.fetch_core_version()
            self._core_version_read = True
        return self._core_version

    def initialize(self) -> None:
        if self._state is not None:
            return
        cfg = self.config

        if cfg.ignore_component_cache:
            self._state = self.builder.build()
            return

        alternative = cfg.alternative_component_cache
        if alternative is not None:
            # Clustered sites manage this file themselves; it is never rewritten
            # once it exists.
            store = self._store_for(alternative)
            if store.exists():
                if cfg.cache_disable_all:
                    snapshot = self.builder.build()
                    if not store.matches(snapshot):
                        self._hard_stop(
                            "component.alternative_cache_mismatch",
                            f"Outdated component cache file {alternative}, can not continue",
                        )
                    self._state = snapshot
                    return
                snapshot = store.load()
                if snapshot is None:
                    self._hard_stop(
                        "component.alternative_cache_unreadable",
                        f"Unreadable component cache file {alternative}, can not continue",
                    )
                    snapshot = self.builder.build()
                self._state = snapshot
                return
            if not is_writable_dir(alternative.parent):
                self._hard_stop(
                    "component.alternative_cache_unwritable",
                    f"Can not create component cache file {alternative}, can not continue",
                )
                self._state = self.builder.build()
                return
        else:
            # The cache dir must be shared by every node of a cluster.
            store = self._store_for(cfg.cachedir / CACHE_FILENAME)

        if not cfg.cache_disable_all and not cfg.developer_mode:
            cached = store.load()
            if cached is not None:
                version = self.core_version()
                if not store.is_stale(cached, version):
                    self._state = cached
                    return
                if not store.version_matches(cached, version):
                    self.logger.event(
                        event="component.cache_reset",
                        level="warning",
                        reason="core upgrade",
                        version=version,
                        cached_version=cached.version,
                    )

        snapshot = self.builder.build()
        self._state = snapshot
        if store.exists():
            if store.matches(snapshot):
                return
            store.discard()
        if store.save(snapshot):
            self.logger.event(
                event="component.cache_rebuilt",
                level="info",
                path=str(store.path),
                sha256=store.content_hash(snapshot),
            )

    def _hard_stop(self, event: str, message: str) -> None:
        self.logger.event(event=event, level="error", message=message)
        if self.config.alternative_cache_strict:
            raise ComponentCacheError(message)

    def _snapshot(self) -> ComponentSnapshot:
        self.initialize()
        assert self._state is not None
        return self._state

    def get_cache_content(self) -> str:
        """Canonical artifact text, as expected in the alternative cache file."""
        if self._state is None:
            self._state = self.builder.build()
        return self._state.canonical_text()

    def write_alternative_cache(self) -> Path:
        """Regenerate the alternative cache artifact from a fresh scan.

        This is the explicit administrator action; ordinary initialization
        never rewrites an existing alternative cache file.
        """
        alternative = self.config.alternative_component_cache
        if alternative is None:
            raise ComponentCacheError("No alternative component cache is configured")
        snapshot = self.builder.build()
        store = self._store_for(alternative)
        if not store.save(snapshot):
            raise ComponentCacheError(f"Can not write component cache file {alternative}")
        self._state = snapshot
        return alternative

    # Lookups

    def get_core_subsystems(self) -> dict[str, str | None]:
        return dict(self._snapshot().subsystems)

    def get_plugin_types(self) -> dict[str, str]:
        return dict(self._snapshot().plugintypes)

    def get_plugin_list(self, plugintype: str) -> dict[str, str]:
        return dict(self._snapshot().plugins.get(plugintype, {}))

    def get_plugin_directory(self, plugintype: str, pluginname: str | None) -> str | None:
        if not pluginname:
            return None
        return self._snapshot().plugins.get(plugintype, {}).get(pluginname)

    def get_subsystem_directory(self, subsystem: str) -> str | None:
        return self._snapshot().subsystems.get(subsystem)

    def normalize_component(self, component: str) -> tuple[str, str | None]:
        if component in CORE_ALIASES or "_" in component:
            return split_component(component, ())
        return split_component(component, self._snapshot().subsystems)

    def normalize_componentname(self, component: str) -> str:
        plugintype, plugin = self.normalize_component(component)
        return join_component(plugintype, plugin)

    def get_component_directory(self, component: str) -> str | None:
        plugintype, plugin = self.normalize_component(component)
        if plugintype == "core":
            if plugin is None:
                return self.config.libdir
            return self.get_subsystem_directory(plugin)
        return self.get_plugin_directory(plugintype, plugin)

    def get_plugin_types_with_subplugins(self) -> dict[str, str]:
        plugintypes = self._snapshot().plugintypes
        return {plugintype: plugintypes[plugintype] for plugintype in SUBPLUGIN_CAPABLE_TYPES}

    def get_subtype_parent(self, subtype: str) -> str | None:
        return self._snapshot().parents.get(subtype)

    def get_subplugins(self, component: str) -> dict[str, list[str]] | None:
        subplugins = self._snapshot().subplugins.get(component)
        if subplugins is None:
            return None
        return {subtype: list(names) for subtype, names in subplugins.items()}

    def is_valid_plugin_name(self, plugintype: str, pluginname: str) -> bool:
        return is_valid_plugin_name(plugintype, pluginname, SUBSYSTEM_NAMES)

    def is_core_subsystem(self, subsystem: str) -> bool:
        return subsystem in self._snapshot().subsystems

    # Classes and files

    def resolve_class(self, classname: str) -> ClassLocation | None:
        """Map a symbolic class name to the file that defines it.

        Lookup order: class map, renamed classes (a deprecated alias of a
        mapped class), then PSR-0 libraries with ``/`` and ``\\`` read as ``_``.
        """
        if not isinstance(classname, str):
            raise CodingError(f"class name must be a string, got {type(classname).__name__}")
        snapshot = self._snapshot()
        name = classname.lstrip("\\")
        path = snapshot.classmap.get(name)
        if path is not None:
            return ClassLocation(name=name, path=path)

        newname = snapshot.classmaprenames.get(name)
        if newname is not None and newname in snapshot.classmap:
            warnings.warn(
                f"Class '{name}' has been renamed for the autoloader and is now deprecated. "
                f"Please use '{newname}' instead.",
                DeprecationWarning,
                stacklevel=2,
            )
            self.logger.event(event="component.class_renamed", level="debug", old=name, new=newname)
            if NULL_SEGMENT_RE.search(name):
                raise CodingError(f"Cannot alias {name} to {newname}")
            return ClassLocation(name=name, path=snapshot.classmap[newname], alias_of=newname)

        normalized = name.replace("/", "_").replace("\\", "_")
        path = snapshot.psrclassmap.get(normalized)
        if path is not None:
            return ClassLocation(name=name, path=path)
        return None

    def class_exists(self, classname: str) -> bool:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", DeprecationWarning)
            return self.resolve_class(classname) is not None

    def get_plugin_list_with_class(
        self, plugintype: str, classsuffix: str, fallbackfile: str | None = None
    ) -> dict[str, str]:
        """Return component -> class name for plugins providing a class.

        Tries ``\\type_plugin\\suffix``, then ``type_plugin_suffix``, then looks
        for the flat name defined in ``fallbackfile`` inside the plugin dir.
        An empty ``classsuffix`` looks for a class named after the component.
        """
        suffix = f"_{classsuffix}" if classsuffix else ""
        pluginclasses: dict[str, str] = {}
        for plugin, fulldir in self.get_plugin_list(plugintype).items():
            component = f"{plugintype}_{plugin}"
            if classsuffix:
                classname = f"\\{component}\\{classsuffix}"
                if self.class_exists(classname):
                    pluginclasses[component] = classname
                    continue

            classname = f"{component}{suffix}"
            if self.class_exists(classname):
                pluginclasses[component] = classname
                continue

            if fallbackfile:
                path = f"{fulldir}/{fallbackfile}"
                if os.path.isfile(path) and classname in defined_class_names(path):
                    pluginclasses[component] = classname
        return pluginclasses

    def get_plugin_list_with_file(self, plugintype: str, filename: str, load: bool = False) -> dict[str, str]:
        """Return plugin name -> path for plugins of a type that contain ``filename``."""
        filemap = self._snapshot().filemap
        if filename in filemap:
            pluginfiles = dict(filemap[filename].get(plugintype, {}))
        else:
            pluginfiles = {}
            for plugin, fulldir in self.get_plugin_list(plugintype).items():
                path = f"{fulldir}/{filename}"
                if os.path.isfile(path):
                    pluginfiles[plugin] = path
        if load:
            for path in pluginfiles.values():
                self._loader.load(path)
        return pluginfiles

    def load_plugin_file(self, path: str) -> ModuleType:
        return self._loader.load(path)

    # Versions

    def get_all_versions_hash(self) -> str:
        """Digest over core and every plugin version.

        Plugin lists are rescanned unless caching is switched off entirely,
        so added or removed plugins show up without resetting the registry.
        """
        snapshot = self._snapshot()
        versions: dict[str, int | float | None] = {"core": self.core_version()}
        usecache = self.config.cache_disable_all or self.config.ignore_component_cache
        for plugintype, typedir in snapshot.plugintypes.items():
            if usecache:
                plugins = snapshot.plugins.get(plugintype, {})
            else:
                plugins = fetch_plugins(
                    plugintype, typedir, dirroot=self.config.dirroot, subsystems=snapshot.subsystems
                )
            for plugin, fulldir in plugins.items():
                versions[f"{plugintype}_{plugin}"] = read_version(fulldir, self.logger)
        return sha256_canonical(versions)
