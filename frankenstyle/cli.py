"""Command line interface for inspecting and regenerating the component cache."""

from __future__ import annotations

import argparse
import json
import sys

from frankenstyle.component import ComponentRegistry
from frankenstyle.kernel.config import load_component_config
from frankenstyle.kernel.errors import FrankenstyleError
from frankenstyle.kernel.logging import MemoryLogger

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_ERROR = 2


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True))


def _registry(args: argparse.Namespace) -> ComponentRegistry:
    config = load_component_config(args.config)
    logger = MemoryLogger() if args.quiet else None
    return ComponentRegistry(config, logger=logger)


def cmd_types(args: argparse.Namespace) -> int:
    registry = _registry(args)
    # Keep registration order; it is meaningful.
    print(json.dumps(registry.get_plugin_types(), indent=2))
    return EXIT_OK


def cmd_subsystems(args: argparse.Namespace) -> int:
    _print_json(_registry(args).get_core_subsystems())
    return EXIT_OK


def cmd_plugins(args: argparse.Namespace) -> int:
    registry = _registry(args)
    if args.plugintype not in registry.get_plugin_types():
        print(f"Unknown plugin type: {args.plugintype}", file=sys.stderr)
        return EXIT_NOT_FOUND
    _print_json(registry.get_plugin_list(args.plugintype))
    return EXIT_OK


def cmd_dir(args: argparse.Namespace) -> int:
    path = _registry(args).get_component_directory(args.component)
    if path is None:
        print(f"Component not found: {args.component}", file=sys.stderr)
        return EXIT_NOT_FOUND
    print(path)
    return EXIT_OK


def cmd_normalize(args: argparse.Namespace) -> int:
    registry = _registry(args)
    plugintype, plugin = registry.normalize_component(args.component)
    _print_json({"type": plugintype, "plugin": plugin, "component": registry.normalize_componentname(args.component)})
    return EXIT_OK


def cmd_class(args: argparse.Namespace) -> int:
    location = _registry(args).resolve_class(args.classname)
    if location is None:
        print(f"Class not found: {args.classname}", file=sys.stderr)
        return EXIT_NOT_FOUND
    _print_json({"name": location.name, "path": location.path, "alias_of": location.alias_of})
    return EXIT_OK


def cmd_subplugins(args: argparse.Namespace) -> int:
    registry = _registry(args)
    subplugins = registry.get_subplugins(args.component)
    if subplugins is None:
        print(f"No subplugins declared by {args.component}", file=sys.stderr)
        return EXIT_NOT_FOUND
    _print_json(subplugins)
    return EXIT_OK


def cmd_versions_hash(args: argparse.Namespace) -> int:
    print(_registry(args).get_all_versions_hash())
    return EXIT_OK


def cmd_cache_build(args: argparse.Namespace) -> int:
    registry = _registry(args)
    registry.initialize()
    store = registry.cache_store()
    _print_json(
        {
            "path": str(store.path),
            "exists": store.exists(),
            "sha256": store.content_hash(registry.snapshot),
            "version": registry.snapshot.version,
        }
    )
    return EXIT_OK


def cmd_cache_show(args: argparse.Namespace) -> int:
    print(_registry(args).get_cache_content())
    return EXIT_OK


def cmd_cache_write_alternative(args: argparse.Namespace) -> int:
    registry = _registry(args)
    path = registry.write_alternative_cache()
    _print_json({"path": str(path), "sha256": registry.cache_store().file_hash()})
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="frankenstyle")
    parser.add_argument("--config", default=None, help="YAML config file (default: ./frankenstyle.yaml if present)")
    parser.add_argument("--quiet", action="store_true", help="Do not write the JSONL event log")
    sub = parser.add_subparsers(dest="command", required=True)

    types = sub.add_parser("types", help="List plugin types and their directories")
    types.set_defaults(func=cmd_types)

    subsystems = sub.add_parser("subsystems", help="List core subsystems")
    subsystems.set_defaults(func=cmd_subsystems)

    plugins = sub.add_parser("plugins", help="List plugins of one type")
    plugins.add_argument("plugintype")
    plugins.set_defaults(func=cmd_plugins)

    directory = sub.add_parser("dir", help="Print a component directory")
    directory.add_argument("component")
    directory.set_defaults(func=cmd_dir)

    normalize = sub.add_parser("normalize", help="Split a component name into type and plugin")
    normalize.add_argument("component")
    normalize.set_defaults(func=cmd_normalize)

    cls = sub.add_parser("class", help="Resolve a class name to its file")
    cls.add_argument("classname")
    cls.set_defaults(func=cmd_class)

    subplugins = sub.add_parser("subplugins", help="List subplugins declared by a component")
    subplugins.add_argument("component")
    subplugins.set_defaults(func=cmd_subplugins)

    versions = sub.add_parser("versions-hash", help="Digest of core and plugin versions")
    versions.set_defaults(func=cmd_versions_hash)

    cache = sub.add_parser("cache", help="Component cache maintenance")
    cache_sub = cache.add_subparsers(dest="cache_command", required=True)
    cache_build = cache_sub.add_parser("build", help="Initialize, loading or regenerating the cache")
    cache_build.set_defaults(func=cmd_cache_build)
    cache_show = cache_sub.add_parser("show", help="Print the canonical cache content")
    cache_show.set_defaults(func=cmd_cache_show)
    cache_alt = cache_sub.add_parser("write-alternative", help="Regenerate the alternative cache file")
    cache_alt.set_defaults(func=cmd_cache_write_alternative)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return int(args.func(args))
    except FrankenstyleError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
