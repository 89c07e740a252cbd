"""Compiled-in tables of core subsystems and standard plugin types."""

from __future__ import annotations

# Any addition here must not collide with an existing module or subplugin name.
# Values are paths relative to dirroot; "{admin}" is the configured admin dir.
CORE_SUBSYSTEMS: tuple[tuple[str, str | None], ...] = (
    ("access", None),
    ("admin", "{admin}"),
    ("auth", "auth"),
    ("availability", "availability"),
    ("backup", "backup/util/ui"),
    ("badges", "badges"),
    ("block", "blocks"),
    ("blog", "blog"),
    ("bulkusers", None),
    ("cache", "cache"),
    ("calendar", "calendar"),
    ("cohort", "cohort"),
    ("comment", "comment"),
    ("completion", "completion"),
    ("countries", None),
    ("course", "course"),
    ("currencies", None),
    ("dbtransfer", None),
    ("debug", None),
    ("editor", "lib/editor"),
    ("edufields", None),
    ("enrol", "enrol"),
    ("error", None),
    ("filepicker", None),
    ("files", "files"),
    ("filters", None),
    ("form", "lib/form"),
    ("grades", "grade"),
    ("grading", "grade/grading"),
    ("group", "group"),
    ("help", None),
    ("hub", None),
    ("imscc", None),
    ("install", None),
    ("iso6392", None),
    ("langconfig", None),
    ("license", None),
    ("mathslib", None),
    ("media", None),
    ("message", "message"),
    ("mimetypes", None),
    ("mnet", "mnet"),
    ("my", "my"),
    ("notes", "notes"),
    ("pagetype", None),
    ("pix", None),
    ("plagiarism", "plagiarism"),
    ("plugin", None),
    ("portfolio", "portfolio"),
    ("publish", "course/publish"),
    ("question", "question"),
    ("rating", "rating"),
    ("register", "{admin}/registration"),
    ("repository", "repository"),
    ("rss", "rss"),
    ("role", "{admin}/roles"),
    ("search", None),
    ("table", None),
    ("tag", "tag"),
    ("timezones", None),
    ("user", "user"),
    ("userkey", None),
    ("webservice", "webservice"),
)

# Order matters: coursereport must come after report.
STANDARD_PLUGIN_TYPES: tuple[tuple[str, str], ...] = (
    ("availability", "availability/condition"),
    ("qtype", "question/type"),
    ("mod", "mod"),
    ("auth", "auth"),
    ("calendartype", "calendar/type"),
    ("enrol", "enrol"),
    ("message", "message/output"),
    ("block", "blocks"),
    ("filter", "filter"),
    ("editor", "lib/editor"),
    ("format", "course/format"),
    ("profilefield", "user/profile/field"),
    ("report", "report"),
    ("coursereport", "course/report"),
    ("gradeexport", "grade/export"),
    ("gradeimport", "grade/import"),
    ("gradereport", "grade/report"),
    ("gradingform", "grade/grading/form"),
    ("mnetservice", "mnet/service"),
    ("webservice", "webservice"),
    ("repository", "repository"),
    ("portfolio", "portfolio"),
    ("qbehaviour", "question/behaviour"),
    ("qformat", "question/format"),
    ("plagiarism", "plagiarism"),
    ("tool", "{admin}/tool"),
    ("cachestore", "cache/stores"),
    ("cachelock", "cache/locks"),
)

# Do not add more here unless absolutely necessary; "local" must stay last.
SUBPLUGIN_CAPABLE_TYPES: tuple[str, ...] = ("mod", "editor", "tool", "local")

# "db" is also a valid auth plugin name, see fetch_plugins().
IGNORED_DIRS = frozenset({"CVS", "_vti_cnf", "simpletest", "db", "yui", "tests", "classes", "fonts"})

# Per-plugin files whose locations are precomputed into the file map.
FILES_TO_MAP: tuple[str, ...] = ("lib.py", "settings.py")

# Vendor prefix -> library root relative to libdir, walked PSR-0 style.
PSR_SYSTEMS: dict[str, str] = {
    "Horde": "horde/framework",
}

CLASS_SUFFIX = ".py"


def _expand(rel: str, *, dirroot: str, admin: str) -> str:
    return f"{dirroot}/{rel.format(admin=admin)}"


def core_subsystems(dirroot: str, admin: str = "admin") -> dict[str, str | None]:
    """Return subsystem name -> absolute dir (None for purely symbolic ones)."""
    return {
        name: (_expand(rel, dirroot=dirroot, admin=admin) if rel is not None else None)
        for name, rel in CORE_SUBSYSTEMS
    }


def standard_plugin_types(dirroot: str, admin: str = "admin") -> dict[str, str]:
    return {name: _expand(rel, dirroot=dirroot, admin=admin) for name, rel in STANDARD_PLUGIN_TYPES}


SUBSYSTEM_NAMES = frozenset(name for name, _rel in CORE_SUBSYSTEMS)
