import json
import tempfile
import unittest
from pathlib import Path

from frankenstyle.component.builder import ComponentBuilder
from frankenstyle.component.snapshot import ComponentSnapshot
from frankenstyle.kernel.logging import MemoryLogger
from tests._tree import CORE_VERSION, SiteTree, standard_site


class ComponentBuilderTests(unittest.TestCase):
    def setUp(self):
        self.tempdir = tempfile.TemporaryDirectory()
        self.tree = standard_site(SiteTree(self.tempdir.name))
        self.logger = MemoryLogger()

    def tearDown(self):
        self.tempdir.cleanup()

    def _build(self, **overrides):
        return ComponentBuilder(self.tree.config(**overrides), self.logger).build()

    def test_standard_types_keep_registration_order(self):
        snapshot = self._build()
        types = list(snapshot.plugintypes)
        self.assertEqual(types[:3], ["availability", "qtype", "mod"])
        self.assertLess(types.index("report"), types.index("coursereport"))
        self.assertLess(types.index("cachelock"), types.index("quiz"))
        self.assertEqual(types[-1], "local")
        self.assertEqual(snapshot.plugintypes["tool"], self.tree.path("admin/tool"))
        self.assertEqual(snapshot.plugintypes["block"], self.tree.path("blocks"))

    def test_subsystems(self):
        snapshot = self._build()
        self.assertEqual(snapshot.subsystems["admin"], self.tree.path("admin"))
        self.assertEqual(snapshot.subsystems["role"], self.tree.path("admin/roles"))
        self.assertEqual(snapshot.subsystems["grades"], self.tree.path("grade"))
        self.assertIsNone(snapshot.subsystems["access"])

    def test_plugins_by_type(self):
        snapshot = self._build()
        self.assertEqual(list(snapshot.plugins["mod"]), ["assign", "forum", "quiz"])
        self.assertEqual(list(snapshot.plugins["block"]), ["course_list", "html"])
        self.assertEqual(list(snapshot.plugins["auth"]), ["db", "manual"])
        self.assertEqual(snapshot.plugins["tool"], {"uploaduser": self.tree.path("admin/tool/uploaduser")})
        self.assertEqual(snapshot.plugins["cachestore"], {})

    def test_subplugins(self):
        snapshot = self._build()
        self.assertEqual(snapshot.plugintypes["quiz"], self.tree.path("mod/quiz/report"))
        self.assertEqual(
            snapshot.parents,
            {"quiz": "mod_quiz", "quizaccess": "mod_quiz", "assignsubmission": "mod_assign"},
        )
        self.assertEqual(
            snapshot.subplugins,
            {
                "mod_quiz": {"quiz": ["grading", "overview"], "quizaccess": ["password"]},
                "mod_assign": {"assignsubmission": ["file", "onlinetext"]},
            },
        )
        self.assertEqual(snapshot.plugins["quizaccess"], {"password": self.tree.path("mod/quiz/accessrule/password")})

    def test_duplicate_subtype_keeps_first_owner(self):
        self.tree.json("mod/alpha/db/subplugins.json", {"shared": "mod/alpha/parts"})
        self.tree.dir("mod/alpha/parts/one")
        self.tree.json("mod/beta/db/subplugins.json", {"shared": "mod/beta/parts", "filter": "mod/beta/filters"})
        self.tree.dir("mod/beta/parts/two")
        self.tree.dir("mod/beta/filters")
        snapshot = self._build()
        self.assertEqual(snapshot.plugintypes["shared"], self.tree.path("mod/alpha/parts"))
        self.assertEqual(snapshot.plugintypes["filter"], self.tree.path("filter"))
        self.assertEqual(snapshot.parents["shared"], "mod_alpha")
        self.assertEqual(snapshot.plugins["shared"], {"one": self.tree.path("mod/alpha/parts/one")})
        duplicates = self.logger.named("component.subtype_duplicate")
        self.assertEqual(sorted(item["subtype"] for item in duplicates), ["filter", "shared"])
        self.assertTrue(all(item["owner"] == "mod_beta" and item["level"] == "error" for item in duplicates))

    def test_local_subplugins_come_after_local(self):
        self.tree.json("local/reports/db/subplugins.json", {"reportsource": "local/reports/source"})
        self.tree.dir("local/reports/source/basic")
        self.tree.json("admin/tool/uploaduser/db/subplugins.yaml", {"uploadformat": "admin/tool/uploaduser/format"})
        self.tree.dir("admin/tool/uploaduser/format/csv")
        types = list(self._build().plugintypes)
        self.assertEqual(types[-2:], ["local", "reportsource"])
        self.assertLess(types.index("uploadformat"), types.index("local"))

    def test_custom_admin_directory(self):
        self.tree.plugin("siteadmin/tool/log")
        snapshot = self._build(admin="siteadmin")
        self.assertEqual(snapshot.plugintypes["tool"], self.tree.path("siteadmin/tool"))
        self.assertEqual(snapshot.subsystems["role"], self.tree.path("siteadmin/roles"))
        self.assertEqual(list(snapshot.plugins["tool"]), ["log"])

    def test_custom_theme_directory(self):
        themedir = Path(self.tempdir.name) / "themes"
        (themedir / "fancy").mkdir(parents=True)
        snapshot = self._build(themedir=str(themedir))
        self.assertEqual(snapshot.plugintypes["theme"], str(themedir))
        self.assertEqual(list(snapshot.plugins["theme"]), ["clean", "fancy"])

    def test_missing_theme_directory_falls_back(self):
        snapshot = self._build(themedir=str(Path(self.tempdir.name) / "nothing"))
        self.assertEqual(snapshot.plugintypes["theme"], self.tree.path("theme"))

    def test_classmap(self):
        classmap = self._build().classmap
        self.assertEqual(classmap["core\\task\\manager"], self.tree.path("lib/classes/task/manager.py"))
        self.assertEqual(classmap["core_plugininfo"], self.tree.path("lib/classes/plugininfo.py"))
        self.assertEqual(classmap["core_user_search"], self.tree.path("user/classes/search.py"))
        self.assertEqual(
            classmap["mod_forum\\local\\exporters\\post"],
            self.tree.path("mod/forum/classes/local/exporters/post.py"),
        )
        self.assertNotIn("mod_forum_created", classmap)
        self.assertEqual(list(classmap), sorted(classmap))

    def test_classmap_renames_and_psr(self):
        self.tree.json("lib/db/renamedclasses.json", {"core_old_manager": "core\\task\\manager"})
        self.tree.json("mod/forum/db/renamedclasses.yml", {"forum_post": "mod_forum\\post"})
        self.tree.file("lib/horde/framework/Horde/Stream.py")
        snapshot = self._build()
        self.assertEqual(
            snapshot.classmaprenames,
            {"core_old_manager": "core\\task\\manager", "forum_post": "mod_forum\\post"},
        )
        self.assertEqual(snapshot.psrclassmap, {"Horde_Stream": self.tree.path("lib/horde/framework/Horde/Stream.py")})

    def test_filemap(self):
        filemap = self._build().filemap
        self.assertEqual(sorted(filemap), ["lib.py", "settings.py"])
        self.assertEqual(
            filemap["lib.py"]["mod"],
            {"forum": self.tree.path("mod/forum/lib.py"), "quiz": self.tree.path("mod/quiz/lib.py")},
        )
        self.assertEqual(filemap["settings.py"]["mod"], {"forum": self.tree.path("mod/forum/settings.py")})
        self.assertEqual(filemap["lib.py"]["block"], {})

    def test_core_version(self):
        self.assertEqual(self._build().version, CORE_VERSION)

    def test_missing_core_version_is_logged(self):
        (self.tree.root / "version.json").unlink()
        self.assertIsNone(self._build().version)
        self.assertEqual(len(self.logger.named("component.core_version_missing")), 1)

    def test_payload_preserves_type_order(self):
        snapshot = self._build()
        restored = ComponentSnapshot.from_payload(json.loads(snapshot.canonical_text()))
        self.assertEqual(restored, snapshot)
        self.assertEqual(list(restored.plugintypes), list(snapshot.plugintypes))

    def test_builds_are_deterministic(self):
        self.assertEqual(self._build().canonical_text(), self._build().canonical_text())


if __name__ == "__main__":
    unittest.main()
