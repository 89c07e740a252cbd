import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from frankenstyle.kernel.config import ComponentConfig, load_component_config
from frankenstyle.kernel.errors import ConfigError


class ComponentConfigTests(unittest.TestCase):
    def setUp(self):
        self.tempdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tempdir.name)

    def tearDown(self):
        self.tempdir.cleanup()

    def test_defaults_fill_in_derived_paths(self):
        config = ComponentConfig.from_mapping({"dirroot": str(self.root)}, environ={})
        self.assertEqual(config.libdir, f"{self.root}/lib")
        self.assertEqual(config.admin, "admin")
        self.assertIsNone(config.themedir)
        self.assertIsNone(config.alternative_component_cache)
        self.assertTrue(config.alternative_cache_strict)
        self.assertFalse(config.developer_mode)
        self.assertEqual(config.directory_permissions, 0o2777)
        self.assertEqual(config.file_permissions, 0o666)

    def test_dirroot_is_required(self):
        with self.assertRaises(ConfigError):
            ComponentConfig.from_mapping({}, environ={})

    def test_unknown_keys_are_rejected(self):
        with self.assertRaises(ConfigError):
            ComponentConfig.from_mapping({"dirroot": str(self.root), "wwwroot": "http://x"}, environ={})

    def test_paths_are_made_absolute_without_trailing_separator(self):
        config = ComponentConfig.from_mapping({"dirroot": str(self.root) + os.sep}, environ={})
        self.assertEqual(config.dirroot, str(self.root))
        relative = ComponentConfig.from_mapping({"dirroot": "site"}, environ={})
        self.assertTrue(os.path.isabs(relative.dirroot))

    def test_environment_overrides_file_values(self):
        environ = {
            "FRANKENSTYLE_DIRROOT": str(self.root / "other"),
            "FRANKENSTYLE_DEVELOPER": "yes",
            "FRANKENSTYLE_CACHE_DISABLE_ALL": "0",
            "FRANKENSTYLE_ALTERNATIVE_COMPONENT_CACHE": str(self.root / "alt.json"),
        }
        config = ComponentConfig.from_mapping(
            {"dirroot": str(self.root), "cache_disable_all": True}, environ=environ
        )
        self.assertEqual(config.dirroot, str(self.root / "other"))
        self.assertTrue(config.developer_mode)
        self.assertFalse(config.cache_disable_all)
        self.assertEqual(config.alternative_component_cache, self.root / "alt.json")

    def test_process_environment_is_read_by_default(self):
        with mock.patch.dict(os.environ, {"FRANKENSTYLE_IGNORE_COMPONENT_CACHE": "true"}):
            config = ComponentConfig.from_mapping({"dirroot": str(self.root)})
        self.assertTrue(config.ignore_component_cache)

    def test_unrecognised_flag_value_keeps_configured_value(self):
        config = ComponentConfig.from_mapping(
            {"dirroot": str(self.root), "ignore_component_cache": True},
            environ={"FRANKENSTYLE_IGNORE_COMPONENT_CACHE": "maybe"},
        )
        self.assertTrue(config.ignore_component_cache)

    def test_load_component_config_reads_yaml(self):
        path = self.root / "frankenstyle.yaml"
        path.write_text(
            f"dirroot: {self.root}\nadmin: siteadmin\nlogging:\n  rotate_max_bytes: 2048\n",
            encoding="utf-8",
        )
        config = load_component_config(path, environ={})
        self.assertEqual(config.admin, "siteadmin")
        self.assertEqual(config.log_rotate_max_bytes, 2048)

    def test_load_component_config_rejects_missing_explicit_file(self):
        with self.assertRaises(ConfigError):
            load_component_config(self.root / "missing.yaml", environ={})

    def test_load_component_config_rejects_non_mapping(self):
        path = self.root / "frankenstyle.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with self.assertRaises(ConfigError):
            load_component_config(path, environ={})


if __name__ == "__main__":
    unittest.main()
