import json
import tempfile
import unittest
from pathlib import Path

from frankenstyle.kernel.config import ComponentConfig
from frankenstyle.kernel.logging import JsonlLogger, JsonlLoggerConfig, MemoryLogger


class JsonlLoggerTests(unittest.TestCase):
    def test_event_writes_sorted_json_line(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            logger = JsonlLogger(JsonlLoggerConfig(path=Path(tmp) / "component.jsonl", rotate_max_bytes=1_000_000))
            logger.event(event="component.subtype_duplicate", level="error", subtype="quiz", owner="mod_other")
            lines = Path(logger.path).read_text(encoding="utf-8").splitlines()
            self.assertEqual(len(lines), 1)
            payload = json.loads(lines[0])
            self.assertEqual(payload["event"], "component.subtype_duplicate")
            self.assertEqual(payload["level"], "error")
            self.assertEqual(payload["subtype"], "quiz")
            self.assertEqual(list(payload), sorted(payload))

    def test_rotation_archives_instead_of_deleting(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "component.jsonl"
            logger = JsonlLogger(JsonlLoggerConfig(path=path, rotate_max_bytes=1024))
            path.write_text("x" * 2048, encoding="utf-8")
            logger.event(event="component.cache_rebuilt")
            archived = list((Path(tmp) / "archive").glob("component.*.jsonl"))
            self.assertEqual(len(archived), 1)
            self.assertEqual(len(path.read_text(encoding="utf-8").splitlines()), 1)

    def test_from_config_uses_configured_log_dir(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config = ComponentConfig.from_mapping(
                {"dirroot": tmp, "logging": {"dir": str(Path(tmp) / "logs")}}, environ={}
            )
            logger = JsonlLogger.from_config(config)
            self.assertEqual(Path(logger.path), Path(tmp) / "logs" / "component.jsonl")

    def test_memory_logger_filters_by_event(self) -> None:
        logger = MemoryLogger()
        logger.event(event="a")
        logger.event(event="b", level="warning")
        self.assertEqual([item["level"] for item in logger.named("b")], ["warning"])


if __name__ == "__main__":
    unittest.main()
