import io
import shutil
import sys
import unittest
from pathlib import Path
from uuid import uuid4

from loguru import logger

from finchat.logging_config import ReplConsoleSink, setup_logging

PROJECT_ROOT = Path(__file__).resolve().parents[1]


class _TerminalStream(io.StringIO):
    def isatty(self) -> bool:
        return True


class SetupLoggingTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp_dir = PROJECT_ROOT / ".test-artifacts" / f"logging-{uuid4().hex}"
        self._tmp_dir.mkdir(parents=True, exist_ok=True)

    def tearDown(self) -> None:
        logger.remove()
        shutil.rmtree(self._tmp_dir, ignore_errors=True)

    def test_console_clears_the_spinner_line_on_a_terminal(self) -> None:
        stream = _TerminalStream()
        setup_logging(consumers=[{"type": "console", "level": "INFO", "stream": stream}])

        logger.info("store ready")

        output = stream.getvalue()
        self.assertTrue(output.startswith("\r\x1b[K"))
        self.assertIn("store ready", output)

    def test_console_writes_plain_lines_when_redirected(self) -> None:
        stream = io.StringIO()
        setup_logging(consumers=[{"type": "console", "level": "WARNING", "stream": stream}])

        logger.info("hidden")
        logger.warning("shown")

        output = stream.getvalue()
        self.assertNotIn("\x1b", output)
        self.assertNotIn("hidden", output)
        self.assertIn("WARNING", output)
        self.assertIn("shown", output)

    def test_file_records_carry_the_user_id(self) -> None:
        path = self._tmp_dir / "nested" / "finchat.log"
        descriptions = setup_logging(consumers=[{"type": "file", "path": str(path)}], user_id="u42")

        logger.info("loaded history")
        logger.remove()

        contents = path.read_text(encoding="utf-8")
        self.assertEqual([f"file ({path}, INFO)"], descriptions)
        self.assertIn("user=u42", contents)
        self.assertIn("loaded history", contents)

    def test_guest_is_the_default_user(self) -> None:
        path = self._tmp_dir / "guest.log"
        setup_logging(consumers=[{"type": "file", "path": str(path)}])

        logger.info("hello")
        logger.remove()

        self.assertIn("user=guest", path.read_text(encoding="utf-8"))

    def test_unknown_consumer_is_skipped_and_reported(self) -> None:
        stream = io.StringIO()
        descriptions = setup_logging(
            consumers=[{"type": "syslog"}, {"type": "console", "level": "WARNING", "stream": stream}]
        )

        self.assertEqual(["console (stderr, WARNING)"], descriptions)
        self.assertIn("'syslog'", stream.getvalue())


class ReplConsoleSinkTests(unittest.TestCase):
    def test_defaults_to_stderr(self) -> None:
        self.assertIs(sys.stderr, ReplConsoleSink().stream)


if __name__ == "__main__":
    unittest.main()
