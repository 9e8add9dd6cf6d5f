import os
import tempfile
import unittest
from unittest.mock import patch
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from setdpi.logger import trace, warning


class TestLogger(unittest.TestCase):
    def test_writes_to_log_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_file = os.path.join(tmp, "setdpi.log")
            with patch.dict(os.environ, {"LOG_FILE": log_file}):
                trace("Wrote 93 bytes to a.png")
                warning("Directory nope does not exist. Skipping.")

            with open(log_file, encoding='utf-8') as f:
                lines = f.read().splitlines()

        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[0].endswith("] TRACE Wrote 93 bytes to a.png"))
        self.assertTrue(lines[1].endswith("] WARNING Warning: Directory nope does not exist. Skipping."))

    def test_without_log_file(self):
        env = {k: v for k, v in os.environ.items() if k != "LOG_FILE"}
        with patch.dict(os.environ, env, clear=True), patch("sys.stderr") as mock_stderr:
            trace("hello")
        self.assertTrue(mock_stderr.write.called)


if __name__ == "__main__":
    unittest.main()
