"""
Tests for the packaging metadata in setup.py and the bundled VERSION file.
"""

import re
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]


class TestPackaging(unittest.TestCase):
    def setUp(self) -> None:
        self.setup_text = (ROOT / "setup.py").read_text(encoding="utf-8")

    def test_project_metadata(self) -> None:
        self.assertIn('name="unical"', self.setup_text)
        self.assertIn('author="UniCal contributors"', self.setup_text)
        self.assertIn('"unical=unical.cli:main"', self.setup_text)

    def test_version_file(self) -> None:
        version = (ROOT / "unical" / "VERSION").read_text(encoding="utf-8").strip()
        self.assertRegex(version, r"^\d+\.\d+\.\d+$")

    def test_runtime_requirements_cover_imports(self) -> None:
        lines = (ROOT / "requirements.txt").read_text(encoding="utf-8").splitlines()
        names = {re.split(r"[<>=!~ ]", line.strip(), maxsplit=1)[0].lower() for line in lines if line.strip()}
        self.assertTrue({"requests", "icalendar", "pyyaml", "rich"} <= names)


if __name__ == "__main__":
    unittest.main()
