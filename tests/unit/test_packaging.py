"""Project metadata points at files that ship with the source tree."""
import re
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


def test_readme_declared_and_present():
    pyproject = (ROOT / "pyproject.toml").read_text(encoding="utf-8")
    match = re.search(r'^readme = "([^"]+)"$', pyproject, re.MULTILINE)
    assert match is not None
    assert match.group(1) == "README.md"
    assert (ROOT / match.group(1)).is_file()
