"""Version lookup for roadwork."""

import re
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"
_VERSION_LINE = re.compile(r'^version\s*=\s*"([^"]+)"', re.MULTILINE)


def get_version() -> str:
    """Version from the source checkout's pyproject.toml, else from the installed metadata."""
    if _PYPROJECT.is_file():
        found = _VERSION_LINE.search(_PYPROJECT.read_text(encoding="utf-8"))
        if found:
            return found.group(1)
    try:
        return version("roadwork")
    except PackageNotFoundError:
        return "0.0.0"
