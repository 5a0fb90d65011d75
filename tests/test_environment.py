"""Test the development environment setup."""
import sys
from pathlib import Path


def test_python_version() -> None:
    """Ensure we're running Python 3.11+."""
    assert sys.version_info >= (3, 11), "Python version should be 3.11 or higher"


def test_project_structure() -> None:
    """Verify basic project structure."""
    project_root = Path(__file__).parent.parent
    assert (project_root / "src" / "mdns_scanner").is_dir()
    assert (project_root / "pyproject.toml").is_file()
