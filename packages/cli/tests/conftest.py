"""Pytest configuration and fixtures for CLI tests.

This conftest.py ensures tests work for both developers (editable install)
and users (pip installed package).
"""
import sys
import pytest
from pathlib import Path
from typer.testing import CliRunner


def pytest_configure(config):
    """Configure pytest with custom markers and path setup."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


@pytest.fixture(scope="session", autouse=True)
def setup_test_path():
    """Ensure the package root is in the Python path.

    This makes the package importable whether tests are run from:
    - The package directory (packages/cli)
    - The project root
    - Or after pip install
    """
    package_root = Path(__file__).parent.parent

    package_root_str = str(package_root)
    if package_root_str not in sys.path:
        sys.path.insert(0, package_root_str)

    yield


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def sample_workspace(tmp_path):
    """Create a workspace where anyhow and serde can be consolidated.

    member1 and member2 declare anyhow 1.0.80 and 1.0.75 plus serde 1.0;
    member3 has no dependencies.
    """
    (tmp_path / "Cargo.toml").write_text(
        '[workspace]\nresolver = "2"\nmembers = ["crates/*"]\n'
    )
    bodies = {
        "member1": '[dependencies]\nanyhow = "1.0.80"\nserde = "1.0"\n',
        "member2": '[dependencies]\nanyhow = "1.0.75"\nserde = "1.0"\n',
        "member3": "",
    }
    for name, body in bodies.items():
        member_dir = tmp_path / "crates" / name
        (member_dir / "src").mkdir(parents=True)
        (member_dir / "src" / "lib.rs").write_text("")
        manifest = f'[package]\nname = "{name}"\nversion = "0.1.0"\n'
        if body:
            manifest += "\n" + body
        (member_dir / "Cargo.toml").write_text(manifest)
    return tmp_path
