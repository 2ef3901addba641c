"""Pytest configuration and fixtures for SDK tests.

This conftest.py ensures tests work for both developers (editable install)
and users (pip installed package).
"""
import sys
import textwrap
from pathlib import Path
from typing import Dict, Optional

import pytest


def pytest_configure(config):
    """Configure pytest with custom markers and path setup."""
    config.addinivalue_line(
        "markers", "integration: marks tests that run a full consolidation pass"
    )


@pytest.fixture(scope="session", autouse=True)
def setup_test_path():
    """Ensure the package root is in the Python path.

    This makes the package importable whether tests are run from:
    - The package directory (packages/sdk-python)
    - The project root
    - Or after pip install
    """
    package_root = Path(__file__).parent.parent

    package_root_str = str(package_root)
    if package_root_str not in sys.path:
        sys.path.insert(0, package_root_str)

    yield


def member_manifest(name: str, body: str = "") -> str:
    """Cargo.toml text for a member package."""
    header = f'[package]\nname = "{name}"\nversion = "0.1.0"\nedition = "2021"\n'
    return header + ("\n" + textwrap.dedent(body).strip() + "\n" if body.strip() else "")


@pytest.fixture
def make_workspace(tmp_path):
    """
    Factory creating a Cargo workspace on disk.

    Usage:
        root = make_workspace(
            members={"member1": '[dependencies]\\nserde = "1.0"'},
            root_extra='[workspace.dependencies]\\nregex = "1.10"',
        )

    Members live under crates/<name>; the root manifest lists "crates/*".
    """

    def _make(
        members: Dict[str, str],
        root_extra: str = "",
        root_manifest: Optional[str] = None,
    ) -> Path:
        if root_manifest is None:
            root_manifest = '[workspace]\nresolver = "2"\nmembers = ["crates/*"]\n'
            if root_extra.strip():
                root_manifest += "\n" + textwrap.dedent(root_extra).strip() + "\n"
        (tmp_path / "Cargo.toml").write_text(root_manifest)

        for name, body in members.items():
            member_dir = tmp_path / "crates" / name
            member_dir.mkdir(parents=True, exist_ok=True)
            (member_dir / "Cargo.toml").write_text(member_manifest(name, body))
            (member_dir / "src").mkdir(exist_ok=True)
            (member_dir / "src" / "lib.rs").write_text("")
        return tmp_path

    return _make


@pytest.fixture
def read_member(tmp_path):
    """Read a member manifest created by make_workspace."""

    def _read(name: str) -> str:
        return (tmp_path / "crates" / name / "Cargo.toml").read_text()

    return _read


@pytest.fixture
def read_root(tmp_path):
    """Read the root manifest created by make_workspace."""

    def _read() -> str:
        return (tmp_path / "Cargo.toml").read_text()

    return _read
