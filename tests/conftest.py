"""
Shared test fixtures.

Every fixture builds on a fresh tmp_path workspace; nothing touches the
real home directory or a running console bridge.
"""

from pathlib import Path

import pytest

from guard.config import Settings
from guard.sanitize.sanitizer import Sanitizer
from guard.workspace import Workspace


@pytest.fixture
def workspace_dir(tmp_path: Path) -> Path:
    root = tmp_path / "ws"
    root.mkdir()
    return root


@pytest.fixture
def settings(workspace_dir: Path) -> Settings:
    return Settings(workspace_root=str(workspace_dir), admin_api_key="test-admin-key")


@pytest.fixture
def workspace(workspace_dir: Path, settings: Settings) -> Workspace:
    return Workspace(workspace_dir, settings)


@pytest.fixture
def sanitizer() -> Sanitizer:
    return Sanitizer()


def write_config(root: Path, text: str) -> Path:
    """Write .direct/config.yml under root and return its path."""
    config_path = root / ".direct" / "config.yml"
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(text, encoding="utf-8")
    return config_path
