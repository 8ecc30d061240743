"""Shared fixtures for scenario tests.

Scenario tests are DETERMINISTIC: they drive ToolPipeline against a temp
workspace with a mocked console. No console bridge, no network.
All scenario tests use @pytest.mark.scenario.
"""
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from guard.enforcement.pipeline import ToolPipeline
from guard.models.audit import AuditRecord
from guard.workspace import Workspace

# Note: workspace fixture already defined in root tests/conftest.py


@pytest.fixture
def console() -> AsyncMock:
    mock = AsyncMock()
    mock.execute.return_value = ""
    return mock


@pytest.fixture
def scenario_pipeline(workspace: Workspace, console: AsyncMock) -> ToolPipeline:
    return ToolPipeline(workspace, console)


def last_record(workspace: Workspace) -> AuditRecord:
    """Most recent audit record for the workspace."""
    records = workspace.query_audit()
    assert records, "expected an audit record"
    return records[-1]


def outside_file(workspace: Workspace, name: str) -> Path:
    """A path next to (not inside) the workspace root."""
    return workspace.root.parent / name
