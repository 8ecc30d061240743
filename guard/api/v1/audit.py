"""Audit query endpoints — all require X-Admin-Key header."""

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException

from guard.api.deps import get_workspace, require_admin
from guard.models.audit import AuditFilters, AuditStats, AuditStatus, AuditView
from guard.models.tools import ExportRequest, ExportResponse
from guard.workspace import Workspace

router = APIRouter()


@router.get("/", response_model=list[AuditView], dependencies=[Depends(require_admin)])
async def list_entries(
    tool: str | None = None,
    status: AuditStatus | None = None,
    since: datetime | None = None,
    last_n: int | None = None,
    view: Literal["sanitized", "full"] | None = None,
    workspace: Workspace = Depends(get_workspace),
) -> list[AuditView]:
    """Return audit entries, oldest first, with the command in the requested view."""
    if last_n is not None and last_n < 0:
        raise HTTPException(status_code=422, detail="last_n must be >= 0")
    filters = AuditFilters(tool=tool, status=status, since=since, last_n=last_n)
    return workspace.view_audit(filters, view)


@router.get("/stats", response_model=AuditStats, dependencies=[Depends(require_admin)])
async def stats(workspace: Workspace = Depends(get_workspace)) -> AuditStats:
    return workspace.audit_stats()


@router.post("/export", response_model=ExportResponse, dependencies=[Depends(require_admin)])
async def export(
    body: ExportRequest,
    workspace: Workspace = Depends(get_workspace),
) -> ExportResponse:
    """Export sanitized entries to a CSV file inside the workspace."""
    verdict = workspace.validate_path(body.path)
    if not verdict.ok:
        raise HTTPException(status_code=400, detail=verdict.reason)
    try:
        rows = workspace.export_audit(verdict.resolved, body.filters)
    except FileExistsError as exc:
        raise HTTPException(status_code=409, detail=f"File already exists: {body.path}") from exc
    return ExportResponse(path=verdict.resolved, rows=rows)
