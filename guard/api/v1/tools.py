"""Privileged tool endpoints: every call is checked, then audited."""

from fastapi import APIRouter, Depends

from guard.api.deps import get_pipeline
from guard.enforcement.pipeline import ToolPipeline
from guard.models.tools import ReadEnvVarRequest, RunCodeRequest, ToolResponse, WriteFileRequest

router = APIRouter()


@router.post("/run-code", response_model=ToolResponse)
async def run_code(
    body: RunCodeRequest,
    pipeline: ToolPipeline = Depends(get_pipeline),
) -> ToolResponse:
    """Execute console code unless a dangerous-operation rule matches."""
    return await pipeline.run_code(body.session_id, body.code, echo=body.echo)


@router.post("/write-file", response_model=ToolResponse)
async def write_file(
    body: WriteFileRequest,
    pipeline: ToolPipeline = Depends(get_pipeline),
) -> ToolResponse:
    return await pipeline.write_file(body.session_id, body.filename, body.content)


@router.post("/write-script", response_model=ToolResponse)
async def write_script(
    body: WriteFileRequest,
    pipeline: ToolPipeline = Depends(get_pipeline),
) -> ToolResponse:
    """Write a script or report; .R is appended unless a known extension is present."""
    return await pipeline.write_script(body.session_id, body.filename, body.content)


@router.post("/read-env-var", response_model=ToolResponse)
async def read_env_var(
    body: ReadEnvVarRequest,
    pipeline: ToolPipeline = Depends(get_pipeline),
) -> ToolResponse:
    return await pipeline.read_env_var(body.session_id, body.name)
