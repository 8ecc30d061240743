"""Stateless checks exposed to tool gateways. No audit record is written."""

from fastapi import APIRouter, Depends

from guard.api.deps import get_workspace
from guard.models.policy import CommandVerdict, PathVerdict
from guard.models.tools import CommandRequest, PathRequest, TextRequest, TextResponse
from guard.workspace import Workspace

router = APIRouter()


@router.post("/validate-path", response_model=PathVerdict)
async def validate_path(
    body: PathRequest,
    workspace: Workspace = Depends(get_workspace),
) -> PathVerdict:
    """Check that a path stays inside the workspace and outside blocked locations."""
    return workspace.validate_path(body.path)


@router.post("/check-command", response_model=CommandVerdict)
async def check_command(
    body: CommandRequest,
    workspace: Workspace = Depends(get_workspace),
) -> CommandVerdict:
    return workspace.sanitizer.check_command(body.code)


@router.post("/redact-secrets", response_model=TextResponse)
async def redact_secrets(
    body: TextRequest,
    workspace: Workspace = Depends(get_workspace),
) -> TextResponse:
    return TextResponse(text=workspace.redact_secrets(body.text))


@router.post("/redact-pii", response_model=TextResponse)
async def redact_pii(
    body: TextRequest,
    workspace: Workspace = Depends(get_workspace),
) -> TextResponse:
    return TextResponse(text=workspace.redact_pii(body.text))
