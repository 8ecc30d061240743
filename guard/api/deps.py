"""FastAPI dependency providers.

The Workspace and console executor are singletons created once in the
lifespan; the pipeline is a cheap per-request wrapper around them.
"""

from fastapi import Depends, Header, HTTPException, Request

from guard.enforcement.pipeline import ToolPipeline
from guard.workspace import Workspace


async def get_workspace(request: Request) -> Workspace:
    """Return the process-wide Workspace from app state."""
    workspace: Workspace = request.app.state.workspace
    return workspace


async def get_pipeline(
    request: Request,
    workspace: Workspace = Depends(get_workspace),
) -> ToolPipeline:
    """Build a pipeline over the shared workspace and executor."""
    return ToolPipeline(workspace=workspace, executor=request.app.state.executor)


async def require_admin(
    request: Request,
    x_admin_key: str = Header(...),
) -> None:
    """Require a valid X-Admin-Key header for admin-gated endpoints."""
    expected = request.app.state.settings.admin_api_key
    # An unset key locks the endpoints rather than opening them
    if not expected or x_admin_key != expected:
        raise HTTPException(status_code=403, detail="Invalid admin key")
