"""FastAPI application factory for the workspace guard."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from guard.api.v1 import audit as audit_router_module
from guard.api.v1 import guard as guard_router_module
from guard.api.v1 import tools as tools_router_module
from guard.config import Settings
from guard.config import settings as default_settings
from guard.enforcement.executor import ConsoleExecutor
from guard.workspace import Workspace

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: build the workspace on startup, close the executor on shutdown."""
    cfg: Settings = app.state.settings

    # --- Startup ---

    # Workspace singleton, root fixed for the process lifetime
    app.state.workspace = Workspace(cfg.workspace_root, cfg)

    # Console executor singleton, unless a test or embedder supplied one
    if getattr(app.state, "executor", None) is None:
        app.state.executor = ConsoleExecutor(cfg)

    logger.info(
        "Workspace guard started (environment=%s, workspace=%s)",
        cfg.environment,
        app.state.workspace.root,
    )

    yield

    # --- Shutdown ---
    if isinstance(app.state.executor, ConsoleExecutor):
        await app.state.executor.aclose()

    logger.info("Workspace guard shut down")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    cfg = settings or default_settings
    logging.getLogger("guard").setLevel(cfg.log_level.upper())

    app = FastAPI(
        title="Workspace Guard",
        description="Path, command and output policy layer for agent tool calls",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store settings on app.state so lifespan + deps can access them
    app.state.settings = cfg
    app.state.executor = None

    # Routers
    app.include_router(guard_router_module.router, prefix="/v1/guard", tags=["guard"])
    app.include_router(tools_router_module.router, prefix="/v1/tools", tags=["tools"])
    app.include_router(audit_router_module.router, prefix="/v1/audit", tags=["audit"])

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


# Module-level app instance for uvicorn
app = create_app()
