from pydantic import BaseModel, Field

from guard.models.audit import AuditFilters, AuditStatus


class RunCodeRequest(BaseModel):
    session_id: int | str
    code: str
    echo: bool = True


class WriteFileRequest(BaseModel):
    session_id: int | str
    filename: str
    content: str


class ReadEnvVarRequest(BaseModel):
    session_id: int | str
    name: str


class PathRequest(BaseModel):
    path: str


class CommandRequest(BaseModel):
    code: str


class TextRequest(BaseModel):
    text: str


class TextResponse(BaseModel):
    text: str


class ExportRequest(BaseModel):
    path: str  # relative to the workspace root
    filters: AuditFilters = Field(default_factory=AuditFilters)


class ExportResponse(BaseModel):
    path: str
    rows: int


class ToolResponse(BaseModel):
    tool: str
    status: AuditStatus
    message: str  # human-readable status string handed back to the host
    resolved_path: str | None = None
    reason: str | None = None  # block reason or error message
    value: str | None = None  # env var value, only for read_env_var success
    duration_ms: int
