from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AuditStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    BLOCKED = "blocked"


class AuditRecord(BaseModel):
    """One line of .direct/audit.log. Caller-supplied extra fields are kept."""

    model_config = ConfigDict(extra="allow")

    ts: datetime
    sid: int | str  # opaque session identifier
    tool: str
    cmd: str  # full command, for forensics
    cmd_sanitized: str  # PII-redacted, the only form that leaves the workspace
    status: AuditStatus
    duration_ms: int | None = None
    error: str | None = None
    reason: str | None = None  # block reason: rule id or path rejection
    size_bytes: int | None = None
    line_count: int | None = None

    @field_validator("ts")
    @classmethod
    def _ts_utc(cls, value: datetime) -> datetime:
        return _as_utc(value).astimezone(timezone.utc)  # type: ignore[union-attr]

    @field_serializer("ts")
    def _serialize_ts(self, value: datetime) -> str:
        return value.strftime(TIMESTAMP_FORMAT)


class AuditFilters(BaseModel):
    tool: str | None = None
    status: AuditStatus | None = None
    since: datetime | None = None  # inclusive; naive values are taken as UTC
    last_n: int | None = Field(default=None, ge=0)

    @field_validator("since")
    @classmethod
    def _since_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)


class DateRange(BaseModel):
    first: datetime
    last: datetime

    @field_serializer("first", "last")
    def _serialize_ts(self, value: datetime) -> str:
        return value.strftime(TIMESTAMP_FORMAT)


class AuditStats(BaseModel):
    total_entries: int
    date_range: DateRange | None = None  # None when the log is empty
    counts_by_tool: dict[str, int] = Field(default_factory=dict)
    counts_by_status: dict[str, int] = Field(default_factory=dict)
    counts_by_session: dict[str, int] = Field(default_factory=dict)


class AuditView(BaseModel):
    ts: str
    sid: int | str
    tool: str
    cmd_display: str
    status: AuditStatus
