from guard.models.audit import (
    AuditFilters,
    AuditRecord,
    AuditStats,
    AuditStatus,
    AuditView,
    DateRange,
)
from guard.models.policy import (
    AuditConfig,
    CommandVerdict,
    GuardConfig,
    PathVerdict,
    PiiPatternConfig,
    PolicyRule,
    RuleCategory,
)
from guard.models.tools import (
    ReadEnvVarRequest,
    RunCodeRequest,
    ToolResponse,
    WriteFileRequest,
)

__all__ = [
    "AuditFilters",
    "AuditRecord",
    "AuditStats",
    "AuditStatus",
    "AuditView",
    "DateRange",
    "AuditConfig",
    "CommandVerdict",
    "GuardConfig",
    "PathVerdict",
    "PiiPatternConfig",
    "PolicyRule",
    "RuleCategory",
    "ReadEnvVarRequest",
    "RunCodeRequest",
    "ToolResponse",
    "WriteFileRequest",
]
