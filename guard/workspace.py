"""Workspace — the per-process trust-boundary context.

One Workspace per workspace root. The root is canonicalized once at
construction and cannot be changed afterwards; pointing the guard at another
directory means building a new Workspace (for the API: restarting it).

The methods below are the functions exposed to tool gateways:
validate_path, is_dangerous_command, redact_secrets, log_audit,
query_audit, export_audit, audit_stats.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

from guard.audit.logger import AuditLogger
from guard.audit.query import AuditQuery
from guard.config import Settings
from guard.models.audit import AuditFilters, AuditRecord, AuditStats, AuditStatus, AuditView
from guard.models.policy import GuardConfig, PathVerdict
from guard.policy.loader import load_config_or_default
from guard.policy.paths import DEFAULT_BLOCKED_PATHS, validate_path
from guard.policy.rules import PatternPolicy
from guard.sanitize.sanitizer import Sanitizer

logger = logging.getLogger(__name__)


class Workspace:
    def __init__(self, root: str | Path, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()
        # Must exist: a missing root fails here rather than at the first path check
        self._root = Path(root).expanduser().resolve(strict=True)
        self._audit_dir = self._root / self._settings.audit_dir_name

        result = load_config_or_default(self.config_path)
        self._config = result.config
        self._config_error = result.error

        self._sanitizer = Sanitizer(PatternPolicy.from_config(self._config))
        self._blocked_paths: tuple[str, ...] = (
            *DEFAULT_BLOCKED_PATHS,
            *self._config.blocked_paths,
            str(self._audit_dir),  # the agent may not touch its own audit trail
        )
        self._audit_logger = AuditLogger(
            self.audit_log_path,
            self._sanitizer,
            log_full_commands=self._config.audit.log_full_commands,
        )
        self._audit_query = AuditQuery(
            self.audit_log_path,
            default_view=self._config.audit.default_view,
        )
        logger.info(
            "Workspace ready root=%s config=%s",
            self._root,
            "degraded" if result.degraded else "ok",
        )

    # ------------------------------------------------------------------
    # Read-only context
    # ------------------------------------------------------------------

    @property
    def root(self) -> Path:
        return self._root

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def config(self) -> GuardConfig:
        return self._config

    @property
    def config_error(self) -> str | None:
        return self._config_error

    @property
    def sanitizer(self) -> Sanitizer:
        return self._sanitizer

    @property
    def blocked_paths(self) -> tuple[str, ...]:
        return self._blocked_paths

    @property
    def audit_dir(self) -> Path:
        return self._audit_dir

    @property
    def config_path(self) -> Path:
        return self._audit_dir / self._settings.config_file_name

    @property
    def audit_log_path(self) -> Path:
        return self._audit_dir / self._settings.audit_log_name

    # ------------------------------------------------------------------
    # Gateway functions
    # ------------------------------------------------------------------

    def validate_path(self, candidate: str) -> PathVerdict:
        return validate_path(candidate, self._root, self._blocked_paths)

    def is_dangerous_command(self, code: str) -> tuple[bool, str | None]:
        return self._sanitizer.is_dangerous(code)

    def redact_secrets(self, text: str) -> str:
        return self._sanitizer.redact_secrets(text)

    def redact_pii(self, text: str) -> str:
        return self._sanitizer.redact_pii(text)

    def is_env_var_allowed(self, name: str) -> bool:
        return name in self._config.allowed_env_vars

    def log_audit(
        self,
        session_id: int | str,
        tool: str,
        command: str,
        status: AuditStatus | str,
        **extra: Any,
    ) -> None:
        self._audit_logger.record(session_id, tool, command, status, **extra)

    def query_audit(self, filters: AuditFilters | None = None) -> list[AuditRecord]:
        return self._audit_query.query(filters)

    def view_audit(
        self,
        filters: AuditFilters | None = None,
        view: Literal["sanitized", "full"] | None = None,
    ) -> list[AuditView]:
        return self._audit_query.view(filters, view)

    def export_audit(self, output_path: str | Path, filters: AuditFilters | None = None) -> int:
        output_path = Path(output_path)
        if not output_path.is_absolute():
            output_path = self._root / output_path
        return self._audit_query.export_csv(output_path, filters)

    def audit_stats(self) -> AuditStats:
        return self._audit_query.stats()
