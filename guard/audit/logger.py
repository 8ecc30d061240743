"""Append-only JSONL audit logger.

Critical invariants:
- record() ALWAYS runs and never raises. A lost audit line must not
  abort the tool action it describes.
- cmd_sanitized is always redact_pii(cmd), computed here, never by callers.
- Lines are only ever appended. The file is opened and closed per write,
  so no handle is held between tool invocations.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from guard.models.audit import AuditRecord, AuditStatus
from guard.sanitize.sanitizer import Sanitizer

logger = logging.getLogger(__name__)


def _encodable(value: Any) -> Any:
    """Replace characters UTF-8 cannot encode (lone surrogates) with '?'."""
    if isinstance(value, str):
        return value.encode("utf-8", errors="replace").decode("utf-8")
    return value


class AuditLogger:
    def __init__(
        self,
        log_path: str | Path,
        sanitizer: Sanitizer,
        log_full_commands: bool = True,
    ) -> None:
        self._log_path = Path(log_path)
        self._sanitizer = sanitizer
        self._log_full_commands = log_full_commands

    @property
    def log_path(self) -> Path:
        return self._log_path

    def record(
        self,
        session_id: int | str,
        tool: str,
        command: str,
        status: AuditStatus | str,
        **extra: Any,
    ) -> None:
        """Append one audit record. Never raises; failures are logged and swallowed."""
        try:
            command = _encodable(command)
            sanitized = self._sanitizer.redact_pii(command)
            entry = AuditRecord(
                ts=datetime.now(timezone.utc),
                sid=_encodable(session_id),
                tool=_encodable(tool),
                # With log_full_commands off the raw command never reaches disk
                cmd=command if self._log_full_commands else sanitized,
                cmd_sanitized=sanitized,
                status=AuditStatus(status),
                **{key: _encodable(value) for key, value in extra.items()},
            )
            line = entry.model_dump_json(exclude_none=True)

            self._log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._log_path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
            logger.debug("audit write sid=%s tool=%s status=%s", session_id, tool, entry.status.value)
        except Exception:
            logger.exception(
                "AuditLogger.record() failed — audit record lost for sid=%s tool=%s",
                session_id,
                tool,
            )
