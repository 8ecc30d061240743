"""ToolPipeline — runs privileged tool calls through the trust boundary.

Step order for every tool:
    1. validate_path      — PathGuard (file tools only)
    2. check_dangerous    — dangerous-operation rules (code / script content)
    3. act                — console execution or file write
    4. redact_output      — secret redaction on anything returned to the agent
    5. write_audit        — AuditLogger.record() ← ALWAYS RUNS (finally block)

Critical invariants:
    - Checks fail closed: a rejected path or matched rule skips step 3.
    - write_audit runs in a finally block regardless of outcome, and cannot
      raise (AuditLogger swallows its own failures).
    - Session ids are passed in by the caller on every call.
"""

from __future__ import annotations

import logging
import os
import re
import time
from pathlib import Path
from typing import Any

from guard.enforcement.errors import (
    ConsoleError,
    ConsoleTimeoutError,
    PathRejectedError,
    PolicyBlockedError,
)
from guard.enforcement.executor import CodeExecutor
from guard.models.audit import AuditStatus
from guard.models.tools import ToolResponse
from guard.policy.rules import ENV_READ_ADVISORY, SCRIPT_RULE_IDS
from guard.workspace import Workspace

logger = logging.getLogger(__name__)

# Files written by write_script keep their extension; anything else gets .R
_KEPT_EXTENSIONS = re.compile(
    r"\.(R|Rmd|qmd|Rnw|csv|tsv|txt|json|xml|md|html|tex|yaml|yml|toml|Rproj)$",
    re.IGNORECASE,
)


def script_filename(filename: str) -> str:
    """Append .R unless the name already carries a known document/data extension."""
    if _KEPT_EXTENSIONS.search(filename):
        return filename
    return filename + ".R"


class ToolPipeline:
    def __init__(self, workspace: Workspace, executor: CodeExecutor) -> None:
        self._workspace = workspace
        self._executor = executor

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    async def run_code(self, session_id: int | str, code: str, echo: bool = True) -> ToolResponse:
        """Execute console code unless it matches a dangerous-operation rule."""
        tool = "run_code"
        start = time.monotonic()
        status = AuditStatus.ERROR
        message = ""
        reason: str | None = None
        output: str | None = None

        try:
            self._check_dangerous(code)
            raw_output = await self._executor.execute(code, echo)
            # Env-read output is withheld even when the console does not echo the call
            if self._workspace.sanitizer.reads_environment(code):
                output = ENV_READ_ADVISORY
            else:
                output = self._workspace.redact_secrets(raw_output)
            status = AuditStatus.SUCCESS
            message = "Code executed" + (f"\n{output}" if output else "")
        except PolicyBlockedError as exc:
            status, reason = AuditStatus.BLOCKED, exc.rule_id
            message = (
                "BLOCKED: potentially dangerous command detected "
                f"(rule: {exc.rule_id}). Code was NOT executed."
            )
            logger.warning("run_code blocked sid=%s rule=%s", session_id, exc.rule_id)
        except (ConsoleError, ConsoleTimeoutError) as exc:
            reason = str(exc)
            message = f"Error executing code: {self._workspace.redact_secrets(reason)}"
        except Exception as exc:
            logger.exception("Unhandled exception executing code sid=%s", session_id)
            reason = f"{type(exc).__name__}: {exc}"
            message = f"Error executing code: {self._workspace.redact_secrets(reason)}"
        finally:
            duration_ms = int((time.monotonic() - start) * 1000)
            self._write_audit(
                session_id,
                tool,
                code,
                status,
                duration_ms=duration_ms,
                **self._reason_field(status, reason),
            )

        return ToolResponse(
            tool=tool,
            status=status,
            message=message,
            reason=reason,
            duration_ms=duration_ms,
        )

    async def write_file(self, session_id: int | str, filename: str, content: str) -> ToolResponse:
        """Create a new file inside the workspace. Never overwrites."""
        return self._write(session_id, "write_file", filename, content, rule_ids=None, check=False)

    async def write_script(self, session_id: int | str, filename: str, code: str) -> ToolResponse:
        """Create a script or report, screening its content for spawn/delete calls."""
        return self._write(
            session_id,
            "write_script",
            script_filename(filename),
            code,
            rule_ids=SCRIPT_RULE_IDS,
            check=True,
        )

    async def read_env_var(self, session_id: int | str, name: str) -> ToolResponse:
        """Return an environment variable only if allowed_env_vars lists it."""
        tool = "read_env_var"
        start = time.monotonic()
        status = AuditStatus.ERROR
        reason: str | None = None
        value: str | None = None

        try:
            if not self._workspace.is_env_var_allowed(name):
                status, reason = AuditStatus.BLOCKED, "env_var_not_allowed"
                message = (
                    f"BLOCKED: environment variable {name!r} is not in allowed_env_vars."
                )
                logger.warning("read_env_var blocked sid=%s name=%s", session_id, name)
            elif name not in os.environ:
                reason = "env_var_not_set"
                message = f"Environment variable {name!r} is not set."
            else:
                value = self._workspace.redact_secrets(os.environ[name])
                status = AuditStatus.SUCCESS
                message = f"{name}={value}"
        finally:
            duration_ms = int((time.monotonic() - start) * 1000)
            self._write_audit(
                session_id,
                tool,
                f'Sys.getenv("{name}")',
                status,
                duration_ms=duration_ms,
                **self._reason_field(status, reason),
            )

        return ToolResponse(
            tool=tool,
            status=status,
            message=message,
            reason=reason,
            value=value,
            duration_ms=duration_ms,
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _write(
        self,
        session_id: int | str,
        tool: str,
        filename: str,
        content: str,
        rule_ids: frozenset[str] | None,
        check: bool,
    ) -> ToolResponse:
        start = time.monotonic()
        status = AuditStatus.ERROR
        reason: str | None = None
        resolved: str | None = None
        extra: dict[str, Any] = {}

        try:
            resolved = self._validate_path(filename)
            if check:
                self._check_dangerous(content, rule_ids)

            target = Path(resolved)
            if target.exists():
                reason = "file_exists"
                message = f"WARNING: file already exists: {filename}. Use a different name."
            else:
                # Encode before the file is created so bad text leaves nothing behind
                data = content.encode("utf-8")
                target.parent.mkdir(parents=True, exist_ok=True)
                # x: fail instead of clobbering a file created since the exists() check
                with open(target, "xb") as f:
                    f.write(data)
                status = AuditStatus.SUCCESS
                message = f"File created: {resolved}"
                extra = {
                    "size_bytes": len(data),
                    "line_count": len(content.splitlines()),
                }
        except PathRejectedError as exc:
            status, reason = AuditStatus.BLOCKED, exc.reason
            message = (
                "ERROR: writing outside the workspace is NOT allowed.\n"
                f"Workspace: {self._workspace.root}\n"
                f"Attempted path: {filename}"
            )
            logger.warning("%s rejected sid=%s path=%r: %s", tool, session_id, filename, exc.reason)
        except PolicyBlockedError as exc:
            status, reason = AuditStatus.BLOCKED, exc.rule_id
            message = (
                "SECURITY WARNING: dangerous code detected "
                f"(rule: {exc.rule_id}). File was NOT created."
            )
            logger.warning("%s blocked sid=%s rule=%s", tool, session_id, exc.rule_id)
        except UnicodeEncodeError as exc:
            reason = f"content is not valid UTF-8 text: {exc.reason}"
            message = f"Error writing file: {reason}"
        except OSError as exc:
            reason = str(exc)
            message = f"Error writing file: {exc}"
        finally:
            duration_ms = int((time.monotonic() - start) * 1000)
            self._write_audit(
                session_id,
                tool,
                content,
                status,
                path=filename,
                duration_ms=duration_ms,
                **extra,
                **self._reason_field(status, reason),
            )

        return ToolResponse(
            tool=tool,
            status=status,
            message=message,
            resolved_path=resolved if status == AuditStatus.SUCCESS else None,
            reason=reason,
            duration_ms=duration_ms,
        )

    def _validate_path(self, filename: str) -> str:
        """Step 1 — PathGuard. Returns the resolved path or raises PathRejectedError."""
        verdict = self._workspace.validate_path(filename)
        if not verdict.ok:
            raise PathRejectedError(filename, verdict.reason)
        return verdict.resolved

    def _check_dangerous(self, code: str, rule_ids: frozenset[str] | None = None) -> None:
        """Step 2 — dangerous-operation rules. Raises PolicyBlockedError on a match."""
        dangerous, rule_id = self._workspace.sanitizer.is_dangerous(code, rule_ids)
        if dangerous:
            raise PolicyBlockedError(rule_id or "unknown")

    def _write_audit(
        self,
        session_id: int | str,
        tool: str,
        command: str,
        status: AuditStatus,
        **extra: Any,
    ) -> None:
        """Step 5 — append the audit record (never raises)."""
        self._workspace.log_audit(session_id, tool, command, status, **extra)

    @staticmethod
    def _reason_field(status: AuditStatus, reason: str | None) -> dict[str, str]:
        if reason is None:
            return {}
        return {"reason": reason} if status == AuditStatus.BLOCKED else {"error": reason}
