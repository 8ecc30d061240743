"""Filtered reads, CSV export and statistics over the JSONL audit log.

Every read goes through query(): the whole file is read, each line parsed on
its own (malformed lines are skipped), records ordered by timestamp, then
filtered tool -> status -> since -> last_n.

export_csv() writes cmd_sanitized and never cmd. That is not a default a
caller can turn off.
"""

import csv
import logging
from collections import Counter
from pathlib import Path
from typing import Literal

from pydantic import ValidationError

from guard.models.audit import (
    TIMESTAMP_FORMAT,
    AuditFilters,
    AuditRecord,
    AuditStats,
    AuditView,
    DateRange,
)

logger = logging.getLogger(__name__)

EXPORT_COLUMNS: tuple[str, ...] = ("ts", "sid", "tool", "cmd_sanitized", "status")


class AuditQuery:
    def __init__(
        self,
        log_path: str | Path,
        default_view: Literal["sanitized", "full"] = "sanitized",
    ) -> None:
        self._log_path = Path(log_path)
        self._default_view = default_view

    def read_all(self) -> list[AuditRecord]:
        """Parse every valid line, oldest first."""
        if not self._log_path.exists():
            return []

        records: list[AuditRecord] = []
        with open(self._log_path, encoding="utf-8", errors="replace") as f:
            for lineno, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append(AuditRecord.model_validate_json(line))
                except ValidationError:
                    logger.debug("Skipping malformed audit line %d in %s", lineno, self._log_path)
        # Stable: concurrent appenders may interleave slightly out of order
        records.sort(key=lambda r: r.ts)
        return records

    def query(self, filters: AuditFilters | None = None) -> list[AuditRecord]:
        """Return records matching filters, applied in the order tool, status, since, last_n."""
        filters = filters or AuditFilters()
        records = self.read_all()

        if filters.tool is not None:
            records = [r for r in records if r.tool == filters.tool]
        if filters.status is not None:
            records = [r for r in records if r.status == filters.status]
        if filters.since is not None:
            records = [r for r in records if r.ts >= filters.since]
        if filters.last_n is not None:
            records = records[-filters.last_n:] if filters.last_n else []

        return records

    def view(
        self,
        filters: AuditFilters | None = None,
        view: Literal["sanitized", "full"] | None = None,
    ) -> list[AuditView]:
        """Display rows; cmd_display is the sanitized command unless view='full'."""
        view = view or self._default_view
        if view == "full":
            logger.warning("Showing FULL audit commands (may contain PII/secrets)")
        return [
            AuditView(
                ts=r.ts.strftime(TIMESTAMP_FORMAT),
                sid=r.sid,
                tool=r.tool,
                cmd_display=r.cmd if view == "full" else r.cmd_sanitized,
                status=r.status,
            )
            for r in self.query(filters)
        ]

    def export_csv(self, output_path: str | Path, filters: AuditFilters | None = None) -> int:
        """Write matching records to a new CSV file (always sanitized). Returns the row count.

        Raises FileExistsError rather than overwrite an existing file.
        """
        records = self.query(filters)
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "x", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(EXPORT_COLUMNS)
            for r in records:
                writer.writerow(
                    [r.ts.strftime(TIMESTAMP_FORMAT), r.sid, r.tool, r.cmd_sanitized, r.status.value]
                )

        logger.info("Exported %d audit entries to %s", len(records), output_path)
        return len(records)

    def stats(self) -> AuditStats:
        """Aggregate counts over the unfiltered log."""
        records = self.query()
        if not records:
            return AuditStats(total_entries=0)

        timestamps = [r.ts for r in records]
        return AuditStats(
            total_entries=len(records),
            date_range=DateRange(first=min(timestamps), last=max(timestamps)),
            counts_by_tool=dict(Counter(r.tool for r in records)),
            counts_by_status=dict(Counter(r.status.value for r in records)),
            counts_by_session=dict(Counter(str(r.sid) for r in records)),
        )
