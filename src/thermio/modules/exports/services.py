"""Export scheduling and log retention."""

from datetime import date, datetime
from typing import Annotated, Any
from uuid import UUID

import structlog
from fastapi import Depends

from thermio.core.audit import AuditContext, WorkspaceEventService, actions
from thermio.modules.exports.models import ExportKind, ExportRecord
from thermio.modules.exports.policy import export_period_due, retention_cutoff
from thermio.modules.exports.repos import ExportRepo
from thermio.modules.temp_logs.repos import TempLogRepo
from thermio.modules.workspaces.settings import ComplianceSettings


log = structlog.get_logger()


class ExportService:
    def __init__(self, repo: ExportRepo, temp_logs: TempLogRepo) -> None:
        self.repo = repo
        self.temp_logs = temp_logs

    async def list_exports(self, workspace_id: UUID) -> list[ExportRecord]:
        return await self.repo.list_by_workspace(workspace_id)

    async def request_export(
        self,
        workspace_id: UUID,
        period_start: date,
        period_end: date,
        user_id: UUID,
        settings: ComplianceSettings,
        events: WorkspaceEventService,
    ) -> tuple[ExportRecord, bool]:
        """Record an on-demand export; an existing one for the period is reused.

        Returns:
            Tuple of (record, whether it was created by this call)
        """
        record = await self._create(
            workspace_id,
            ExportKind.MANUAL,
            period_start,
            period_end,
            settings,
            created_by=user_id,
        )
        if record is None:
            existing = await self.repo.get_by_period(
                workspace_id, ExportKind.MANUAL, period_start, period_end
            )
            if existing is None:
                raise RuntimeError("export record vanished after conditional insert")
            return existing, False

        await events.record(
            actions.EXPORT_GENERATED,
            f"Export requested for {period_start.isoformat()} "
            f"to {period_end.isoformat()}",
            metadata={"export_id": str(record.id), "log_count": record.log_count},
        )
        return record, True

    async def schedule_due_export(
        self, workspace: Any, settings: ComplianceSettings, now: datetime
    ) -> ExportRecord | None:
        """Create the scheduled export record if one is due at ``now``.

        Running twice in the same hour creates the record once.
        """
        period = export_period_due(settings, now)
        if period is None:
            return None

        record = await self._create(
            workspace.id, period.kind, period.start, period.end, settings
        )
        if record is None:
            log.info(
                "export_already_scheduled",
                workspace_id=str(workspace.id),
                kind=str(period.kind),
                period_start=period.start.isoformat(),
            )
            return None

        log.info(
            "export_scheduled",
            workspace_id=str(workspace.id),
            export_id=str(record.id),
            kind=str(period.kind),
            period_start=period.start.isoformat(),
            period_end=period.end.isoformat(),
            log_count=record.log_count,
        )
        await WorkspaceEventService(
            self.repo.session, AuditContext(workspace_id=workspace.id)
        ).record(
            actions.EXPORT_GENERATED,
            f"Scheduled {period.kind} export for {period.start.isoformat()} "
            f"to {period.end.isoformat()}",
            metadata={"export_id": str(record.id), "log_count": record.log_count},
        )
        return record

    async def purge_expired_logs(
        self, workspace: Any, settings: ComplianceSettings, now: datetime
    ) -> int:
        """Delete logs older than the retention period if the purge is due."""
        cutoff = retention_cutoff(settings, now)
        if cutoff is None:
            return 0

        removed = await self.temp_logs.purge_before(workspace.id, cutoff)
        if removed:
            log.info(
                "retention_purged",
                workspace_id=str(workspace.id),
                cutoff=cutoff.isoformat(),
                removed=removed,
            )
            await WorkspaceEventService(
                self.repo.session, AuditContext(workspace_id=workspace.id)
            ).record(
                actions.RETENTION_PURGED,
                f"Purged {removed} logs dated before {cutoff.isoformat()}",
                metadata={"cutoff": cutoff.isoformat(), "removed": removed},
            )
        return removed

    async def _create(
        self,
        workspace_id: UUID,
        kind: str,
        period_start: date,
        period_end: date,
        settings: ComplianceSettings,
        created_by: UUID | None = None,
    ) -> ExportRecord | None:
        log_count = await self.temp_logs.count_by_date_range(
            workspace_id, period_start, period_end
        )
        return await self.repo.create_if_absent(
            workspace_id,
            str(kind),
            period_start,
            period_end,
            log_count=log_count,
            recipients=list(settings.export_recipients),
            created_by=created_by,
        )


ExportSvc = Annotated[ExportService, Depends(ExportService)]
