# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Dashboard and report views for sensitive tasks.
"""

from typing import Any, Optional

from rotation_service.core.config import settings
from rotation_service.metrics.prometheus import TASKS_BY_STATUS
from rotation_service.models.domain import ActionType, TaskStatus
from rotation_service.repositories.task_repository import TaskRepository
from rotation_service.services.reports import (
    dashboard_stats,
    generate_alerts,
    personnel_load,
    tasks_without_backup,
)
from rotation_service.services.task_service import SensitiveTaskService, to_task


class ReportService:
    """Read-only aggregations over all tasks of an organization."""

    def __init__(self, repo: TaskRepository, task_service: SensitiveTaskService) -> None:
        self._repo = repo
        self._tasks = task_service

    def _rows(self, organization_id: Optional[str]) -> list[dict[str, Any]]:
        return self._repo.list_tasks(organization_id=organization_id)

    # ── Dashboard ──

    def get_dashboard_stats(self, organization_id: Optional[str] = None) -> dict[str, int]:
        tasks = [to_task(r) for r in self._rows(organization_id)]
        stats = dashboard_stats(tasks, self._tasks.now(), settings.DUE_SOON_DAYS)
        for status in TaskStatus:
            TASKS_BY_STATUS.labels(status=status.value).set(stats[status.value])
        return stats

    def get_alerts(self, organization_id: Optional[str] = None) -> list[dict[str, Any]]:
        tasks = [to_task(r) for r in self._rows(organization_id)]
        alerts = generate_alerts(tasks, self._tasks.now(), settings.DUE_SOON_DAYS)
        return [a.model_dump(mode="json") for a in alerts]

    # ── Reports ──

    def inventory(self, organization_id: Optional[str] = None) -> list[dict[str, Any]]:
        """Every task with its personnel and derived status."""
        now = self._tasks.now()
        return [self._tasks.present(r, now) for r in self._rows(organization_id)]

    def due_soon(self, organization_id: Optional[str] = None) -> list[dict[str, Any]]:
        """Tasks whose rotation falls within the due-soon window, earliest first."""
        due = [
            t for t in self.inventory(organization_id)
            if t["status"] == TaskStatus.ROTATION_DUE.value
        ]
        return sorted(due, key=lambda t: t["days_until_rotation"])

    def no_backup(self, organization_id: Optional[str] = None) -> list[dict[str, Any]]:
        now = self._tasks.now()
        rows = {r["id"]: r for r in self._rows(organization_id)}
        return [
            self._tasks.present(rows[t.id], now)
            for t in tasks_without_backup(to_task(r) for r in rows.values())
        ]

    def personnel(self, organization_id: Optional[str] = None) -> dict[str, Any]:
        tasks = [to_task(r) for r in self._rows(organization_id)]
        rows = personnel_load(tasks, settings.OVERLOAD_THRESHOLD)
        return {
            "overload_threshold": settings.OVERLOAD_THRESHOLD,
            "overloaded_count": sum(1 for r in rows if r["overloaded"]),
            "personnel": rows,
        }

    def history(
        self,
        action_type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        if action_type:
            action_type = ActionType(action_type).value
        rows = self._repo.get_history(
            action_type=action_type, limit=limit or settings.DEFAULT_HISTORY_LIMIT
        )
        return [self._tasks.present_history(h) for h in rows]
