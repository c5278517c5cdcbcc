# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Reporting views over classified tasks — alerts, dashboard
counters, personnel load. Pure functions over task models.
"""

import math
from datetime import datetime, timedelta
from typing import Any, Iterable

from rotation_service.models.domain import (
    AlertSeverity,
    AlertType,
    SensitiveTask,
    SEVERITY_ORDER,
    TaskAlert,
    TaskStatus,
)
from rotation_service.services.rotation import (
    DEFAULT_DUE_SOON_DAYS,
    classify_task,
    days_until_due,
)


def generate_alerts(
    tasks: Iterable[SensitiveTask],
    now: datetime,
    due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
) -> list[TaskAlert]:
    """One alert per task per condition, most severe first."""
    alerts: list[TaskAlert] = []

    for task in tasks:
        status = classify_task(task, now, due_soon_days)

        def _alert(alert_type: AlertType, severity: AlertSeverity, message: str):
            alerts.append(TaskAlert(
                type=alert_type,
                severity=severity,
                message=message,
                task_id=task.id,
                task_name=task.task_name,
            ))

        if status is TaskStatus.ROTATION_OVERDUE:
            overdue = math.floor((now - task.next_rotation_date) / timedelta(days=1))
            _alert(
                AlertType.OVERDUE, AlertSeverity.HIGH,
                f"{task.task_name} için rotasyon süresi {overdue} gün önce doldu!",
            )
        elif status is TaskStatus.ROTATION_DUE:
            remaining = days_until_due(task.next_rotation_date, now)
            _alert(
                AlertType.DUE_SOON, AlertSeverity.MEDIUM,
                f"{task.task_name} rotasyonuna {remaining} gün kaldı",
            )

        if task.assigned_primary_id and not task.assigned_backup_id:
            _alert(
                AlertType.NO_BACKUP, AlertSeverity.MEDIUM,
                f"{task.task_name} görevine yedek personel atanmadı",
            )

        if status is TaskStatus.AWAITING_ASSIGNMENT:
            _alert(
                AlertType.NO_ASSIGNMENT, AlertSeverity.HIGH,
                f"{task.task_name} görevine personel atanmadı",
            )

    # sorted() is stable: insertion order survives within a severity
    return sorted(alerts, key=lambda a: SEVERITY_ORDER[a.severity])


def dashboard_stats(
    tasks: Iterable[SensitiveTask],
    now: datetime,
    due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
) -> dict[str, int]:
    counts = {status: 0 for status in TaskStatus}
    total = 0
    for task in tasks:
        counts[classify_task(task, now, due_soon_days)] += 1
        total += 1
    return {
        "total_tasks": total,
        "normal": counts[TaskStatus.NORMAL],
        "awaiting_assignment": counts[TaskStatus.AWAITING_ASSIGNMENT],
        "rotation_due": counts[TaskStatus.ROTATION_DUE],
        "rotation_overdue": counts[TaskStatus.ROTATION_OVERDUE],
    }


def tasks_without_backup(tasks: Iterable[SensitiveTask]) -> list[SensitiveTask]:
    """Tasks with a primary but no stand-in."""
    return [t for t in tasks if t.assigned_primary_id and not t.assigned_backup_id]


def personnel_load(
    tasks: Iterable[SensitiveTask], overload_threshold: int
) -> list[dict[str, Any]]:
    """
    Count primary assignments per person.
    Anyone holding overload_threshold or more sensitive tasks is flagged.
    Sorted by task count descending, then personnel id.
    """
    load: dict[str, list[str]] = {}
    for task in tasks:
        if task.assigned_primary_id:
            load.setdefault(task.assigned_primary_id, []).append(task.id)

    rows = [
        {
            "personnel_id": person,
            "task_count": len(task_ids),
            "task_ids": task_ids,
            "overloaded": len(task_ids) >= overload_threshold,
        }
        for person, task_ids in load.items()
    ]
    rows.sort(key=lambda r: (-r["task_count"], r["personnel_id"]))
    return rows
