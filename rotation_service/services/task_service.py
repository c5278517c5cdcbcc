# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Sensitive task lifecycle — registration, assignment, rotation,
postponement. Validates commands, runs the pure rotation logic and hands the
task update plus its audit entry to the repository as one unit.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from rotation_service.core.config import settings
from rotation_service.core.logging import get_logger
from rotation_service.metrics.prometheus import (
    DUPLICATE_SUBMISSIONS,
    ROTATION_ACTIONS,
    TASKS_CREATED,
)
from rotation_service.models.domain import (
    ACTION_TYPE_LABELS,
    ActionType,
    PostponementReason,
    ROTATION_PERIOD_LABELS,
    RotationHistoryEntry,
    RotationPeriod,
    SensitiveTask,
    STATUS_LABELS,
    TaskStatus,
)
from rotation_service.repositories.task_repository import TaskRepository
from rotation_service.services.notification_client import NotificationClient
from rotation_service.services.rotation import (
    classify_task,
    compute_next_rotation_date,
    days_until_due,
    format_postponement_note,
    parse_period,
    postpone_rotation_date,
    record_transition,
)

logger = get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def to_task(row: dict[str, Any]) -> SensitiveTask:
    return SensitiveTask(**row)


class SensitiveTaskService:
    """Business logic for sensitive task rotation."""

    def __init__(
        self,
        repo: TaskRepository,
        notification_client: NotificationClient,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._repo = repo
        self._notifications = notification_client
        self._clock = clock

    # ── Queries ──

    def now(self) -> datetime:
        return self._clock() if self._clock else utcnow()

    def present(self, row: dict[str, Any], now: Optional[datetime] = None) -> dict[str, Any]:
        """Row enriched with a freshly derived status; the stored one may be stale."""
        now = now or self.now()
        task = to_task(row)
        status = classify_task(task, now, settings.DUE_SOON_DAYS)
        result = dict(row)
        result["status"] = status.value
        result["status_label"] = STATUS_LABELS[status]
        try:
            result["rotation_period_label"] = ROTATION_PERIOD_LABELS[RotationPeriod(row["rotation_period"])]
        except ValueError:
            result["rotation_period_label"] = row["rotation_period"]
        result["days_until_rotation"] = (
            days_until_due(task.next_rotation_date, now)
            if task.next_rotation_date is not None
            else None
        )
        return result

    @staticmethod
    def present_history(row: dict[str, Any]) -> dict[str, Any]:
        result = {k: v for k, v in row.items() if k != "idempotency_key"}
        result["action_label"] = ACTION_TYPE_LABELS[ActionType(row["action_type"])]
        return result

    def get_task(self, task_id: str) -> dict[str, Any]:
        """Raises KeyError if the task does not exist."""
        row = self._repo.get_task(task_id)
        if row is None:
            raise KeyError(f"Sensitive task {task_id} not found")
        return self.present(row)

    def get_task_detail(self, task_id: str) -> dict[str, Any]:
        task = self.get_task(task_id)
        task["history"] = [self.present_history(h) for h in self._repo.get_history(task_id)]
        task["postponements"] = self._repo.get_postponements(task_id)
        return task

    def list_tasks(
        self,
        search: Optional[str] = None,
        department_id: Optional[str] = None,
        status: Optional[str] = None,
        organization_id: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        now = self.now()
        rows = self._repo.list_tasks(organization_id, department_id, search)
        tasks = [self.present(r, now) for r in rows]
        if status:
            tasks = [t for t in tasks if t["status"] == TaskStatus(status).value]
        return tasks

    def get_history(
        self,
        task_id: str,
        action_type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        if self._repo.get_task(task_id) is None:
            raise KeyError(f"Sensitive task {task_id} not found")
        if action_type:
            action_type = ActionType(action_type).value
        rows = self._repo.get_history(
            task_id, action_type, limit or settings.DEFAULT_HISTORY_LIMIT
        )
        return [self.present_history(h) for h in rows]

    # ── Commands ──

    def create_task(
        self,
        task_name: str,
        process_name: str,
        rotation_period: str,
        organization_id: Optional[str] = None,
        department_id: Optional[str] = None,
        workflow_id: Optional[str] = None,
        workflow_step_id: Optional[str] = None,
    ) -> dict[str, Any]:
        """Register a task imported from a workflow step. Starts unassigned."""
        period = parse_period(rotation_period)
        now_iso = _iso(self.now())
        record = {
            "id": str(uuid.uuid4()),
            "organization_id": organization_id,
            "workflow_id": workflow_id,
            "workflow_step_id": workflow_step_id,
            "task_name": task_name,
            "process_name": process_name,
            "department_id": department_id,
            "assigned_primary_id": None,
            "assigned_backup_id": None,
            "rotation_period": period.value,
            "last_rotation_date": None,
            "next_rotation_date": None,
            "status": TaskStatus.AWAITING_ASSIGNMENT.value,
            "created_at": now_iso,
            "updated_at": now_iso,
        }
        self._repo.create_task(record)
        TASKS_CREATED.inc()
        logger.info("Sensitive task created: id=%s name=%s period=%s",
                    record["id"], task_name, period.value)
        return self.present(record)

    def assign(
        self,
        task_id: str,
        primary_id: str,
        backup_id: Optional[str] = None,
        performed_by: Optional[str] = None,
        notes: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> dict[str, Any]:
        """First assignment of personnel to an unassigned task."""
        replay = self._replay(task_id, idempotency_key)
        if replay is not None:
            return replay

        task = self._load(task_id)
        if not primary_id:
            raise ValueError("Primary personnel must be selected")
        if task.assigned_primary_id:
            raise ValueError(
                f"Task {task_id} already has primary personnel; use rotation instead"
            )
        self._check_backup(primary_id, backup_id)
        return self._change_personnel(
            task, ActionType.INITIAL_ASSIGNMENT, primary_id, backup_id,
            performed_by, notes, idempotency_key,
        )

    def rotate(
        self,
        task_id: str,
        new_primary_id: str,
        new_backup_id: Optional[str] = None,
        performed_by: Optional[str] = None,
        notes: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> dict[str, Any]:
        """Hand the task to new personnel and restart the rotation clock."""
        replay = self._replay(task_id, idempotency_key)
        if replay is not None:
            return replay

        task = self._load(task_id)
        if not new_primary_id:
            raise ValueError("New primary personnel must be selected")
        if not task.assigned_primary_id:
            raise ValueError(
                f"Task {task_id} has no personnel yet; use initial assignment instead"
            )
        if new_primary_id == task.assigned_primary_id:
            raise ValueError("New primary personnel must differ from the current one")
        self._check_backup(new_primary_id, new_backup_id)
        return self._change_personnel(
            task, ActionType.ROTATION, new_primary_id, new_backup_id,
            performed_by, notes, idempotency_key,
        )

    def postpone(
        self,
        task_id: str,
        days: int,
        reason: str,
        explanation: str,
        performed_by: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> dict[str, Any]:
        """Defer the next rotation deadline without changing personnel."""
        replay = self._replay(task_id, idempotency_key)
        if replay is not None:
            return replay

        task = self._load(task_id)
        reason = PostponementReason(reason)
        if not explanation or not explanation.strip():
            raise ValueError("A postponement reason must be provided")
        if not 1 <= days <= settings.MAX_POSTPONEMENT_DAYS:
            raise ValueError(
                f"Postponement must be between 1 and {settings.MAX_POSTPONEMENT_DAYS} days"
            )
        if not task.assigned_primary_id:
            raise ValueError(f"Task {task_id} has no personnel to postpone a rotation for")
        if task.next_rotation_date is None:
            raise ValueError(f"Task {task_id} has no rotation date to postpone")

        now = self.now()
        new_due = postpone_rotation_date(task.next_rotation_date, days)
        entry = record_transition(
            task, ActionType.POSTPONEMENT,
            task.assigned_primary_id, task.assigned_backup_id,
            notes=format_postponement_note(days, explanation),
            performed_by=performed_by,
            action_date=now,
        )
        updated = task.model_copy(update={"next_rotation_date": new_due})
        history = self._history_record(entry, idempotency_key, now)
        postponement = {
            "id": str(uuid.uuid4()),
            "sensitive_task_id": task.id,
            "history_id": history["id"],
            "postponement_reason": reason.value,
            "postponement_duration": days,
            "original_due_date": _iso(task.next_rotation_date),
            "new_due_date": _iso(new_due),
            "approved_by": performed_by,
            "notes": explanation,
            "created_at": _iso(now),
        }
        return self._commit(
            updated, entry.action_type, history, now,
            {"next_rotation_date": _iso(new_due)}, postponement,
        )

    # ── Internal ──

    def _load(self, task_id: str) -> SensitiveTask:
        row = self._repo.get_task(task_id)
        if row is None:
            raise KeyError(f"Sensitive task {task_id} not found")
        return to_task(row)

    @staticmethod
    def _check_backup(primary_id: str, backup_id: Optional[str]) -> None:
        if backup_id and backup_id == primary_id:
            raise ValueError("Backup personnel must differ from primary personnel")

    def _replay(self, task_id: str, idempotency_key: Optional[str]) -> Optional[dict[str, Any]]:
        """Result of an earlier submit with the same key, if there was one."""
        if not idempotency_key:
            return None
        existing = self._repo.get_history_by_key(idempotency_key)
        if existing is None:
            return None
        if existing["sensitive_task_id"] != task_id:
            raise ValueError("Idempotency key was already used for another task")
        DUPLICATE_SUBMISSIONS.inc()
        logger.info("Duplicate submit replayed: key=%s task=%s", idempotency_key, task_id)
        return {
            "task": self.get_task(task_id),
            "history": self.present_history(existing),
            "duplicate": True,
        }

    def _change_personnel(
        self,
        task: SensitiveTask,
        action: ActionType,
        primary_id: str,
        backup_id: Optional[str],
        performed_by: Optional[str],
        notes: Optional[str],
        idempotency_key: Optional[str],
    ) -> dict[str, Any]:
        now = self.now()
        next_date = compute_next_rotation_date(task.rotation_period, now)
        entry = record_transition(
            task, action, primary_id, backup_id,
            notes=notes, performed_by=performed_by, action_date=now,
        )
        updated = task.model_copy(update={
            "assigned_primary_id": primary_id,
            "assigned_backup_id": backup_id,
            "last_rotation_date": now,
            "next_rotation_date": next_date,
        })
        result = self._commit(
            updated, action, self._history_record(entry, idempotency_key, now), now,
            {
                "assigned_primary_id": primary_id,
                "assigned_backup_id": backup_id,
                "last_rotation_date": _iso(now),
                "next_rotation_date": _iso(next_date),
            },
        )
        if not result["duplicate"]:
            self._notify_assignees(updated, action)
        return result

    def _commit(
        self,
        updated: SensitiveTask,
        action: ActionType,
        history: dict[str, Any],
        now: datetime,
        task_updates: dict[str, Any],
        postponement: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        status = classify_task(updated, now, settings.DUE_SOON_DAYS)
        task_updates = {**task_updates, "status": status.value, "updated_at": _iso(now)}
        stored, duplicate = self._repo.apply_transition(
            updated.id, task_updates, history, postponement
        )
        if duplicate:
            DUPLICATE_SUBMISSIONS.inc()
        else:
            ROTATION_ACTIONS.labels(action=action.value).inc()
            logger.info(
                "Rotation action recorded: task=%s action=%s primary=%s backup=%s next=%s",
                updated.id, action.value, updated.assigned_primary_id,
                updated.assigned_backup_id, _iso(updated.next_rotation_date),
            )
        return {
            "task": self.get_task(updated.id),
            "history": self.present_history(stored),
            "duplicate": duplicate,
        }

    @staticmethod
    def _history_record(
        entry: RotationHistoryEntry, idempotency_key: Optional[str], now: datetime
    ) -> dict[str, Any]:
        return {
            "id": str(uuid.uuid4()),
            "sensitive_task_id": entry.sensitive_task_id,
            "action_type": entry.action_type.value,
            "action_date": _iso(entry.action_date),
            "previous_primary_id": entry.previous_primary_id,
            "new_primary_id": entry.new_primary_id,
            "previous_backup_id": entry.previous_backup_id,
            "new_backup_id": entry.new_backup_id,
            "notes": entry.notes,
            "performed_by": entry.performed_by,
            "idempotency_key": idempotency_key,
            "created_at": _iso(now),
        }

    def _notify_assignees(self, task: SensitiveTask, action: ActionType) -> None:
        verb = "atandınız" if action is ActionType.INITIAL_ASSIGNMENT else "rotasyonla atandınız"
        self._notifications.send(
            channel="console",
            recipient=task.assigned_primary_id,
            message=f"'{task.task_name}' hassas görevine asil personel olarak {verb}",
            task_id=task.id,
        )
        if task.assigned_backup_id:
            self._notifications.send(
                channel="console",
                recipient=task.assigned_backup_id,
                message=f"'{task.task_name}' hassas görevine yedek personel olarak {verb}",
                task_id=task.id,
            )
