# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Rotation logic — pure computation, no side effects.

Due-date arithmetic, status classification and audit-entry construction
for sensitive tasks. Nothing here touches the database, metrics or logs;
callers supply "now" explicitly.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from rotation_service.models.domain import (
    ActionType,
    RotationHistoryEntry,
    RotationPeriod,
    SensitiveTask,
    TaskStatus,
)

DEFAULT_DUE_SOON_DAYS = 15

ROTATION_INTERVALS: dict[RotationPeriod, relativedelta] = {
    RotationPeriod.MONTHLY: relativedelta(months=1),
    RotationPeriod.QUARTERLY: relativedelta(months=3),
    RotationPeriod.SEMI_ANNUAL: relativedelta(months=6),
    RotationPeriod.ANNUAL: relativedelta(years=1),
    RotationPeriod.BIENNIAL: relativedelta(years=2),
}


class UnsupportedPeriodError(ValueError):
    """Raised when a rotation period is not one of RotationPeriod."""

    def __init__(self, period) -> None:
        self.period = period
        super().__init__(
            f"Unsupported rotation period '{period}'. "
            f"Allowed: {[p.value for p in RotationPeriod]}"
        )


def parse_period(period: Union[RotationPeriod, str]) -> RotationPeriod:
    try:
        return RotationPeriod(period)
    except ValueError:
        raise UnsupportedPeriodError(period) from None


def compute_next_rotation_date(
    period: Union[RotationPeriod, str], from_date: datetime
) -> datetime:
    """
    Return the due date one rotation period after from_date.

    Calendar arithmetic: a day-of-month missing from the target month clamps
    to its last day (Jan 31 + 1 month -> Feb 28/29).
    Raises UnsupportedPeriodError for anything outside RotationPeriod.
    """
    return from_date + ROTATION_INTERVALS[parse_period(period)]


def postpone_rotation_date(next_rotation_date: datetime, days: int) -> datetime:
    """Shift a due date forward by a whole number of days."""
    if days < 1:
        raise ValueError("Postponement must be at least 1 day")
    return next_rotation_date + timedelta(days=days)


def days_until_due(next_rotation_date: datetime, now: datetime) -> int:
    """Whole days until the due date, floored; negative once overdue."""
    return math.floor((next_rotation_date - now) / timedelta(days=1))


def classify_task(
    task: SensitiveTask,
    now: datetime,
    due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
) -> TaskStatus:
    """Derive the task status. First match wins."""
    if not task.assigned_primary_id:
        return TaskStatus.AWAITING_ASSIGNMENT
    if task.next_rotation_date is None:
        return TaskStatus.NORMAL

    remaining = days_until_due(task.next_rotation_date, now)
    if remaining < 0:
        return TaskStatus.ROTATION_OVERDUE
    if remaining <= due_soon_days:
        return TaskStatus.ROTATION_DUE
    return TaskStatus.NORMAL


def format_postponement_note(days: int, reason: str) -> str:
    return f"{days} gün ertelendi. Gerekçe: {reason}"


def record_transition(
    task: SensitiveTask,
    action: ActionType,
    new_primary_id: Optional[str],
    new_backup_id: Optional[str] = None,
    notes: Optional[str] = None,
    performed_by: Optional[str] = None,
    action_date: Optional[datetime] = None,
) -> RotationHistoryEntry:
    """
    Build the audit entry for one action on a task.

    initial_assignment has no previous personnel. postponement keeps the
    task's current personnel on both sides of the transition, whatever ids
    the caller passes. Whether a rotation actually changes the primary is
    validated by the caller.
    """
    action = ActionType(action)
    if action is ActionType.INITIAL_ASSIGNMENT:
        previous_primary, previous_backup = None, None
    else:
        previous_primary = task.assigned_primary_id
        previous_backup = task.assigned_backup_id

    if action is ActionType.POSTPONEMENT:
        new_primary_id = task.assigned_primary_id
        new_backup_id = task.assigned_backup_id

    return RotationHistoryEntry(
        sensitive_task_id=task.id,
        action_type=action,
        action_date=action_date or datetime.now(timezone.utc),
        previous_primary_id=previous_primary,
        new_primary_id=new_primary_id,
        previous_backup_id=previous_backup,
        new_backup_id=new_backup_id,
        performed_by=performed_by,
        notes=notes,
    )
