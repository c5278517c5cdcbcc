# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models — pure data structures, NO FastAPI dependency.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RotationPeriod(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMI_ANNUAL = "semi_annual"
    ANNUAL = "annual"
    BIENNIAL = "biennial"


class TaskStatus(str, Enum):
    NORMAL = "normal"
    ROTATION_DUE = "rotation_due"
    ROTATION_OVERDUE = "rotation_overdue"
    AWAITING_ASSIGNMENT = "awaiting_assignment"


class ActionType(str, Enum):
    INITIAL_ASSIGNMENT = "initial_assignment"
    ROTATION = "rotation"
    POSTPONEMENT = "postponement"


class PostponementReason(str, Enum):
    NO_QUALIFIED_PERSONNEL = "no_qualified_personnel"
    PERSONNEL_ON_LEAVE = "personnel_on_leave"
    CRITICAL_PERIOD = "critical_period"
    OTHER = "other"


class AlertType(str, Enum):
    OVERDUE = "overdue"
    DUE_SOON = "due_soon"
    NO_BACKUP = "no_backup"
    NO_ASSIGNMENT = "no_assignment"


class AlertSeverity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# ── Display labels (consumed by reporting) ──

ROTATION_PERIOD_LABELS: dict[RotationPeriod, str] = {
    RotationPeriod.MONTHLY: "Aylık",
    RotationPeriod.QUARTERLY: "3 Aylık",
    RotationPeriod.SEMI_ANNUAL: "6 Aylık",
    RotationPeriod.ANNUAL: "Yıllık",
    RotationPeriod.BIENNIAL: "2 Yıllık",
}

STATUS_LABELS: dict[TaskStatus, str] = {
    TaskStatus.NORMAL: "Normal",
    TaskStatus.ROTATION_DUE: "Rotasyon Yakın",
    TaskStatus.ROTATION_OVERDUE: "Rotasyon Geçti",
    TaskStatus.AWAITING_ASSIGNMENT: "Atama Bekliyor",
}

ACTION_TYPE_LABELS: dict[ActionType, str] = {
    ActionType.INITIAL_ASSIGNMENT: "İlk Atama",
    ActionType.ROTATION: "Rotasyon",
    ActionType.POSTPONEMENT: "Erteleme",
}

POSTPONEMENT_REASON_LABELS: dict[PostponementReason, str] = {
    PostponementReason.NO_QUALIFIED_PERSONNEL: "Yetkin personel bulunmuyor",
    PostponementReason.PERSONNEL_ON_LEAVE: "Personel izinde/raporlu",
    PostponementReason.CRITICAL_PERIOD: "Kritik dönem (bütçe, seçim vb.)",
    PostponementReason.OTHER: "Diğer",
}

SEVERITY_ORDER: dict[AlertSeverity, int] = {
    AlertSeverity.HIGH: 0,
    AlertSeverity.MEDIUM: 1,
    AlertSeverity.LOW: 2,
}


class SensitiveTask(BaseModel):
    """A workflow step carrying corruption risk, subject to periodic reassignment."""
    id: str
    task_name: str = ""
    process_name: str = ""
    organization_id: Optional[str] = None
    department_id: Optional[str] = None
    workflow_id: Optional[str] = None
    workflow_step_id: Optional[str] = None
    rotation_period: str = Field(..., description="One of RotationPeriod values")
    assigned_primary_id: Optional[str] = None
    assigned_backup_id: Optional[str] = None
    last_rotation_date: Optional[datetime] = None
    next_rotation_date: Optional[datetime] = None


class RotationHistoryEntry(BaseModel):
    """Immutable audit record of one assign / rotate / postpone action."""
    model_config = ConfigDict(frozen=True)

    sensitive_task_id: str
    action_type: ActionType
    action_date: datetime
    previous_primary_id: Optional[str] = None
    new_primary_id: Optional[str] = None
    previous_backup_id: Optional[str] = None
    new_backup_id: Optional[str] = None
    performed_by: Optional[str] = None
    notes: Optional[str] = None


class TaskAlert(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: AlertType
    severity: AlertSeverity
    message: str
    task_id: str
    task_name: str
