# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request / Response schemas — API contract definitions.
These are Pydantic models used ONLY at the controller (HTTP) boundary.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from rotation_service.models.domain import PostponementReason, RotationPeriod


# ── Task Schemas ──

class TaskCreateRequest(BaseModel):
    task_name: str = Field(..., min_length=1, max_length=255)
    process_name: str = Field(..., min_length=1, max_length=255)
    rotation_period: RotationPeriod = Field(
        default=RotationPeriod.ANNUAL, description="Rotation cadence"
    )
    organization_id: Optional[str] = None
    department_id: Optional[str] = None
    workflow_id: Optional[str] = None
    workflow_step_id: Optional[str] = None


class TaskResponse(BaseModel):
    id: str
    task_name: str
    process_name: str
    organization_id: Optional[str] = None
    department_id: Optional[str] = None
    workflow_id: Optional[str] = None
    workflow_step_id: Optional[str] = None
    rotation_period: str
    rotation_period_label: str
    assigned_primary_id: Optional[str] = None
    assigned_backup_id: Optional[str] = None
    last_rotation_date: Optional[str] = None
    next_rotation_date: Optional[str] = None
    days_until_rotation: Optional[int] = None
    status: str
    status_label: str
    created_at: str
    updated_at: str


class HistoryEntryResponse(BaseModel):
    id: str
    sensitive_task_id: str
    action_type: str
    action_label: str
    action_date: str
    previous_primary_id: Optional[str] = None
    new_primary_id: Optional[str] = None
    previous_backup_id: Optional[str] = None
    new_backup_id: Optional[str] = None
    notes: Optional[str] = None
    performed_by: Optional[str] = None
    created_at: str


class PostponementResponse(BaseModel):
    id: str
    sensitive_task_id: str
    history_id: str
    postponement_reason: str
    postponement_duration: int
    original_due_date: str
    new_due_date: str
    approved_by: Optional[str] = None
    notes: Optional[str] = None
    created_at: str


class TaskDetailResponse(TaskResponse):
    history: list[HistoryEntryResponse] = []
    postponements: list[PostponementResponse] = []


class TaskListResponse(BaseModel):
    total: int
    tasks: list[TaskResponse]


class TransitionResponse(BaseModel):
    task: TaskResponse
    history: HistoryEntryResponse
    duplicate: bool = False


# ── Command Schemas ──

class _Personnel(BaseModel):
    performed_by: Optional[str] = Field(default=None, description="Acting user")
    notes: Optional[str] = Field(default=None, max_length=2000)


class AssignRequest(_Personnel):
    primary_id: str = Field(..., min_length=1, description="Primary personnel")
    backup_id: Optional[str] = Field(default=None, description="Backup personnel")


class RotateRequest(_Personnel):
    new_primary_id: str = Field(..., min_length=1, description="Incoming primary")
    new_backup_id: Optional[str] = Field(default=None, description="Incoming backup")


class PostponeRequest(BaseModel):
    days: int = Field(..., ge=1, description="Postponement in days")
    reason: PostponementReason
    explanation: str = Field(..., min_length=1, max_length=2000)
    performed_by: Optional[str] = None

    @field_validator("explanation")
    @classmethod
    def explanation_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("explanation must not be blank")
        return v
