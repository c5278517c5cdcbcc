# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Sensitive task endpoints — registration, listing, assignment,
rotation, postponement, history.
Thin HTTP layer — delegates ALL logic to SensitiveTaskService.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError

from rotation_service.core.dependencies import get_task_service
from rotation_service.models.domain import ActionType, TaskStatus
from rotation_service.schemas.tasks import (
    AssignRequest,
    HistoryEntryResponse,
    PostponeRequest,
    RotateRequest,
    TaskCreateRequest,
    TaskDetailResponse,
    TaskListResponse,
    TaskResponse,
    TransitionResponse,
)
from rotation_service.services.task_service import SensitiveTaskService

router = APIRouter(prefix="/api/v1", tags=["Sensitive Tasks"])


@router.post("/tasks", status_code=201, response_model=TaskResponse)
def create_task(
    payload: TaskCreateRequest,
    service: SensitiveTaskService = Depends(get_task_service),
):
    """Register a sensitive task imported from a workflow step."""
    try:
        return service.create_task(
            task_name=payload.task_name,
            process_name=payload.process_name,
            rotation_period=payload.rotation_period.value,
            organization_id=payload.organization_id,
            department_id=payload.department_id,
            workflow_id=payload.workflow_id,
            workflow_step_id=payload.workflow_step_id,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=f"Database error: {e}")


@router.get("/tasks", response_model=TaskListResponse)
def list_tasks(
    search: Optional[str] = None,
    department_id: Optional[str] = None,
    status: Optional[TaskStatus] = None,
    organization_id: Optional[str] = None,
    service: SensitiveTaskService = Depends(get_task_service),
):
    """List tasks filtered by name, department and derived status."""
    tasks = service.list_tasks(
        search=search,
        department_id=department_id,
        status=status.value if status else None,
        organization_id=organization_id,
    )
    return TaskListResponse(total=len(tasks), tasks=tasks)


@router.get("/tasks/{task_id}", response_model=TaskDetailResponse)
def get_task(
    task_id: str,
    service: SensitiveTaskService = Depends(get_task_service),
):
    """Task with its rotation history and postponements."""
    try:
        return service.get_task_detail(task_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Sensitive task not found")


@router.post("/tasks/{task_id}/assign", response_model=TransitionResponse)
def assign_task(
    task_id: str,
    payload: AssignRequest,
    idempotency_key: Optional[str] = Header(default=None, alias="Idempotency-Key"),
    service: SensitiveTaskService = Depends(get_task_service),
):
    """Initial assignment of primary (and optional backup) personnel."""
    try:
        return service.assign(
            task_id,
            primary_id=payload.primary_id,
            backup_id=payload.backup_id,
            performed_by=payload.performed_by,
            notes=payload.notes,
            idempotency_key=idempotency_key,
        )
    except KeyError:
        raise HTTPException(status_code=404, detail="Sensitive task not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=f"Database error: {e}")


@router.post("/tasks/{task_id}/rotate", response_model=TransitionResponse)
def rotate_task(
    task_id: str,
    payload: RotateRequest,
    idempotency_key: Optional[str] = Header(default=None, alias="Idempotency-Key"),
    service: SensitiveTaskService = Depends(get_task_service),
):
    """Rotate the task to new personnel."""
    try:
        return service.rotate(
            task_id,
            new_primary_id=payload.new_primary_id,
            new_backup_id=payload.new_backup_id,
            performed_by=payload.performed_by,
            notes=payload.notes,
            idempotency_key=idempotency_key,
        )
    except KeyError:
        raise HTTPException(status_code=404, detail="Sensitive task not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=f"Database error: {e}")


@router.post("/tasks/{task_id}/postpone", response_model=TransitionResponse)
def postpone_task(
    task_id: str,
    payload: PostponeRequest,
    idempotency_key: Optional[str] = Header(default=None, alias="Idempotency-Key"),
    service: SensitiveTaskService = Depends(get_task_service),
):
    """Defer the next rotation with a justified reason."""
    try:
        return service.postpone(
            task_id,
            days=payload.days,
            reason=payload.reason.value,
            explanation=payload.explanation,
            performed_by=payload.performed_by,
            idempotency_key=idempotency_key,
        )
    except KeyError:
        raise HTTPException(status_code=404, detail="Sensitive task not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=f"Database error: {e}")


@router.get("/tasks/{task_id}/history", response_model=list[HistoryEntryResponse])
def get_task_history(
    task_id: str,
    action_type: Optional[ActionType] = None,
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    service: SensitiveTaskService = Depends(get_task_service),
):
    """Audit trail of one task, newest first."""
    try:
        return service.get_history(
            task_id,
            action_type=action_type.value if action_type else None,
            limit=limit,
        )
    except KeyError:
        raise HTTPException(status_code=404, detail="Sensitive task not found")
