# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Dashboard counters, alerts and report listings.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from rotation_service.core.dependencies import get_report_service
from rotation_service.models.domain import ActionType
from rotation_service.schemas.tasks import HistoryEntryResponse, TaskResponse
from rotation_service.services.report_service import ReportService

router = APIRouter(prefix="/api/v1", tags=["Dashboard & Reports"])


@router.get("/dashboard/stats")
def dashboard_stats(
    organization_id: Optional[str] = None,
    service: ReportService = Depends(get_report_service),
):
    return service.get_dashboard_stats(organization_id)


@router.get("/dashboard/alerts")
def dashboard_alerts(
    organization_id: Optional[str] = None,
    service: ReportService = Depends(get_report_service),
):
    alerts = service.get_alerts(organization_id)
    return {"total": len(alerts), "alerts": alerts}


@router.get("/reports/inventory", response_model=list[TaskResponse])
def inventory_report(
    organization_id: Optional[str] = None,
    service: ReportService = Depends(get_report_service),
):
    return service.inventory(organization_id)


@router.get("/reports/due-soon", response_model=list[TaskResponse])
def due_soon_report(
    organization_id: Optional[str] = None,
    service: ReportService = Depends(get_report_service),
):
    return service.due_soon(organization_id)


@router.get("/reports/no-backup", response_model=list[TaskResponse])
def no_backup_report(
    organization_id: Optional[str] = None,
    service: ReportService = Depends(get_report_service),
):
    return service.no_backup(organization_id)


@router.get("/reports/personnel")
def personnel_report(
    organization_id: Optional[str] = None,
    service: ReportService = Depends(get_report_service),
):
    return service.personnel(organization_id)


@router.get("/reports/history", response_model=list[HistoryEntryResponse])
def history_report(
    action_type: Optional[ActionType] = None,
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    service: ReportService = Depends(get_report_service),
):
    return service.history(
        action_type=action_type.value if action_type else None, limit=limit
    )
