# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection — wire repositories and services.
"""

from rotation_service.core.database import engine
from rotation_service.repositories.task_repository import TaskRepository
from rotation_service.services.notification_client import NotificationClient
from rotation_service.services.report_service import ReportService
from rotation_service.services.task_service import SensitiveTaskService

# ── Singleton instances ──
_task_repo = TaskRepository(engine)
_notification_client = NotificationClient()
_task_service = SensitiveTaskService(
    repo=_task_repo,
    notification_client=_notification_client,
)
_report_service = ReportService(repo=_task_repo, task_service=_task_service)


# ── FastAPI dependency functions ──
def get_task_repo() -> TaskRepository:
    return _task_repo


def get_task_service() -> SensitiveTaskService:
    return _task_service


def get_report_service() -> ReportService:
    return _report_service
