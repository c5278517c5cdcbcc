# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Sensitive Task Rotation Service
================================
Tracks sensitive (corruption-risk) workflow tasks, their primary and backup
personnel, and the mandatory periodic rotation of those people.

    awaiting_assignment ─► normal ─► rotation_due ─► rotation_overdue
                              ▲                           │
                              └──── rotate / postpone ────┘

Every assign / rotate / postpone writes the task and its audit entry in a
single transaction.

Port: 8005
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rotation_service.controllers import report_controller, system_controller, task_controller
from rotation_service.core.config import settings
from rotation_service.core.database import engine, init_schema
from rotation_service.core.logging import get_logger
from rotation_service.middleware import MetricsMiddleware, RequestIDMiddleware

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Create tables at startup; dispose pool on shutdown."""
    try:
        init_schema(engine)
        logger.info("Database schema ready")
    except Exception as exc:
        logger.error("Database not reachable at startup: %s", exc)
    yield
    engine.dispose()


app = FastAPI(
    title="Sensitive Task Rotation Service",
    description="Rotation deadlines, assignments and audit trail for sensitive tasks.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)

app.include_router(system_controller.router)
app.include_router(task_controller.router)
app.include_router(report_controller.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.SERVICE_PORT)
