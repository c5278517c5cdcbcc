# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""SQLAlchemy engine singleton and schema bootstrap."""
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from rotation_service.core.config import settings

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS sensitive_tasks (
        id                  VARCHAR(36) PRIMARY KEY,
        organization_id     VARCHAR(64),
        workflow_id         VARCHAR(64),
        workflow_step_id    VARCHAR(64),
        task_name           VARCHAR(255) NOT NULL,
        process_name        VARCHAR(255) NOT NULL,
        department_id       VARCHAR(64),
        assigned_primary_id VARCHAR(64),
        assigned_backup_id  VARCHAR(64),
        rotation_period     VARCHAR(32) NOT NULL,
        last_rotation_date  VARCHAR(40),
        next_rotation_date  VARCHAR(40),
        status              VARCHAR(32) NOT NULL,
        created_at          VARCHAR(40) NOT NULL,
        updated_at          VARCHAR(40) NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS task_rotation_history (
        id                  VARCHAR(36) PRIMARY KEY,
        sensitive_task_id   VARCHAR(36) NOT NULL REFERENCES sensitive_tasks(id),
        action_type         VARCHAR(32) NOT NULL,
        action_date         VARCHAR(40) NOT NULL,
        previous_primary_id VARCHAR(64),
        new_primary_id      VARCHAR(64),
        previous_backup_id  VARCHAR(64),
        new_backup_id       VARCHAR(64),
        notes               TEXT,
        performed_by        VARCHAR(64),
        idempotency_key     VARCHAR(128) UNIQUE,
        created_at          VARCHAR(40) NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS task_postponements (
        id                    VARCHAR(36) PRIMARY KEY,
        sensitive_task_id     VARCHAR(36) NOT NULL REFERENCES sensitive_tasks(id),
        history_id            VARCHAR(36) NOT NULL REFERENCES task_rotation_history(id),
        postponement_reason   VARCHAR(64) NOT NULL,
        postponement_duration INTEGER NOT NULL,
        original_due_date     VARCHAR(40) NOT NULL,
        new_due_date          VARCHAR(40) NOT NULL,
        approved_by           VARCHAR(64),
        notes                 TEXT,
        created_at            VARCHAR(40) NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_history_task ON task_rotation_history (sensitive_task_id)",
    "CREATE INDEX IF NOT EXISTS ix_postponements_task ON task_postponements (sensitive_task_id)",
)


def build_engine(url: str) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across threads."""
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.POOL_SIZE,
        max_overflow=settings.MAX_OVERFLOW,
        pool_recycle=settings.POOL_RECYCLE,
    )


def init_schema(bind: Engine) -> None:
    with bind.begin() as conn:
        for statement in SCHEMA_STATEMENTS:
            conn.execute(text(statement))


engine = build_engine(settings.DATABASE_URL)
