# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for sensitive tasks, rotation history and postponements."""
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from rotation_service.core.logging import get_logger

logger = get_logger(__name__)

TASK_COLS = (
    "id, organization_id, workflow_id, workflow_step_id, task_name, process_name, "
    "department_id, assigned_primary_id, assigned_backup_id, rotation_period, "
    "last_rotation_date, next_rotation_date, status, created_at, updated_at"
)

HISTORY_COLS = (
    "id, sensitive_task_id, action_type, action_date, previous_primary_id, "
    "new_primary_id, previous_backup_id, new_backup_id, notes, performed_by, "
    "idempotency_key, created_at"
)

POSTPONEMENT_COLS = (
    "id, sensitive_task_id, history_id, postponement_reason, postponement_duration, "
    "original_due_date, new_due_date, approved_by, notes, created_at"
)

# Columns a transition is allowed to touch on the task row
MUTABLE_TASK_COLS = (
    "assigned_primary_id", "assigned_backup_id", "last_rotation_date",
    "next_rotation_date", "status", "updated_at",
)


def _escape_like(value: str) -> str:
    """Make LIKE wildcards literal; pairs with ESCAPE '!'."""
    return value.replace("!", "!!").replace("%", "!%").replace("_", "!_")


def _row_to_dict(row) -> Dict[str, Any]:
    return dict(row._mapping)


class TaskRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    # ── Write ──────────────────────────────────────────────────────────

    def create_task(self, record: Dict[str, Any]) -> Dict[str, Any]:
        with self._engine.begin() as conn:
            conn.execute(
                text(f"""
                    INSERT INTO sensitive_tasks ({TASK_COLS})
                    VALUES (:id, :organization_id, :workflow_id, :workflow_step_id,
                            :task_name, :process_name, :department_id,
                            :assigned_primary_id, :assigned_backup_id, :rotation_period,
                            :last_rotation_date, :next_rotation_date, :status,
                            :created_at, :updated_at)
                """),
                record,
            )
        return dict(record)

    def apply_transition(
        self,
        task_id: str,
        task_updates: Dict[str, Any],
        history: Dict[str, Any],
        postponement: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Dict[str, Any], bool]:
        """
        Update the task row and append its history entry (plus the
        postponement record, if any) in ONE transaction.

        Returns (history_row, duplicate). A history row already stored under
        the same idempotency key is returned as-is with duplicate=True and
        nothing is written. Raises ValueError if the key belongs to another
        task.
        """
        key = history.get("idempotency_key")
        if key:
            existing = self._existing_for_key(task_id, key)
            if existing is not None:
                return existing, True

        unknown = set(task_updates) - set(MUTABLE_TASK_COLS)
        if unknown:
            raise ValueError(f"Cannot update task columns: {sorted(unknown)}")

        assignments = ", ".join(f"{col} = :{col}" for col in task_updates)
        try:
            with self._engine.begin() as conn:
                result = conn.execute(
                    text(f"UPDATE sensitive_tasks SET {assignments} WHERE id = :id"),
                    {**task_updates, "id": task_id},
                )
                if result.rowcount == 0:
                    raise KeyError(f"Sensitive task {task_id} not found")
                conn.execute(
                    text(f"""
                        INSERT INTO task_rotation_history ({HISTORY_COLS})
                        VALUES (:id, :sensitive_task_id, :action_type, :action_date,
                                :previous_primary_id, :new_primary_id,
                                :previous_backup_id, :new_backup_id, :notes,
                                :performed_by, :idempotency_key, :created_at)
                    """),
                    history,
                )
                if postponement is not None:
                    conn.execute(
                        text(f"""
                            INSERT INTO task_postponements ({POSTPONEMENT_COLS})
                            VALUES (:id, :sensitive_task_id, :history_id,
                                    :postponement_reason, :postponement_duration,
                                    :original_due_date, :new_due_date, :approved_by,
                                    :notes, :created_at)
                        """),
                        postponement,
                    )
        except IntegrityError:
            # A concurrent submit with the same key won the race; whole
            # transaction rolled back, so report the winner.
            if key:
                existing = self._existing_for_key(task_id, key)
                if existing is not None:
                    logger.info("Duplicate submit collapsed: key=%s task=%s", key, task_id)
                    return existing, True
            raise
        return dict(history), False

    def _existing_for_key(self, task_id: str, key: str) -> Optional[Dict[str, Any]]:
        existing = self.get_history_by_key(key)
        if existing is not None and existing["sensitive_task_id"] != task_id:
            raise ValueError("Idempotency key was already used for another task")
        return existing

    # ── Read ───────────────────────────────────────────────────────────

    def get_task(self, task_id: str) -> Optional[Dict[str, Any]]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {TASK_COLS} FROM sensitive_tasks WHERE id = :id"),
                {"id": task_id},
            ).fetchone()
        return _row_to_dict(row) if row else None

    def list_tasks(
        self,
        organization_id: Optional[str] = None,
        department_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        conditions = []
        params: Dict[str, Any] = {}
        if organization_id:
            conditions.append("organization_id = :org")
            params["org"] = organization_id
        if department_id:
            conditions.append("department_id = :dept")
            params["dept"] = department_id
        if search:
            conditions.append(
                "(LOWER(task_name) LIKE :q ESCAPE '!' OR LOWER(process_name) LIKE :q ESCAPE '!')"
            )
            params["q"] = f"%{_escape_like(search.lower())}%"
        where = (" WHERE " + " AND ".join(conditions)) if conditions else ""

        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"SELECT {TASK_COLS} FROM sensitive_tasks{where} ORDER BY created_at DESC"),
                params,
            ).fetchall()
        return [_row_to_dict(r) for r in rows]

    def get_history(
        self,
        task_id: Optional[str] = None,
        action_type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        conditions = []
        params: Dict[str, Any] = {}
        if task_id:
            conditions.append("sensitive_task_id = :tid")
            params["tid"] = task_id
        if action_type:
            conditions.append("action_type = :atype")
            params["atype"] = action_type
        where = (" WHERE " + " AND ".join(conditions)) if conditions else ""
        sql = f"SELECT {HISTORY_COLS} FROM task_rotation_history{where} ORDER BY created_at DESC, id"
        if limit:
            sql += " LIMIT :limit"
            params["limit"] = limit

        with self._engine.connect() as conn:
            rows = conn.execute(text(sql), params).fetchall()
        return [_row_to_dict(r) for r in rows]

    def get_history_by_key(self, key: str) -> Optional[Dict[str, Any]]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {HISTORY_COLS} FROM task_rotation_history WHERE idempotency_key = :k"),
                {"k": key},
            ).fetchone()
        return _row_to_dict(row) if row else None

    def get_postponements(self, task_id: str) -> List[Dict[str, Any]]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"""
                    SELECT {POSTPONEMENT_COLS} FROM task_postponements
                    WHERE sensitive_task_id = :tid ORDER BY created_at DESC
                """),
                {"tid": task_id},
            ).fetchall()
        return [_row_to_dict(r) for r in rows]

    def count_history(self, task_id: Optional[str] = None) -> int:
        sql = "SELECT COUNT(*) FROM task_rotation_history"
        params: Dict[str, Any] = {}
        if task_id:
            sql += " WHERE sensitive_task_id = :tid"
            params["tid"] = task_id
        with self._engine.connect() as conn:
            return conn.execute(text(sql), params).scalar() or 0

    def verify_connection(self):
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def dispose(self):
        self._engine.dispose()
