# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false

"""
Tests for the Sensitive Task Rotation Service HTTP API.
Runs against an in-memory SQLite database (see conftest.py).
"""

import uuid
from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from rotation_service.core.database import engine, init_schema
from rotation_service.core.dependencies import get_task_repo, get_task_service
from rotation_service.main import app

client = TestClient(app)

T0 = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


# ============================================
# Fixtures
# ============================================
@pytest.fixture(autouse=True)
def reset_db():
    """Fresh tables for every test."""
    init_schema(engine)
    with engine.begin() as conn:
        conn.execute(text("DELETE FROM task_postponements"))
        conn.execute(text("DELETE FROM task_rotation_history"))
        conn.execute(text("DELETE FROM sensitive_tasks"))
    yield


@pytest.fixture
def clock():
    """Controls the service clock; set clock.return_value to move time."""
    with patch("rotation_service.services.task_service.utcnow") as mock_now:
        mock_now.return_value = T0
        yield mock_now


@pytest.fixture
def notifier():
    with patch.object(get_task_service()._notifications, "send") as mock_send:
        yield mock_send


def _create(name="Ödeme emri onayı", period="quarterly", **extra):
    body = {"task_name": name, "process_name": "Harcama süreci", "rotation_period": period}
    body.update(extra)
    r = client.post("/api/v1/tasks", json=body)
    assert r.status_code == 201, r.text
    return r.json()


def _assign(task_id, primary="alice", backup="bob", **extra):
    body = {"primary_id": primary, "backup_id": backup, "performed_by": "admin"}
    body.update(extra)
    return client.post(f"/api/v1/tasks/{task_id}/assign", json=body)


def _history_count(task_id):
    return get_task_repo().count_history(task_id)


# ============================================
# Health & Metrics
# ============================================
class TestHealth:
    def test_health_ok(self):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"
        assert r.json()["service"] == "sensitive-task-rotation"

    def test_readiness_ok(self):
        r = client.get("/health/ready")
        assert r.status_code == 200
        assert r.json()["database"] == "connected"

    def test_readiness_fails_when_db_down(self):
        with patch.object(get_task_repo(), "verify_connection", side_effect=Exception("boom")):
            r = client.get("/health/ready")
        assert r.status_code == 503

    def test_metrics_endpoint(self):
        client.get("/api/v1/tasks")
        r = client.get("/metrics")
        assert r.status_code == 200
        assert "http_requests_total" in r.text
        assert "rotation_actions_total" in r.text

    def test_request_id_propagated(self):
        r = client.get("/health", headers={"X-Request-ID": "my-req-42"})
        assert r.headers["X-Request-ID"] == "my-req-42"

    def test_request_id_generated(self):
        r = client.get("/health")
        assert len(r.headers["X-Request-ID"]) == 36


# ============================================
# Task registration & listing
# ============================================
class TestCreateTask:
    def test_create_starts_unassigned(self, clock):
        d = _create(period="monthly", department_id="mali-hizmetler")
        assert d["status"] == "awaiting_assignment"
        assert d["status_label"] == "Atama Bekliyor"
        assert d["rotation_period_label"] == "Aylık"
        assert d["next_rotation_date"] is None
        assert d["days_until_rotation"] is None

    def test_create_biennial(self, clock):
        assert _create(period="biennial")["rotation_period"] == "biennial"

    def test_invalid_period_422(self):
        r = client.post("/api/v1/tasks", json={
            "task_name": "T", "process_name": "P", "rotation_period": "weekly",
        })
        assert r.status_code == 422

    def test_missing_name_422(self):
        r = client.post("/api/v1/tasks", json={"process_name": "P"})
        assert r.status_code == 422

    def test_create_does_not_write_history(self, clock):
        d = _create()
        assert _history_count(d["id"]) == 0


class TestListTasks:
    def test_empty(self):
        r = client.get("/api/v1/tasks")
        assert r.status_code == 200
        assert r.json() == {"total": 0, "tasks": []}

    def test_search_matches_task_or_process_name(self, clock):
        _create(name="Kasa sayımı")
        _create(name="İhale komisyonu", process_name="Satın Alma")
        _create(name="Ruhsat onayı", process_name="İmar")
        r = client.get("/api/v1/tasks", params={"search": "satın"})
        assert [t["task_name"] for t in r.json()["tasks"]] == ["İhale komisyonu"]

    def test_search_wildcards_are_literal(self, clock):
        _create(name="Kasa sayımı")
        _create(name="Vezne_2 kapanışı")
        _create(name="%100 kontrol")
        r = client.get("/api/v1/tasks", params={"search": "_"})
        assert [t["task_name"] for t in r.json()["tasks"]] == ["Vezne_2 kapanışı"]
        r = client.get("/api/v1/tasks", params={"search": "%"})
        assert [t["task_name"] for t in r.json()["tasks"]] == ["%100 kontrol"]

    def test_filter_by_department(self, clock):
        _create(department_id="d1")
        _create(department_id="d2")
        r = client.get("/api/v1/tasks", params={"department_id": "d2"})
        assert r.json()["total"] == 1

    def test_filter_by_derived_status(self, clock):
        a = _create()
        _create()
        _assign(a["id"])
        r = client.get("/api/v1/tasks", params={"status": "awaiting_assignment"})
        assert r.json()["total"] == 1
        r = client.get("/api/v1/tasks", params={"status": "normal"})
        assert [t["id"] for t in r.json()["tasks"]] == [a["id"]]

    def test_invalid_status_filter_422(self):
        assert client.get("/api/v1/tasks", params={"status": "late"}).status_code == 422

    def test_status_reclassified_on_read(self, clock):
        task = _create(period="monthly")
        _assign(task["id"])
        clock.return_value = datetime(2025, 4, 5, 9, 0, tzinfo=timezone.utc)
        r = client.get("/api/v1/tasks")
        row = r.json()["tasks"][0]
        assert row["status"] == "rotation_overdue"
        assert row["days_until_rotation"] == -4


class TestGetTask:
    def test_not_found(self):
        assert client.get(f"/api/v1/tasks/{uuid.uuid4()}").status_code == 404

    def test_detail_includes_history(self, clock):
        task = _create()
        _assign(task["id"])
        r = client.get(f"/api/v1/tasks/{task['id']}")
        assert r.status_code == 200
        d = r.json()
        assert len(d["history"]) == 1
        assert d["history"][0]["action_type"] == "initial_assignment"
        assert d["history"][0]["action_label"] == "İlk Atama"
        assert d["postponements"] == []


# ============================================
# Assignment
# ============================================
class TestAssign:
    def test_assign_sets_dates_and_history(self, clock, notifier):
        task = _create(period="quarterly")
        r = _assign(task["id"])
        assert r.status_code == 200
        d = r.json()
        assert d["duplicate"] is False
        assert d["task"]["assigned_primary_id"] == "alice"
        assert d["task"]["assigned_backup_id"] == "bob"
        assert d["task"]["last_rotation_date"] == T0.isoformat()
        assert d["task"]["next_rotation_date"] == "2025-06-01T09:00:00+00:00"
        assert d["task"]["status"] == "normal"
        h = d["history"]
        assert h["action_type"] == "initial_assignment"
        assert h["previous_primary_id"] is None
        assert h["previous_backup_id"] is None
        assert h["new_primary_id"] == "alice"
        assert h["new_backup_id"] == "bob"
        assert h["performed_by"] == "admin"

    def test_assign_notifies_primary_and_backup(self, clock, notifier):
        task = _create()
        _assign(task["id"])
        recipients = [c.kwargs["recipient"] for c in notifier.call_args_list]
        assert recipients == ["alice", "bob"]

    def test_assign_without_backup(self, clock):
        task = _create()
        r = _assign(task["id"], backup=None)
        assert r.status_code == 200
        assert r.json()["history"]["new_backup_id"] is None

    def test_assign_twice_rejected(self, clock):
        task = _create()
        _assign(task["id"])
        r = _assign(task["id"], primary="carol")
        assert r.status_code == 400
        assert _history_count(task["id"]) == 1

    def test_backup_same_as_primary_rejected(self, clock):
        task = _create()
        r = _assign(task["id"], primary="alice", backup="alice")
        assert r.status_code == 400
        assert _history_count(task["id"]) == 0

    def test_missing_primary_422(self, clock):
        task = _create()
        r = client.post(f"/api/v1/tasks/{task['id']}/assign", json={"backup_id": "bob"})
        assert r.status_code == 422

    def test_unknown_task_404(self):
        assert _assign(str(uuid.uuid4())).status_code == 404


# ============================================
# Rotation
# ============================================
class TestRotate:
    def test_rotation_history_snapshot(self, clock):
        task = _create(period="annual")
        _assign(task["id"], primary="A", backup="B")
        clock.return_value = datetime(2026, 2, 20, 9, 0, tzinfo=timezone.utc)
        r = client.post(f"/api/v1/tasks/{task['id']}/rotate", json={
            "new_primary_id": "C", "new_backup_id": None, "performed_by": "admin",
        })
        assert r.status_code == 200
        h = r.json()["history"]
        assert h["action_type"] == "rotation"
        assert h["previous_primary_id"] == "A"
        assert h["new_primary_id"] == "C"
        assert h["previous_backup_id"] == "B"
        assert h["new_backup_id"] is None
        t = r.json()["task"]
        assert t["last_rotation_date"] == "2026-02-20T09:00:00+00:00"
        assert t["next_rotation_date"] == "2027-02-20T09:00:00+00:00"
        assert _history_count(task["id"]) == 2

    def test_rotate_to_same_primary_rejected(self, clock):
        task = _create()
        _assign(task["id"], primary="A")
        r = client.post(f"/api/v1/tasks/{task['id']}/rotate", json={"new_primary_id": "A"})
        assert r.status_code == 400
        assert _history_count(task["id"]) == 1

    def test_rotate_unassigned_rejected(self, clock):
        task = _create()
        r = client.post(f"/api/v1/tasks/{task['id']}/rotate", json={"new_primary_id": "A"})
        assert r.status_code == 400

    def test_rotate_backup_equals_new_primary_rejected(self, clock):
        task = _create()
        _assign(task["id"], primary="A")
        r = client.post(f"/api/v1/tasks/{task['id']}/rotate",
                        json={"new_primary_id": "C", "new_backup_id": "C"})
        assert r.status_code == 400

    def test_rotate_clears_overdue(self, clock):
        task = _create(period="monthly")
        _assign(task["id"], primary="A")
        clock.return_value = datetime(2025, 5, 1, 9, 0, tzinfo=timezone.utc)
        assert client.get(f"/api/v1/tasks/{task['id']}").json()["status"] == "rotation_overdue"
        r = client.post(f"/api/v1/tasks/{task['id']}/rotate", json={"new_primary_id": "B"})
        assert r.json()["task"]["status"] == "normal"

    def test_rotate_unknown_task_404(self):
        r = client.post(f"/api/v1/tasks/{uuid.uuid4()}/rotate", json={"new_primary_id": "A"})
        assert r.status_code == 404


# ============================================
# Postponement
# ============================================
class TestPostpone:
    def _postpone(self, task_id, **overrides):
        body = {
            "days": 30,
            "reason": "personnel_on_leave",
            "explanation": "Asil personel doğum izninde",
            "performed_by": "mudur",
        }
        body.update(overrides)
        return client.post(f"/api/v1/tasks/{task_id}/postpone", json=body)

    def test_postpone_shifts_due_date(self, clock):
        task = _create(period="quarterly")
        _assign(task["id"], primary="A", backup="B")   # next: 2025-06-01
        r = self._postpone(task["id"])
        assert r.status_code == 200
        d = r.json()
        assert d["task"]["next_rotation_date"] == "2025-07-01T09:00:00+00:00"
        assert d["task"]["last_rotation_date"] == T0.isoformat()
        h = d["history"]
        assert h["action_type"] == "postponement"
        assert (h["previous_primary_id"], h["new_primary_id"]) == ("A", "A")
        assert (h["previous_backup_id"], h["new_backup_id"]) == ("B", "B")
        assert "30" in h["notes"]
        assert "Asil personel doğum izninde" in h["notes"]

    def test_postponement_record_stored(self, clock):
        task = _create(period="quarterly")
        _assign(task["id"])
        self._postpone(task["id"], days=10, reason="critical_period")
        p = client.get(f"/api/v1/tasks/{task['id']}").json()["postponements"]
        assert len(p) == 1
        assert p[0]["postponement_reason"] == "critical_period"
        assert p[0]["postponement_duration"] == 10
        assert p[0]["original_due_date"] == "2025-06-01T09:00:00+00:00"
        assert p[0]["new_due_date"] == "2025-06-11T09:00:00+00:00"
        assert p[0]["approved_by"] == "mudur"

    def test_postpone_does_not_notify(self, clock, notifier):
        task = _create()
        _assign(task["id"])
        notifier.reset_mock()
        self._postpone(task["id"])
        notifier.assert_not_called()

    def test_blank_explanation_422(self, clock):
        task = _create()
        _assign(task["id"])
        assert self._postpone(task["id"], explanation="   ").status_code == 422

    def test_explanation_stored_verbatim(self, clock):
        task = _create()
        _assign(task["id"])
        r = self._postpone(task["id"], days=5, explanation="  Bütçe dönemi  ")
        assert r.json()["history"]["notes"] == "5 gün ertelendi. Gerekçe:   Bütçe dönemi  "
        p = client.get(f"/api/v1/tasks/{task['id']}").json()["postponements"]
        assert p[0]["notes"] == "  Bütçe dönemi  "

    def test_zero_days_422(self, clock):
        task = _create()
        _assign(task["id"])
        assert self._postpone(task["id"], days=0).status_code == 422

    def test_too_long_400(self, clock):
        task = _create()
        _assign(task["id"])
        assert self._postpone(task["id"], days=4000).status_code == 400

    def test_invalid_reason_422(self, clock):
        task = _create()
        _assign(task["id"])
        assert self._postpone(task["id"], reason="bored").status_code == 422

    def test_unassigned_task_400(self, clock):
        task = _create()
        assert self._postpone(task["id"]).status_code == 400
        assert _history_count(task["id"]) == 0


# ============================================
# History
# ============================================
class TestHistory:
    def test_history_newest_first(self, clock):
        task = _create(period="monthly")
        _assign(task["id"], primary="A")
        clock.return_value = datetime(2025, 3, 20, 9, 0, tzinfo=timezone.utc)
        client.post(f"/api/v1/tasks/{task['id']}/rotate", json={"new_primary_id": "B"})
        r = client.get(f"/api/v1/tasks/{task['id']}/history")
        assert [h["action_type"] for h in r.json()] == ["rotation", "initial_assignment"]

    def test_history_filter_by_action(self, clock):
        task = _create(period="monthly")
        _assign(task["id"], primary="A")
        client.post(f"/api/v1/tasks/{task['id']}/rotate", json={"new_primary_id": "B"})
        r = client.get(f"/api/v1/tasks/{task['id']}/history",
                       params={"action_type": "rotation"})
        assert len(r.json()) == 1

    def test_history_unknown_task_404(self):
        assert client.get(f"/api/v1/tasks/{uuid.uuid4()}/history").status_code == 404


# ============================================
# Atomicity & duplicate submits
# ============================================
class TestAtomicity:
    def test_failed_history_insert_rolls_back_task_update(self, clock):
        task = _create()
        taken_id = uuid.uuid4()
        with engine.begin() as conn:
            conn.execute(text("""
                INSERT INTO task_rotation_history
                    (id, sensitive_task_id, action_type, action_date, created_at)
                VALUES (:id, 'other-task', 'rotation', '2025-01-01', '2025-01-01')
            """), {"id": str(taken_id)})

        with patch("rotation_service.services.task_service.uuid.uuid4", return_value=taken_id):
            r = _assign(task["id"])
        assert r.status_code == 500

        stored = get_task_repo().get_task(task["id"])
        assert stored["assigned_primary_id"] is None
        assert stored["next_rotation_date"] is None
        assert _history_count(task["id"]) == 0

    def test_repository_raises_for_missing_task(self):
        with pytest.raises(KeyError):
            get_task_repo().apply_transition(
                "missing", {"status": "normal"},
                {"id": "h1", "sensitive_task_id": "missing", "action_type": "rotation",
                 "action_date": "x", "previous_primary_id": None, "new_primary_id": None,
                 "previous_backup_id": None, "new_backup_id": None, "notes": None,
                 "performed_by": None, "idempotency_key": None, "created_at": "x"},
            )
        assert get_task_repo().count_history() == 0

    def test_repository_rejects_foreign_columns(self, clock):
        task = _create()
        with pytest.raises(ValueError):
            get_task_repo().apply_transition(task["id"], {"task_name": "hijack"}, {})

    def test_integrity_error_without_key_propagates(self, clock):
        task = _create()
        _assign(task["id"])
        history = get_task_repo().get_history(task["id"])[0]
        with pytest.raises(IntegrityError):
            get_task_repo().apply_transition(task["id"], {"status": "normal"}, history)


class TestIdempotency:
    def test_double_submit_records_once(self, clock, notifier):
        task = _create()
        headers = {"Idempotency-Key": "assign-42"}
        first = client.post(f"/api/v1/tasks/{task['id']}/assign",
                            json={"primary_id": "alice"}, headers=headers)
        second = client.post(f"/api/v1/tasks/{task['id']}/assign",
                             json={"primary_id": "alice"}, headers=headers)
        assert first.status_code == second.status_code == 200
        assert first.json()["duplicate"] is False
        assert second.json()["duplicate"] is True
        assert second.json()["history"]["id"] == first.json()["history"]["id"]
        assert _history_count(task["id"]) == 1
        assert notifier.call_count == 1

    def test_double_postpone_shifts_once(self, clock):
        task = _create(period="quarterly")
        _assign(task["id"])
        body = {"days": 30, "reason": "other", "explanation": "Seçim dönemi"}
        headers = {"Idempotency-Key": "pp-1"}
        client.post(f"/api/v1/tasks/{task['id']}/postpone", json=body, headers=headers)
        r = client.post(f"/api/v1/tasks/{task['id']}/postpone", json=body, headers=headers)
        assert r.json()["task"]["next_rotation_date"] == "2025-07-01T09:00:00+00:00"
        assert len(client.get(f"/api/v1/tasks/{task['id']}").json()["postponements"]) == 1

    def test_key_reused_on_other_task_rejected(self, clock):
        a = _create()
        b = _create()
        headers = {"Idempotency-Key": "shared"}
        client.post(f"/api/v1/tasks/{a['id']}/assign", json={"primary_id": "x"}, headers=headers)
        r = client.post(f"/api/v1/tasks/{b['id']}/assign", json={"primary_id": "y"}, headers=headers)
        assert r.status_code == 400

    def test_key_from_other_task_rejected_at_write(self, clock):
        a = _create()
        b = _create()
        headers = {"Idempotency-Key": "shared"}
        client.post(f"/api/v1/tasks/{a['id']}/assign", json={"primary_id": "x"}, headers=headers)
        service = get_task_service()
        with patch.object(service, "_replay", return_value=None):
            r = client.post(f"/api/v1/tasks/{b['id']}/assign",
                            json={"primary_id": "y"}, headers=headers)
        assert r.status_code == 400
        assert get_task_repo().get_task(b["id"])["assigned_primary_id"] is None
        assert _history_count(b["id"]) == 0

    def test_lost_race_returns_winner(self, clock):
        task = _create()
        _assign(task["id"], primary="A")
        winner = client.post(f"/api/v1/tasks/{task['id']}/rotate",
                             json={"new_primary_id": "B"}, headers={"Idempotency-Key": "r-1"})
        repo = get_task_repo()
        stored = repo.get_history_by_key("r-1")
        loser = dict(stored, id=str(uuid.uuid4()), new_primary_id="C")
        # first lookup misses, as if the winner had not committed yet
        with patch.object(repo, "get_history_by_key", side_effect=[None, stored]):
            row, duplicate = repo.apply_transition(
                task["id"], {"assigned_primary_id": "C"}, loser,
            )
        assert duplicate is True
        assert row["id"] == winner.json()["history"]["id"]
        assert repo.get_task(task["id"])["assigned_primary_id"] == "B"
        assert _history_count(task["id"]) == 2

    def test_lost_race_with_key_of_other_task_rejected(self, clock):
        a = _create()
        b = _create()
        client.post(f"/api/v1/tasks/{a['id']}/assign",
                    json={"primary_id": "x"}, headers={"Idempotency-Key": "k"})
        repo = get_task_repo()
        stored = repo.get_history_by_key("k")
        attempt = dict(stored, id=str(uuid.uuid4()), sensitive_task_id=b["id"])
        with patch.object(repo, "get_history_by_key", side_effect=[None, stored]):
            with pytest.raises(ValueError):
                repo.apply_transition(b["id"], {"assigned_primary_id": "y"}, attempt)
        assert repo.get_task(b["id"])["assigned_primary_id"] is None
        assert _history_count(b["id"]) == 0

    def test_without_key_each_submit_counts(self, clock):
        task = _create()
        _assign(task["id"], primary="A")
        client.post(f"/api/v1/tasks/{task['id']}/rotate", json={"new_primary_id": "B"})
        client.post(f"/api/v1/tasks/{task['id']}/rotate", json={"new_primary_id": "C"})
        assert _history_count(task["id"]) == 3


# ============================================
# Dashboard & reports
# ============================================
@pytest.fixture
def portfolio(clock):
    """Four tasks, one per status, observed at 2025-06-01 09:00."""
    due = _create(name="Due", period="monthly")
    clock.return_value = datetime(2025, 5, 10, 9, 0, tzinfo=timezone.utc)
    _assign(due["id"], primary="alice", backup=None)            # next 2025-06-10

    overdue = _create(name="Overdue", period="monthly")
    clock.return_value = datetime(2025, 4, 1, 9, 0, tzinfo=timezone.utc)
    _assign(overdue["id"], primary="alice", backup=None)        # next 2025-05-01

    normal = _create(name="Normal", period="annual")
    clock.return_value = datetime(2025, 5, 1, 9, 0, tzinfo=timezone.utc)
    _assign(normal["id"], primary="alice", backup="bob")        # next 2026-05-01

    waiting = _create(name="Waiting")
    clock.return_value = datetime(2025, 6, 1, 9, 0, tzinfo=timezone.utc)
    return {"due": due, "overdue": overdue, "normal": normal, "waiting": waiting}


class TestDashboard:
    def test_stats(self, portfolio):
        r = client.get("/api/v1/dashboard/stats")
        assert r.json() == {
            "total_tasks": 4,
            "normal": 1,
            "awaiting_assignment": 1,
            "rotation_due": 1,
            "rotation_overdue": 1,
        }

    def test_alerts(self, portfolio):
        r = client.get("/api/v1/dashboard/alerts")
        alerts = r.json()["alerts"]
        assert r.json()["total"] == 5
        assert [a["severity"] for a in alerts] == ["high", "high", "medium", "medium", "medium"]
        kinds = {(a["task_name"], a["type"]) for a in alerts}
        assert kinds == {
            ("Overdue", "overdue"), ("Overdue", "no_backup"),
            ("Due", "due_soon"), ("Due", "no_backup"),
            ("Waiting", "no_assignment"),
        }

    def test_stats_gauge_exported(self, portfolio):
        client.get("/api/v1/dashboard/stats")
        assert 'sensitive_tasks_total{status="rotation_overdue"} 1.0' in client.get("/metrics").text


class TestReports:
    def test_inventory(self, portfolio):
        assert len(client.get("/api/v1/reports/inventory").json()) == 4

    def test_due_soon(self, portfolio):
        r = client.get("/api/v1/reports/due-soon").json()
        assert [t["task_name"] for t in r] == ["Due"]
        assert r[0]["days_until_rotation"] == 9

    def test_no_backup(self, portfolio):
        r = client.get("/api/v1/reports/no-backup").json()
        assert sorted(t["task_name"] for t in r) == ["Due", "Overdue"]

    def test_personnel(self, portfolio):
        d = client.get("/api/v1/reports/personnel").json()
        assert d["overload_threshold"] == 3
        assert d["overloaded_count"] == 1
        assert d["personnel"][0]["personnel_id"] == "alice"
        assert d["personnel"][0]["task_count"] == 3

    def test_history_report(self, portfolio):
        r = client.get("/api/v1/reports/history").json()
        assert len(r) == 3
        assert {h["action_type"] for h in r} == {"initial_assignment"}
        r = client.get("/api/v1/reports/history", params={"action_type": "rotation"}).json()
        assert r == []

    def test_organization_scope(self, clock):
        _create(organization_id="org-1")
        _create(organization_id="org-2")
        r = client.get("/api/v1/dashboard/stats", params={"organization_id": "org-1"})
        assert r.json()["total_tasks"] == 1
