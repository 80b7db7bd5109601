"""Tests for the ledger and streak audit."""
from datetime import timedelta
from unittest.mock import patch

from sqlalchemy import select

from ecoplay.models.database_models import AuditLog, User
from ecoplay.services.audit_service import AuditService
from ecoplay.services.ledger_service import LedgerService
from ecoplay.services.streak_service import today_utc


async def load_user(db, user_id) -> User:
    result = await db.execute(
        select(User).where(User.id == user_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


class TestAuditService:

    async def test_clean_history_has_no_findings(self, db, make_user):
        user_id = await make_user()
        today = today_utc()
        await LedgerService.submit_watering(db, user_id, "a.jpg", day=today - timedelta(days=1))
        await LedgerService.submit_watering(db, user_id, "b.jpg", day=today)

        report = await AuditService.audit_all_users(db)

        assert report["checked"] == 1
        assert report["anomalies"] == 0
        assert report["findings"] == []

    async def test_tampered_balance_is_detected(self, db, make_user):
        user_id = await make_user()
        await LedgerService.submit_watering(db, user_id, "a.jpg")
        user = await load_user(db, user_id)
        user.points = 999
        await db.commit()

        report = await AuditService.audit_all_users(db, actor_user_id=42)

        assert report["anomalies"] == 1
        finding = report["findings"][0]
        assert finding["user_id"] == user_id
        assert finding["stored_points"] == 999
        assert finding["ledger_points"] == 15
        assert finding["issues"] == ["ledger_mismatch"]

        logs = (await db.execute(select(AuditLog))).scalars().all()
        assert [(log.action, log.target_id, log.actor_user_id) for log in logs] == [
            ("ledger_mismatch", user_id, 42)
        ]

    async def test_streak_drift_is_detected_not_corrected(self, db, make_user):
        user_id = await make_user()
        await LedgerService.submit_watering(db, user_id, "a.jpg")
        user = await load_user(db, user_id)
        user.watering_streak = 5
        await db.commit()

        report = await AuditService.audit_all_users(db)

        assert report["findings"][0]["issues"] == ["streak_mismatch"]
        assert report["findings"][0]["computed_streak"] == 1
        assert (await load_user(db, user_id)).watering_streak == 5

    async def test_old_streak_is_judged_on_last_watering_day(self, db, make_user):
        """A streak that ended days ago still matches its own history."""
        user_id = await make_user()
        today = today_utc()
        await LedgerService.submit_watering(db, user_id, "a.jpg", day=today - timedelta(days=6))
        await LedgerService.submit_watering(db, user_id, "b.jpg", day=today - timedelta(days=5))

        report = await AuditService.audit_all_users(db)

        assert report["anomalies"] == 0


class TestAuditEndpoint:

    async def test_requires_review_capability(self, client, make_user):
        user_id = await make_user()
        resp = await client.post("/admin/audit", headers={"X-User-Id": str(user_id)})
        assert resp.status_code == 403

    async def test_admin_runs_audit(self, client, make_user):
        admin_id = await make_user(role="admin")
        await make_user(points=50)

        resp = await client.post("/admin/audit", headers={"X-User-Id": str(admin_id)})

        assert resp.status_code == 200
        body = resp.json()
        assert body["checked"] == 2
        assert body["anomalies"] == 1
        assert body["findings"][0]["issues"] == ["ledger_mismatch"]


class TestAuditTask:

    def test_task_runs_service_in_fresh_loop(self):
        from worker.tasks import audit_tasks

        async def fake_audit(db, limit=500, actor_user_id=None):
            return {"checked": 3, "anomalies": 0, "findings": [], "audited_at": "2024-05-10T00:00:00"}

        with patch.object(AuditService, "audit_all_users", new=fake_audit):
            result = audit_tasks.audit_all_users.run(limit=10)

        assert result == {"checked": 3, "anomalies": 0, "audited_at": "2024-05-10T00:00:00"}

    def test_audit_tasks_run_on_audit_queue_with_own_limits(self):
        from worker.tasks import audit_tasks

        assert audit_tasks.audit_all_users.queue == "audit"
        assert audit_tasks.audit_all_users.time_limit == 900
        assert audit_tasks.audit_all_users.soft_time_limit < audit_tasks.audit_all_users.time_limit
        assert audit_tasks.audit_user.queue == "audit"
        assert audit_tasks.audit_user.time_limit == 60
