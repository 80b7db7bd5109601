"""
Ledger audit background tasks.

Run on demand; there is no beat schedule.
"""
from worker.celery_app import celery_app
import logging

logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    name="worker.tasks.audit_tasks.audit_all_users",
    queue="audit",
    time_limit=900,
    soft_time_limit=840,
)
def audit_all_users(self, limit: int = 500):
    """
    Compare every user's stored points and streak with the ledger and
    watering history. Anomalies are written to audit_logs.
    """
    logger.info(f"Starting ledger audit (limit={limit})")

    try:
        import asyncio
        from ecoplay.database import async_session_maker
        from ecoplay.services.audit_service import AuditService

        async def run_audit():
            async with async_session_maker() as db:
                return await AuditService.audit_all_users(db, limit=limit)

        result = asyncio.run(run_audit())
        logger.info(f"Ledger audit finished: {result['checked']} checked, {result['anomalies']} anomalies")
        return {
            "checked": result["checked"],
            "anomalies": result["anomalies"],
            "audited_at": result["audited_at"],
        }

    except Exception as e:
        logger.error(f"Ledger audit task error: {e}")
        self.retry(exc=e, countdown=300, max_retries=3)


@celery_app.task(name="worker.tasks.audit_tasks.audit_user", queue="audit", time_limit=60)
def audit_user(user_id: int):
    """Audit a single user without writing audit rows."""
    logger.info(f"Auditing user {user_id}")

    try:
        import asyncio
        from ecoplay.database import async_session_maker
        from ecoplay.models.database_models import User
        from ecoplay.services.audit_service import AuditService

        async def run_audit():
            async with async_session_maker() as db:
                user = await db.get(User, user_id)
                if user is None:
                    return None
                return await AuditService.audit_user(db, user)

        report = asyncio.run(run_audit())
        if report is None:
            logger.warning(f"Audit skipped, user {user_id} not found")
        elif report["issues"]:
            logger.warning(f"Audit anomaly for user {user_id}: {report['issues']}")
        return report

    except Exception as e:
        logger.error(f"User audit task error: {e}")
        return {"error": str(e)}
