"""
Ledger and streak audit.

Detects drift between denormalized user fields and their sources of truth:
- users.points vs sum(points_ledger.delta)
- users.watering_streak vs compute_streak over the watering history, taken on
  the user's last watering day

Findings are written to audit_logs. Nothing is auto-corrected.
"""
from typing import Optional, List, Dict, Any
from datetime import datetime
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ecoplay.models.database_models import User, WateringRecord, AuditLog
from ecoplay.services.ledger_service import LedgerService
from ecoplay.services.streak_service import compute_streak

logger = logging.getLogger(__name__)


class AuditService:

    @staticmethod
    async def audit_user(db: AsyncSession, user: User) -> Dict[str, Any]:
        """Return the user's stored vs derived values and any issues found."""
        issues: List[str] = []

        ledger_points = await LedgerService.ledger_balance(db, user.id)
        if ledger_points != (user.points or 0):
            issues.append("ledger_mismatch")

        computed_streak = 0
        if user.last_watering_date is not None:
            result = await db.execute(
                select(WateringRecord.date).where(WateringRecord.user_id == user.id)
            )
            days = [row[0] for row in result.all()]
            computed_streak = compute_streak(days, today=user.last_watering_date)
        if computed_streak != (user.watering_streak or 0):
            issues.append("streak_mismatch")

        return {
            "user_id": user.id,
            "stored_points": user.points or 0,
            "ledger_points": ledger_points,
            "stored_streak": user.watering_streak or 0,
            "computed_streak": computed_streak,
            "issues": issues,
        }

    @staticmethod
    async def audit_all_users(
        db: AsyncSession,
        limit: int = 500,
        actor_user_id: Optional[int] = None
    ) -> Dict[str, Any]:
        """Audit up to `limit` users and log every anomaly."""
        result = await db.execute(select(User).order_by(User.id).limit(limit))
        users = list(result.scalars().all())

        findings = []
        for user in users:
            report = await AuditService.audit_user(db, user)
            if not report["issues"]:
                continue

            findings.append(report)
            for issue in report["issues"]:
                db.add(AuditLog(
                    actor_user_id=actor_user_id,
                    action=issue,
                    target_type="user",
                    target_id=user.id,
                    meta=report,
                ))
            logger.warning(f"Audit anomaly for user {user.id}: {report['issues']}")

        await db.commit()
        logger.info(f"Audit checked {len(users)} users, {len(findings)} with anomalies")

        return {
            "checked": len(users),
            "anomalies": len(findings),
            "findings": findings,
            "audited_at": datetime.utcnow().isoformat(),
        }
