"""
Admin Service: review queue, reconciliation and user management.

Reconciliation point logic lives in LedgerService; this layer adds the
capability check and the audit trail.
"""
from typing import Optional, List, Dict, Any
from datetime import datetime
import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ecoplay.models.database_models import (
    User, WateringRecord, Submission, Quiz, QuizAttempt,
    LessonCompletion, AuditLog
)
from ecoplay.services.capabilities import Capability, ROLES, require_capability
from ecoplay.services.errors import NotFound, ValidationError, NotAuthorized
from ecoplay.services.ledger_service import LedgerService, user_locks
from ecoplay.services.audit_service import AuditService
from ecoplay.services.streak_service import compute_streak

logger = logging.getLogger(__name__)


class AdminService:
    """Operations for admins and educators."""

    @staticmethod
    async def _audit(
        db: AsyncSession,
        actor: User,
        action: str,
        target_type: str,
        target_id: Optional[int],
        meta: Dict[str, Any]
    ) -> None:
        """Best-effort audit row, written after the audited change committed."""
        try:
            db.add(AuditLog(
                actor_user_id=actor.id,
                action=action,
                target_type=target_type,
                target_id=target_id,
                meta=meta,
            ))
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(f"Failed to write audit log for {action} {target_type}:{target_id}: {e}")

    # ------------------------------------------------------------------
    # Review queue
    # ------------------------------------------------------------------

    @staticmethod
    async def _pending(db: AsyncSession, model) -> List[Dict[str, Any]]:
        result = await db.execute(
            select(model, User.full_name, User.username, User.email)
            .join(User, User.id == model.user_id)
            .where(model.verified == False)  # noqa: E712
            .order_by(model.created_at)
        )
        return [
            {
                "record": record,
                "user": {"id": record.user_id, "full_name": full_name, "username": username, "email": email},
            }
            for record, full_name, username, email in result.all()
        ]

    @staticmethod
    async def pending_submissions(db: AsyncSession, actor: User) -> List[Dict[str, Any]]:
        require_capability(actor, Capability.review)
        return await AdminService._pending(db, Submission)

    @staticmethod
    async def pending_watering(db: AsyncSession, actor: User) -> List[Dict[str, Any]]:
        require_capability(actor, Capability.review)
        return await AdminService._pending(db, WateringRecord)

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    @staticmethod
    async def reconcile_submission(
        db: AsyncSession,
        actor: User,
        submission_id: int,
        verified: bool,
        adjusted_points: Optional[int] = None,
        admin_notes: Optional[str] = None
    ) -> Dict[str, Any]:
        require_capability(actor, Capability.review)
        actor_id = actor.id
        result = await LedgerService.reconcile_submission(
            db, submission_id, verified,
            adjusted_points=adjusted_points,
            admin_notes=admin_notes,
            reviewer_id=actor_id,
        )
        await AdminService._audit(db, actor, "submission_reviewed", "submission", submission_id, {
            "verified": verified,
            "previously_verified": result["previously_verified"],
            "adjusted_points": adjusted_points,
            "points_delta": result["points_delta"],
            "admin_notes": admin_notes,
        })
        return result

    @staticmethod
    async def reconcile_watering(
        db: AsyncSession,
        actor: User,
        record_id: int,
        verified: bool,
        adjusted_points: Optional[int] = None,
        admin_notes: Optional[str] = None
    ) -> Dict[str, Any]:
        require_capability(actor, Capability.review)
        actor_id = actor.id
        result = await LedgerService.reconcile_watering(
            db, record_id, verified,
            adjusted_points=adjusted_points,
            admin_notes=admin_notes,
            reviewer_id=actor_id,
        )
        await AdminService._audit(db, actor, "watering_reviewed", "watering", record_id, {
            "verified": verified,
            "previously_verified": result["previously_verified"],
            "adjusted_points": adjusted_points,
            "points_delta": result["points_delta"],
            "admin_notes": admin_notes,
        })
        return result

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    @staticmethod
    async def list_users(db: AsyncSession, actor: User) -> List[User]:
        require_capability(actor, Capability.review)
        result = await db.execute(select(User).order_by(User.id))
        return list(result.scalars().all())

    @staticmethod
    async def get_user_detail(db: AsyncSession, actor: User, user_id: int) -> Dict[str, Any]:
        """User with quiz history, submissions and completed lessons."""
        require_capability(actor, Capability.review)
        user = await db.get(User, user_id)
        if user is None:
            raise NotFound("User not found")

        attempts = await db.execute(
            select(QuizAttempt, Quiz.title)
            .join(Quiz, Quiz.id == QuizAttempt.quiz_id)
            .where(QuizAttempt.user_id == user_id)
            .order_by(QuizAttempt.taken_at.desc())
        )
        submissions = await db.execute(
            select(Submission)
            .where(Submission.user_id == user_id)
            .order_by(Submission.created_at.desc())
        )
        lessons = await db.execute(
            select(LessonCompletion.lesson_id).where(LessonCompletion.user_id == user_id)
        )
        days = await db.execute(
            select(WateringRecord.date).where(WateringRecord.user_id == user_id)
        )

        return {
            "user": user,
            "quiz_attempts": [
                {
                    "quiz_id": attempt.quiz_id,
                    "quiz_title": title,
                    "earned": attempt.earned,
                    "correct_answers": attempt.correct_answers,
                    "total_questions": attempt.total_questions,
                    "taken_at": attempt.taken_at,
                }
                for attempt, title in attempts.all()
            ],
            "submissions": list(submissions.scalars().all()),
            "completed_lessons": [row[0] for row in lessons.all()],
            "computed_streak": compute_streak([row[0] for row in days.all()]),
        }

    @staticmethod
    async def update_role(db: AsyncSession, actor: User, user_id: int, role: str) -> User:
        """
        Change a user's role.

        Admins and educators may change roles; granting or revoking the
        admin role needs the admin capability.
        """
        require_capability(actor, Capability.review)
        if role not in ROLES:
            raise ValidationError(f"Role must be one of: {', '.join(ROLES)}")

        user = await db.get(User, user_id)
        if user is None:
            raise NotFound("User not found")

        old_role = user.role
        if "admin" in (role, old_role):
            require_capability(actor, Capability.admin)

        user.role = role
        await db.commit()
        logger.info(f"User {user_id} role changed {old_role} -> {role} by {actor.id}")

        await AdminService._audit(db, actor, "role_changed", "user", user_id, {
            "from": old_role,
            "to": role,
        })
        return user

    @staticmethod
    async def delete_user(db: AsyncSession, actor: User, user_id: int) -> None:
        """Remove a user; owned records go with it."""
        require_capability(actor, Capability.admin)
        if actor.id == user_id:
            raise NotAuthorized("Admins cannot remove their own account")

        async with user_locks.get(user_id):
            user = await db.get(User, user_id)
            if user is None:
                raise NotFound("User not found")
            snapshot = {"username": user.username, "points": user.points}
            try:
                await db.delete(user)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info(f"User {user_id} removed by {actor.id}")
        await AdminService._audit(db, actor, "user_removed", "user", user_id, snapshot)

    # ------------------------------------------------------------------
    # Analytics & audit
    # ------------------------------------------------------------------

    @staticmethod
    async def analytics(db: AsyncSession, actor: User) -> Dict[str, Any]:
        require_capability(actor, Capability.review)

        async def count(stmt) -> int:
            result = await db.execute(stmt)
            return int(result.scalar() or 0)

        return {
            "total_users": await count(select(func.count(User.id))),
            "total_quizzes": await count(select(func.count(Quiz.id))),
            "total_submissions": await count(select(func.count(Submission.id))),
            "verified_submissions": await count(
                select(func.count(Submission.id)).where(Submission.verified == True)  # noqa: E712
            ),
            "total_watering_records": await count(select(func.count(WateringRecord.id))),
            "verified_watering_records": await count(
                select(func.count(WateringRecord.id)).where(WateringRecord.verified == True)  # noqa: E712
            ),
            "total_points_awarded": await count(select(func.coalesce(func.sum(User.points), 0))),
            "computed_at": datetime.utcnow().isoformat(),
        }

    @staticmethod
    async def run_audit(db: AsyncSession, actor: User, limit: int = 500) -> Dict[str, Any]:
        require_capability(actor, Capability.review)
        return await AuditService.audit_all_users(db, limit=limit, actor_user_id=actor.id)
