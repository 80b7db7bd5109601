"""
Ledger Service: the only code path that changes a user's points.

Sources of points:
- Watering: +15 once per user per calendar day, after the oracle accepts
- Activity submissions: +10 credited optimistically, before review
- Quizzes: sum of the points of correctly answered questions, every attempt
- Lessons: pointsReward, at most once per (user, lesson)
- Redemptions: -cost, only if cost <= balance

Every delta is written to `points_ledger` together with the new balance in the
same transaction, so sum(points_ledger.delta) == users.points at all times.
Operations on one user are serialized; different users run in parallel.
"""
from typing import Optional, List, Dict, Any, Sequence
from contextlib import asynccontextmanager
from datetime import date, datetime
from weakref import WeakValueDictionary
import asyncio
import logging

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ecoplay.config import settings
from ecoplay.models.database_models import (
    User, WateringRecord, Submission, QuizAttempt, Redemption,
    Lesson, LessonCompletion, PointsLedgerEntry
)
from ecoplay.services.errors import (
    ValidationError, MissingField, DuplicateSubmission, VerificationFailed,
    InsufficientPoints, AlreadyCompleted, NotFound
)
from ecoplay.services.quiz_service import QuizService
from ecoplay.services.streak_service import next_stored_streak, today_utc
from ecoplay.services.verification_service import VerificationService

logger = logging.getLogger(__name__)


class UserLocks:
    """One asyncio.Lock per user id, dropped once nobody holds or waits on it."""

    def __init__(self):
        self._locks: "WeakValueDictionary[int, asyncio.Lock]" = WeakValueDictionary()

    def get(self, user_id: int) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    def reset(self) -> None:
        self._locks = WeakValueDictionary()


user_locks = UserLocks()


class LedgerService:
    """Points ledger operations. Each public operation is one atomic unit."""

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    @asynccontextmanager
    async def _user_transaction(db: AsyncSession, user_id: int):
        """Hold the user's lock, commit on success, roll back on any failure."""
        async with user_locks.get(user_id):
            try:
                yield
                await db.commit()
            except Exception:
                await db.rollback()
                raise

    @staticmethod
    async def _lock_user(db: AsyncSession, user_id: int) -> User:
        """Load a fresh copy of the user row, locked for update where supported."""
        result = await db.execute(
            select(User)
            .where(User.id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFound("User not found")
        return user

    @staticmethod
    def _apply_delta(
        db: AsyncSession,
        user: User,
        delta: int,
        kind: str,
        reference: Optional[str] = None,
        note: Optional[str] = None
    ) -> PointsLedgerEntry:
        user.points = (user.points or 0) + delta
        entry = PointsLedgerEntry(
            user_id=user.id,
            kind=kind,
            delta=delta,
            balance_after=user.points,
            reference=reference,
            note=note,
        )
        db.add(entry)

        if user.points < 0:
            logger.warning(f"User {user.id} balance is negative ({user.points}) after {kind} {reference}")
        logger.info(f"Ledger user={user.id} kind={kind} delta={delta:+d} balance={user.points} ref={reference}")
        return entry

    # ------------------------------------------------------------------
    # Watering
    # ------------------------------------------------------------------

    @staticmethod
    async def submit_watering(
        db: AsyncSession,
        user_id: int,
        evidence: Optional[str],
        note: Optional[str] = None,
        day: Optional[date] = None
    ) -> Dict[str, Any]:
        """
        Record today's watering and credit it.

        Raises DuplicateSubmission if a record already exists for the day and
        VerificationFailed if the oracle rejects (or times out). Neither
        failure leaves a record or a point change behind.
        """
        if not evidence:
            raise MissingField("evidence")
        day = day or today_utc()

        async with LedgerService._user_transaction(db, user_id):
            user = await LedgerService._lock_user(db, user_id)

            existing = await db.execute(
                select(WateringRecord.id).where(
                    WateringRecord.user_id == user_id,
                    WateringRecord.date == day
                )
            )
            if existing.first() is not None:
                raise DuplicateSubmission("You have already submitted a watering record for today.")

            if not await VerificationService.verify(evidence, "watering"):
                raise VerificationFailed("Could not verify a plant watering activity in the image.")

            record = WateringRecord(
                user_id=user_id,
                date=day,
                evidence=evidence,
                note=note or settings.DEFAULT_WATERING_NOTE,
                verified=True,
                points=settings.WATERING_POINTS,
                points_credited=True,
            )
            db.add(record)
            try:
                await db.flush()
            except IntegrityError:
                raise DuplicateSubmission("You have already submitted a watering record for today.") from None

            LedgerService._apply_delta(db, user, record.points, "watering", f"watering:{record.id}")
            user.watering_streak = next_stored_streak(user.last_watering_date, user.watering_streak, day)
            user.last_watering_date = day

        return {
            "record": record,
            "new_points": user.points,
            "new_streak": user.watering_streak,
        }

    # ------------------------------------------------------------------
    # Activity submissions
    # ------------------------------------------------------------------

    @staticmethod
    async def submit_activity(
        db: AsyncSession,
        user_id: int,
        type: Optional[str],
        note: Optional[str],
        evidence: Optional[str]
    ) -> Dict[str, Any]:
        """
        Create an unverified submission and credit it immediately.

        The credit is optimistic; admin reconciliation may reverse it later.
        """
        missing = [name for name, value in (("type", type), ("note", note), ("evidence", evidence)) if not value]
        if missing:
            raise MissingField(*missing)
        if type not in settings.ACTIVITY_TYPES:
            raise ValidationError(
                f"Unknown activity type '{type}'. Expected one of: {', '.join(settings.ACTIVITY_TYPES)}"
            )

        async with LedgerService._user_transaction(db, user_id):
            user = await LedgerService._lock_user(db, user_id)

            submission = Submission(
                user_id=user_id,
                type=type,
                note=note,
                evidence=evidence,
                verified=False,
                points=settings.ACTIVITY_POINTS,
                points_credited=True,
            )
            db.add(submission)
            await db.flush()

            LedgerService._apply_delta(db, user, submission.points, "activity", f"submission:{submission.id}")

        return {
            "submission": submission,
            "new_points": user.points,
        }

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    @staticmethod
    async def _reconcile(
        db: AsyncSession,
        model,
        label: str,
        record_id: int,
        verified: bool,
        adjusted_points: Optional[int],
        admin_notes: Optional[str],
        reviewer_id: Optional[int]
    ) -> Dict[str, Any]:
        """
        Apply a verification decision and the point delta it implies.

        old -> new:
        - False -> True: re-price to adjusted_points if given (net delta);
          credit in full if the record holds no credit
        - True -> False: debit the stored points
        - unchanged: notes and review metadata only
        """
        if adjusted_points is not None and adjusted_points < 0:
            raise ValidationError("Adjusted points must be zero or more")

        result = await db.execute(select(model.user_id).where(model.id == record_id))
        owner_id = result.scalar_one_or_none()
        if owner_id is None:
            raise NotFound(f"{label.capitalize()} not found")

        async with LedgerService._user_transaction(db, owner_id):
            result = await db.execute(
                select(model)
                .where(model.id == record_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            record = result.scalar_one_or_none()
            if record is None:
                raise NotFound(f"{label.capitalize()} not found")
            user = await LedgerService._lock_user(db, record.user_id)

            was_verified = bool(record.verified)
            delta = 0

            if not was_verified and verified:
                if record.points_credited:
                    if adjusted_points is not None and adjusted_points != record.points:
                        delta = adjusted_points - record.points
                        record.points = adjusted_points
                else:
                    if adjusted_points is not None:
                        record.points = adjusted_points
                    delta = record.points
                    record.points_credited = True
            elif was_verified and not verified:
                if record.points_credited:
                    delta = -record.points
                    record.points_credited = False

            record.verified = verified
            if admin_notes is not None:
                record.admin_notes = admin_notes
            record.reviewed_by = reviewer_id
            record.reviewed_at = datetime.utcnow()

            if delta:
                LedgerService._apply_delta(
                    db, user, delta, "reconciliation", f"{label}:{record.id}",
                    note=f"{'verified' if verified else 'rejected'} by {reviewer_id}"
                )

        logger.info(
            f"Reconciled {label} {record_id}: {was_verified} -> {verified}, delta={delta:+d}"
        )
        return {
            "record": record,
            "previously_verified": was_verified,
            "points_delta": delta,
            "new_points": user.points,
        }

    @staticmethod
    async def reconcile_submission(
        db: AsyncSession,
        submission_id: int,
        verified: bool,
        adjusted_points: Optional[int] = None,
        admin_notes: Optional[str] = None,
        reviewer_id: Optional[int] = None
    ) -> Dict[str, Any]:
        return await LedgerService._reconcile(
            db, Submission, "submission", submission_id,
            verified, adjusted_points, admin_notes, reviewer_id
        )

    @staticmethod
    async def reconcile_watering(
        db: AsyncSession,
        record_id: int,
        verified: bool,
        adjusted_points: Optional[int] = None,
        admin_notes: Optional[str] = None,
        reviewer_id: Optional[int] = None
    ) -> Dict[str, Any]:
        return await LedgerService._reconcile(
            db, WateringRecord, "watering", record_id,
            verified, adjusted_points, admin_notes, reviewer_id
        )

    # ------------------------------------------------------------------
    # Redemptions
    # ------------------------------------------------------------------

    @staticmethod
    async def redeem(
        db: AsyncSession,
        user_id: int,
        reward_name: Optional[str],
        cost: Optional[int]
    ) -> Dict[str, Any]:
        """Spend points on a reward. Debit and redemption record are one unit."""
        missing = []
        if not reward_name:
            missing.append("reward_name")
        if cost is None:
            missing.append("cost")
        if missing:
            raise MissingField(*missing)
        if cost <= 0:
            raise ValidationError("Cost must be a positive number of points")

        async with LedgerService._user_transaction(db, user_id):
            user = await LedgerService._lock_user(db, user_id)

            if cost > (user.points or 0):
                raise InsufficientPoints("Not enough points to redeem this reward.")

            redemption = Redemption(user_id=user_id, reward=reward_name, cost=cost)
            db.add(redemption)
            await db.flush()

            LedgerService._apply_delta(db, user, -cost, "redemption", f"redemption:{redemption.id}", note=reward_name)

        return {
            "redemption": redemption,
            "new_points": user.points,
        }

    # ------------------------------------------------------------------
    # Lessons
    # ------------------------------------------------------------------

    @staticmethod
    async def complete_lesson(
        db: AsyncSession,
        user_id: int,
        lesson_id: int
    ) -> Dict[str, Any]:
        """Credit a lesson's reward, at most once per user."""
        lesson = await db.get(Lesson, lesson_id)
        if lesson is None:
            raise NotFound("Lesson not found")
        reward = lesson.points_reward or 0

        async with LedgerService._user_transaction(db, user_id):
            user = await LedgerService._lock_user(db, user_id)

            existing = await db.execute(
                select(LessonCompletion.id).where(
                    LessonCompletion.user_id == user_id,
                    LessonCompletion.lesson_id == lesson_id
                )
            )
            if existing.first() is not None:
                raise AlreadyCompleted("Lesson already completed.")

            db.add(LessonCompletion(user_id=user_id, lesson_id=lesson_id))
            try:
                await db.flush()
            except IntegrityError:
                raise AlreadyCompleted("Lesson already completed.") from None

            if reward:
                LedgerService._apply_delta(db, user, reward, "lesson", f"lesson:{lesson_id}")

        return {
            "lesson": lesson,
            "points_earned": reward,
            "new_points": user.points,
        }

    # ------------------------------------------------------------------
    # Quizzes
    # ------------------------------------------------------------------

    @staticmethod
    async def credit_quiz(
        db: AsyncSession,
        user_id: int,
        quiz_id: int,
        answers: Sequence[Optional[int]]
    ) -> Dict[str, Any]:
        """
        Grade an attempt, append it to the user's history and credit the score.

        Repeat attempts are allowed and each one is credited.
        """
        quiz = await QuizService.get_quiz(db, quiz_id)
        grade = QuizService.grade(quiz, answers)
        total_questions = len(quiz.questions)

        async with LedgerService._user_transaction(db, user_id):
            user = await LedgerService._lock_user(db, user_id)

            attempt = QuizAttempt(
                user_id=user_id,
                quiz_id=quiz_id,
                earned=grade["total_points"],
                correct_answers=grade["correct_count"],
                total_questions=total_questions,
            )
            db.add(attempt)
            await db.flush()

            if grade["total_points"]:
                LedgerService._apply_delta(db, user, grade["total_points"], "quiz", f"quiz_attempt:{attempt.id}")

        return {
            "total_points": grade["total_points"],
            "correct_count": grade["correct_count"],
            "total_questions": total_questions,
            "attempt": attempt,
            "new_points": user.points,
        }

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @staticmethod
    async def get_ledger(
        db: AsyncSession,
        user_id: int,
        limit: int = 100
    ) -> List[PointsLedgerEntry]:
        result = await db.execute(
            select(PointsLedgerEntry)
            .where(PointsLedgerEntry.user_id == user_id)
            .order_by(PointsLedgerEntry.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    @staticmethod
    async def ledger_balance(db: AsyncSession, user_id: int) -> int:
        """Sum of every delta ever applied to the user."""
        result = await db.execute(
            select(func.coalesce(func.sum(PointsLedgerEntry.delta), 0))
            .where(PointsLedgerEntry.user_id == user_id)
        )
        return int(result.scalar() or 0)
