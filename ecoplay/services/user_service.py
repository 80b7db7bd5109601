"""
User profile and history reads.
"""
from typing import Optional, List, Dict, Any
import logging

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from ecoplay.models.database_models import User, WateringRecord, Submission, Redemption, QuizAttempt
from ecoplay.services.badge_service import earned_badges, streak_milestones
from ecoplay.services.errors import NotFound, ValidationError
from ecoplay.services.streak_service import compute_streak, today_utc

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("full_name", "username", "email", "school", "grade")


class UserService:

    @staticmethod
    async def _ensure_unique(
        db: AsyncSession,
        username: Optional[str],
        email: Optional[str],
        exclude_id: Optional[int] = None
    ) -> None:
        clauses = []
        if username:
            clauses.append(User.username == username)
        if email:
            clauses.append(User.email == email)
        if not clauses:
            return

        stmt = select(User.id).where(or_(*clauses))
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        result = await db.execute(stmt)
        if result.first() is not None:
            raise ValidationError("User already exists with that email or username")

    @staticmethod
    async def create_user(db: AsyncSession, data: Dict[str, Any]) -> User:
        for field in ("full_name", "username", "email"):
            if not data.get(field):
                raise ValidationError(f"{field} is required")
        await UserService._ensure_unique(db, data["username"], data["email"])

        user = User(
            full_name=data["full_name"],
            username=data["username"],
            email=data["email"],
            school=data.get("school"),
            grade=data.get("grade"),
            role="user",
            points=0,
            watering_streak=0,
        )
        db.add(user)
        await db.commit()
        logger.info(f"User {user.id} registered ({user.username})")
        return user

    @staticmethod
    async def get_user(db: AsyncSession, user_id: int) -> User:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    @staticmethod
    async def update_profile(db: AsyncSession, user: User, data: Dict[str, Any]) -> User:
        """Update descriptive fields only; points, streak and role are not editable here."""
        await UserService._ensure_unique(db, data.get("username"), data.get("email"), exclude_id=user.id)
        for field in PROFILE_FIELDS:
            value = data.get(field)
            if value:
                setattr(user, field, value)
        await db.commit()
        return user

    @staticmethod
    async def watering_history(db: AsyncSession, user_id: int) -> List[WateringRecord]:
        result = await db.execute(
            select(WateringRecord)
            .where(WateringRecord.user_id == user_id)
            .order_by(WateringRecord.date.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def submissions(db: AsyncSession, user_id: int) -> List[Submission]:
        result = await db.execute(
            select(Submission)
            .where(Submission.user_id == user_id)
            .order_by(Submission.created_at.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def redemptions(db: AsyncSession, user_id: int) -> List[Redemption]:
        result = await db.execute(
            select(Redemption)
            .where(Redemption.user_id == user_id)
            .order_by(Redemption.created_at.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def quiz_attempt_count(db: AsyncSession, user_id: int) -> int:
        result = await db.execute(
            select(func.count(QuizAttempt.id)).where(QuizAttempt.user_id == user_id)
        )
        return int(result.scalar() or 0)

    @staticmethod
    async def badges(db: AsyncSession, user: User) -> List[str]:
        """Badges for the stored points and streak, as on the profile page."""
        attempts = await UserService.quiz_attempt_count(db, user.id)
        return earned_badges(user.points, user.watering_streak, attempts)

    @staticmethod
    async def dashboard(db: AsyncSession, user: User) -> Dict[str, Any]:
        """Points and streaks as shown on the dashboard."""
        records = await UserService.watering_history(db, user.id)
        today = today_utc()
        computed_streak = compute_streak(records, today=today)
        return {
            "user_id": user.id,
            "full_name": user.full_name,
            "points": user.points,
            "stored_streak": user.watering_streak,
            "computed_streak": computed_streak,
            "watered_today": any(r.date == today for r in records),
            "plants_watered": len(records),
            "last_watering_date": user.last_watering_date,
            "badges": await UserService.badges(db, user),
            "streak_milestones": streak_milestones(computed_streak),
        }
