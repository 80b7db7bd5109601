"""
Lesson content management. Completion credit is in LedgerService.complete_lesson.
"""
from typing import Optional, List, Dict, Any
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ecoplay.models.database_models import Lesson
from ecoplay.services.errors import NotFound, ValidationError

logger = logging.getLogger(__name__)

LESSON_TYPES = ("video", "text", "interactive")


class LessonService:

    @staticmethod
    async def list_lessons(db: AsyncSession) -> List[Lesson]:
        result = await db.execute(select(Lesson).order_by(Lesson.id))
        return list(result.scalars().all())

    @staticmethod
    async def get_lesson(db: AsyncSession, lesson_id: int) -> Lesson:
        lesson = await db.get(Lesson, lesson_id)
        if lesson is None:
            raise NotFound("Lesson not found")
        return lesson

    @staticmethod
    async def create_lesson(
        db: AsyncSession,
        data: Dict[str, Any],
        created_by: Optional[int] = None
    ) -> Lesson:
        if not data.get("title") or not data.get("type") or not data.get("content"):
            raise ValidationError("Title, type, and content are required for a lesson.")
        if data["type"] not in LESSON_TYPES:
            raise ValidationError(f"Lesson type must be one of: {', '.join(LESSON_TYPES)}")

        lesson = Lesson(
            title=data["title"],
            description=data.get("description"),
            type=data["type"],
            content=data["content"],
            thumbnail=data.get("thumbnail"),
            points_reward=data.get("points_reward") or 0,
            created_by=created_by,
        )
        db.add(lesson)
        await db.commit()
        logger.info(f"Lesson {lesson.id} created by {created_by}")
        return lesson

    @staticmethod
    async def update_lesson(db: AsyncSession, lesson_id: int, data: Dict[str, Any]) -> Lesson:
        """Apply the provided fields; absent fields keep their value."""
        lesson = await LessonService.get_lesson(db, lesson_id)

        if data.get("type") is not None and data["type"] not in LESSON_TYPES:
            raise ValidationError(f"Lesson type must be one of: {', '.join(LESSON_TYPES)}")

        for field in ("title", "description", "type", "content", "thumbnail", "points_reward"):
            value = data.get(field)
            if value is not None:
                setattr(lesson, field, value)

        await db.commit()
        return lesson

    @staticmethod
    async def delete_lesson(db: AsyncSession, lesson_id: int) -> None:
        lesson = await LessonService.get_lesson(db, lesson_id)
        await db.delete(lesson)
        await db.commit()
        logger.info(f"Lesson {lesson_id} removed")
