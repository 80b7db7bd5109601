"""
Lesson API endpoints.

Authoring (create/update/delete) needs the review capability.
Completing a lesson credits its reward once per user.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging

from ecoplay.database import get_db
from ecoplay.dependencies import get_current_user, requires
from ecoplay.models.database_models import User
from ecoplay.services.capabilities import Capability
from ecoplay.services.errors import LedgerError
from ecoplay.services.ledger_service import LedgerService
from ecoplay.services.lesson_service import LessonService
from ecoplay.schemas.schemas import (
    LessonCreateRequest,
    LessonUpdateRequest,
    LessonResponse,
    LessonCompleteResponse,
    MessageResponse
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/lessons", tags=["Lessons"])


@router.get("", response_model=List[LessonResponse], summary="List Lessons")
async def list_lessons(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await LessonService.list_lessons(db)


@router.get("/{lesson_id}", response_model=LessonResponse, summary="Get Lesson")
async def get_lesson(
    lesson_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    try:
        return await LessonService.get_lesson(db, lesson_id)
    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("", response_model=LessonResponse, status_code=201, summary="Create Lesson (Admin/Educator)")
async def create_lesson(
    body: LessonCreateRequest,
    user: User = Depends(requires(Capability.review)),
    db: AsyncSession = Depends(get_db)
):
    try:
        return await LessonService.create_lesson(db, body.model_dump(mode="json"), created_by=user.id)
    except LedgerError as e:
        await db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/{lesson_id}", response_model=LessonResponse, summary="Update Lesson (Admin/Educator)")
async def update_lesson(
    lesson_id: int,
    body: LessonUpdateRequest,
    user: User = Depends(requires(Capability.review)),
    db: AsyncSession = Depends(get_db)
):
    try:
        return await LessonService.update_lesson(db, lesson_id, body.model_dump(mode="json"))
    except LedgerError as e:
        await db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{lesson_id}", response_model=MessageResponse, summary="Delete Lesson (Admin/Educator)")
async def delete_lesson(
    lesson_id: int,
    user: User = Depends(requires(Capability.review)),
    db: AsyncSession = Depends(get_db)
):
    try:
        await LessonService.delete_lesson(db, lesson_id)
        return {"message": "Lesson removed"}
    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/{lesson_id}/complete",
    response_model=LessonCompleteResponse,
    summary="Complete Lesson",
    description="Mark a lesson complete and earn its reward. A lesson pays out only once per user."
)
async def complete_lesson(
    lesson_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    user_id = user.id
    try:
        result = await LedgerService.complete_lesson(db, user_id, lesson_id)
        return {
            "message": f"Lesson completed! You earned {result['points_earned']} points.",
            "points_earned": result["points_earned"],
            "new_points": result["new_points"],
        }

    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        await db.rollback()
        logger.error(f"Lesson completion error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
