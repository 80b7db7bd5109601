"""
Quiz API endpoints.

Grading:
- Each question whose chosen option matches the correct index earns its points
- Unanswered questions earn nothing
- Every attempt is recorded and credited, including repeats
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
from ecoplay.services.quiz_service import QuizService
from ecoplay.schemas.schemas import (
    QuizCreateRequest,
    QuizPublic,
    QuizSubmitRequest,
    QuizSubmitResponse
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quizzes", tags=["Quizzes"])


@router.get("", response_model=List[QuizPublic], summary="List Quizzes")
async def list_quizzes(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await QuizService.list_quizzes(db)


@router.get("/{quiz_id}", response_model=QuizPublic, summary="Get Quiz")
async def get_quiz(
    quiz_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    try:
        return await QuizService.get_quiz(db, quiz_id)
    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "",
    response_model=QuizPublic,
    status_code=201,
    summary="Create Quiz (Admin/Educator)"
)
async def create_quiz(
    body: QuizCreateRequest,
    user: User = Depends(requires(Capability.review)),
    db: AsyncSession = Depends(get_db)
):
    try:
        return await QuizService.create_quiz(
            db,
            title=body.title,
            description=body.description,
            questions=[q.model_dump() for q in body.questions],
            created_by=user.id
        )
    except LedgerError as e:
        await db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/submit",
    response_model=QuizSubmitResponse,
    summary="Submit Quiz Answers",
    description="Grade the answers (option indexes, null for skipped) and credit the earned points."
)
async def submit_quiz(
    body: QuizSubmitRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    user_id = user.id
    try:
        result = await LedgerService.credit_quiz(
            db=db,
            user_id=user_id,
            quiz_id=body.quiz_id,
            answers=body.answers
        )
        return {
            "message": "Quiz submitted successfully",
            "total_points": result["total_points"],
            "correct_answers": result["correct_count"],
            "total_questions": result["total_questions"],
            "new_points": result["new_points"],
        }

    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        await db.rollback()
        logger.error(f"Quiz submission error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
