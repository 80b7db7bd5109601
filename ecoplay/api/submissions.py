"""
Activity submission API endpoints.

Activities (Planting, Cleanup, Recycling, Conservation) earn 10 points as
soon as they are submitted. An admin or educator reviews them afterwards and
may re-price or reverse the credit.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging

from ecoplay.database import get_db
from ecoplay.dependencies import get_current_user
from ecoplay.models.database_models import User
from ecoplay.services.errors import LedgerError
from ecoplay.services.ledger_service import LedgerService
from ecoplay.services.user_service import UserService
from ecoplay.schemas.schemas import (
    ActivitySubmitRequest,
    ActivitySubmitResponse,
    SubmissionResponse
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/submissions", tags=["Activity Submissions"])


@router.get(
    "",
    response_model=List[SubmissionResponse],
    summary="My Submissions"
)
async def list_submissions(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await UserService.submissions(db, user.id)


@router.post(
    "",
    response_model=ActivitySubmitResponse,
    status_code=201,
    summary="Submit Activity",
    description="Submit an environmental activity with photo evidence. Points are awarded immediately, pending review."
)
async def submit_activity(
    body: ActivitySubmitRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    user_id = user.id
    try:
        result = await LedgerService.submit_activity(
            db=db,
            user_id=user_id,
            type=body.type.value if body.type else None,
            note=body.note,
            evidence=body.evidence
        )
        return {
            "message": "Activity submitted successfully! Points awarded, awaiting verification.",
            "submission": result["submission"],
            "new_points": result["new_points"],
        }

    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        await db.rollback()
        logger.error(f"Activity submission error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
