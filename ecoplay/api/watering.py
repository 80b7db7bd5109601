"""
Daily watering API endpoints.

Rules:
- One watering record per user per calendar day
- Evidence must pass the verification oracle (timeout = rejection)
- +15 points on acceptance
- Streak continues if the previous watering was yesterday, else restarts at 1
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
    WateringSubmitRequest,
    WateringSubmitResponse,
    WateringRecordResponse
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/watering", tags=["Watering"])


@router.get(
    "",
    response_model=List[WateringRecordResponse],
    summary="Watering History",
    description="All watering records of the caller, newest day first."
)
async def list_watering(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await UserService.watering_history(db, user.id)


@router.post(
    "",
    response_model=WateringSubmitResponse,
    status_code=201,
    summary="Submit Today's Watering",
    description="""
    Submit photo evidence of today's plant watering.

    Errors:
    - 409 if today's record already exists
    - 422 if the evidence could not be verified
    """
)
async def submit_watering(
    body: WateringSubmitRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Submit a watering record."""
    user_id = user.id
    try:
        result = await LedgerService.submit_watering(
            db=db,
            user_id=user_id,
            evidence=body.evidence,
            note=body.note
        )
        return {
            "message": "Watering record submitted and verified!",
            "record": result["record"],
            "new_points": result["new_points"],
            "new_streak": result["new_streak"],
        }

    except LedgerError as e:
        logger.info(f"Watering rejected for user {user_id}: {e.message}")
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        await db.rollback()
        logger.error(f"Watering submission error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
