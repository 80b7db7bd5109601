"""
Reward redemption API endpoints.
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
from ecoplay.schemas.schemas import RedeemRequest, RedeemResponse, RedemptionResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/redemptions", tags=["Redemptions"])


@router.get("", response_model=List[RedemptionResponse], summary="My Redemptions")
async def list_redemptions(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await UserService.redemptions(db, user.id)


@router.post(
    "",
    response_model=RedeemResponse,
    status_code=201,
    summary="Redeem Reward",
    description="Spend points on a reward. Fails without side effects if the balance is too low."
)
async def redeem(
    body: RedeemRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    user_id = user.id
    try:
        result = await LedgerService.redeem(
            db=db,
            user_id=user_id,
            reward_name=body.reward_name,
            cost=body.cost
        )
        return {
            "message": f"Successfully redeemed {body.reward_name}!",
            "redemption": result["redemption"],
            "new_points": result["new_points"],
        }

    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        await db.rollback()
        logger.error(f"Redemption error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
