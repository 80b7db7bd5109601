"""
User profile API endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException, Query
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
    UserCreateRequest,
    UserUpdateRequest,
    UserProfile,
    MyProfile,
    DashboardResponse,
    LedgerEntryResponse
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=UserProfile, status_code=201, summary="Register Profile")
async def register(
    body: UserCreateRequest,
    db: AsyncSession = Depends(get_db)
):
    try:
        return await UserService.create_user(db, body.model_dump())
    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/me", response_model=MyProfile, summary="My Profile", description="Profile with earned badges.")
async def get_profile(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    badges = await UserService.badges(db, user)
    return MyProfile.model_validate(user).model_copy(update={"badges": badges})


@router.put("/me", response_model=MyProfile, summary="Update My Profile")
async def update_profile(
    body: UserUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    try:
        user = await UserService.update_profile(db, user, body.model_dump())
        badges = await UserService.badges(db, user)
        return MyProfile.model_validate(user).model_copy(update={"badges": badges})
    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/me/dashboard",
    response_model=DashboardResponse,
    summary="Dashboard",
    description="Points, stored streak and the streak recomputed from the watering history."
)
async def dashboard(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await UserService.dashboard(db, user)


@router.get("/me/ledger", response_model=List[LedgerEntryResponse], summary="My Points Ledger")
async def ledger(
    limit: int = Query(100, ge=1, le=1000),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await LedgerService.get_ledger(db, user.id, limit=limit)
