"""
Admin & Educator API endpoints.

Verification decisions (old verified -> new verified):
| Transition     | Point effect                                          |
|----------------|-------------------------------------------------------|
| false -> true  | re-price to `points` if given (net delta), else none  |
| true -> false  | debit the record's points                             |
| unchanged      | none; notes and review metadata only                  |

Capabilities:
- review (admin, educator): queues, verification, roles, analytics, audit
- admin: user removal
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging

from ecoplay.database import get_db
from ecoplay.dependencies import requires
from ecoplay.models.database_models import User
from ecoplay.services.admin_service import AdminService
from ecoplay.services.capabilities import Capability
from ecoplay.services.errors import LedgerError
from ecoplay.schemas.schemas import (
    VerifyRequest,
    SubmissionReviewResponse,
    WateringReviewResponse,
    PendingSubmission,
    PendingWatering,
    RoleUpdateRequest,
    UserProfile,
    UserDetailResponse,
    AnalyticsResponse,
    AuditResponse,
    MessageResponse
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin", tags=["Admin"])


# ============================================
# USERS
# ============================================
@router.get("/users", response_model=List[UserProfile], summary="List Users")
async def list_users(
    actor: User = Depends(requires(Capability.review)),
    db: AsyncSession = Depends(get_db)
):
    return await AdminService.list_users(db, actor)


@router.get("/users/{user_id}", response_model=UserDetailResponse, summary="User Details")
async def get_user(
    user_id: int,
    actor: User = Depends(requires(Capability.review)),
    db: AsyncSession = Depends(get_db)
):
    try:
        return await AdminService.get_user_detail(db, actor, user_id)
    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/users/{user_id}/role", response_model=UserProfile, summary="Update User Role")
async def update_role(
    user_id: int,
    body: RoleUpdateRequest,
    actor: User = Depends(requires(Capability.review)),
    db: AsyncSession = Depends(get_db)
):
    try:
        return await AdminService.update_role(db, actor, user_id, body.role.value)
    except LedgerError as e:
        await db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/users/{user_id}", response_model=MessageResponse, summary="Remove User (Admin)")
async def delete_user(
    user_id: int,
    actor: User = Depends(requires(Capability.admin)),
    db: AsyncSession = Depends(get_db)
):
    try:
        await AdminService.delete_user(db, actor, user_id)
        return {"message": "User removed"}
    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"User removal error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


# ============================================
# ACTIVITY SUBMISSIONS
# ============================================
@router.get("/submissions/pending", response_model=List[PendingSubmission], summary="Pending Submissions")
async def pending_submissions(
    actor: User = Depends(requires(Capability.review)),
    db: AsyncSession = Depends(get_db)
):
    rows = await AdminService.pending_submissions(db, actor)
    return [{"submission": row["record"], "user": row["user"]} for row in rows]


@router.put(
    "/submissions/{submission_id}/verify",
    response_model=SubmissionReviewResponse,
    summary="Verify/Reject Submission"
)
async def verify_submission(
    submission_id: int,
    body: VerifyRequest,
    actor: User = Depends(requires(Capability.review)),
    db: AsyncSession = Depends(get_db)
):
    try:
        result = await AdminService.reconcile_submission(
            db, actor, submission_id,
            verified=body.verified,
            adjusted_points=body.points,
            admin_notes=body.admin_notes
        )
        return {
            "message": "Submission updated",
            "submission": result["record"],
            "points_delta": result["points_delta"],
            "user_points": result["new_points"],
        }

    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        await db.rollback()
        logger.error(f"Submission review error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


# ============================================
# WATERING RECORDS
# ============================================
@router.get("/watering/pending", response_model=List[PendingWatering], summary="Pending Watering Records")
async def pending_watering(
    actor: User = Depends(requires(Capability.review)),
    db: AsyncSession = Depends(get_db)
):
    return await AdminService.pending_watering(db, actor)


@router.put(
    "/watering/{record_id}/verify",
    response_model=WateringReviewResponse,
    summary="Verify/Reject Watering Record"
)
async def verify_watering(
    record_id: int,
    body: VerifyRequest,
    actor: User = Depends(requires(Capability.review)),
    db: AsyncSession = Depends(get_db)
):
    try:
        result = await AdminService.reconcile_watering(
            db, actor, record_id,
            verified=body.verified,
            adjusted_points=body.points,
            admin_notes=body.admin_notes
        )
        return {
            "message": "Watering record updated",
            "record": result["record"],
            "points_delta": result["points_delta"],
            "user_points": result["new_points"],
        }

    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        await db.rollback()
        logger.error(f"Watering review error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


# ============================================
# ANALYTICS & AUDIT
# ============================================
@router.get("/analytics", response_model=AnalyticsResponse, summary="Platform Analytics")
async def analytics(
    actor: User = Depends(requires(Capability.review)),
    db: AsyncSession = Depends(get_db)
):
    return await AdminService.analytics(db, actor)


@router.post(
    "/audit",
    response_model=AuditResponse,
    summary="Ledger & Streak Audit",
    description="Compare stored points and streaks with the ledger and watering history. Read-only; anomalies are logged."
)
async def audit(
    limit: int = Query(500, ge=1, le=10000),
    actor: User = Depends(requires(Capability.review)),
    db: AsyncSession = Depends(get_db)
):
    return await AdminService.run_audit(db, actor, limit=limit)
