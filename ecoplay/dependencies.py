"""
FastAPI dependencies: caller identity and capability checks.

Identity comes from the X-User-Id header set by the upstream auth layer.
"""
from typing import Optional
from fastapi import Depends, HTTPException, Header
from sqlalchemy.ext.asyncio import AsyncSession

from ecoplay.database import get_db
from ecoplay.models.database_models import User
from ecoplay.services.capabilities import Capability, require_capability
from ecoplay.services.errors import LedgerError, NotAuthenticated, NotAuthorized


def _http_error(error: LedgerError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.message)


async def get_current_user(
    x_user_id: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Resolve the authenticated caller."""
    if not x_user_id:
        raise _http_error(NotAuthenticated("Not authenticated"))
    try:
        user_id = int(x_user_id)
    except ValueError:
        raise _http_error(NotAuthenticated("Invalid user identity"))

    user = await db.get(User, user_id)
    if user is None:
        raise _http_error(NotAuthenticated("Unknown user"))
    return user


def requires(capability: Capability):
    """Dependency factory: the caller must hold `capability`."""

    async def _check(user: User = Depends(get_current_user)) -> User:
        try:
            require_capability(user, capability)
        except NotAuthorized as e:
            raise _http_error(e)
        return user

    return _check
