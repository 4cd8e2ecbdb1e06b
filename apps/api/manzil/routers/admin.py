"""Admin endpoints for the review queue and user roles."""
from __future__ import annotations

import enum
from typing import Awaitable, Callable

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..models.user import User
from ..schemas import listings as listings_schema
from ..schemas import users as users_schema
from ..services import listings as listings_service
from ..services import users as users_service
from ..services import workflow
from .deps import require_admin

router = APIRouter()


class ReviewDecision(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"
    APPROVE_NEW = "approve-new"
    REJECT_NEW = "reject-new"
    APPROVE_EDIT = "approve-edit"
    REJECT_EDIT = "reject-edit"
    APPROVE_DELETE = "approve-delete"
    REJECT_DELETE = "reject-delete"


_DECISIONS: dict[ReviewDecision, Callable[[str, User, AsyncSession], Awaitable[listings_schema.ReviewOutcome]]] = {
    ReviewDecision.APPROVE: workflow.approve,
    ReviewDecision.REJECT: workflow.reject,
    ReviewDecision.APPROVE_NEW: workflow.approve_new,
    ReviewDecision.REJECT_NEW: workflow.reject_new,
    ReviewDecision.APPROVE_EDIT: workflow.approve_edit,
    ReviewDecision.REJECT_EDIT: workflow.reject_edit,
    ReviewDecision.APPROVE_DELETE: workflow.approve_delete,
    ReviewDecision.REJECT_DELETE: workflow.reject_delete,
}


@router.get("/approvals", response_model=listings_schema.ApprovalQueue)
async def approval_queue(
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> listings_schema.ApprovalQueue:
    """Return listings awaiting review, split into approvals and delete requests."""

    return await workflow.pending_queue(session)


@router.post("/approvals/{listing_id}/{decision}", response_model=listings_schema.ReviewOutcome)
async def review_listing(
    listing_id: str,
    decision: ReviewDecision,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> listings_schema.ReviewOutcome:
    """Apply a review decision; plain ``approve``/``reject`` follow the listing's state."""

    return await _DECISIONS[decision](listing_id, admin, session)


@router.get("/agent-listings", response_model=list[listings_schema.ListingOut])
async def agent_listings(
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> list[listings_schema.ListingOut]:
    return await listings_service.agent_listings(session)


@router.get("/users", response_model=list[users_schema.UserOut])
async def list_users(
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> list[users_schema.UserOut]:
    return await users_service.list_users(session)


@router.patch("/users/{uid}/role", response_model=users_schema.UserOut)
async def change_role(
    uid: str,
    payload: users_schema.RoleUpdate,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> users_schema.UserOut:
    return await users_service.change_role(admin, uid, payload, session)
