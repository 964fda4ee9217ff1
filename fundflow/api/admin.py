from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fundflow.database import get_db
from fundflow.dependencies import require_admin
from fundflow.models.user import User
from fundflow.schemas.admin import ApproveUserRequest, ApproveUserResponse, PendingUserResponse
from fundflow.schemas.auth import MessageResponse
from fundflow.services import admin_service
from fundflow.utils.security import Identity

router = APIRouter(prefix="/admin", tags=["admin"])


def to_pending_user(user: User) -> PendingUserResponse:
    return PendingUserResponse(
        userId=user.id,
        name=user.name,
        email=user.email,
        mobile=user.mobile,
        status=user.status.value,
        role=user.role.value,
        balance=float(user.balance),
        createdAt=user.created_at,
    )


@router.get("/pending-users", response_model=List[PendingUserResponse])
def get_pending_users(
    admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Registrations waiting for a decision"""
    return [to_pending_user(u) for u in admin_service.list_pending(db)]


@router.post("/approve-user/{user_id}", response_model=ApproveUserResponse)
def approve_user(
    user_id: int,
    request: ApproveUserRequest,
    admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Approves a pending user and sets the opening balance"""
    user = admin_service.approve(db, user_id, request.balance)
    return ApproveUserResponse(
        message=f"User {user.name} approved with balance {user.balance}.",
        user=to_pending_user(user),
    )


@router.post("/reject-user/{user_id}", response_model=MessageResponse)
def reject_user(
    user_id: int,
    admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Deletes a pending registration"""
    admin_service.reject(db, user_id)
    return MessageResponse(message=f"User {user_id} has been rejected and deleted.")
