"""Administrator workflow: review pending registrations"""
import logging
from decimal import Decimal
from typing import List

from sqlalchemy.orm import Session

from fundflow.exceptions import AlreadyApproved, InvalidAmount, InvalidState, NotFound
from fundflow.models.enums import UserRole, UserStatus
from fundflow.models.user import User
from fundflow.schemas.admin import MAX_BALANCE
from fundflow.services.auth_service import create_user, get_user_by_email

logger = logging.getLogger(__name__)


def list_pending(db: Session) -> List[User]:
    return (
        db.query(User)
        .filter(User.status == UserStatus.PENDING)
        .order_by(User.created_at, User.id)
        .all()
    )


def approve(db: Session, user_id: int, initial_balance: Decimal) -> User:
    """
    Approves a pending user and grants the opening balance.

    Raises:
        NotFound: no such user
        AlreadyApproved: the user is not pending
        InvalidAmount: negative or too large opening balance
    """
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found.")

    if user.status != UserStatus.PENDING:
        raise AlreadyApproved()

    initial_balance = Decimal(initial_balance)
    if initial_balance < 0:
        raise InvalidAmount("Initial balance cannot be negative.")
    if initial_balance >= MAX_BALANCE:
        raise InvalidAmount("Initial balance is too large.")

    user.status = UserStatus.APPROVED
    user.balance = initial_balance
    db.commit()
    db.refresh(user)

    logger.info(
        "user %s approved with balance %s", user.id, user.balance,
        extra={"user_id": user.id, "action": "approve"},
    )
    return user


def reject(db: Session, user_id: int) -> None:
    """Deletes a pending registration for good"""
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found.")

    if user.status != UserStatus.PENDING:
        raise InvalidState()

    db.delete(user)
    db.commit()
    logger.info("user %s rejected and deleted", user_id, extra={"user_id": user_id, "action": "reject"})


def create_admin(db: Session, name: str, email: str, password: str, mobile: str) -> User:
    """Creates an approved administrator account"""
    user = create_user(
        db, name, email, password, mobile,
        role=UserRole.ADMIN,
        status=UserStatus.APPROVED,
    )
    logger.info("administrator %s created", user.id, extra={"user_id": user.id, "action": "create_admin"})
    return user


def ensure_admin(db: Session, name: str, email: str, password: str, mobile: str) -> User:
    """Startup seeding: returns the existing account or creates the administrator"""
    existing = get_user_by_email(db, email)
    if existing:
        return existing
    return create_admin(db, name, email, password, mobile)
