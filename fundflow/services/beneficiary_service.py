"""Beneficiary links between users"""
import logging
from typing import List, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fundflow.exceptions import AlreadyExists, ForbiddenRecipient, NotFound, RecipientNotFound, SelfReference
from fundflow.models.beneficiary import Beneficiary
from fundflow.models.enums import UserStatus
from fundflow.models.user import User
from fundflow.services.auth_service import ensure_owner, normalize_email
from fundflow.utils.security import Identity

logger = logging.getLogger(__name__)


def list_beneficiaries(db: Session, identity: Identity, owner_id: int) -> List[Tuple[Beneficiary, User]]:
    """Links owned by owner_id together with the recipient user"""
    ensure_owner(identity, owner_id)
    return (
        db.query(Beneficiary, User)
        .join(User, Beneficiary.beneficiary_user_id == User.id)
        .filter(Beneficiary.owner_user_id == owner_id)
        .order_by(Beneficiary.date_added, Beneficiary.id)
        .all()
    )


def add_beneficiary(db: Session, identity: Identity, account_identifier: str) -> Tuple[Beneficiary, User]:
    """
    Adds the user registered under account_identifier (an email) as a
    beneficiary of the caller.

    Raises:
        RecipientNotFound: no approved user with that email
        ForbiddenRecipient: the recipient is an administrator
        SelfReference: the recipient is the caller
        AlreadyExists: the link is already there
    """
    owner_id = identity.user_id
    recipient = (
        db.query(User)
        .filter(User.email == normalize_email(account_identifier), User.status == UserStatus.APPROVED)
        .first()
    )
    if not recipient:
        raise RecipientNotFound()

    if recipient.is_admin:
        raise ForbiddenRecipient()

    if recipient.id == owner_id:
        raise SelfReference()

    exists = db.query(Beneficiary).filter(
        Beneficiary.owner_user_id == owner_id,
        Beneficiary.beneficiary_user_id == recipient.id,
    ).first()
    if exists:
        raise AlreadyExists()

    beneficiary = Beneficiary(owner_user_id=owner_id, beneficiary_user_id=recipient.id)
    db.add(beneficiary)
    try:
        db.commit()
    except IntegrityError as e:
        # Lost a race against an identical insert
        db.rollback()
        raise AlreadyExists() from e
    db.refresh(beneficiary)

    logger.info(
        "user %s added beneficiary %s", owner_id, recipient.id,
        extra={"user_id": owner_id, "action": "add_beneficiary"},
    )
    return beneficiary, recipient


def remove_beneficiary(db: Session, identity: Identity, beneficiary_id: int) -> None:
    """Deletes one of the caller's own links"""
    beneficiary = db.query(Beneficiary).filter(
        Beneficiary.id == beneficiary_id,
        Beneficiary.owner_user_id == identity.user_id,
    ).first()
    if not beneficiary:
        raise NotFound("Beneficiary not found or you don't own it.")

    db.delete(beneficiary)
    db.commit()
    logger.info(
        "user %s removed beneficiary link %s", identity.user_id, beneficiary_id,
        extra={"user_id": identity.user_id, "action": "remove_beneficiary"},
    )
