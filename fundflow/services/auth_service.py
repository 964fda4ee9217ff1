"""Registration, login and token verification"""
import logging
from decimal import Decimal
from typing import Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fundflow.exceptions import DuplicateIdentity, Forbidden, InvalidCredentials, NotApproved, NotFound
from fundflow.models.enums import UserRole, UserStatus
from fundflow.models.user import User
from fundflow.utils.security import (
    Identity, create_access_token, decode_access_token, get_password_hash,
    identity_from_claims, verify_password,
)

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(User.email == normalize_email(email)).first()


def create_user(
    db: Session,
    name: str,
    email: str,
    password: str,
    mobile: str,
    role: UserRole = UserRole.USER,
    status: UserStatus = UserStatus.PENDING,
    balance: Decimal = Decimal("0.00"),
) -> User:
    """Inserts a user row; the unique email index is the final word on duplicates"""
    if get_user_by_email(db, email):
        raise DuplicateIdentity()

    user = User(
        name=name.strip(),
        email=normalize_email(email),
        password=get_password_hash(password),
        mobile=mobile.strip(),
        role=role,
        status=status,
        balance=balance,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateIdentity() from e
    db.refresh(user)
    return user


def register(db: Session, name: str, email: str, password: str, mobile: str) -> User:
    """Registers a customer: Pending, role User, zero balance"""
    user = create_user(db, name, email, password, mobile)
    logger.info("user %s registered, awaiting approval", user.id, extra={"user_id": user.id, "action": "register"})
    return user


def login(db: Session, email: str, password: str) -> Tuple[str, User]:
    """
    Checks credentials and issues an access token.

    Returns:
        (token, user)

    Raises:
        InvalidCredentials: unknown email or wrong password
        NotApproved: the account is still pending
    """
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password):
        logger.info("failed login attempt", extra={"action": "login"})
        raise InvalidCredentials()

    if not user.is_approved:
        raise NotApproved()

    token = create_access_token(data={
        "sub": str(user.id),
        "name": user.name,
        "email": user.email,
        "role": user.role.value,
    })
    return token, user


def verify_token(token: str) -> Identity:
    """Turns a bearer token into an Identity or raises InvalidToken"""
    return identity_from_claims(decode_access_token(token))


def ensure_owner(identity: Identity, owner_id: int) -> None:
    """The caller may only act on resources it owns"""
    if identity.user_id != owner_id:
        logger.warning(
            "identity %s tried to act for user %s", identity.user_id, owner_id,
            extra={"user_id": identity.user_id, "action": "forbidden"},
        )
        raise Forbidden()


def get_user(db: Session, identity: Identity, user_id: int) -> User:
    """Own profile and balance"""
    ensure_owner(identity, user_id)
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found.")
    return user
