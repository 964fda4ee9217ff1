import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from fundflow.config import settings
from fundflow.exceptions import InvalidToken
from fundflow.models.enums import UserRole

# Salted, iterated password hashing
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


@dataclass(frozen=True)
class Identity:
    """Caller identity extracted from a verified access token"""
    user_id: int
    role: UserRole
    name: str = ""
    email: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Checks a password against its stored hash"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Stored value is not a hash passlib recognises
        return False


def get_password_hash(password: str) -> str:
    """Hashes a password"""
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Creates a signed JWT that expires after ACCESS_TOKEN_EXPIRE_MINUTES"""
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({
        "iat": now,
        "exp": expire,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "jti": uuid.uuid4().hex,
    })
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decodes and validates a JWT.

    Signature, expiry, issuer and audience are all checked.

    Raises:
        InvalidToken: if any check fails or the token is malformed
    """
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
        )
    except JWTError as e:
        raise InvalidToken() from e


def identity_from_claims(payload: dict) -> Identity:
    """Builds an Identity from decoded claims, rejecting incomplete payloads"""
    try:
        user_id = int(payload["sub"])
        role = UserRole(payload["role"])
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidToken("Token payload is malformed.") from e
    return Identity(
        user_id=user_id,
        role=role,
        name=payload.get("name", ""),
        email=payload.get("email", ""),
    )
