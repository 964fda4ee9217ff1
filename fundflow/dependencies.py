from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from fundflow.exceptions import Forbidden, InvalidToken
from fundflow.services.auth_service import verify_token
from fundflow.utils.security import Identity

bearer_scheme = HTTPBearer(auto_error=False, description="Access token issued by /login")


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    """Identity of the caller from the Authorization: Bearer header"""
    if credentials is None or not credentials.credentials:
        raise InvalidToken("Not authenticated.")
    return verify_token(credentials.credentials)


def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    """Administrator-only routes"""
    if not identity.is_admin:
        raise Forbidden("Administrator access required.")
    return identity
