from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

# Numeric(18, 2) leaves sixteen digits before the point
MAX_BALANCE = Decimal("1e16")


class PendingUserResponse(BaseModel):
    """User awaiting approval, projected without the password hash"""
    userId: int
    name: str
    email: str
    mobile: str
    status: str
    role: str
    balance: float
    createdAt: Optional[datetime] = None


class ApproveUserRequest(BaseModel):
    """Initial balance granted on approval"""
    balance: Decimal = Field(..., ge=0, lt=MAX_BALANCE, decimal_places=2)


class ApproveUserResponse(BaseModel):
    message: str
    user: PendingUserResponse
