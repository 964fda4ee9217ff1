"""Transfer and history schemas"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class TransferRequest(BaseModel):
    """
    Fund transfer request.

    The amount is checked by the transfer engine itself so that zero or
    negative amounts are reported as InvalidAmount rather than a schema error.
    """
    senderUserId: int
    beneficiaryId: int
    amount: Decimal
    description: Optional[str] = Field(None, max_length=255)

    @field_validator('description', mode='before')
    @classmethod
    def blank_description_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class TransferResponse(BaseModel):
    message: str = "Transfer successful."
    transactionId: int


class TransactionView(BaseModel):
    """One ledger row seen from the viewer's side"""
    transactionId: int
    date: datetime
    amount: float
    type: str
    description: str
    senderName: str
    receiverName: str
    counterpartName: str
