"""Fund transfers and transaction history"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fundflow.database import get_db
from fundflow.dependencies import get_current_identity
from fundflow.schemas.transaction import TransactionView, TransferRequest, TransferResponse
from fundflow.services import transaction_service
from fundflow.utils.security import Identity

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("/history", response_model=List[TransactionView])
def get_history(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """
    Every transfer the caller sent or received, newest first.

    Each row is labelled Outgoing or Incoming from the caller's side and the
    amount is always positive.
    """
    return transaction_service.history(db, identity)


@router.post("/transfer", response_model=TransferResponse)
def transfer_funds(
    request: TransferRequest,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """
    Transfers money to one of the sender's beneficiaries.

    The sender must be the authenticated user. There is no idempotency key:
    resubmitting after a timeout can move the money twice.
    """
    transaction = transaction_service.transfer(
        db,
        identity,
        sender_id=request.senderUserId,
        beneficiary_id=request.beneficiaryId,
        amount=request.amount,
        description=request.description,
    )
    return TransferResponse(transactionId=transaction.id)
