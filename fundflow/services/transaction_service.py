"""Transfer engine and transaction history"""
import logging
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Tuple

from sqlalchemy import desc, func, or_, update
from sqlalchemy.orm import Session, joinedload

from fundflow.exceptions import (
    BeneficiaryNotFound, InsufficientFunds, InvalidAmount, RecipientUnavailable,
    SenderUnavailable, TransferFailed,
)
from fundflow.models.beneficiary import Beneficiary
from fundflow.models.enums import TransactionDirection
from fundflow.models.transaction import Transaction
from fundflow.models.user import User
from fundflow.schemas.transaction import TransactionView
from fundflow.services.auth_service import ensure_owner
from fundflow.utils.security import Identity

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
TRANSFER_TYPE = "Transfer"
DEFAULT_DESCRIPTION = "Transfer"


def normalize_amount(amount) -> Decimal:
    """
    Converts an amount to a two-place Decimal.

    Raises:
        InvalidAmount: not a number, not positive, or finer than one cent
    """
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise InvalidAmount("Amount must be a number.") from e

    if not value.is_finite() or value <= 0:
        raise InvalidAmount()
    if value != value.quantize(CENT):
        raise InvalidAmount("Amount cannot have more than two decimal places.")
    return value.quantize(CENT)


def _lock_accounts(db: Session, *user_ids: int) -> None:
    """
    Takes row locks on the given users with SELECT ... FOR UPDATE.

    Rows are locked in ascending id order so two opposite transfers cannot
    deadlock. Backends without row locks (SQLite) skip this; the guarded
    debit in transfer() still refuses to overdraw.
    """
    db.query(User.id).filter(User.id.in_(sorted(set(user_ids)))).order_by(User.id).with_for_update().all()


def transfer(
    db: Session,
    identity: Identity,
    sender_id: int,
    beneficiary_id: int,
    amount,
    description: Optional[str] = None,
) -> Transaction:
    """
    Moves amount from the sender to the user behind one of the sender's
    beneficiary links and records a single ledger row.

    Preconditions are checked in this order:
        InvalidAmount, Forbidden, SenderUnavailable, BeneficiaryNotFound,
        RecipientUnavailable, InsufficientFunds

    Balances are changed with SQL-side arithmetic and the debit only matches
    while the committed balance still covers the amount, so a concurrent
    transfer from the same sender can never be overwritten by a stale read.

    The debit, the credit and the ledger insert commit together or not at
    all. Anything that goes wrong while applying them is rolled back, logged
    and reported as TransferFailed.
    """
    amount = normalize_amount(amount)
    ensure_owner(identity, sender_id)

    sender = db.get(User, sender_id)
    if not sender or not sender.is_approved:
        raise SenderUnavailable()

    link = db.query(Beneficiary).filter(
        Beneficiary.id == beneficiary_id,
        Beneficiary.owner_user_id == sender_id,
    ).first()
    if not link:
        raise BeneficiaryNotFound()

    receiver = link.beneficiary_user
    if not receiver or not receiver.is_approved:
        raise RecipientUnavailable()

    receiver_id = receiver.id
    _lock_accounts(db, sender_id, receiver_id)

    try:
        # round(): SQLite does this arithmetic in floating point
        debited = db.execute(
            update(User)
            .where(User.id == sender_id, User.balance >= amount)
            .values(balance=func.round(User.balance - amount, 2))
            .execution_options(synchronize_session=False)
        )
        if debited.rowcount == 1:
            db.execute(
                update(User)
                .where(User.id == receiver_id)
                .values(balance=func.round(User.balance + amount, 2))
                .execution_options(synchronize_session=False)
            )

            transaction = Transaction(
                sender_id=sender_id,
                receiver_id=receiver_id,
                amount=amount,
                type=TRANSFER_TYPE,
                description=description,
            )
            db.add(transaction)
            db.commit()
    except Exception as e:
        db.rollback()
        logger.exception(
            "transfer of %s from user %s to user %s failed and was rolled back",
            amount, sender_id, receiver_id,
            extra={"user_id": sender_id, "action": "transfer"},
        )
        raise TransferFailed() from e

    if debited.rowcount != 1:
        db.rollback()
        logger.info(
            "transfer of %s from user %s rejected: insufficient funds", amount, sender_id,
            extra={"user_id": sender_id, "action": "transfer"},
        )
        raise InsufficientFunds()

    db.refresh(transaction)
    logger.info(
        "transaction %s: user %s sent %s to user %s", transaction.id, sender_id, amount, receiver_id,
        extra={"user_id": sender_id, "action": "transfer"},
    )
    return transaction


def describe(transaction: Transaction, viewer_id: int) -> Tuple[TransactionDirection, str]:
    """
    Direction and display text of a ledger row for one of its two parties.

    Stored text that already names the counterpart ("To ..." / "From ...")
    is shown as is.
    """
    text = transaction.description or DEFAULT_DESCRIPTION

    if transaction.sender_id == viewer_id:
        if transaction.description and transaction.description.startswith("To "):
            return TransactionDirection.OUTGOING, transaction.description
        receiver = transaction.receiver
        return TransactionDirection.OUTGOING, f"To {receiver.name} ({receiver.email}): {text}"

    if transaction.description and transaction.description.startswith("From "):
        return TransactionDirection.INCOMING, transaction.description
    return TransactionDirection.INCOMING, f"From {transaction.sender.name}: {text}"


def history(db: Session, identity: Identity) -> List[TransactionView]:
    """All transfers the caller took part in, newest first"""
    user_id = identity.user_id
    transactions = (
        db.query(Transaction)
        .options(joinedload(Transaction.sender), joinedload(Transaction.receiver))
        .filter(or_(Transaction.sender_id == user_id, Transaction.receiver_id == user_id))
        .order_by(desc(Transaction.created_at), desc(Transaction.id))
        .all()
    )

    views = []
    for t in transactions:
        direction, text = describe(t, user_id)
        counterpart = t.receiver if direction == TransactionDirection.OUTGOING else t.sender
        views.append(TransactionView(
            transactionId=t.id,
            date=t.created_at,
            amount=float(abs(t.amount)),
            type=direction.value,
            description=text,
            senderName=t.sender.name,
            receiverName=t.receiver.name,
            counterpartName=counterpart.name,
        ))
    return views
