"""Transfer engine"""
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from fundflow.exceptions import (
    BeneficiaryNotFound, Forbidden, InsufficientFunds, InvalidAmount, RecipientUnavailable,
    SenderUnavailable, TransferFailed,
)
from fundflow.models import Beneficiary, Transaction, User, UserStatus
from fundflow.services import beneficiary_service, transaction_service


@pytest.fixture
def alice(make_user):
    return make_user(name="Alice", balance="5000")


@pytest.fixture
def bob(make_user):
    return make_user(name="Bob", balance="2000")


@pytest.fixture
def link(db, alice, bob, identity_of):
    link, _ = beneficiary_service.add_beneficiary(db, identity_of(alice), bob.email)
    return link


def balances(session_factory, *user_ids):
    """Balances as committed, read through a fresh session"""
    session = session_factory()
    try:
        return [session.get(User, user_id).balance for user_id in user_ids]
    finally:
        session.close()


def test_transfer_moves_money_and_records_one_row(db, session_factory, alice, bob, link, identity_of):
    transaction = transaction_service.transfer(
        db, identity_of(alice), alice.id, link.id, Decimal("1500"), "Rent share",
    )

    assert balances(session_factory, alice.id, bob.id) == [Decimal("3500.00"), Decimal("3500.00")]
    assert db.query(Transaction).count() == 1
    assert transaction.sender_id == alice.id
    assert transaction.receiver_id == bob.id
    assert transaction.amount == Decimal("1500.00")
    assert transaction.description == "Rent share"
    assert transaction.type == "Transfer"
    assert transaction.created_at is not None


def test_sum_of_balances_is_preserved(db, session_factory, alice, bob, link, identity_of):
    before = sum(balances(session_factory, alice.id, bob.id))

    for amount in ("0.01", "99.99", "1234.56"):
        transaction_service.transfer(db, identity_of(alice), alice.id, link.id, Decimal(amount))

    assert sum(balances(session_factory, alice.id, bob.id)) == before
    assert db.query(Transaction).count() == 3


def test_whole_balance_can_be_sent(db, session_factory, alice, bob, link, identity_of):
    transaction_service.transfer(db, identity_of(alice), alice.id, link.id, Decimal("5000"))

    assert balances(session_factory, alice.id, bob.id) == [Decimal("0.00"), Decimal("7000.00")]


@pytest.mark.parametrize("amount", ["0", "-1", "-0.01", "0.001", "NaN", "abc"])
def test_invalid_amount(db, session_factory, alice, bob, link, identity_of, amount):
    with pytest.raises(InvalidAmount):
        transaction_service.transfer(db, identity_of(alice), alice.id, link.id, amount)

    assert balances(session_factory, alice.id, bob.id) == [Decimal("5000.00"), Decimal("2000.00")]


def test_amount_checked_before_identity(db, alice, bob, link, identity_of):
    with pytest.raises(InvalidAmount):
        transaction_service.transfer(db, identity_of(bob), alice.id, link.id, Decimal("0"))


def test_sender_must_be_caller(db, session_factory, alice, bob, link, identity_of):
    with pytest.raises(Forbidden):
        transaction_service.transfer(db, identity_of(bob), alice.id, link.id, Decimal("10"))

    assert balances(session_factory, alice.id, bob.id) == [Decimal("5000.00"), Decimal("2000.00")]


def test_pending_sender(db, make_user, bob, identity_of):
    carol = make_user(name="Carol", status=UserStatus.PENDING, balance="100")

    with pytest.raises(SenderUnavailable):
        transaction_service.transfer(db, identity_of(carol), carol.id, 1, Decimal("10"))


def test_missing_sender(db, identity_of, alice):
    identity = identity_of(alice)
    db.delete(alice)
    db.commit()

    with pytest.raises(SenderUnavailable):
        transaction_service.transfer(db, identity, identity.user_id, 1, Decimal("10"))


def test_unknown_beneficiary(db, alice, identity_of):
    with pytest.raises(BeneficiaryNotFound):
        transaction_service.transfer(db, identity_of(alice), alice.id, 999, Decimal("10"))


def test_beneficiary_of_someone_else(db, alice, bob, make_user, identity_of):
    carol = make_user(name="Carol", balance="100")
    bobs_link, _ = beneficiary_service.add_beneficiary(db, identity_of(bob), carol.email)

    with pytest.raises(BeneficiaryNotFound):
        transaction_service.transfer(db, identity_of(alice), alice.id, bobs_link.id, Decimal("10"))


def test_recipient_not_approved(db, alice, make_user, identity_of):
    carol = make_user(name="Carol", status=UserStatus.PENDING)
    # Only reachable through a link written directly; the service refuses pending recipients
    stale = Beneficiary(owner_user_id=alice.id, beneficiary_user_id=carol.id)
    db.add(stale)
    db.commit()

    with pytest.raises(RecipientUnavailable):
        transaction_service.transfer(db, identity_of(alice), alice.id, stale.id, Decimal("10"))


def test_insufficient_funds_leaves_balances_unchanged(db, session_factory, alice, bob, link, identity_of):
    with pytest.raises(InsufficientFunds):
        transaction_service.transfer(db, identity_of(alice), alice.id, link.id, Decimal("5000.01"))

    assert balances(session_factory, alice.id, bob.id) == [Decimal("5000.00"), Decimal("2000.00")]
    assert db.query(Transaction).count() == 0


def test_balance_check_uses_committed_balance(db, session_factory, alice, bob, link, identity_of):
    # Another request drains Alice's account after this session loaded her row
    assert alice.balance == Decimal("5000.00")
    other = session_factory()
    other.get(User, alice.id).balance = Decimal("100")
    other.commit()
    other.close()

    with pytest.raises(InsufficientFunds):
        transaction_service.transfer(db, identity_of(alice), alice.id, link.id, Decimal("500"))

    assert balances(session_factory, alice.id, bob.id) == [Decimal("100.00"), Decimal("2000.00")]


def test_interleaved_transfers_cannot_overdraw(db, session_factory, alice, bob, link, identity_of, monkeypatch):
    identity = identity_of(alice)
    alice_id, bob_id, link_id = alice.id, bob.id, link.id
    real_lock = transaction_service._lock_accounts

    def lock_then_transfer_elsewhere(session, *user_ids):
        real_lock(session, *user_ids)
        if session is db:
            # A second request spends 4000 of Alice's 5000 while this one is past its reads
            other = session_factory()
            try:
                transaction_service.transfer(other, identity, alice_id, link_id, Decimal("4000"))
            finally:
                other.close()

    monkeypatch.setattr(transaction_service, "_lock_accounts", lock_then_transfer_elsewhere)

    with pytest.raises(InsufficientFunds):
        transaction_service.transfer(db, identity, alice_id, link_id, Decimal("4000"))

    assert balances(session_factory, alice_id, bob_id) == [Decimal("1000.00"), Decimal("6000.00")]
    check = session_factory()
    try:
        assert check.query(Transaction).count() == 1
    finally:
        check.close()


def test_balances_stay_in_cents(db, session_factory, alice, bob, link, identity_of):
    for _ in range(3):
        transaction_service.transfer(db, identity_of(alice), alice.id, link.id, Decimal("0.10"))
    transaction_service.transfer(db, identity_of(alice), alice.id, link.id, Decimal("4999.70"))

    assert balances(session_factory, alice.id, bob.id) == [Decimal("0.00"), Decimal("7000.00")]


def test_failure_while_applying_rolls_back(db, session_factory, alice, bob, link, identity_of, monkeypatch):
    real_flush = db.flush

    def flush_then_fail():
        real_flush()
        raise OperationalError("COMMIT", {}, Exception("connection lost"))

    monkeypatch.setattr(db, "commit", flush_then_fail)

    with pytest.raises(TransferFailed):
        transaction_service.transfer(db, identity_of(alice), alice.id, link.id, Decimal("1500"))

    assert balances(session_factory, alice.id, bob.id) == [Decimal("5000.00"), Decimal("2000.00")]
    check = session_factory()
    try:
        assert check.query(Transaction).count() == 0
    finally:
        check.close()


def test_ledger_rows_protect_users_from_deletion(db, alice, bob, link, identity_of):
    transaction_service.transfer(db, identity_of(alice), alice.id, link.id, Decimal("10"))

    db.delete(db.get(User, bob.id))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_normalize_amount_quantizes():
    assert transaction_service.normalize_amount("12.5") == Decimal("12.50")
    assert transaction_service.normalize_amount(3) == Decimal("3.00")
