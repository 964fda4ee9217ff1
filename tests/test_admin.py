"""Approval workflow"""
from decimal import Decimal

import pytest

from fundflow.exceptions import AlreadyApproved, DuplicateIdentity, InvalidAmount, InvalidCredentials, InvalidState, NotFound
from fundflow.models import User, UserRole, UserStatus
from fundflow.services import admin_service, auth_service


def test_list_pending_returns_only_pending(db, make_user):
    make_user(name="Approved")
    pending_a = make_user(name="Carol", status=UserStatus.PENDING)
    pending_b = make_user(name="Dave", status=UserStatus.PENDING)

    pending = admin_service.list_pending(db)

    assert [u.id for u in pending] == [pending_a.id, pending_b.id]


def test_approve_sets_status_and_balance(db, make_user):
    user = make_user(status=UserStatus.PENDING)

    approved = admin_service.approve(db, user.id, Decimal("5000"))

    assert approved.status == UserStatus.APPROVED
    assert approved.is_approved
    assert approved.balance == Decimal("5000.00")
    token, _ = auth_service.login(db, user.email, "secret123")
    assert token


def test_approve_unknown_user(db):
    with pytest.raises(NotFound):
        admin_service.approve(db, 999, Decimal("10"))


def test_approve_twice(db, make_user):
    user = make_user(status=UserStatus.PENDING)
    admin_service.approve(db, user.id, Decimal("10"))

    with pytest.raises(AlreadyApproved):
        admin_service.approve(db, user.id, Decimal("20"))

    db.refresh(user)
    assert user.balance == Decimal("10.00")


def test_approve_negative_balance(db, make_user):
    user = make_user(status=UserStatus.PENDING)

    with pytest.raises(InvalidAmount):
        admin_service.approve(db, user.id, Decimal("-1"))

    db.refresh(user)
    assert user.status == UserStatus.PENDING


def test_reject_deletes_pending_user(db, make_user):
    user = make_user(status=UserStatus.PENDING)
    user_id, email = user.id, user.email

    admin_service.reject(db, user_id)

    assert db.get(User, user_id) is None
    with pytest.raises(InvalidCredentials):
        auth_service.login(db, email, "secret123")


def test_reject_unknown_user(db):
    with pytest.raises(NotFound):
        admin_service.reject(db, 999)


def test_reject_approved_user(db, make_user):
    user = make_user()

    with pytest.raises(InvalidState):
        admin_service.reject(db, user.id)

    assert db.get(User, user.id) is not None


def test_create_admin(db):
    admin = admin_service.create_admin(db, "Root", "root@fundflow.io", "rootpass", "5550000")

    assert admin.role == UserRole.ADMIN
    assert admin.status == UserStatus.APPROVED

    with pytest.raises(DuplicateIdentity):
        admin_service.create_admin(db, "Root", "root@fundflow.io", "rootpass", "5550000")


def test_ensure_admin_is_idempotent(db):
    first = admin_service.ensure_admin(db, "Root", "root@fundflow.io", "rootpass", "5550000")
    second = admin_service.ensure_admin(db, "Root", "root@fundflow.io", "rootpass", "5550000")

    assert first.id == second.id
    assert db.query(User).filter(User.role == UserRole.ADMIN).count() == 1


def test_approve_balance_beyond_sixteen_digits(db, make_user):
    user = make_user(status=UserStatus.PENDING)

    with pytest.raises(InvalidAmount):
        admin_service.approve(db, user.id, Decimal("1e16"))

    db.refresh(user)
    assert user.status == UserStatus.PENDING
