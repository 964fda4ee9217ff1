from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Enum as SQLEnum, Integer, Numeric, String
from fundflow.database import Base
from fundflow.models.enums import UserRole, UserStatus, enum_values


class User(Base):
    """Identity and account of a bank customer or administrator"""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_users_balance_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)  # passlib hash, never the plain text
    mobile = Column(String(20), nullable=False)
    role = Column(
        SQLEnum(UserRole, native_enum=False, length=20, values_callable=enum_values),
        nullable=False,
        default=UserRole.USER,
    )
    status = Column(
        SQLEnum(UserStatus, native_enum=False, length=20, values_callable=enum_values),
        nullable=False,
        default=UserStatus.PENDING,
        index=True,
    )
    balance = Column(Numeric(18, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    @property
    def is_approved(self) -> bool:
        return self.status == UserStatus.APPROVED

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
