from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from fundflow.database import Base


class Beneficiary(Base):
    """Directed link from an owner to a user they may send money to"""
    __tablename__ = "beneficiaries"
    __table_args__ = (
        UniqueConstraint("owner_user_id", "beneficiary_user_id", name="uq_beneficiaries_owner_beneficiary"),
        CheckConstraint("owner_user_id <> beneficiary_user_id", name="ck_beneficiaries_not_self"),
    )

    id = Column(Integer, primary_key=True, index=True)
    owner_user_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    beneficiary_user_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    date_added = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    # Many-to-one only: users never cascade into their links
    beneficiary_user = relationship("User", foreign_keys=[beneficiary_user_id])
