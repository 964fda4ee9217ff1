from fundflow.models.enums import UserRole, UserStatus, TransactionDirection
from fundflow.models.user import User
from fundflow.models.beneficiary import Beneficiary
from fundflow.models.transaction import Transaction

__all__ = [
    "User",
    "Beneficiary",
    "Transaction",
    "UserRole",
    "UserStatus",
    "TransactionDirection",
]
