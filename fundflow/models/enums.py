from enum import Enum


class UserRole(str, Enum):
    """Account roles; fixed when the row is created"""
    USER = "User"
    ADMIN = "Admin"


class UserStatus(str, Enum):
    """Account lifecycle: Pending until an administrator approves it"""
    PENDING = "Pending"
    APPROVED = "Approved"


class TransactionDirection(str, Enum):
    """Direction of a ledger row as seen by the viewer"""
    OUTGOING = "Outgoing"
    INCOMING = "Incoming"


def enum_values(enum_cls):
    return [member.value for member in enum_cls]
