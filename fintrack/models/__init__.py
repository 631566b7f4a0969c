from fintrack.models.user import User
from fintrack.models.transaction import Transaction
from fintrack.models.enums import TransactionType

__all__ = [
    "User",
    "Transaction",
    "TransactionType",
]
