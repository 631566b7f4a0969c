from datetime import date, timedelta
from typing import Optional, List

from sqlalchemy import select, func, and_, case
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.core.exceptions import ResourceNotFoundError
from fintrack.models.enums import TransactionType
from fintrack.models.transaction import Transaction
from fintrack.schemas.transaction import TransactionCreate, TransactionUpdate, TransactionSummary


class TransactionRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id_and_user(
        self, transaction_id: str, user_id: str
    ) -> Optional[Transaction]:
        """Get transaction by ID and user ID."""
        result = await self.db.execute(
            select(Transaction).where(
                Transaction.id == transaction_id,
                Transaction.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_or_raise(self, transaction_id: str, user_id: str) -> Transaction:
        """Get a user's transaction, raising ResourceNotFoundError if missing."""
        transaction = await self.get_by_id_and_user(transaction_id, user_id)
        if transaction is None:
            raise ResourceNotFoundError(
                f"Transaction {transaction_id} not found",
                details={"transaction_id": transaction_id},
            )
        return transaction

    async def get_by_user(
        self, user_id: str, limit: Optional[int] = None
    ) -> List[Transaction]:
        """Get a user's transactions, newest first."""
        query = (
            select(Transaction)
            .where(Transaction.user_id == user_id)
            .order_by(Transaction.date.desc(), Transaction.created_at.desc())
        )
        if limit:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_in_window(
        self,
        user_id: str,
        window_days: int,
        today: Optional[date] = None,
    ) -> List[Transaction]:
        """Get a user's transactions dated within the trailing window ending today.

        Bounds are inclusive: today - window_days <= date <= today.
        """
        today = today or date.today()
        start_date = today - timedelta(days=window_days)

        result = await self.db.execute(
            select(Transaction)
            .where(
                and_(
                    Transaction.user_id == user_id,
                    Transaction.date >= start_date,
                    Transaction.date <= today,
                )
            )
            .order_by(Transaction.date.desc(), Transaction.created_at.desc())
        )
        return list(result.scalars().all())

    async def create(self, user_id: str, data: TransactionCreate) -> Transaction:
        """Create a new transaction."""
        transaction = Transaction(
            user_id=user_id,
            type=data.type.value,
            amount=data.amount,
            category=data.category,
            description=data.description,
            date=data.date,
        )
        self.db.add(transaction)
        await self.db.flush()
        await self.db.refresh(transaction)
        return transaction

    async def update(
        self, transaction_id: str, user_id: str, data: TransactionUpdate
    ) -> Optional[Transaction]:
        """Update a user's transaction. Returns None if it doesn't exist."""
        transaction = await self.get_by_id_and_user(transaction_id, user_id)
        if not transaction:
            return None

        if data.type is not None:
            transaction.type = data.type.value
        if data.amount is not None:
            transaction.amount = data.amount
        if data.category is not None:
            transaction.category = data.category
        if data.description is not None:
            transaction.description = data.description
        if data.date is not None:
            transaction.date = data.date

        await self.db.flush()
        await self.db.refresh(transaction)
        return transaction

    async def delete(self, transaction_id: str, user_id: str) -> bool:
        """Delete a user's transaction."""
        transaction = await self.get_by_id_and_user(transaction_id, user_id)
        if not transaction:
            return False

        await self.db.delete(transaction)
        await self.db.flush()
        return True

    async def get_summary(self, user_id: str) -> TransactionSummary:
        """All-time income/expense totals for a user."""
        result = await self.db.execute(
            select(
                func.coalesce(
                    func.sum(
                        case(
                            (Transaction.type == TransactionType.INCOME.value, Transaction.amount),
                            else_=0.0,
                        )
                    ),
                    0.0,
                ),
                func.coalesce(
                    func.sum(
                        case(
                            (Transaction.type == TransactionType.EXPENSE.value, Transaction.amount),
                            else_=0.0,
                        )
                    ),
                    0.0,
                ),
            ).where(Transaction.user_id == user_id)
        )
        total_income, total_expense = result.one()
        total_income = float(total_income or 0.0)
        total_expense = float(total_expense or 0.0)

        return TransactionSummary(
            total_income=total_income,
            total_expense=total_expense,
            balance=total_income - total_expense,
        )
