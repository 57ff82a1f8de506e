import logging
from datetime import datetime, timezone
from typing import List

from settlegraph.core.auth import CurrentUser
from settlegraph.db.session import get_database
from settlegraph.models.settlement import PersonalSettlement
from settlegraph.models.transaction import Transaction, TransactionHistory
from settlegraph.repositories.settlement_repo import SettlementRepository
from settlegraph.repositories.transaction_repo import TransactionRepository
from settlegraph.schemas.transaction import TransactionCreate
from settlegraph.utils.validation import validate_transaction

logger = logging.getLogger(__name__)


class TransactionPermissionError(Exception):
    """Raised when a non-admin deletes a transaction they did not record."""
    pass


class TransactionService:
    @staticmethod
    async def create(transaction_in: TransactionCreate, user: CurrentUser) -> Transaction:
        """
        Store a transfer together with its CREATED history entry and an
        open settlement entry (payee owes payer) linked by transaction id.
        """
        validate_transaction(transaction_in)
        db = await get_database()

        transaction = Transaction(
            payer_username=transaction_in.payer_username,
            payee_username=transaction_in.payee_username,
            amount=transaction_in.amount,
            description=transaction_in.description,
            timestamp=transaction_in.timestamp or datetime.now(timezone.utc),
            created_by=user.username.strip().lower(),
        )
        repo = TransactionRepository(db)
        await repo.create(transaction)
        await repo.record_history(transaction, "CREATED", transaction.created_by)
        await SettlementRepository(db).create(PersonalSettlement(
            from_user=transaction.payee_username,
            to_user=transaction.payer_username,
            amount=transaction.amount,
            transaction_id=str(transaction.id),
        ))
        logger.info(
            "Recorded transaction %s: %s paid %s %.2f",
            transaction.id, transaction.payer_username,
            transaction.payee_username, transaction.amount
        )
        return transaction

    @staticmethod
    async def list_for_viewer(user: CurrentUser) -> List[Transaction]:
        """Admins see the global ledger, everyone else only their own transfers."""
        db = await get_database()
        repo = TransactionRepository(db)
        if user.is_admin:
            return await repo.list_all()
        return await repo.list_for_user(user.username)

    @staticmethod
    async def list_all() -> List[Transaction]:
        db = await get_database()
        return await TransactionRepository(db).list_all()

    @staticmethod
    async def delete(transaction_id: str, user: CurrentUser) -> bool:
        """
        Delete a transaction and prune settlement entries derived from it.

        Returns False when the transaction does not exist.
        """
        db = await get_database()
        repo = TransactionRepository(db)

        transaction = await repo.get(transaction_id)
        if transaction is None:
            return False

        creator = (transaction.created_by or "").strip().lower()
        if not user.is_admin and creator != user.username.strip().lower():
            raise TransactionPermissionError(
                f"{user.username} may not delete transaction {transaction_id}"
            )

        deleted = await repo.delete(transaction, performed_by=user.username)
        if deleted:
            pruned = await SettlementRepository(db).delete_for_transaction(str(transaction.id))
            logger.info(
                "Deleted transaction %s (pruned %d settlement entries)",
                transaction_id, pruned
            )
        return deleted

    @staticmethod
    async def history() -> List[TransactionHistory]:
        db = await get_database()
        return await TransactionRepository(db).list_history()
