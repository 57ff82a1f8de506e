import logging
from typing import Any, Dict, Iterable, List

from settlegraph.core.auth import CurrentUser
from settlegraph.models.transaction import Transaction
from settlegraph.schemas.balance import BalanceEntry
from settlegraph.services.transaction_service import TransactionService

logger = logging.getLogger(__name__)


def coerce_amount(value: Any) -> float:
    """Numeric amount of a record, 0.0 when missing or not a number."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def transfer_parties(transaction: Transaction) -> tuple[str, str, float] | None:
    """
    (payer, payee, amount) of a usable transaction, or None.

    Records with a blank payer, blank payee or zero/non-numeric amount carry
    no obligation and are filtered out rather than rejected.
    """
    payer = (transaction.payer_username or "").strip()
    payee = (transaction.payee_username or "").strip()
    amount = coerce_amount(transaction.amount)
    if not payer or not payee or not amount:
        return None
    return payer, payee, amount


def aggregate_balances(transactions: Iterable[Transaction]) -> Dict[str, float]:
    """
    Fold transactions into one signed net balance per participant.

    The payer is credited the amount and the payee debited it, so the
    balances of every participant always sum to (almost) zero.
    """
    balances: Dict[str, float] = {}
    for transaction in transactions:
        parties = transfer_parties(transaction)
        if parties is None:
            continue
        payer, payee, amount = parties
        balances[payer] = balances.get(payer, 0.0) + amount
        balances[payee] = balances.get(payee, 0.0) - amount

    logger.debug("Aggregated balances for %d participants", len(balances))
    return balances


class BalanceService:
    @staticmethod
    def compute(transactions: Iterable[Transaction]) -> List[BalanceEntry]:
        """Balance entries sorted by participant name."""
        balances = aggregate_balances(transactions)
        return [
            BalanceEntry(participant=participant, net_amount=balances[participant])
            for participant in sorted(balances)
        ]

    @staticmethod
    async def for_viewer(user: CurrentUser) -> List[BalanceEntry]:
        transactions = await TransactionService.list_for_viewer(user)
        return BalanceService.compute(transactions)
