import logging
from typing import Dict, Iterable, List, Mapping, Optional

from settlegraph.core.auth import CurrentUser
from settlegraph.core.constants import EPSILON
from settlegraph.db.session import get_database
from settlegraph.models.settlement import PersonalSettlement
from settlegraph.models.transaction import Transaction
from settlegraph.repositories.settlement_repo import AMOUNT_TOLERANCE, SettlementRepository
from settlegraph.schemas.settlement import (
    NotificationItem,
    NotificationsResponse,
    OptimizationResult,
    SettlementEdge,
)
from settlegraph.services.balance_service import aggregate_balances
from settlegraph.services.transaction_service import TransactionService
from settlegraph.utils.formatting import format_amount

logger = logging.getLogger(__name__)


def optimize_settlements(balances: Mapping[str, float]) -> OptimizationResult:
    """
    Net a balance mapping into a small set of direct payments.

    Greedy balance matching: creditors sorted by largest credit first,
    debtors by largest debt first (ties broken by name), then two cursors
    walk both lists transferring min(credit, |debt|) at each step. This is
    a heuristic and does not guarantee the minimum number of payments.
    """
    creditors = [[user, bal] for user, bal in balances.items() if bal > EPSILON]
    debtors = [[user, bal] for user, bal in balances.items() if bal < -EPSILON]

    creditors.sort(key=lambda c: (-c[1], c[0]))
    debtors.sort(key=lambda d: (d[1], d[0]))  # most negative first

    edges: List[SettlementEdge] = []
    instructions: List[str] = []

    i = 0
    j = 0

    while i < len(creditors) and j < len(debtors):
        creditor = creditors[i]
        debtor = debtors[j]

        owe = min(creditor[1], abs(debtor[1]))
        if owe > EPSILON:
            edges.append(SettlementEdge(from_user=debtor[0], to_user=creditor[0], amount=owe))
            instructions.append(f"{creditor[0]} receives {format_amount(owe)} from {debtor[0]}")

            creditor[1] -= owe
            debtor[1] += owe

        if creditor[1] <= EPSILON:
            i += 1
        if abs(debtor[1]) <= EPSILON:
            j += 1

    logger.debug("Netted %d balances into %d payments", len(balances), len(edges))
    return OptimizationResult(edges=edges, instructions=instructions)


def apply_settlements(balances: Mapping[str, float], edges: Iterable[SettlementEdge]) -> Dict[str, float]:
    """Balances left over once every edge has been paid."""
    remaining = dict(balances)
    for edge in edges:
        remaining[edge.from_user] = remaining.get(edge.from_user, 0.0) + edge.amount
        remaining[edge.to_user] = remaining.get(edge.to_user, 0.0) - edge.amount
    return remaining


def personal_instructions(edges: Iterable[SettlementEdge], username: str) -> List[str]:
    """Instructions phrased for one participant."""
    instructions = []
    for edge in edges:
        amount = format_amount(edge.amount)
        if edge.from_user == username:
            instructions.append(f"Pay {amount} to {edge.to_user}")
        elif edge.to_user == username:
            instructions.append(f"{edge.from_user} should pay you {amount}")
    return instructions


def _match_status(
    edge: SettlementEdge,
    entries: List[PersonalSettlement]
) -> Optional[PersonalSettlement]:
    for entry in entries:
        if (
            entry.from_user == edge.from_user
            and entry.to_user == edge.to_user
            and abs(entry.amount - edge.amount) <= AMOUNT_TOLERANCE
        ):
            return entry
    return None


class SettlementService:
    @staticmethod
    def optimize(transactions: Iterable[Transaction]) -> OptimizationResult:
        return optimize_settlements(aggregate_balances(transactions))

    @staticmethod
    async def optimize_for_viewer(user: CurrentUser) -> OptimizationResult:
        transactions = await TransactionService.list_for_viewer(user)
        return SettlementService.optimize(transactions)

    @staticmethod
    async def edges_for_user(username: str) -> List[SettlementEdge]:
        """Globally netted payments that involve the user."""
        transactions = await TransactionService.list_all()
        result = SettlementService.optimize(transactions)
        return [
            edge for edge in result.edges
            if username in (edge.from_user, edge.to_user)
        ]

    @staticmethod
    async def instructions_for_user(username: str) -> List[str]:
        return personal_instructions(await SettlementService.edges_for_user(username), username)

    @staticmethod
    async def notifications(username: str) -> NotificationsResponse:
        """Optimized payments involving the user, flagged against the status store."""
        edges = await SettlementService.edges_for_user(username)

        db = await get_database()
        entries = await SettlementRepository(db).list_for_user(username)

        response = NotificationsResponse()
        for edge in edges:
            entry = _match_status(edge, entries)
            item = NotificationItem(
                from_user=edge.from_user,
                to_user=edge.to_user,
                amount=edge.amount,
                settled=bool(entry and entry.settled),
                settlement_id=str(entry.id) if entry else None,
            )
            if edge.from_user == username:
                response.to_pay.append(item)
            else:
                response.to_receive.append(item)
        return response

    @staticmethod
    async def mark_paid(settlement_id: str, username: str) -> Optional[PersonalSettlement]:
        db = await get_database()
        entry = await SettlementRepository(db).mark_settled(settlement_id, username)
        if entry is None:
            logger.warning("Settlement %s not found or not owned by %s", settlement_id, username)
        else:
            logger.info("Settlement %s marked paid by %s", settlement_id, username)
        return entry

    @staticmethod
    async def mark_paid_by_info(
        from_user: str,
        to_user: str,
        amount: float,
        username: str
    ) -> PersonalSettlement:
        db = await get_database()
        entry = await SettlementRepository(db).mark_settled_by_info(from_user, to_user, amount, username)
        logger.info("Payment %s -> %s %.2f marked paid by %s", from_user, to_user, amount, username)
        return entry
