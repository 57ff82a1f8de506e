"""
Graph model builder: turns transactions or netted payments into nodes and links.

Links always point from the participant who owes to the participant who
is owed. In raw mode that is payee -> payer for every transaction, summed
per ordered pair; in optimized mode the netted payments are used as is.
"""

from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel

from settlegraph.models.transaction import Transaction
from settlegraph.schemas.settlement import SettlementEdge
from settlegraph.services.balance_service import transfer_parties
from settlegraph.services.settlement_service import SettlementService


class ViewMode(str, Enum):
    RAW = "raw"
    OPTIMIZED = "optimized"


class ViewContext(BaseModel):
    """Which edge set a viewer is looking at, plus the netted edges shown last."""
    view_mode: ViewMode = ViewMode.RAW
    cached_optimized_edges: Optional[List[SettlementEdge]] = None

    def reset(self) -> "ViewContext":
        return ViewContext()


class GraphLink(BaseModel):
    source: str   # owes
    target: str   # is owed
    amount: float


class GraphModel(BaseModel):
    nodes: List[str] = []
    links: List[GraphLink] = []

    @property
    def is_empty(self) -> bool:
        return not self.links


def aggregate_raw_links(transactions: Iterable[Transaction]) -> List[GraphLink]:
    """One link per distinct (payee, payer) pair, amounts summed, first-seen order."""
    totals: Dict[Tuple[str, str], float] = {}
    for transaction in transactions:
        parties = transfer_parties(transaction)
        if parties is None:
            continue
        payer, payee, amount = parties
        key = (payee, payer)
        totals[key] = totals.get(key, 0.0) + amount
    return [
        GraphLink(source=source, target=target, amount=amount)
        for (source, target), amount in totals.items()
    ]


def links_from_edges(edges: Iterable[SettlementEdge]) -> List[GraphLink]:
    return [
        GraphLink(source=edge.from_user, target=edge.to_user, amount=edge.amount)
        for edge in edges
    ]


def build_graph(transactions: Iterable[Transaction], context: ViewContext) -> GraphModel:
    """Nodes are exactly the participants that appear in some active link."""
    transactions = list(transactions)
    if context.view_mode == ViewMode.OPTIMIZED:
        edges = context.cached_optimized_edges
        if edges is None:
            edges = SettlementService.optimize(transactions).edges
        links = links_from_edges(edges)
    else:
        links = aggregate_raw_links(transactions)

    nodes: List[str] = []
    seen = set()
    for link in links:
        for node_id in (link.source, link.target):
            if node_id not in seen:
                seen.add(node_id)
                nodes.append(node_id)
    return GraphModel(nodes=nodes, links=links)
