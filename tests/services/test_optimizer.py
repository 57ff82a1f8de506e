import pytest

from settlegraph.schemas.settlement import SettlementEdge
from settlegraph.services.balance_service import aggregate_balances
from settlegraph.services.settlement_service import (
    SettlementService,
    apply_settlements,
    optimize_settlements,
    personal_instructions,
)

def test_single_transfer(make_transaction):
    result = SettlementService.optimize([make_transaction("A", "B", 100)])

    assert result.edges == [SettlementEdge(from_user="B", to_user="A", amount=100)]
    assert result.instructions == ["A receives ₹100.00 from B"]

def test_intermediary_nets_out(make_transaction):
    transactions = [make_transaction("A", "B", 100), make_transaction("B", "C", 100)]

    balances = aggregate_balances(transactions)
    result = optimize_settlements(balances)

    assert balances == {"A": 100.0, "B": 0.0, "C": -100.0}
    assert result.edges == [SettlementEdge(from_user="C", to_user="A", amount=100)]

def test_tied_creditors_resolved_by_name(make_transaction):
    transactions = [make_transaction("C", "B", 50), make_transaction("A", "B", 50)]

    result = SettlementService.optimize(transactions)

    assert [(e.from_user, e.to_user, e.amount) for e in result.edges] == [
        ("B", "A", 50.0),
        ("B", "C", 50.0),
    ]
    assert result.instructions == [
        "A receives ₹50.00 from B",
        "C receives ₹50.00 from B",
    ]

def test_empty_input():
    result = optimize_settlements({})
    assert result.edges == []
    assert result.instructions == []

def test_largest_creditor_served_first():
    result = optimize_settlements({"x": 30.0, "y": 70.0, "d": -100.0})
    assert [e.to_user for e in result.edges] == ["y", "x"]

def test_balances_cleared_after_applying_edges():
    balances = {"a": 40.0, "b": 25.5, "c": -10.25, "d": -30.0, "e": -25.25}

    result = optimize_settlements(balances)
    remaining = apply_settlements(balances, result.edges)

    assert all(abs(value) < 1e-6 for value in remaining.values())
    assert len(result.edges) <= len(balances) - 1
    assert all(edge.amount > 0 for edge in result.edges)

def test_optimizing_settled_balances_yields_nothing():
    balances = {"a": 12.5, "b": -7.5, "c": -5.0}
    remaining = apply_settlements(balances, optimize_settlements(balances).edges)

    assert optimize_settlements(remaining).edges == []

@pytest.mark.parametrize("noise", [1e-10, -1e-10])
def test_near_zero_balances_ignored(noise):
    result = optimize_settlements({"a": noise, "b": 5.0, "c": -5.0})
    assert result.edges == [SettlementEdge(from_user="c", to_user="b", amount=5.0)]

def test_personal_instructions():
    edges = [
        SettlementEdge(from_user="bob", to_user="alice", amount=20),
        SettlementEdge(from_user="alice", to_user="carol", amount=5.5),
        SettlementEdge(from_user="dave", to_user="carol", amount=1),
    ]

    assert personal_instructions(edges, "alice") == [
        "bob should pay you ₹20.00",
        "Pay ₹5.50 to carol",
    ]


def test_each_participant_moves_exactly_its_balance():
    balances = {"ann": 70.0, "ben": 15.25, "cat": -33.0, "dan": -40.0, "eve": -12.25}

    edges = optimize_settlements(balances).edges

    for user, balance in balances.items():
        paid = sum(e.amount for e in edges if e.from_user == user)
        received = sum(e.amount for e in edges if e.to_user == user)
        assert received - paid == pytest.approx(balance, abs=1e-9)
