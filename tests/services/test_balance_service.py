import pytest
from unittest.mock import AsyncMock, patch

from settlegraph.core.auth import CurrentUser
from settlegraph.models.transaction import Transaction
from settlegraph.services.balance_service import (
    BalanceService,
    aggregate_balances,
    coerce_amount,
    transfer_parties,
)


def test_payer_credited_payee_debited(make_transaction):
    balances = aggregate_balances([
        make_transaction("alice", "bob", 30),
        make_transaction("bob", "carol", 10),
    ])
    assert balances == {"alice": 30.0, "bob": -20.0, "carol": -10.0}
    assert abs(sum(balances.values())) < 1e-9


def test_blank_and_zero_records_skipped():
    transactions = [
        Transaction(payer_username="  ", payee_username="bob", amount=10),
        Transaction(payer_username="alice", payee_username="", amount=10),
        Transaction(payer_username="alice", payee_username="bob", amount=0),
    ]
    assert aggregate_balances(transactions) == {}


def test_names_are_trimmed():
    parties = transfer_parties(Transaction(payer_username=" alice ", payee_username="bob ", amount=3))
    assert parties == ("alice", "bob", 3.0)


@pytest.mark.parametrize("value, expected", [
    (None, 0.0),
    (True, 0.0),
    ("12.5", 12.5),
    ("abc", 0.0),
    (7, 7.0),
])
def test_coerce_amount(value, expected):
    assert coerce_amount(value) == expected


def test_compute_sorted_by_participant(make_transaction):
    entries = BalanceService.compute([
        make_transaction("zoe", "adam", 5),
        make_transaction("mia", "zoe", 2),
    ])
    assert [e.participant for e in entries] == ["adam", "mia", "zoe"]
    assert [e.net_amount for e in entries] == [-5.0, 2.0, 3.0]


@pytest.mark.asyncio
async def test_for_viewer_uses_visible_transactions(make_transaction):
    user = CurrentUser(username="alice")
    with patch(
        "settlegraph.services.transaction_service.TransactionService.list_for_viewer",
        new_callable=AsyncMock
    ) as mock_list:
        mock_list.return_value = [make_transaction("alice", "bob", 8)]

        entries = await BalanceService.for_viewer(user)

        mock_list.assert_awaited_once_with(user)
        assert [(e.participant, e.net_amount) for e in entries] == [("alice", 8.0), ("bob", -8.0)]
