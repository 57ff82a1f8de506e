"""Tests for the settlement status and transaction stores."""
import pytest
from datetime import datetime, timezone

from bson import ObjectId

from settlegraph.models.settlement import PersonalSettlement
from settlegraph.repositories.settlement_repo import AMOUNT_TOLERANCE, SettlementRepository
from settlegraph.repositories.transaction_repo import TransactionRepository


def _entry_doc(**overrides):
    doc = {
        "_id": ObjectId(),
        "from_user": "bob",
        "to_user": "alice",
        "amount": 10.0,
        "settled": False,
        "created_at": datetime(2024, 3, 1, tzinfo=timezone.utc),
    }
    doc.update(overrides)
    return doc


@pytest.mark.asyncio
class TestSettlementRepository:
    """SettlementRepository against a mocked collection."""

    async def test_get_invalid_id(self, mock_db):
        repo = SettlementRepository(mock_db)

        assert await repo.get("not-an-id") is None
        mock_db.personal_settlements.find_one.assert_not_called()

    async def test_mark_settled_by_stranger(self, mock_db):
        doc = _entry_doc()
        mock_db.personal_settlements.find_one.return_value = doc
        repo = SettlementRepository(mock_db)

        assert await repo.mark_settled(str(doc["_id"]), "mallory") is None
        mock_db.personal_settlements.update_one.assert_not_called()

    async def test_mark_settled_already_paid(self, mock_db):
        doc = _entry_doc(settled=True, settled_by="alice")
        mock_db.personal_settlements.find_one.return_value = doc
        repo = SettlementRepository(mock_db)

        entry = await repo.mark_settled(str(doc["_id"]), "bob")

        assert entry.settled_by == "alice"
        mock_db.personal_settlements.update_one.assert_not_called()

    async def test_find_matching_uses_amount_window(self, mock_db):
        repo = SettlementRepository(mock_db)

        await repo.find_matching("bob", "alice", 10.0, settled=False)

        query = mock_db.personal_settlements.find_one.call_args[0][0]
        assert query["amount"] == {"$gte": 10.0 - AMOUNT_TOLERANCE, "$lte": 10.0 + AMOUNT_TOLERANCE}
        assert query["settled"] is False

    async def test_mark_settled_by_info_updates_open_entry(self, mock_db):
        doc = _entry_doc()
        mock_db.personal_settlements.find_one.return_value = doc
        repo = SettlementRepository(mock_db)

        entry = await repo.mark_settled_by_info("bob", "alice", 10.0, "alice")

        assert entry.id == doc["_id"]
        assert entry.settled is True
        mock_db.personal_settlements.insert_one.assert_not_called()

    async def test_list_unsettled(self, mock_db, make_cursor):
        mock_db.personal_settlements.find.return_value = make_cursor([
            _entry_doc(), _entry_doc(settled=True)
        ])
        repo = SettlementRepository(mock_db)

        entries = await repo.list_unsettled_for_user("bob")

        assert len(entries) == 1
        assert isinstance(entries[0], PersonalSettlement)


@pytest.mark.asyncio
class TestTransactionRepository:
    """TransactionRepository against a mocked collection."""

    async def test_list_for_blank_user(self, mock_db):
        repo = TransactionRepository(mock_db)

        assert await repo.list_for_user("   ") == []
        mock_db.transactions.find.assert_not_called()

    async def test_username_is_escaped(self, mock_db, make_cursor):
        mock_db.transactions.find.return_value = make_cursor([])
        repo = TransactionRepository(mock_db)

        await repo.list_for_user("a.b")

        clause = mock_db.transactions.find.call_args[0][0]["$or"][0]
        assert clause["payer_username"]["$regex"] == r"^a\.b$"

    async def test_list_history(self, mock_db, make_cursor):
        mock_db.transaction_history.find.return_value = make_cursor([{
            "_id": ObjectId(),
            "transaction_id": "abc",
            "action": "DELETED",
            "payload": {"amount": 3},
            "performed_by": "root",
            "recorded_at": datetime(2024, 3, 2, tzinfo=timezone.utc),
            "created_at": datetime(2024, 3, 2, tzinfo=timezone.utc),
        }])
        repo = TransactionRepository(mock_db)

        history = await repo.list_history()

        assert history[0].action == "DELETED"
        mock_db.transaction_history.find.return_value.sort.assert_called_once_with("recorded_at", -1)
