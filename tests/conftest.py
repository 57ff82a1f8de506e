from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from settlegraph.core.auth import create_access_token
from settlegraph.main import app
from settlegraph.models.transaction import Transaction


def _collection() -> MagicMock:
    collection = MagicMock()
    collection.insert_one = AsyncMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.update_one = AsyncMock()
    collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
    collection.delete_many = AsyncMock(return_value=MagicMock(deleted_count=0))
    collection.create_index = AsyncMock()
    return collection


@pytest.fixture
def mock_db():
    """Motor database stand-in with the collections the repositories use."""
    db = MagicMock()
    db.transactions = _collection()
    db.transaction_history = _collection()
    db.personal_settlements = _collection()
    return db


@pytest.fixture
def make_cursor():
    """Build a find() cursor whose sort() chains and to_list() yields `docs`."""
    def _make(docs):
        cursor = MagicMock()
        cursor.sort.return_value = cursor
        cursor.to_list = AsyncMock(return_value=list(docs))
        return cursor
    return _make


@pytest.fixture
def make_transaction():
    def _make(payer, payee, amount, created_by=None, **extra):
        return Transaction(
            id=ObjectId(),
            payer_username=payer,
            payee_username=payee,
            amount=amount,
            timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
            created_by=created_by if created_by is not None else payer,
            **extra
        )
    return _make


@pytest.fixture
def client():
    """Test client without the lifespan, so no Mongo connection is opened."""
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {create_access_token('alice')}"}


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {create_access_token('root', is_admin=True)}"}
