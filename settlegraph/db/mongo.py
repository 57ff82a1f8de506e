import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from settlegraph.core.config import settings

logger = logging.getLogger(__name__)


class MongoDatabase:
    """MongoDB connection manager."""

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

mongodb = MongoDatabase()

async def connect_to_mongo():
    """Connect to MongoDB."""
    mongodb.client = AsyncIOMotorClient(settings.MONGODB_URI)
    mongodb.db = mongodb.client[settings.MONGODB_DB]

    await create_indexes()
    logger.info("Connected to MongoDB: %s", settings.MONGODB_DB)

async def close_mongo_connection():
    """Disconnect from MongoDB."""
    if mongodb.client is not None:
        mongodb.client.close()
    logger.info("Disconnected from MongoDB")

async def create_indexes():
    """Create database indexes."""
    # Transaction store
    await mongodb.db.transactions.create_index("timestamp")
    await mongodb.db.transactions.create_index("payer_username")
    await mongodb.db.transactions.create_index("payee_username")
    await mongodb.db.transactions.create_index("created_by")

    # Settlement status store
    await mongodb.db.personal_settlements.create_index([("from_user", 1), ("settled", 1)])
    await mongodb.db.personal_settlements.create_index([("to_user", 1), ("settled", 1)])
    await mongodb.db.personal_settlements.create_index("transaction_id")

    await mongodb.db.transaction_history.create_index("recorded_at")
