from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from app.core.config import settings
from app.core.logging import get_logger

log = get_logger(__name__)

FRIENDS = "friends"
TRANSACTIONS = "transactions"

class MongoDatabase:
    """MongoDB connection manager."""

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

mongodb = MongoDatabase()

async def connect_to_mongo():
    """Connect to MongoDB."""
    mongodb.client = AsyncIOMotorClient(
        settings.MONGODB_URL,
        maxPoolSize=50,
        serverSelectionTimeoutMS=5000
    )
    mongodb.db = mongodb.client[settings.DATABASE_NAME]

    await create_indexes(mongodb.db)
    log.info("mongo_connected", database=settings.DATABASE_NAME)

async def close_mongo_connection():
    """Disconnect from MongoDB."""
    if mongodb.client is not None:
        mongodb.client.close()
        mongodb.client = None
        mongodb.db = None
    log.info("mongo_disconnected")

async def create_indexes(db: AsyncIOMotorDatabase):
    """Create database indexes."""
    await db[FRIENDS].create_index("created_at")

    # Ledger scans: per friend by day, per friend by type
    await db[TRANSACTIONS].create_index([("friend_id", 1), ("date", -1)])
    await db[TRANSACTIONS].create_index([("friend_id", 1), ("type", 1)])

async def ping() -> bool:
    """Check that the server answers."""
    if mongodb.client is None:
        return False
    await mongodb.client.admin.command("ping")
    return True

def get_db() -> AsyncIOMotorDatabase:
    """Get database instance."""
    return mongodb.db
