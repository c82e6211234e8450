from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from aymur.utils.logger import Logger
from .settings import settings

logger = Logger("database")


class DatabaseManager:
    """
    Owns the process-wide motor client.

    `connect()` is idempotent and pings the server before reporting
    success; the app lifespan calls it on startup and `close()` on
    shutdown, and `get_database` connects lazily when neither ran.
    """

    def __init__(self, uri: Optional[str] = None, database_name: Optional[str] = None):
        self.uri = uri
        self.database_name = database_name
        self._client: Optional[AsyncIOMotorClient] = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    @property
    def database(self) -> AsyncIOMotorDatabase:
        if self._client is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._client[self.database_name or settings.database_name]

    async def connect(self) -> None:
        if self._client is not None:
            return
        uri = self.uri or settings.mongodb_uri
        if not uri:
            raise RuntimeError("MONGODB_URI is not configured")

        client = AsyncIOMotorClient(uri)
        try:
            await client.admin.command("ping")
        except Exception as exc:
            client.close()
            logger.error(f"MongoDB ping failed: {exc}")
            raise
        self._client = client
        logger.info(f"Connected to MongoDB [{self.database_name or settings.database_name}]")

    def close(self) -> None:
        if self._client is None:
            return
        self._client.close()
        self._client = None
        logger.info("MongoDB connection closed")


db_manager = DatabaseManager()


async def get_database() -> AsyncIOMotorDatabase:
    """FastAPI dependency: the shared database handle."""
    await db_manager.connect()
    return db_manager.database
