import logging

from app.core.config import settings
from app.db.mongo import MongoDocumentStore
from app.db.store import DocumentStore, MemoryDocumentStore

logger = logging.getLogger(__name__)


class StoreHolder:
    """Holds the process-wide store opened at startup."""

    store: DocumentStore | None = None


holder = StoreHolder()


async def connect_store() -> DocumentStore:
    """Open the configured backend."""
    if settings.STORE_BACKEND == "memory":
        holder.store = MemoryDocumentStore(max_retries=settings.TRANSACTION_MAX_RETRIES)
        logger.info("Using in-memory document store")
    else:
        store = MongoDocumentStore.from_uri(
            settings.MONGODB_URI,
            settings.MONGODB_DB,
            max_retries=settings.TRANSACTION_MAX_RETRIES
        )
        await store.create_indexes()
        holder.store = store
        logger.info("Connected to MongoDB: %s", settings.MONGODB_DB)
    return holder.store


async def close_store() -> None:
    if holder.store is not None:
        await holder.store.close()
        holder.store = None


def get_store() -> DocumentStore:
    """FastAPI dependency returning the active store."""
    if holder.store is None:
        raise RuntimeError("Document store is not connected")
    return holder.store
