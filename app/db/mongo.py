import logging
from decimal import Decimal

from bson.codec_options import TypeCodec, TypeRegistry
from bson.decimal128 import Decimal128
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from app.db.store import DocumentSession, DocumentStore, TransactionConflict, new_id

logger = logging.getLogger(__name__)


class DecimalCodec(TypeCodec):
    """Store money as Decimal128 so amounts survive the round trip exactly."""
    python_type = Decimal
    bson_type = Decimal128

    def transform_python(self, value: Decimal) -> Decimal128:
        return Decimal128(value)

    def transform_bson(self, value: Decimal128) -> Decimal:
        return value.to_decimal()


type_registry = TypeRegistry([DecimalCodec()])


class MongoSession(DocumentSession):
    """Document operations on a Motor database, optionally inside a client session."""

    def __init__(self, db: AsyncIOMotorDatabase, session=None):
        self.db = db
        self.session = session

    async def get(self, collection, doc_id):
        return await self.db[collection].find_one({"_id": doc_id}, session=self.session)

    async def find(self, collection, filters=None, sort=None, limit=None):
        cursor = self.db[collection].find(filters or {}, session=self.session)
        if sort:
            cursor = cursor.sort(sort)
        if limit:
            cursor = cursor.limit(limit)
        return await cursor.to_list(None)

    async def count(self, collection, filters=None):
        return await self.db[collection].count_documents(filters or {}, session=self.session)

    async def insert(self, collection, doc):
        doc = dict(doc)
        doc.setdefault("_id", new_id())
        await self.db[collection].insert_one(doc, session=self.session)
        return doc

    async def update(self, collection, doc_id, fields):
        result = await self.db[collection].update_one(
            {"_id": doc_id},
            {"$set": fields},
            session=self.session
        )
        return result.matched_count > 0

    async def delete(self, collection, doc_id):
        result = await self.db[collection].delete_one({"_id": doc_id}, session=self.session)
        return result.deleted_count > 0

    async def delete_many(self, collection, filters):
        result = await self.db[collection].delete_many(filters, session=self.session)
        return result.deleted_count


class MongoDocumentStore(MongoSession, DocumentStore):
    """
    MongoDB-backed store.

    Multi-document transactions need a replica set (or sharded cluster);
    a standalone mongod rejects ``start_transaction``.
    """

    def __init__(self, client: AsyncIOMotorClient, db_name: str, max_retries: int = 5):
        super().__init__(client[db_name])
        self.client = client
        self.max_retries = max_retries

    @classmethod
    def from_uri(cls, uri: str, db_name: str, max_retries: int = 5) -> "MongoDocumentStore":
        client = AsyncIOMotorClient(uri, tz_aware=True, type_registry=type_registry)
        return cls(client, db_name, max_retries=max_retries)

    async def _run_once(self, fn):
        async with await self.client.start_session() as session:
            try:
                async with session.start_transaction():
                    return await fn(MongoSession(self.db, session))
            except PyMongoError as exc:
                if exc.has_error_label("TransientTransactionError"):
                    raise TransactionConflict(str(exc)) from exc
                raise

    async def create_indexes(self) -> None:
        """Create database indexes."""
        await self.db["users"].create_index("email", unique=True)
        await self.db["members"].create_index([("hotel_id", ASCENDING), ("user_id", ASCENDING)], unique=True)
        await self.db["members"].create_index("user_id")
        await self.db["partners"].create_index("hotel_id")
        await self.db["clients"].create_index([("hotel_id", ASCENDING), ("partner_id", ASCENDING)])
        await self.db["clients"].create_index([("hotel_id", ASCENDING), ("debt", ASCENDING)])
        await self.db["transactions"].create_index([("hotel_id", ASCENDING), ("created_at", DESCENDING)])
        await self.db["transactions"].create_index([("hotel_id", ASCENDING), ("client_id", ASCENDING)])
        await self.db["period_history"].create_index(
            [("hotel_id", ASCENDING), ("partner_id", ASCENDING), ("start_date", DESCENDING)]
        )

    async def close(self) -> None:
        self.client.close()
        logger.info("Disconnected from MongoDB")
