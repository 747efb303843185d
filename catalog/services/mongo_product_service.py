import logging
from datetime import datetime, timezone

from bson import ObjectId
from pymongo.errors import PyMongoError

from catalog.exceptions import DocumentStoreUnavailableError
from catalog.mongo import DocumentStore
from catalog.schemas.product import (
    MongoProductData,
    MongoProductResponse,
    ProductPayload,
)
from catalog.utils.validation import clean_name, clean_price, clean_stock, to_number

logger = logging.getLogger(__name__)

COLLECTION = "products"


class MongoProductService:
    """
    Product operations against the document store.

    Every store failure, whether connecting or running the operation, is
    raised as DocumentStoreUnavailableError so callers can tell "store
    absent" apart from a bad request.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    async def _collection(self):
        return await self.store.get_collection_safe(COLLECTION)

    async def list_products(self) -> list[MongoProductResponse]:
        """All documents in the collection, with defaults for missing fields."""
        try:
            collection = await self._collection()
            documents = await collection.find({}).to_list(length=None)
        except PyMongoError as e:
            raise DocumentStoreUnavailableError(f"MongoDB is not available: {e}") from e

        logger.info(f"{len(documents)} products found in MongoDB")
        return [self._to_response(document) for document in documents]

    async def create(self, payload: ProductPayload) -> tuple[str, MongoProductData]:
        """
        Insert a product document.

        Returns:
            Tuple of (inserted id as a string, stored product fields)

        Raises:
            ProductValidationError: If name or price is missing or invalid
            DocumentStoreUnavailableError: If the store cannot be reached
        """
        product = MongoProductData(
            name=clean_name(payload.name, max_length=None),
            price=clean_price(payload.price),
            stock=clean_stock(payload.stock),
            created_at=datetime.now(timezone.utc),
        )
        try:
            collection = await self._collection()
            result = await collection.insert_one(product.model_dump())
        except PyMongoError as e:
            raise DocumentStoreUnavailableError(f"MongoDB is not available: {e}") from e

        product_id = str(result.inserted_id)
        logger.info(f"Product created in MongoDB: {product_id}")
        return product_id, product

    async def count_products(self) -> int:
        try:
            collection = await self._collection()
            return await collection.count_documents({})
        except PyMongoError as e:
            raise DocumentStoreUnavailableError(f"MongoDB is not available: {e}") from e

    async def sample_products(self, limit: int = 5) -> list[MongoProductResponse]:
        try:
            collection = await self._collection()
            documents = await collection.find({}).limit(limit).to_list(length=None)
        except PyMongoError as e:
            raise DocumentStoreUnavailableError(f"MongoDB is not available: {e}") from e
        return [self._to_response(document) for document in documents]

    @staticmethod
    def _to_response(document: dict) -> MongoProductResponse:
        # Stored documents may hold fields of any type
        object_id = document.get("_id")
        created_at = document.get("created_at")
        if not isinstance(created_at, datetime):
            if isinstance(object_id, ObjectId):
                created_at = object_id.generation_time
            else:
                created_at = datetime.now(timezone.utc)

        name = document.get("name")
        return MongoProductResponse(
            id=str(object_id) if object_id is not None else "N/A",
            name=str(name) if name else "Unnamed",
            price=to_number(document.get("price")) or 0,
            stock=int(to_number(document.get("stock")) or 0),
            created_at=created_at,
        )
