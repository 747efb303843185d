"""
Smoke check for MongoDB: connect, count products, print a few of them.

Usage:
    python scripts/check_document_store.py

Exits with status 0 on success and 1 on any failure.
"""

import asyncio
import logging
import sys

from catalog.config import get_settings
from catalog.mongo import DocumentStore
from catalog.services.mongo_product_service import MongoProductService

logger = logging.getLogger(__name__)


async def check_document_store(store: DocumentStore) -> int:
    service = MongoProductService(store)
    try:
        logger.info("Checking MongoDB connection...")
        await store.connect()

        count = await service.count_products()
        logger.info(f"Total products in the database: {count}")

        if count > 0:
            logger.info("Products found:")
            for index, product in enumerate(await service.sample_products(), start=1):
                logger.info(f"{index}. {product.name} - ${product.price}")

        logger.info("Connection check completed successfully")
        return 0
    except Exception as e:
        logger.error(f"Connection check failed: {e}")
        return 1
    finally:
        await store.close()


def main() -> int:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    store = DocumentStore(
        settings.mongo_url,
        settings.mongo_db,
        server_selection_timeout_ms=settings.mongo_timeout_ms,
    )
    return asyncio.run(check_document_store(store))


if __name__ == "__main__":
    sys.exit(main())
