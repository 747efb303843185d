import logging
from typing import Any, Optional

from sqlalchemy import Integer, delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.schema import CreateTable, DropTable

from catalog.database import RelationalDatabase
from catalog.exceptions import ProductNotFoundError
from catalog.models.product import products_table
from catalog.schemas.product import ProductPayload
from catalog.utils.validation import clean_name, clean_price, clean_stock

logger = logging.getLogger(__name__)

# Fixed catalog written by seed_sample_data(), in insertion order.
SAMPLE_PRODUCTS = [
    {"name": "Laptop Dell XPS 13", "price": 1299.99, "stock": 15},
    {"name": "iPhone 15 Pro", "price": 999.99, "stock": 25},
    {"name": "Samsung Galaxy S24", "price": 899.99, "stock": 20},
    {"name": "PlayStation 5", "price": 499.99, "stock": 10},
    {"name": "Sony WH-1000XM5 Headphones", "price": 399.99, "stock": 30},
    {"name": 'LG OLED 55" Smart TV', "price": 1299.99, "stock": 8},
    {"name": "iPad Pro Tablet", "price": 1099.99, "stock": 12},
    {"name": "Canon EOS R5 Camera", "price": 3899.99, "stock": 5},
    {"name": "Apple Watch Series 9", "price": 399.99, "stock": 18},
    {"name": "Nintendo Switch OLED", "price": 349.99, "stock": 22},
]


def _parse_id(product_id: Any) -> int:
    """Identifiers that are not integers can never match a row."""
    try:
        return int(str(product_id))
    except ValueError:
        raise ProductNotFoundError(product_id)


class ProductService:
    """
    Product operations against the relational store.

    Each method issues one statement through RelationalDatabase, except
    the table reset and seed helpers, which issue several statements with
    no transaction around them.
    """

    def __init__(self, db: RelationalDatabase):
        self.db = db

    async def list_products(self) -> list[dict]:
        """All products, newest first."""
        result = await self.db.execute_query(
            select(products_table).order_by(
                products_table.c.created_at.desc(),
                products_table.c.id.desc(),
            )
        )
        return result.rows

    async def create(self, payload: ProductPayload) -> int:
        """
        Insert a product and return its new identifier.

        Raises:
            ProductValidationError: If name, price or stock is invalid
        """
        values = {
            "name": clean_name(payload.name),
            "price": clean_price(payload.price),
            "stock": clean_stock(payload.stock),
        }
        result = await self.db.execute_query(
            insert(products_table).values(created_at=func.now(), **values)
        )
        logger.info(f"Product created, ID: {result.lastrowid}")
        return result.lastrowid

    async def get(self, product_id: Any) -> dict:
        """
        Fetch one product.

        Raises:
            ProductNotFoundError: If no row has this identifier
        """
        result = await self.db.execute_query(
            select(products_table).where(products_table.c.id == _parse_id(product_id))
        )
        if not result.rows:
            raise ProductNotFoundError(product_id)
        return result.rows[0]

    async def update(self, product_id: Any, payload: ProductPayload) -> None:
        """
        Rewrite name, price and stock, and stamp updated_at.

        Raises:
            ProductValidationError: If the new values are invalid
            ProductNotFoundError: If no row has this identifier
        """
        values = {
            "name": clean_name(payload.name),
            "price": clean_price(payload.price),
            "stock": clean_stock(payload.stock),
        }
        result = await self.db.execute_query(
            update(products_table)
            .where(products_table.c.id == _parse_id(product_id))
            .values(updated_at=func.now(), **values)
        )
        if result.rowcount == 0:
            raise ProductNotFoundError(product_id)

    async def delete(self, product_id: Any) -> None:
        """
        Raises:
            ProductNotFoundError: If no row has this identifier
        """
        result = await self.db.execute_query(
            delete(products_table).where(products_table.c.id == _parse_id(product_id))
        )
        if result.rowcount == 0:
            raise ProductNotFoundError(product_id)

    async def count(self) -> int:
        result = await self.db.execute_query(
            select(func.count().label("count")).select_from(products_table)
        )
        return result.rows[0]["count"]

    async def reset_table(self) -> None:
        """Drop the products table if present, then create it empty."""
        try:
            await self.db.execute_query(DropTable(products_table, if_exists=True))
            logger.info("Table products dropped (if it existed)")
        except SQLAlchemyError as e:
            logger.info(f"Could not drop table products (probably missing): {e}")

        await self.db.execute_query(CreateTable(products_table))
        logger.info("Table products created")

    async def seed_sample_data(self) -> int:
        """
        Recreate the table and insert the fixed sample catalog.

        Statements are committed one by one; a failure part-way leaves the
        table missing or empty.

        Returns:
            Number of rows in the table afterwards
        """
        await self.reset_table()
        await self.db.execute_query(insert(products_table), SAMPLE_PRODUCTS)
        count = await self.count()
        logger.info(f"Sample data created: {count} products")
        return count

    async def describe(self) -> Optional[dict]:
        """
        Inspect the products table.

        Returns:
            None if the table is missing, otherwise a dict with the column
            structure, the id column and whether ids are auto-assigned
        """
        columns = await self.db.describe_table(products_table.name)
        if columns is None:
            return None

        structure = [self._describe_column(column) for column in columns]
        id_column = next((c for c in structure if c["field"] == "id"), None)
        return {
            "structure": structure,
            "idColumn": id_column,
            "hasAutoIncrement": bool(id_column and id_column["extra"] == "auto_increment"),
        }

    def _describe_column(self, column: dict) -> dict:
        # SQLite assigns ids automatically to an INTEGER PRIMARY KEY column
        auto_increment = column.get("autoincrement") is True or (
            self.db.dialect_name == "sqlite"
            and column["primary_key"]
            and isinstance(column["type"], Integer)
        )
        default = column.get("default")
        return {
            "field": column["name"],
            "type": column["type"].compile(dialect=self.db.engine.dialect),
            "nullable": bool(column.get("nullable", True)),
            "key": "PRI" if column["primary_key"] else "",
            "default": None if default is None else str(default),
            "extra": "auto_increment" if auto_increment else "",
        }
