from sqlalchemy import Column, Integer, String, Numeric, DateTime
from sqlalchemy.sql import func

from catalog.database import Base

NAME_MAX_LENGTH = 100


class Product(Base):
    """
    Product row in the relational store.

    Attributes:
        id: Auto-incremented identifier, immutable once assigned
        name: Product name (non-empty, at most 100 characters)
        price: Price with two fractional digits
        stock: Available quantity, defaults to 0
        created_at: Set when the row is inserted
        updated_at: Set on every update, NULL until the first one
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(NAME_MAX_LENGTH), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, default=0, server_default="0")
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, nullable=True)

    __table_args__ = {"mysql_engine": "InnoDB", "mysql_charset": "utf8mb4"}

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', stock={self.stock})>"


products_table = Product.__table__
