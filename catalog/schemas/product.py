from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Any, Optional


class ProductPayload(BaseModel):
    """
    Request body for creating or updating a product.

    Fields are accepted as-is and checked by the services, so that a bad
    value produces a 400 naming the field instead of a generic 422.
    """
    name: Optional[Any] = Field(None, description="Product name")
    price: Optional[Any] = Field(None, description="Product price")
    stock: Optional[Any] = Field(None, description="Available stock (defaults to 0)")


class ProductResponse(BaseModel):
    """Product row from the relational store."""
    id: int
    name: str
    price: float
    stock: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProductListResponse(BaseModel):
    success: bool = True
    products: list[ProductResponse]
    count: int


class ProductDetailResponse(BaseModel):
    success: bool = True
    product: ProductResponse


class ProductCreatedResponse(BaseModel):
    success: bool = True
    message: str
    productId: int


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class MongoProductData(BaseModel):
    """Fields written to the document store for a new product."""
    name: str
    price: float
    stock: int = 0
    created_at: datetime


class MongoProductResponse(MongoProductData):
    """Document product as returned to clients, with the ObjectId as a string."""
    id: str


class MongoProductListResponse(BaseModel):
    success: bool = True
    products: list[MongoProductResponse]
    count: int
    source: str = "mongodb"


class MongoProductCreatedResponse(BaseModel):
    success: bool = True
    message: str
    productId: str
    product: MongoProductData
