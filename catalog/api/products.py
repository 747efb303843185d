import logging

from fastapi import APIRouter, Depends, status

from catalog.api.deps import (
    error_response,
    get_app_settings,
    get_relational_db,
    server_error,
)
from catalog.config import Settings
from catalog.database import RelationalDatabase
from catalog.exceptions import ProductNotFoundError, ProductValidationError
from catalog.schemas.product import (
    MessageResponse,
    ProductCreatedResponse,
    ProductDetailResponse,
    ProductListResponse,
    ProductPayload,
)
from catalog.services.product_service import ProductService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])


@router.get(
    "",
    response_model=ProductListResponse,
    summary="List all products",
    description="Get every product in the relational store, newest first."
)
async def list_products(
    db: RelationalDatabase = Depends(get_relational_db),
    settings: Settings = Depends(get_app_settings),
):
    """Get all products."""
    try:
        products = await ProductService(db).list_products()
    except Exception as e:
        logger.exception("Error in GET /products")
        return server_error("Failed to fetch products", e, settings)

    return ProductListResponse(products=products, count=len(products))


@router.post(
    "",
    response_model=ProductCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
    description="Create a product with a name, a price and an optional stock."
)
async def create_product(
    payload: ProductPayload,
    db: RelationalDatabase = Depends(get_relational_db),
    settings: Settings = Depends(get_app_settings),
):
    """
    Create a new product.

    - **name**: Product name (required, non-empty)
    - **price**: Product price, must be a number (required)
    - **stock**: Initial stock, defaults to 0
    """
    logger.info(f"POST /products - data: {payload.model_dump()}")
    try:
        product_id = await ProductService(db).create(payload)
    except ProductValidationError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, e.message, field=e.field)
    except Exception as e:
        logger.exception("Error in POST /products")
        return server_error("Failed to create product", e, settings)

    return ProductCreatedResponse(
        message="Product created successfully",
        productId=product_id,
    )


@router.get(
    "/{product_id}",
    response_model=ProductDetailResponse,
    summary="Get product by ID",
)
async def get_product(
    product_id: str,
    db: RelationalDatabase = Depends(get_relational_db),
    settings: Settings = Depends(get_app_settings),
):
    """Get a product by ID."""
    try:
        product = await ProductService(db).get(product_id)
    except ProductNotFoundError as e:
        return error_response(status.HTTP_404_NOT_FOUND, e.message)
    except Exception as e:
        logger.exception("Error in GET /products/{id}")
        return server_error("Failed to fetch product", e, settings)

    return ProductDetailResponse(product=product)


@router.put(
    "/{product_id}",
    response_model=MessageResponse,
    summary="Update a product",
    description="Rewrite name, price and stock of a product."
)
async def update_product(
    product_id: str,
    payload: ProductPayload,
    db: RelationalDatabase = Depends(get_relational_db),
    settings: Settings = Depends(get_app_settings),
):
    """
    Update a product.

    All three fields are written; a missing stock becomes 0.
    """
    logger.info(f"PUT /products/{product_id} - data: {payload.model_dump()}")
    try:
        await ProductService(db).update(product_id, payload)
    except ProductValidationError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, e.message, field=e.field)
    except ProductNotFoundError as e:
        return error_response(status.HTTP_404_NOT_FOUND, e.message)
    except Exception as e:
        logger.exception("Error in PUT /products/{id}")
        return server_error("Failed to update product", e, settings)

    return MessageResponse(message="Product updated successfully")


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    summary="Delete a product",
)
async def delete_product(
    product_id: str,
    db: RelationalDatabase = Depends(get_relational_db),
    settings: Settings = Depends(get_app_settings),
):
    """Delete a product."""
    logger.info(f"DELETE /products/{product_id}")
    try:
        await ProductService(db).delete(product_id)
    except ProductNotFoundError as e:
        return error_response(status.HTTP_404_NOT_FOUND, e.message)
    except Exception as e:
        logger.exception("Error in DELETE /products/{id}")
        return server_error("Failed to delete product", e, settings)

    return MessageResponse(message="Product deleted successfully")
