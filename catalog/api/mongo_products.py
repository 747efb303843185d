import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from catalog.api.deps import (
    error_response,
    get_app_settings,
    get_document_store,
    server_error,
)
from catalog.config import Settings
from catalog.exceptions import DocumentStoreUnavailableError, ProductValidationError
from catalog.mongo import DocumentStore
from catalog.schemas.product import (
    MongoProductCreatedResponse,
    MongoProductListResponse,
    ProductPayload,
)
from catalog.services.mongo_product_service import MongoProductService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/mongo/products", tags=["MongoDB Products"])


def store_unavailable_listing() -> JSONResponse:
    """
    Soft failure for reads: HTTP 200 with success=false and no products.

    The front-end treats this as "store absent", as opposed to a 4xx/5xx
    which means the request itself failed.
    """
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "success": False,
            "error": "MongoDB is not available",
            "message": "Install MongoDB or check that it is running",
            "solution": "Run: mongod",
            "products": [],
            "count": 0,
            "source": "mongodb",
        },
    )


@router.get(
    "",
    response_model=MongoProductListResponse,
    summary="List products from MongoDB",
    description="Returns success=false with an empty list (HTTP 200) when MongoDB is down."
)
async def list_mongo_products(
    store: DocumentStore = Depends(get_document_store),
    settings: Settings = Depends(get_app_settings),
):
    """Get all products from the document store."""
    try:
        products = await MongoProductService(store).list_products()
    except DocumentStoreUnavailableError as e:
        logger.warning(f"MongoDB not available: {e}")
        return store_unavailable_listing()
    except Exception as e:
        logger.exception("Error in GET /mongo/products")
        return server_error("Error while reading from MongoDB", e, settings)

    return MongoProductListResponse(products=products, count=len(products))


@router.post(
    "",
    response_model=MongoProductCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product in MongoDB",
)
async def create_mongo_product(
    payload: ProductPayload,
    store: DocumentStore = Depends(get_document_store),
    settings: Settings = Depends(get_app_settings),
):
    """
    Create a product document.

    - **name**: Product name (required)
    - **price**: Product price (required)
    - **stock**: Initial stock, defaults to 0
    """
    try:
        product_id, product = await MongoProductService(store).create(payload)
    except ProductValidationError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, e.message, field=e.field)
    except DocumentStoreUnavailableError as e:
        logger.warning(f"MongoDB not available: {e}")
        return error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "MongoDB is not available",
            message="Could not create the product in MongoDB",
            solution="Install and start MongoDB",
        )
    except Exception as e:
        logger.exception("Error in POST /mongo/products")
        return server_error("Error while processing the request", e, settings)

    return MongoProductCreatedResponse(
        message="Product created in MongoDB",
        productId=product_id,
        product=product,
    )
