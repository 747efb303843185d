"""
Administrative endpoints for the relational store.

/init-db and /setup-test-data are destructive: both drop and recreate the
products table.
"""

import logging

from fastapi import APIRouter, Depends, status

from catalog.api.deps import error_response, get_app_settings, get_relational_db
from catalog.config import Settings
from catalog.database import RelationalDatabase
from catalog.services.product_service import ProductService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Admin"])


def _error_text(exc: Exception, fallback: str, settings: Settings) -> str:
    return fallback if settings.is_production else str(exc)


@router.post(
    "/init-db",
    summary="Initialize the products table",
    description="Drops the products table if it exists and recreates it empty."
)
async def init_db(
    db: RelationalDatabase = Depends(get_relational_db),
    settings: Settings = Depends(get_app_settings),
):
    try:
        await ProductService(db).reset_table()
    except Exception as e:
        logger.exception("Error initializing the database")
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            _error_text(e, "Failed to initialize the database", settings),
            details="Make sure MySQL is running and the user has the required privileges",
        )

    return {
        "success": True,
        "message": "Database initialized with an AUTO_INCREMENT products table",
    }


@router.post(
    "/setup-test-data",
    summary="Reset and seed sample products",
    description="Recreates the products table and inserts ten sample products."
)
async def setup_test_data(
    db: RelationalDatabase = Depends(get_relational_db),
    settings: Settings = Depends(get_app_settings),
):
    logger.info("Creating sample data...")
    try:
        count = await ProductService(db).seed_sample_data()
    except Exception as e:
        logger.exception("Error creating sample data")
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            _error_text(e, "Failed to create sample data", settings),
            solution="Run POST /init-db first",
        )

    return {
        "success": True,
        "message": f"Created {count} sample products",
        "count": count,
    }


@router.get(
    "/diagnose",
    summary="Inspect the products table",
    description="Reports whether the table exists and whether its id column auto-increments."
)
async def diagnose(
    db: RelationalDatabase = Depends(get_relational_db),
    settings: Settings = Depends(get_app_settings),
):
    try:
        report = await ProductService(db).describe()
    except Exception as e:
        logger.exception("Error diagnosing the products table")
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            _error_text(e, "Failed to inspect the database", settings),
        )

    if report is None:
        return {
            "success": False,
            "message": "The products table does NOT exist",
            "solution": "Run POST /init-db",
        }

    has_auto_increment = report["hasAutoIncrement"]
    return {
        "success": True,
        "tableExists": True,
        "hasAutoIncrement": has_auto_increment,
        "structure": report["structure"],
        "idColumn": report["idColumn"],
        "message": (
            "Table is correct, id uses AUTO_INCREMENT"
            if has_auto_increment
            else "The id column is missing AUTO_INCREMENT"
        ),
    }
