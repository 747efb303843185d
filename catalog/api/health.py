import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from catalog.api.deps import get_app_settings, get_document_store
from catalog.config import Settings
from catalog.mongo import DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/status",
    summary="Server status",
    description="Liveness check with basic server metadata."
)
async def server_status(settings: Settings = Depends(get_app_settings)):
    """Simple liveness check."""
    return {
        "status": "online",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "port": settings.port,
        "environment": settings.environment,
    }


@router.get(
    "/mongo-status",
    summary="MongoDB status",
    description="Ping MongoDB and report whether it is reachable."
)
async def mongo_status(store: DocumentStore = Depends(get_document_store)):
    """Report document store availability."""
    try:
        connected = await store.check_connection()
    except Exception as e:
        logger.exception("Error checking MongoDB status")
        return {
            "success": False,
            "mongodb": {
                "connected": False,
                "status": "error",
                "message": f"Error checking MongoDB: {e}",
            },
        }

    return {
        "success": True,
        "mongodb": {
            "connected": connected,
            "status": "online" if connected else "offline",
            "message": "MongoDB is connected and responding" if connected else "MongoDB is not available",
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
