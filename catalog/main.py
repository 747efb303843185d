from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from typing import Optional
import logging
import uvicorn

from catalog.config import Settings, get_settings
from catalog.database import RelationalDatabase
from catalog.mongo import DocumentStore
from catalog.api import admin, health, mongo_products, products
from catalog.api.deps import error_response

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

ENDPOINTS = [
    "GET    /api/products",
    "POST   /api/products",
    "GET    /api/products/{id}",
    "PUT    /api/products/{id}",
    "DELETE /api/products/{id}",
    "GET    /api/mongo/products",
    "POST   /api/mongo/products",
    "POST   /init-db",
    "POST   /setup-test-data",
    "GET    /diagnose",
    "GET    /status",
    "GET    /mongo-status",
]


async def check_databases(app: FastAPI) -> None:
    """
    Best-effort connectivity checks run at startup.

    Neither store is required: failures are logged as warnings and the
    server keeps running.
    """
    logger.info("Checking databases...")

    relational_db: RelationalDatabase = app.state.relational_db
    if await relational_db.check_connection():
        logger.info(f"Relational store connected ({relational_db.dialect_name})")
    else:
        logger.warning("Relational store is not available, /api/products will fail until it is")

    document_store: DocumentStore = app.state.document_store
    if await document_store.check_connection():
        logger.info("MongoDB connected and responding")
    else:
        logger.warning("MongoDB is not available, the server will run with the relational store only")
        logger.info("To use MongoDB, install it and run: mongod")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    settings: Settings = app.state.settings

    # Startup
    logger.info(f"Server running on http://localhost:{settings.port}")
    logger.info("Available endpoints:")
    for endpoint in ENDPOINTS:
        logger.info(f"   {endpoint}")
    await check_databases(app)

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await app.state.document_store.close()
    await app.state.relational_db.dispose()


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """JSON error bodies for framework errors and uncaught exceptions."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return error_response(
                status.HTTP_404_NOT_FOUND,
                "Route not found",
                path=request.url.path,
                method=request.method,
            )
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "Invalid request body",
            details=[error.get("msg") for error in exc.errors()],
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            message="Contact the administrator" if settings.is_production else str(exc),
        )


def create_app(
    settings: Optional[Settings] = None,
    relational_db: Optional[RelationalDatabase] = None,
    document_store: Optional[DocumentStore] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration; loaded from the environment when omitted
        relational_db: Relational store; built from settings when omitted
        document_store: Document store; built from settings when omitted
    """
    settings = settings or get_settings()
    logger.info(f"Configuration: {settings.masked()}")

    if relational_db is None:
        relational_db = RelationalDatabase.from_url(
            settings.relational_url,
            pool_size=settings.db_pool_size,
            queue_limit=settings.db_queue_limit,
        )
    if document_store is None:
        document_store = DocumentStore(
            settings.mongo_url,
            settings.mongo_db,
            server_selection_timeout_ms=settings.mongo_timeout_ms,
        )

    app = FastAPI(
        title="Product Catalog API",
        description="""
        Product catalog backed by two independent stores:

        - **MySQL**: full CRUD under `/api/products`
        - **MongoDB**: list and create under `/api/mongo/products`

        MongoDB is optional. When it is down, listing returns `success: false`
        with HTTP 200 and creating returns 503.
        """,
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.relational_db = relational_db
    app.state.document_store = document_store

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in settings.cors_origin.split(",")],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_api_requests(request: Request, call_next):
        if request.url.path.startswith("/api"):
            logger.info(f"API {request.method} {request.url.path}")
        return await call_next(request)

    register_exception_handlers(app, settings)

    # Include API routers
    app.include_router(health.router)
    app.include_router(admin.router)
    app.include_router(products.router, prefix="/api")
    app.include_router(mongo_products.router, prefix="/api")

    static_dir = settings.static_dir
    if static_dir.is_dir():
        app.mount("/static", StaticFiles(directory=static_dir), name="static")

    @app.get("/", include_in_schema=False)
    async def index():
        """Front-end entry page."""
        index_file = static_dir / "index.html"
        if not index_file.is_file():
            return error_response(status.HTTP_404_NOT_FOUND, "Front-end not found")
        return FileResponse(index_file)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    settings = get_settings()
    uvicorn.run("catalog.main:app", host=settings.host, port=settings.port)
