"""
Exceptions shared by the data-access layer, the services and the routes.

Routes map each of these to an HTTP status; anything else is treated as an
unexpected error and becomes a 500.
"""


class CatalogError(Exception):
    """Base class for catalog errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ProductValidationError(CatalogError):
    """
    Client-supplied product data failed a precondition.

    HTTP Status Code: 400 Bad Request
    """

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


class ProductNotFoundError(CatalogError):
    """
    No product matches the requested identifier.

    HTTP Status Code: 404 Not Found
    """

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product with ID {product_id} not found")


class PoolExhaustedError(CatalogError):
    """Raised when every connection is busy and the wait queue is full."""

    def __init__(self, capacity: int, queue_limit: int):
        self.capacity = capacity
        self.queue_limit = queue_limit
        super().__init__(
            f"Connection pool exhausted: {capacity} in use, "
            f"{queue_limit} waiting"
        )


class DocumentStoreError(CatalogError):
    """Base class for document store failures."""


class DocumentStoreNotConnectedError(DocumentStoreError):
    """Raised by get_collection() before a successful connect()."""

    def __init__(self):
        super().__init__("Document store not connected. Call connect() first.")


class DocumentStoreUnavailableError(DocumentStoreError):
    """
    The document store could not be reached.

    HTTP Status Code: 200 soft-fail on reads, 503 on writes
    """
