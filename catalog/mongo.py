"""
MongoDB connection management.

A single DocumentStore instance owns the process-wide client. The store is
optional: every route goes through get_collection_safe(), and an absent
server surfaces as DocumentStoreUnavailableError instead of crashing the
process.
"""

import asyncio
import enum
import logging
from typing import Any, Callable, Optional

from fastapi import Request
from pymongo import AsyncMongoClient

from catalog.exceptions import (
    DocumentStoreNotConnectedError,
    DocumentStoreUnavailableError,
)

logger = logging.getLogger(__name__)


class ConnectionState(str, enum.Enum):
    """Lifecycle of the shared client."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class DocumentStore:
    """
    Lazily connected, shared MongoDB client.

    Concurrent connect() calls while an attempt is in flight all await
    that same attempt; only one client is ever being opened at a time.
    """

    def __init__(
        self,
        url: str,
        database: str,
        client_factory: Callable[..., Any] = AsyncMongoClient,
        server_selection_timeout_ms: int = 5000,
    ):
        self.url = url
        self.database = database
        self._client_factory = client_factory
        self._timeout_ms = server_selection_timeout_ms
        self._client = None
        self._state = ConnectionState.DISCONNECTED
        self._pending: Optional[asyncio.Future] = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED and self._client is not None

    async def connect(self):
        """
        Return a connected client, opening one if necessary.

        Raises:
            DocumentStoreUnavailableError: If the server could not be reached
        """
        if self.is_connected:
            return self._client

        if self._pending is None or self._pending.done():
            logger.info(f"Connecting to MongoDB at {self.url} (database: {self.database})")
            self._pending = asyncio.ensure_future(self._open())
        else:
            logger.info("MongoDB connection already in progress, waiting for it")

        pending = self._pending
        try:
            return await asyncio.shield(pending)
        finally:
            if self._pending is pending and pending.done():
                self._pending = None

    async def _open(self):
        self._state = ConnectionState.CONNECTING
        await self._discard_client()

        client = self._client_factory(
            self.url, serverSelectionTimeoutMS=self._timeout_ms
        )
        try:
            await client.admin.command("ping")
        except Exception as e:
            self._state = ConnectionState.DISCONNECTED
            logger.error(f"Error connecting to MongoDB: {e}")
            await self._close_quietly(client)
            raise DocumentStoreUnavailableError(f"MongoDB is not available: {e}") from e

        self._client = client
        self._state = ConnectionState.CONNECTED
        logger.info("Connected to MongoDB")
        return client

    def get_collection(self, name: str):
        """Return a collection handle; requires a prior successful connect()."""
        if not self.is_connected:
            raise DocumentStoreNotConnectedError()
        return self._client[self.database][name]

    async def get_collection_safe(self, name: str):
        """Connect if needed, then return the collection handle."""
        if not self.is_connected:
            await self.connect()
        return self.get_collection(name)

    async def check_connection(self) -> bool:
        """
        Ping the server. Returns False on any failure.

        A failed ping marks the client disconnected so the next connect()
        opens a fresh one.
        """
        try:
            client = await self.connect()
            await client.admin.command("ping")
            return True
        except Exception as e:
            logger.warning(f"MongoDB is not responding: {e}")
            if self._state is ConnectionState.CONNECTED:
                self._state = ConnectionState.DISCONNECTED
            return False

    async def close(self) -> None:
        """
        Close the client and reset state. Safe to call repeatedly.

        An in-flight connect is allowed to finish first, so the client it
        opens is closed here too.
        """
        pending = self._pending
        if pending is not None and not pending.done():
            logger.info("Waiting for the in-flight MongoDB connection before closing")
            await asyncio.wait([pending])

        if self._client is None:
            self._state = ConnectionState.DISCONNECTED
            return
        await self._discard_client()
        self._state = ConnectionState.DISCONNECTED
        logger.info("MongoDB connection closed")

    async def _discard_client(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            await self._close_quietly(client)

    @staticmethod
    async def _close_quietly(client) -> None:
        try:
            await client.close()
        except Exception as e:
            logger.debug(f"Ignoring error while closing MongoDB client: {e}")


def get_document_store(request: Request) -> DocumentStore:
    """Dependency returning the document store bound to the running app."""
    return request.app.state.document_store
