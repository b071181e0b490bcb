"""
MongoDB Connection Manager

One process-wide AsyncMongoClient, created on first use and reused by every
request afterwards. This matters most in serverless deployments, where a warm
container handles many invocations and a fresh TLS handshake per request
would dominate latency.

State transitions:
    disconnected --ensure_connected()--> connecting
    failed       --ensure_connected()--> connecting
    connecting   --ping ok-------------> connected
    connecting   --any error-----------> failed
    connected/failed --close()---------> disconnected

Requests that arrive while a connection attempt is running wait on that
same attempt instead of opening a second one.
"""

import asyncio
import logging
import socket
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Optional

from fastapi import Request
from pymongo import AsyncMongoClient, monitoring
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import (
    ExecutionTimeout,
    NetworkTimeout,
    OperationFailure,
    ServerSelectionTimeoutError,
)

from app.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    disconnected = "disconnected"
    connecting = "connecting"
    connected = "connected"
    failed = "failed"


class ConnectionErrorKind(str, Enum):
    dns_resolution = "dns_resolution"
    connection_refused = "connection_refused"
    authentication_failure = "authentication_failure"
    timeout = "timeout"
    unknown = "unknown"


class DatabaseConnectionError(Exception):
    """Raised by ensure_connected() when the database cannot be reached."""

    def __init__(self, kind: ConnectionErrorKind, message: str, code: Any = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.code = code

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "code": self.code, "message": self.message}


# Substrings the driver and the OS put in error messages
_AUTH_MARKERS = ("authentication failed", "bad auth", "auth failed")
_DNS_MARKERS = (
    "getaddrinfo",
    "name or service not known",
    "nodename nor servname",
    "temporary failure in name resolution",
    "no address associated",
    "dns query name does not exist",
)
_REFUSED_MARKERS = ("connection refused", "econnrefused", "actively refused")
_AUTH_CODES = {18, 8000}


def classify_connection_error(exc: BaseException) -> DatabaseConnectionError:
    """Map a driver or OS error onto a ConnectionErrorKind."""
    message = str(exc) or exc.__class__.__name__
    lowered = message.lower()
    code = getattr(exc, "code", None)
    if code is None:
        code = getattr(exc, "errno", None)

    if isinstance(exc, OperationFailure) and exc.code in _AUTH_CODES:
        kind = ConnectionErrorKind.authentication_failure
    elif any(marker in lowered for marker in _AUTH_MARKERS):
        kind = ConnectionErrorKind.authentication_failure
    elif isinstance(exc, socket.gaierror) or any(m in lowered for m in _DNS_MARKERS):
        kind = ConnectionErrorKind.dns_resolution
    elif isinstance(exc, ConnectionRefusedError) or any(m in lowered for m in _REFUSED_MARKERS):
        kind = ConnectionErrorKind.connection_refused
    elif isinstance(exc, (ServerSelectionTimeoutError, NetworkTimeout, ExecutionTimeout, TimeoutError)):
        kind = ConnectionErrorKind.timeout
    else:
        kind = ConnectionErrorKind.unknown

    return DatabaseConnectionError(kind, message, code)


class PoolStatsListener(monitoring.ConnectionPoolListener):
    """
    Counts pool connections from driver monitoring events.

    pymongo does not expose live pool counters, so they are rebuilt from
    CMAP events: total = created - closed, pending = check-outs started
    but not yet finished, available = total - checked out.
    """

    def __init__(self):
        self.total = 0
        self.checked_out = 0
        self.pending = 0

    def snapshot(self) -> dict:
        return {
            "totalConnectionCount": self.total,
            "availableConnectionCount": max(self.total - self.checked_out, 0),
            "pendingConnectionCount": self.pending,
        }

    def pool_created(self, event):
        pass

    def pool_ready(self, event):
        pass

    def pool_cleared(self, event):
        pass

    def pool_closed(self, event):
        pass

    def connection_created(self, event):
        self.total += 1

    def connection_ready(self, event):
        pass

    def connection_closed(self, event):
        self.total = max(self.total - 1, 0)

    def connection_check_out_started(self, event):
        self.pending += 1

    def connection_check_out_failed(self, event):
        self.pending = max(self.pending - 1, 0)

    def connection_checked_out(self, event):
        self.pending = max(self.pending - 1, 0)
        self.checked_out += 1

    def connection_checked_in(self, event):
        self.checked_out = max(self.checked_out - 1, 0)


class MongoConnectionManager:
    """
    Owns the cached client and the single in-flight connection attempt.

    All state changes happen on the event loop thread, so no lock is taken.
    Porting this to threads needs a mutex around the state checks.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client_factory: Callable[..., Any] = AsyncMongoClient,
    ):
        self.settings = settings or get_settings()
        self._client_factory = client_factory
        self._client: Optional[AsyncMongoClient] = None
        self._pending: Optional[asyncio.Task] = None
        self.state = ConnectionState.disconnected
        self.attempts = 0
        self.last_error: Optional[DatabaseConnectionError] = None
        self.pool_stats: Optional[PoolStatsListener] = None

    @property
    def client(self) -> Optional[AsyncMongoClient]:
        return self._client

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.connected and self._client is not None

    async def ensure_connected(self) -> AsyncMongoClient:
        """
        Return a live client, connecting first if needed.

        Raises:
            DatabaseConnectionError: the attempt this call started or joined failed
        """
        if self.is_connected:
            return self._client

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._connect())

        # shield: a cancelled request must not cancel the shared attempt
        return await asyncio.shield(self._pending)

    async def _connect(self) -> AsyncMongoClient:
        self.state = ConnectionState.connecting
        self.attempts += 1
        logger.info(
            "MongoDB connecting (attempt %d)", self.attempts,
            extra={"db_event": "connecting", "attempt": self.attempts},
        )

        client = None
        pool_stats = PoolStatsListener()
        try:
            client = self._client_factory(
                self.settings.mongodb_uri,
                serverSelectionTimeoutMS=self.settings.mongodb_server_selection_timeout_ms,
                connectTimeoutMS=self.settings.mongodb_connect_timeout_ms,
                socketTimeoutMS=self.settings.mongodb_socket_timeout_ms,
                event_listeners=[pool_stats],
            )
            await client.admin.command("ping")
        except Exception as exc:
            error = classify_connection_error(exc)
            self._client = None
            self.last_error = error
            self.state = ConnectionState.failed
            logger.error(
                "MongoDB connection error: kind=%s code=%s message=%s",
                error.kind.value, error.code, error.message,
                extra={
                    "db_event": "error",
                    "kind": error.kind.value,
                    "code": error.code,
                    "error_message": error.message,
                },
            )
            if client is not None:
                await client.close()
            raise error from exc
        else:
            self._client = client
            self.pool_stats = pool_stats
            self.last_error = None
            self.state = ConnectionState.connected
            logger.info("MongoDB connected", extra={"db_event": "connected"})
            return client
        finally:
            self._pending = None

    def get_database(self) -> AsyncDatabase:
        """Default database of the connected client (URI path, else MONGODB_DB)."""
        if not self.is_connected:
            raise DatabaseConnectionError(
                ConnectionErrorKind.unknown, "MongoDB is not connected"
            )
        return self._client.get_default_database(default=self.settings.mongodb_db)

    async def close(self) -> None:
        """Tear the client down. The next ensure_connected() reconnects."""
        if self._pending is not None:
            # let an in-flight attempt settle before closing what it opened
            await asyncio.wait([self._pending])
        client, self._client = self._client, None
        self.pool_stats = None
        if client is not None:
            await client.close()
        if self.state is not ConnectionState.disconnected:
            self.state = ConnectionState.disconnected
            logger.info("MongoDB disconnected", extra={"db_event": "disconnected"})


@lru_cache()
def get_connection_manager() -> MongoConnectionManager:
    """Process-wide manager (singleton pattern)"""
    return MongoConnectionManager()


def get_manager(request: Request) -> MongoConnectionManager:
    """FastAPI dependency - the manager attached to this app."""
    return request.app.state.db_manager


async def get_db(request: Request) -> AsyncDatabase:
    """
    FastAPI dependency - connected database handle.

    Usage:
        @router.get("/things")
        async def list_things(db: AsyncDatabase = Depends(get_db)):
            ...
    """
    manager = get_manager(request)
    await manager.ensure_connected()
    return manager.get_database()
