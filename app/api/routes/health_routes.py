"""
Health & Database Diagnostic Routes

GET /health - Liveness plus cached connection state (never connects)
GET /test-db - Connect and list collections
GET /db-status - Detailed connection and database stats
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from pymongo.errors import PyMongoError

from app.api.deps import get_app_settings
from app.core.config import Settings
from app.db.mongodb import MongoConnectionManager, get_manager
from app.utils.process import memory_usage, uptime_seconds, utc_timestamp
from app.schemas.schemas import (
    HealthResponse, DatabaseTestResponse, DatabaseTestInfo,
    DatabaseStatusResponse, DatabaseStatusInfo
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

DBSTATS_FIELDS = ("collections", "objects", "dataSize", "storageSize", "indexes", "indexSize")


def _hosts(manager: MongoConnectionManager) -> List[str]:
    if manager.client is None:
        return []
    servers = manager.client.topology_description.server_descriptions()
    return [f"{host}:{port}" for host, port in servers]


@router.get("/health", response_model=HealthResponse)
async def health_check(manager: MongoConnectionManager = Depends(get_manager)):
    """Report process health and whether the database is connected."""
    return HealthResponse(
        timestamp=utc_timestamp(),
        dbConnected=manager.is_connected,
        readyState=manager.state.value,
        uptime=uptime_seconds(),
        memory=memory_usage(),
    )


@router.get("/test-db", response_model=DatabaseTestResponse)
async def test_db(manager: MongoConnectionManager = Depends(get_manager)):
    """Connect (if needed) and list the database's collections."""
    await manager.ensure_connected()
    collections = await manager.get_database().list_collection_names()

    return DatabaseTestResponse(
        database=DatabaseTestInfo(
            status="connected",
            readyState=manager.state.value,
            collections=collections,
            totalCollections=len(collections),
        ),
        timestamp=utc_timestamp(),
    )


@router.get("/db-status", response_model=DatabaseStatusResponse)
async def db_status(
    manager: MongoConnectionManager = Depends(get_manager),
    settings: Settings = Depends(get_app_settings)
):
    """Detailed view of the connection. Does not trigger a connection attempt."""
    stats = None
    name = settings.mongodb_db
    if manager.is_connected:
        db = manager.get_database()
        name = db.name
        try:
            raw = await db.command("dbstats")
            stats = {k: raw[k] for k in DBSTATS_FIELDS if k in raw}
        except PyMongoError as e:
            logger.warning("dbstats failed: %s", e)
            stats = {"error": str(e)}

    return DatabaseStatusResponse(
        timestamp=utc_timestamp(),
        database=DatabaseStatusInfo(
            status=manager.state.value,
            readyState=manager.state.value,
            connected=manager.is_connected,
            hosts=_hosts(manager),
            name=name,
            attempts=manager.attempts,
            lastError=manager.last_error.to_dict() if manager.last_error else None,
        ),
        connectionPool=manager.pool_stats.snapshot() if manager.pool_stats else "Not available",
        databaseStats=stats,
        environment=settings.environment,
        uptime=uptime_seconds(),
        memory=memory_usage(),
    )
