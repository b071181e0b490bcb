"""
Database module - MongoDB connection lifecycle.
"""
from app.db.mongodb import (
    ConnectionState,
    ConnectionErrorKind,
    DatabaseConnectionError,
    MongoConnectionManager,
    get_connection_manager,
    get_db,
)

__all__ = [
    "ConnectionState",
    "ConnectionErrorKind",
    "DatabaseConnectionError",
    "MongoConnectionManager",
    "get_connection_manager",
    "get_db",
]
