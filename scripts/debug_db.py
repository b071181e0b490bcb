#!/usr/bin/env python3
"""
Database Debug Script

Connects through the same connection manager the API uses, then pings,
lists collections and prints database stats.
Usage: python scripts/debug_db.py
"""
import asyncio
import sys
sys.path.insert(0, '.')

from app.core.config import get_settings
from app.db.mongodb import (
    ConnectionErrorKind,
    DatabaseConnectionError,
    MongoConnectionManager,
)
from scripts.check_env import mask_mongodb_uri

HINTS = {
    ConnectionErrorKind.dns_resolution: "DNS resolution failed - check your MongoDB URI host",
    ConnectionErrorKind.connection_refused: "Connection refused - check that MongoDB is running",
    ConnectionErrorKind.authentication_failure: "Authentication failed - check credentials",
    ConnectionErrorKind.timeout: "Timed out selecting a server - check network access / IP allow-list",
    ConnectionErrorKind.unknown: "Unrecognised error - see message above",
}


async def run_checks(manager: MongoConnectionManager) -> bool:
    print("\n[1] Connecting...")
    try:
        client = await manager.ensure_connected()
    except DatabaseConnectionError as e:
        print("    ❌ Connection failed")
        print(f"    Kind: {e.kind.value}")
        print(f"    Code: {e.code}")
        print(f"    Message: {e.message}")
        print(f"    Hint: {HINTS[e.kind]}")
        return False
    print("    ✅ Connected")

    db = manager.get_database()
    print(f"    Database: {db.name}")

    print("\n[2] Ping...")
    result = await client.admin.command("ping")
    print(f"    ✅ Ping result: {result}")

    print("\n[3] Collections...")
    collections = await db.list_collection_names()
    print(f"    ✅ {len(collections)} found: {', '.join(sorted(collections)) or '-'}")

    print("\n[4] Database stats...")
    stats = await db.command("dbstats")
    for key in ("collections", "dataSize", "storageSize", "indexes"):
        print(f"    {key}: {stats.get(key)}")
    return True


async def main() -> int:
    settings = get_settings()
    print("=" * 50)
    print("CAMPUS RECRUITMENT API - DATABASE DEBUG")
    print("=" * 50)
    print(f"    Environment: {settings.environment}")
    print(f"    URI: {mask_mongodb_uri(settings.mongodb_uri)}")

    manager = MongoConnectionManager(settings)
    try:
        ok = await run_checks(manager)
    finally:
        await manager.close()
        print("\n    Connection closed")

    print("\n" + "=" * 50)
    print("Database debug complete!")
    print("=" * 50)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
