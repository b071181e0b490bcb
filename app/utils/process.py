"""
Process introspection for health endpoints.
"""

import time
from datetime import datetime, timezone
from typing import Dict

import psutil

PROCESS_STARTED_AT = time.monotonic()


def uptime_seconds() -> float:
    return round(time.monotonic() - PROCESS_STARTED_AT, 3)


def memory_usage() -> Dict[str, int]:
    """Resident and virtual memory of this process, in bytes."""
    info = psutil.Process().memory_info()
    return {"rss": info.rss, "vms": info.vms}


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()
