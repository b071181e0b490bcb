#!/usr/bin/env python3
"""
Environment Check Script

Shows which configuration variables are set, hiding secrets.
Usage: python scripts/check_env.py
"""
import os
import platform
import sys
sys.path.insert(0, '.')

from dotenv import load_dotenv

REQUIRED_VARS = ["MONGODB_URI", "JWT_SECRET", "ENVIRONMENT"]
OPTIONAL_VARS = ["PORT", "RATE_LIMIT_WINDOW_MS", "RATE_LIMIT_MAX_REQUESTS", "DEPLOYMENT_MODE"]


def mask_mongodb_uri(uri: str) -> str:
    """Drop the password (and path) from a MongoDB URI."""
    scheme, sep, rest = uri.partition("://")
    if not sep:
        return "<unparseable>"
    if "@" not in rest:
        return uri
    credentials, _, host_part = rest.rpartition("@")
    username = credentials.split(":", 1)[0]
    host = host_part.split("/", 1)[0]
    return f"{scheme}://{username}@{host}/..."


def describe(name: str, value: str) -> str:
    if name == "JWT_SECRET":
        return f"Set ({len(value)} characters)"
    if name == "MONGODB_URI":
        return f"Set ({mask_mongodb_uri(value)})"
    return value


def main():
    load_dotenv()

    print("=" * 50)
    print("CAMPUS RECRUITMENT API - ENVIRONMENT CHECK")
    print("=" * 50)

    print("\nRequired Variables:")
    missing = 0
    for name in REQUIRED_VARS:
        value = os.getenv(name)
        if value:
            print(f"    ✅ {name}: {describe(name, value)}")
        else:
            missing += 1
            print(f"    ❌ {name}: NOT SET")

    print("\nOptional Variables:")
    for name in OPTIONAL_VARS:
        value = os.getenv(name)
        if value:
            print(f"    ✅ {name}: {value}")
        else:
            print(f"    ⚠️  {name}: Using default value")

    print("\nEnvironment:")
    print(f"    ENVIRONMENT: {os.getenv('ENVIRONMENT', 'development')}")
    print(f"    Working directory: {os.getcwd()}")
    print(f"    Platform: {platform.system().lower()}")

    print("\n" + "=" * 50)
    print("Environment check complete!")
    print("=" * 50)
    return 1 if missing else 0


if __name__ == "__main__":
    sys.exit(main())
