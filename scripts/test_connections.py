#!/usr/bin/env python3
"""
Connection Test Script

Run this to verify the database, file storage and Gemini are reachable.
Usage: python scripts/test_connections.py
"""
import asyncio
import sys
sys.path.insert(0, '.')

from app.db.postgres import test_postgres_connection
from app.db.mongodb import test_mongo_connection
from app.services.gemini_client import get_gemini_client
from app.core.config import get_settings
from app.core.errors import AppError


def test_gemini_connection() -> bool:
    try:
        reply = asyncio.run(get_gemini_client().assist("Reply with exactly: OK"))
        return "OK" in reply.upper()
    except AppError as e:
        print(f"    Gemini error: {e.detail}")
        return False


def main():
    settings = get_settings()
    print("=" * 50)
    print("CAREERHUB - CONNECTION TEST")
    print("=" * 50)

    # Test SQL database
    print("\n[1] Testing SQL database...")
    if settings.database_url:
        print(f"    URL: {settings.database_url.split('@')[-1]}")
    else:
        print(f"    URL: postgresql://{settings.postgres_user}:****@{settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}")
    if test_postgres_connection():
        print("    ✅ Database: CONNECTED")
    else:
        print("    ❌ Database: FAILED")

    # Test MongoDB
    print("\n[2] Testing MongoDB (file storage)...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    if test_mongo_connection():
        print("    ✅ MongoDB: CONNECTED")
    else:
        print("    ❌ MongoDB: FAILED")

    # Test Gemini (only if API key is set)
    print("\n[3] Testing Gemini API...")
    if settings.gemini_api_key:
        print(f"    Model: {settings.gemini_model}")
        if test_gemini_connection():
            print("    ✅ Gemini: CONNECTED")
        else:
            print("    ❌ Gemini: FAILED")
    else:
        print("    ⚠️  Gemini: API key not configured (skip for now)")

    print("\n" + "=" * 50)
    print("Connection test complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
