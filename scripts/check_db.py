"""Script to test the database connection and the Aurora tables."""

import asyncio
import sys
import os

# Add the project root to sys.path to allow importing from 'app'
sys.path.append(os.getcwd())

from app.database import db
from core.storage.repositories import SCHEMA_STATEMENTS

TABLES = ("document_analyses", "threat_scans", "chat_messages")


async def check_db_connection():
    try:
        print("🔍 Attempting to connect to the database...")
        await db.connect()

        async with db.pool.acquire() as conn:
            version = await conn.fetchval("SELECT version()")
            print(f"✅ Connected to: {version}")

            for table in TABLES:
                count = await conn.fetchval(f"SELECT COUNT(*) FROM {table}")
                print(f"✅ {table}: {count} rows")

        print(f"📋 {len(SCHEMA_STATEMENTS)} schema statements applied")
        await db.disconnect()
        print("✨ Database check complete!")
    except Exception as e:
        print(f"❌ Error connecting to database: {e}")
        print("\nPossible issues:")
        print("1. Is the Docker container running? (Run 'docker ps')")
        print("2. Is the DATABASE_URL in .env correct?")


if __name__ == "__main__":
    asyncio.run(check_db_connection())
