"""
NH Console - Seed Users (dev/staging only)
Creates one admin and one regular user with predictable credentials.
Run from backend/: python scripts/seed_users.py
Reset: python scripts/seed_users.py --reset
"""

import asyncio
import sys
import uuid
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from config import client, db, hash_password, now_iso
from services.permissions import get_preset_permissions

# Same password for all seeded accounts
TEST_PASSWORD = "NhConsole2026!"

TEST_USERS = [
    {"email": "admin@test.local", "name": "Admin Test", "role": "admin"},
    {"email": "staff@test.local", "name": "Staff Test", "role": "user"},
]


async def reset():
    """Delete all test.local users and their sessions"""
    users = await db.users.find({"email": {"$regex": "@test\\.local$"}}, {"id": 1}).to_list(None)
    await db.sessions.delete_many({"user_id": {"$in": [u.get("id") for u in users]}})
    result = await db.users.delete_many({"email": {"$regex": "@test\\.local$"}})
    print(f"Deleted {result.deleted_count} test users")


async def seed():
    """Create test users"""
    for u in TEST_USERS:
        await db.users.insert_one({
            "id": str(uuid.uuid4()),
            "email": u["email"],
            "password": hash_password(TEST_PASSWORD),
            "name": u["name"],
            "role": u["role"],
            "permissions": get_preset_permissions(u["role"]),
            "is_active": True,
            "createdAt": now_iso(),
        })
        print(f"  Created: {u['email']} ({u['role']})")


async def main():
    await reset()
    if "--reset" in sys.argv:
        print("Reset complete. Run without --reset to re-seed.")
    else:
        await seed()
        print(f"\n{len(TEST_USERS)} test users seeded. Password for all: {TEST_PASSWORD}")
        print("Reset: python scripts/seed_users.py --reset")

    client.close()


if __name__ == "__main__":
    asyncio.run(main())
