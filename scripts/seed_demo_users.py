"""Seed a handful of demo users and print access tokens for them.

Usage:
    python scripts/seed_demo_users.py            # Postgres (POSTGRES_URL)
    STORE_BACKEND=memory python scripts/seed_demo_users.py   # tokens only
"""

import asyncio
import os
import sys

sys.path.append(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "backend"))

from hackmate.domain.users.demo import DEMO_USERS  # noqa: E402
from hackmate.infra import jwt as jwt_helper  # noqa: E402
from hackmate.infra import postgres  # noqa: E402
from hackmate.settings import settings  # noqa: E402


async def seed_postgres() -> None:
    async with postgres.acquire() as conn:
        for user in DEMO_USERS:
            await conn.execute(
                """
                INSERT INTO users (id, username, email, display_name, bio, skills)
                VALUES ($1, $2, $3, $4, $5, $6)
                ON CONFLICT (id) DO UPDATE
                SET display_name = EXCLUDED.display_name,
                    bio = EXCLUDED.bio,
                    skills = EXCLUDED.skills,
                    updated_at = NOW()
                """,
                user["id"],
                user["username"],
                user["email"],
                user["display_name"],
                user["bio"],
                user["skills"],
            )
            print(f"Seeded {user['username']} ({user['id']})")
    await postgres.close_pool()


async def main() -> None:
    if not settings.uses_memory_store():
        await seed_postgres()
    for user in DEMO_USERS:
        token = jwt_helper.encode_access(
            {"sub": user["id"], "handle": user["username"], "name": user["display_name"]},
            ttl_seconds=7 * 24 * 3600,
        )
        print(f"{user['username']}: Bearer {token}")


if __name__ == "__main__":
    asyncio.run(main())
