"""
Postboard Backend: Demo Data Seeder
=====================================

What:  Fills an empty (migrated) database with an admin account, a handful
       of demo users and a few posts per user.
How:   Goes through the regular models, so passwords are hashed by the users
       save hook and timestamps are stamped like any other write. Existing
       rows are wiped first; everything runs in one transaction.
Who:   Developers, after `alembic upgrade head`:

    cd backend && python -m app.seed            # users and posts
    cd backend && python -m app.seed users      # users only

Admin login: admin@example.com / Admin123
"""

import argparse
import asyncio
import logging
import random
from typing import List, Optional, Sequence

from app.database import QueryExecutor, create_engine
from app.models import build_registry
from app.models.post import POST_STATUSES
from app.orm import ModelRegistry, Record

logger = logging.getLogger("postboard.seed")

ADMIN = {
    "name": "Admin User",
    "email": "admin@example.com",
    "password": "Admin123",
    "status": "active",
}

FIRST_NAMES = ["Ada", "Grace", "Linus", "Margaret", "Alan", "Barbara", "Ken", "Radia", "Dennis", "Frances"]
LAST_NAMES = ["Lovelace", "Hopper", "Torvalds", "Hamilton", "Turing", "Liskov", "Thompson", "Perlman", "Ritchie", "Allen"]
TOPICS = ["databases", "async I/O", "testing", "caching", "API design", "migrations", "observability"]


async def seed_users(registry: ModelRegistry, rng: random.Random, count: int = 10) -> List[Record]:
    users = registry["users"]
    await users.executor.execute(f"DELETE FROM {users.table}")

    created = [await users.create(ADMIN)]
    logger.info("Admin user created: %s / %s", ADMIN["email"], ADMIN["password"])

    for first, last in list(zip(FIRST_NAMES, LAST_NAMES))[:count]:
        created.append(await users.create({
            "name": f"{first} {last}",
            "email": f"{first}.{last}@example.com".lower(),
            "password": f"Demo{rng.randint(1000, 9999)}pass",
            "status": rng.choice(["active", "active", "inactive"]),
        }))
    logger.info("Created %d users", len(created))
    return created


async def seed_posts(registry: ModelRegistry, rng: random.Random, authors: Sequence[Record]) -> int:
    posts = registry["posts"]
    await posts.executor.execute(f"DELETE FROM {posts.table}")

    total = 0
    for author in authors:
        for _ in range(rng.randint(1, 5)):
            topic = rng.choice(TOPICS)
            await posts.create({
                "title": f"Notes on {topic}",
                "content": (
                    f"{author.get_attribute('name')} writes about {topic}. "
                    "Short demo content generated by the seeder."
                ),
                "user_id": author.get_key(),
                "status": rng.choice(POST_STATUSES),
            })
            total += 1
    logger.info("Created %d posts", total)
    return total


async def run(only: Optional[str] = None, seed: int = 42, database_url: Optional[str] = None) -> None:
    executor = QueryExecutor(create_engine(database_url))
    registry = build_registry(executor)
    rng = random.Random(seed)
    try:
        async with executor.transaction():
            if only == "posts":
                authors = await registry["users"].all()
                if not authors:
                    logger.warning("No users found. Seed users first.")
                    return
            else:
                authors = await seed_users(registry, rng)
            if only != "users":
                await seed_posts(registry, rng, authors)
    finally:
        await executor.dispose()
    logger.info("Seeding completed")


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Seed the Postboard database with demo data.")
    parser.add_argument("only", nargs="?", choices=["users", "posts"], help="run a single seeder")
    parser.add_argument("--seed", type=int, default=42, help="random seed for reproducible data")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    asyncio.run(run(args.only, args.seed))


if __name__ == "__main__":
    main()
