import argparse
import asyncio

from ..database import AsyncSessionLocal, engine
from ..models import Base
from ..services.catalog_seed import seed_plan_templates


async def seed(create_tables: bool = True) -> dict:
    """Create tables if asked, then seed the built-in plan catalog once."""
    if create_tables:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        result = await seed_plan_templates(db)
    print(f"Plan templates seeding finished: created={result['created']}, count={result['count']}")
    return result


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed built-in plan templates into the database")
    parser.add_argument(
        "--no-create-tables",
        action="store_true",
        help="Assume the schema is already migrated",
    )
    args = parser.parse_args()

    asyncio.run(seed(create_tables=not args.no_create_tables))


if __name__ == "__main__":
    main()
