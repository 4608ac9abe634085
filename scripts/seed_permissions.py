"""
Seed script to populate default permissions and roles.

Run this script after database initialization to create:
- The default permission catalog
- Default roles with their permissions
- Optionally, a Super Admin assignment for one existing actor

Usage:
    python -m scripts.seed_permissions [ACTOR_ID]

ACTOR_ID may also be given through the SUPER_ADMIN_ACTOR_ID environment variable.
"""
import asyncio
import os
import sys

from ikada_access.core.database.engine import AsyncSessionLocal, init_db
from ikada_access.features.permissions.catalog import DEFAULT_ROLES
from ikada_access.features.permissions.seed import seed_defaults
from ikada_access.utils import get_logger


log = get_logger(__name__)


async def main(super_admin_actor_id: str | None = None):
    """Main function to seed permissions and roles."""
    log.info("Starting permission seeding...")
    
    # Initialize database tables first
    log.info("Initializing database tables...")
    await init_db()
    
    async with AsyncSessionLocal() as db:
        try:
            await seed_defaults(db, super_admin_actor_id=super_admin_actor_id)
        except Exception:
            log.error("Error seeding permissions", exc_info=True)
            await db.rollback()
            raise
    
    log.info("Permission seeding completed successfully!")
    log.info("Default roles:")
    for role_name, role_config in DEFAULT_ROLES.items():
        log.info("  - %s: %s", role_name, role_config["description"])


if __name__ == "__main__":
    actor_id = sys.argv[1] if len(sys.argv) > 1 else os.environ.get("SUPER_ADMIN_ACTOR_ID")
    asyncio.run(main(actor_id))
